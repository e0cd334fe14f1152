"""Volume loading from DICOM series (pydicom) and NIfTI files (nibabel).

DICOM inputs are assumed to be a single-series axial acquisition: the
first frame of every file becomes one axial slice, stacked in the order
given by ``SortBy``.
"""

from pathlib import Path

import nibabel as nib
import numpy as np
import pydicom
from pydicom.pixels import apply_modality_lut, apply_voi_lut

from mpr.enums import SortBy
from mpr.volume import Volume

_SKIP = object()  # sort key missing: drop the file


class VolumeLoaderError(ValueError):
    """A set of files that cannot be assembled into a volume."""


# ---------------------------------------------------------------------------
# Per-dataset helpers
# ---------------------------------------------------------------------------
def _sort_order(ds, sort_by):
    """Sort key for one dataset: a float, None (sorts first) or _SKIP."""
    if sort_by == SortBy.IMAGE_POSITION_PATIENT:
        pos = ds.get("ImagePositionPatient")
        if pos is None:
            return _SKIP
        try:
            return float(pos[2]) if len(pos) > 2 else None
        except (TypeError, ValueError):
            return _SKIP
    if sort_by == SortBy.TABLE_POSITION:
        if "TablePosition" not in ds:
            return _SKIP
        try:
            return float(ds.get("TablePosition"))
        except (TypeError, ValueError):
            return None
    if sort_by == SortBy.INSTANCE_NUMBER:
        if "InstanceNumber" not in ds:
            return _SKIP
        try:
            return float(int(ds.get("InstanceNumber")))
        except (TypeError, ValueError):
            return None
    return 0.0


def decode_image(ds):
    """First frame of a dataset as a 2D uint16 array.

    The modality LUT (rescale slope / intercept) is applied before the
    first VOI LUT or window, so window values are read in output units
    (e.g. HU for CT).
    """
    arr = ds.pixel_array
    if int(ds.get("NumberOfFrames", 1) or 1) > 1:
        arr = arr[0]
    if int(ds.get("SamplesPerPixel", 1)) > 1:
        arr = arr[..., 0]
    arr = apply_modality_lut(arr, ds)
    arr = apply_voi_lut(arr, ds)
    return np.clip(arr, 0, 65535).astype(np.uint16)


def _spacing(datasets):
    """(x, y, z) spacing from the first dataset carrying all three tags."""
    for ds in datasets:
        pixel_spacing = ds.get("PixelSpacing")
        thickness = ds.get("SliceThickness")
        if pixel_spacing is None or thickness is None or len(pixel_spacing) < 2:
            continue
        return float(pixel_spacing[0]), float(pixel_spacing[1]), float(thickness)
    return None


def _sort_images(ordered, sort_by):
    """Sort (order, image) pairs in place; None keys sort first."""
    if sort_by != SortBy.NONE:
        ordered.sort(key=lambda item: (item[0] is not None,
                                       item[0] if item[0] is not None else 0.0))
    if sort_by == SortBy.IMAGE_POSITION_PATIENT:
        ordered.reverse()


# ---------------------------------------------------------------------------
# Public loaders
# ---------------------------------------------------------------------------
def load_from_datasets(datasets, sort_by=SortBy.IMAGE_POSITION_PATIENT):
    """Assemble a Volume from in-memory pydicom datasets."""
    ordered = []
    for ds in datasets:
        if "PixelData" not in ds:
            continue
        order = _sort_order(ds, sort_by)
        if order is _SKIP:
            continue
        try:
            image = decode_image(ds)
        except (AttributeError, NotImplementedError, RuntimeError, ValueError) as e:
            print(f"WARNING: skipping {ds.get('SOPInstanceUID', '?')}: {e}")
            continue
        ordered.append((order, image))

    if not ordered:
        raise VolumeLoaderError("No valid DICOM images found")

    _sort_images(ordered, sort_by)
    images = [image for _, image in ordered]

    if any(image.shape != images[0].shape for image in images):
        raise VolumeLoaderError("Inconsistent image dimensions")

    spacing = _spacing(datasets)
    if spacing is None:
        raise VolumeLoaderError("Missing spacing information")

    return Volume(np.stack(images, axis=0), spacing)


def load_from_file_paths(paths, sort_by=SortBy.IMAGE_POSITION_PATIENT):
    """Read each path with pydicom and assemble a Volume."""
    datasets = [pydicom.dcmread(str(p)) for p in paths]
    return load_from_datasets(datasets, sort_by)


def load_from_directory(path, sort_by=SortBy.IMAGE_POSITION_PATIENT):
    """Load every ``*.dcm`` file (any case) in a directory."""
    paths = sorted(p for p in Path(path).iterdir()
                   if p.is_file() and p.suffix.lower() == ".dcm")
    if not paths:
        raise VolumeLoaderError("No valid DICOM images found")
    return load_from_file_paths(paths, sort_by)


def load_nifti(path):
    """Load a NIfTI file as a Volume; (i, j, k) -> (depth, height, width)."""
    img = nib.load(str(path))
    data = np.asarray(img.dataobj)
    if data.ndim == 4:
        data = data[..., 0]
    data = np.clip(data, 0, 65535).astype(np.uint16)
    spacing = tuple(float(z) for z in img.header.get_zooms()[:3])
    return Volume(np.ascontiguousarray(data.transpose(2, 1, 0)), spacing)
