"""Shared fixtures for the test suite."""

import numpy as np
import pytest
import taichi as ti
from pydicom.dataset import Dataset, FileMetaDataset
from pydicom.uid import CTImageStorage, ExplicitVRLittleEndian, generate_uid


@pytest.fixture(scope="session", autouse=True)
def taichi_cpu():
    """One Taichi runtime for the whole session, on the CPU backend."""
    ti.init(arch=ti.cpu)
    yield


def _voxel_code(z, y, x):
    """Distinct small label per voxel of the coded volume."""
    return z * 20 + y * 5 + x


def _make_coded_volume(depth=3, height=4, width=5):
    """uint16 (depth, height, width) volume whose u8 image value is the code.

    Voxel value is 257 * code + 128, so (v / 65535) * 255 = code + 0.498,
    far from any truncation boundary.
    """
    z, y, x = np.meshgrid(np.arange(depth), np.arange(height), np.arange(width),
                          indexing='ij')
    codes = _voxel_code(z, y, x)
    return (257 * codes + 128).astype(np.uint16), codes.astype(np.uint8)


def _make_ct_dataset(pixels, instance_number=None, position=None,
                     pixel_spacing=(1.0, 1.0), thickness=1.0, **extra):
    """Minimal uncompressed 16-bit MONOCHROME2 CT dataset.

    ``extra`` sets further elements by keyword (e.g. RescaleIntercept).
    """
    meta = FileMetaDataset()
    meta.MediaStorageSOPClassUID = CTImageStorage
    meta.MediaStorageSOPInstanceUID = generate_uid()
    meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = Dataset()
    ds.file_meta = meta
    ds.SOPClassUID = CTImageStorage
    ds.SOPInstanceUID = meta.MediaStorageSOPInstanceUID
    ds.Modality = "CT"
    ds.Rows, ds.Columns = pixels.shape
    ds.SamplesPerPixel = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    ds.BitsAllocated = 16
    ds.BitsStored = 16
    ds.HighBit = 15
    ds.PixelRepresentation = 0
    ds.PixelData = np.ascontiguousarray(pixels, dtype="<u2").tobytes()
    if pixel_spacing is not None:
        ds.PixelSpacing = list(pixel_spacing)
    if thickness is not None:
        ds.SliceThickness = thickness
    if instance_number is not None:
        ds.InstanceNumber = instance_number
    if position is not None:
        ds.ImagePositionPatient = list(position)
    for keyword, value in extra.items():
        setattr(ds, keyword, value)
    return ds


def _write_dicom(path, pixels, **kwargs):
    """Write one dataset to ``path`` as a conformant DICOM file."""
    ds = _make_ct_dataset(pixels, **kwargs)
    ds.save_as(str(path), enforce_file_format=True)
    return path


@pytest.fixture
def coded_volume():
    """Factory fixture returning (uint16 volume, expected u8 codes)."""
    return _make_coded_volume


@pytest.fixture
def write_dicom():
    """Factory fixture that returns the _write_dicom helper."""
    return _write_dicom
