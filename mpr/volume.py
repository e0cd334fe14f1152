"""In-memory uint16 volume with CPU and kernel-based slice extraction."""

import numpy as np

from mpr.dispatch import SliceSampler
from mpr.enums import Interpolation, Orientation
from mpr.interpolator import bilinear_resize, get_isotropic_dimensions
from mpr.profiling import step

# Orientation -> array axis of a (depth, height, width) volume
SLICE_AXIS = {
    Orientation.AXIAL: 0,
    Orientation.CORONAL: 1,
    Orientation.SAGITTAL: 2,
}


def normalize_to_u8(values):
    """Map uint16 intensities to uint8: (v / 65535) * 255, clamped, truncated."""
    scaled = np.asarray(values, dtype=np.float32) / 65535.0 * 255.0
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


class Volume:
    """A (depth, height, width) uint16 voxel grid plus its spacing."""

    def __init__(self, data, spacing, sampler=None):
        self.data = np.asarray(data, dtype=np.uint16)
        self.spacing = tuple(float(s) for s in spacing)  # (x, y, z) mm
        self.interpolated_dim = get_isotropic_dimensions(self.spacing,
                                                         self.data.shape)
        self.sampler = sampler
        self.slice_sampler = None  # created on first kernel extraction

    def dim(self):
        """(depth, height, width)"""
        return self.data.shape

    def get_slice_from_axis(self, index, orientation):
        """Raw uint16 slice view; rows run along height (axial) or depth."""
        axis = SLICE_AXIS[Orientation(orientation)]
        return np.take(self.data, index, axis=axis)

    def plane_size(self, orientation):
        """Isotropic (width, height) of the image for an orientation."""
        new_z, new_y, new_x = self.interpolated_dim
        orientation = Orientation(orientation)
        if orientation == Orientation.AXIAL:
            return new_x, new_y
        elif orientation == Orientation.CORONAL:
            return new_x, new_z
        return new_y, new_z

    def _check_index(self, index, orientation):
        axis = SLICE_AXIS[Orientation(orientation)]
        if not 0 <= index < self.data.shape[axis]:
            raise IndexError(
                f"slice {index} out of range for {Orientation(orientation).name}"
                f" (size {self.data.shape[axis]})")

    def get_image_from_axis(self, index, orientation,
                            interpolation=Interpolation.NONE):
        """Extract a uint8 slice image on the CPU.

        With ``Interpolation.LINEAR`` coronal and sagittal slices are
        resampled to isotropic pixels; axial slices are already in-plane
        and are returned unchanged.
        """
        orientation = Orientation(orientation)
        self._check_index(index, orientation)
        slice2d = self.get_slice_from_axis(index, orientation)

        if interpolation == Interpolation.NONE or orientation == Orientation.AXIAL:
            return normalize_to_u8(slice2d)

        target_width, target_height = self.plane_size(orientation)
        return normalize_to_u8(
            bilinear_resize(slice2d, target_width, target_height))

    def get_image_from_axis_gpu(self, index, orientation):
        """Extract an isotropic uint8 slice image with the Taichi kernel."""
        orientation = Orientation(orientation)
        self._check_index(index, orientation)

        if self.slice_sampler is None:
            with step("slice sampler init"):
                self.slice_sampler = SliceSampler(self.data, self.sampler)

        target_width, target_height = self.plane_size(orientation)
        with step("extract slice"):
            image = self.slice_sampler.extract_slice(
                index, orientation, target_width, target_height)
        return image
