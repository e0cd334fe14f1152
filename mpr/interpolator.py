"""Isotropic sizing and in-plane bilinear resampling for the CPU path."""

import numpy as np
from scipy.ndimage import map_coordinates


def get_isotropic_dimensions(spacing, dim):
    """Volume size after resampling every axis to the finest spacing.

    Parameters
    ----------
    spacing : (float, float, float)
        Voxel spacing (x, y, z) in mm.
    dim : (int, int, int)
        Volume shape (depth, height, width), i.e. (z, y, x).

    Returns
    -------
    (new_z, new_y, new_x) as ints, truncated.
    """
    x_spacing, y_spacing, z_spacing = spacing
    min_spacing = min(x_spacing, y_spacing, z_spacing)
    depth, height, width = dim
    new_x = int(width * x_spacing / min_spacing)
    new_y = int(height * y_spacing / min_spacing)
    new_z = int(depth * z_spacing / min_spacing)
    return new_z, new_y, new_x


def bilinear_resize(slice2d, target_width, target_height):
    """Resample a 2D slice to (target_height, target_width), corners aligned.

    Output pixel (row, col) reads source position
    (row * (h-1)/(th-1), col * (w-1)/(tw-1)); neighbours past the last
    row/column repeat the edge.
    """
    height, width = slice2d.shape
    scale_x = (width - 1) / max(target_width - 1, 1)
    scale_y = (height - 1) / max(target_height - 1, 1)

    rows = np.arange(target_height, dtype=np.float64) * scale_y
    cols = np.arange(target_width, dtype=np.float64) * scale_x
    rr, cc = np.meshgrid(rows, cols, indexing='ij')

    return map_coordinates(np.asarray(slice2d, dtype=np.float64),
                           np.array([rr, cc]), order=1, mode='nearest')
