"""Orthogonal slice extraction kernel (one thread per output pixel)."""

import taichi as ti

from mpr.kernels.common import decode_rg16, quantize_u8, sample_rg, slice_coords
from mpr.params import WORKGROUP_SIZE

THREADS_PER_GROUP = WORKGROUP_SIZE * WORKGROUP_SIZE


@ti.kernel
def slice_sample(
    tex: ti.template(),          # vec2 u8 3D field (width, height, depth)
    out: ti.types.ndarray(dtype=ti.u32, ndim=1),  # output_width * output_height
    slice_index: int,
    orientation: int,            # 0=axial, 1=coronal, else sagittal
    output_width: int, output_height: int,
    volume_width: int, volume_height: int, volume_depth: int,
    grid_x: int, grid_y: int,    # thread grid, multiples of WORKGROUP_SIZE
    filter_mode: int,
    address_mode: int,
):
    """Sample one slice of the volume into a flat row-major u8 buffer."""
    ti.loop_config(block_dim=THREADS_PER_GROUP)
    for x, y in ti.ndrange(grid_x, grid_y):
        # Grid overshoots non-aligned images; those threads write nothing.
        if x < output_width and y < output_height:
            uvw = slice_coords(x, y, slice_index, orientation,
                               output_width, output_height,
                               volume_width, volume_height, volume_depth)
            rg = sample_rg(tex, uvw, filter_mode, address_mode)
            out[y * output_width + x] = quantize_u8(decode_rg16(rg))
