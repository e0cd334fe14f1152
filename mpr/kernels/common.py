"""Taichi helper functions shared by the slice kernels.

Three building blocks, each usable on its own from another kernel:

  slice_coords  output pixel + slice -> normalized (u, v, w) sample coord
  sample_rg     normalized coord -> filtered (r, g) channels in [0, 1]
  decode_rg16   (r, g) low/high byte pair -> normalized 16-bit intensity
"""

import taichi as ti
import taichi.math as tm

# Orientation codes (mpr.enums.Orientation)
AXIAL = 0
CORONAL = 1

# Filter modes (mpr.texture.FilterMode)
NEAREST = 0
LINEAR = 1

# Address modes (mpr.texture.AddressMode)
CLAMP_TO_EDGE = 0
REPEAT = 1
CLAMP_TO_BORDER = 2


@ti.func
def slice_coords(x: int, y: int, slice_index: int, orientation: int,
                 output_width: int, output_height: int,
                 volume_width: int, volume_height: int, volume_depth: int):
    """Map output pixel (x, y) on a slice to a normalized volume coordinate.

    Samples sit on pixel centres in-plane and on the voxel centre along
    the slice normal. Nothing is clamped; coordinates past [0, 1] are
    resolved by the sampler's address mode.
    """
    fx = (x + 0.5) / output_width
    fy = (y + 0.5) / output_height
    slice_norm = slice_index + 0.5
    coord = tm.vec3(0.0)
    if orientation == AXIAL:  # normal = depth
        coord = tm.vec3(fx, fy, slice_norm / volume_depth)
    elif orientation == CORONAL:  # normal = height
        coord = tm.vec3(fx, slice_norm / volume_height, fy)
    else:  # sagittal, and any unrecognized code
        coord = tm.vec3(slice_norm / volume_width, fx, fy)
    return coord


@ti.func
def _address(i: int, n: int, mode: int):
    """Resolve a texel index along one axis -> (index, inside)."""
    idx = i
    inside = 1
    if mode == REPEAT:
        idx = i % n
    elif mode == CLAMP_TO_BORDER:
        if i < 0 or i >= n:
            idx = 0
            inside = 0
    else:
        idx = ti.min(ti.max(i, 0), n - 1)
    return idx, inside


@ti.func
def _fetch(tex: ti.template(), i: int, j: int, k: int, mode: int):
    """Read one texel as UNORM channels; border texels are (0, 0)."""
    ii, in_i = _address(i, tex.shape[0], mode)
    jj, in_j = _address(j, tex.shape[1], mode)
    kk, in_k = _address(k, tex.shape[2], mode)
    texel = tm.vec2(0.0)
    if in_i and in_j and in_k:
        texel = ti.cast(tex[ii, jj, kk], ti.f32) / 255.0
    return texel


@ti.func
def _lerp(a, b, t):
    # a + (b - a) * t keeps equal endpoints exact
    return a + (b - a) * t


@ti.func
def sample_rg(tex: ti.template(), uvw, filter_mode: int, address_mode: int):
    """Sample a 2-channel u8 texture at a normalized coordinate (base level).

    Channels are filtered independently, the way a hardware sampler
    treats an RG8 UNORM texture.
    """
    size = tm.vec3(tex.shape[0], tex.shape[1], tex.shape[2])
    rg = tm.vec2(0.0)
    if filter_mode == NEAREST:
        p = ti.cast(ti.floor(uvw * size), ti.i32)
        rg = _fetch(tex, p[0], p[1], p[2], address_mode)
    else:
        t = uvw * size - 0.5
        fl = ti.floor(t)
        p = ti.cast(fl, ti.i32)
        f = t - fl
        c000 = _fetch(tex, p[0], p[1], p[2], address_mode)
        c100 = _fetch(tex, p[0] + 1, p[1], p[2], address_mode)
        c010 = _fetch(tex, p[0], p[1] + 1, p[2], address_mode)
        c110 = _fetch(tex, p[0] + 1, p[1] + 1, p[2], address_mode)
        c001 = _fetch(tex, p[0], p[1], p[2] + 1, address_mode)
        c101 = _fetch(tex, p[0] + 1, p[1], p[2] + 1, address_mode)
        c011 = _fetch(tex, p[0], p[1] + 1, p[2] + 1, address_mode)
        c111 = _fetch(tex, p[0] + 1, p[1] + 1, p[2] + 1, address_mode)
        c00 = _lerp(c000, c100, f[0])
        c10 = _lerp(c010, c110, f[0])
        c01 = _lerp(c001, c101, f[0])
        c11 = _lerp(c011, c111, f[0])
        rg = _lerp(_lerp(c00, c10, f[1]), _lerp(c01, c11, f[1]), f[2])
    return rg


@ti.func
def decode_rg16(rg):
    """Rebuild a normalized 16-bit intensity from (low, high) UNORM bytes.

    Must stay bit-compatible with mpr.texture.encode_rg16: the low and
    high terms are scaled by 255 and 255 * 256 respectively.
    """
    low_byte = rg[0] * 255.0
    high_byte = rg[1] * 255.0
    return (low_byte + high_byte * 256.0) / 65535.0


@ti.func
def quantize_u8(value: float):
    """Clamp value * 255 to [0, 255] and truncate toward zero."""
    return ti.cast(ti.min(ti.max(value * 255.0, 0.0), 255.0), ti.u32)
