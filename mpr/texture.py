"""Volume texture storage and sampler configuration.

The uint16 volume is stored as a two-channel u8 texture: channel 0 holds
the low byte, channel 1 the high byte of each voxel. The slice kernel
reconstructs the intensity with ``decode_rg16``.
"""

from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import taichi as ti

from mpr.kernels import common


class FilterMode(IntEnum):
    NEAREST = common.NEAREST
    LINEAR = common.LINEAR


class AddressMode(IntEnum):
    CLAMP_TO_EDGE = common.CLAMP_TO_EDGE
    REPEAT = common.REPEAT
    CLAMP_TO_BORDER = common.CLAMP_TO_BORDER


@dataclass(frozen=True)
class Sampler:
    """Filtering / addressing policy applied when the kernel samples."""
    filter_mode: FilterMode = FilterMode.LINEAR
    address_mode: AddressMode = AddressMode.CLAMP_TO_EDGE


def encode_rg16(volume):
    """Pack a (depth, height, width) uint16 volume into RG8 texels.

    Returns a (width, height, depth, 2) uint8 array; [..., 0] is the low
    byte and [..., 1] the high byte of each voxel.
    """
    volume = np.asarray(volume)
    if volume.ndim != 3:
        raise ValueError(f"expected a 3D volume, got shape {volume.shape}")
    data = volume.astype(np.uint16, copy=False)
    texels = np.empty(data.shape + (2,), dtype=np.uint8)
    texels[..., 0] = (data & 0xFF).astype(np.uint8)
    texels[..., 1] = (data >> 8).astype(np.uint8)
    # (z, y, x, c) -> (x, y, z, c) so field[i, j, k] is addressed by (u, v, w)
    return np.ascontiguousarray(texels.transpose(2, 1, 0, 3))


class VolumeTexture:
    """Read-only RG8 3D texture backing the slice kernel."""

    def __init__(self, width, height, depth):
        self.width = width
        self.height = height
        self.depth = depth
        self.field = ti.Vector.field(2, dtype=ti.u8,
                                     shape=(width, height, depth))

    @classmethod
    def from_volume(cls, volume):
        """Allocate a texture for a (depth, height, width) volume and upload it."""
        texels = encode_rg16(volume)
        width, height, depth = texels.shape[:3]
        tex = cls(width, height, depth)
        tex.field.from_numpy(texels)
        return tex

    @property
    def shape(self):
        """Volume shape as (depth, height, width)."""
        return self.depth, self.height, self.width
