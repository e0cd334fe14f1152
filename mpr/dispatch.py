"""Host-side dispatch of the slice kernel.

``SliceSampler`` owns the uploaded volume texture and the sampler policy.
Each ``extract_slice`` call builds a fresh parameter block, allocates the
uint32 output buffer, launches the 8x8-blocked grid and reads the result back
as a uint8 image.
"""

import numpy as np
import taichi as ti

from mpr.kernels.slice_sample import slice_sample
from mpr.params import DispatchParams
from mpr.texture import Sampler, VolumeTexture


class SliceSampler:
    """Extracts orthogonal slices from one uploaded volume."""

    def __init__(self, volume, sampler=None):
        self.texture = VolumeTexture.from_volume(volume)
        self.sampler = sampler if sampler is not None else Sampler()

    @property
    def dimensions(self):
        """Volume shape as (depth, height, width)."""
        return self.texture.shape

    def params(self, slice_index, orientation, target_width, target_height):
        """Build the parameter block for one dispatch."""
        return DispatchParams(
            slice_index=int(slice_index),
            orientation=orientation,
            output_width=int(target_width),
            output_height=int(target_height),
            volume_width=self.texture.width,
            volume_height=self.texture.height,
            volume_depth=self.texture.depth,
        )

    def dispatch(self, params, out):
        """Launch the kernel for ``params`` writing into the uint32 array ``out``.

        ``out`` must hold at least ``output_width * output_height`` slots;
        slots past that are never touched.
        """
        grid_x, grid_y = params.grid_shape()
        slice_sample(
            self.texture.field, out,
            params.slice_index, params.orientation,
            params.output_width, params.output_height,
            params.volume_width, params.volume_height, params.volume_depth,
            grid_x, grid_y,
            int(self.sampler.filter_mode), int(self.sampler.address_mode),
        )

    def extract_slice(self, slice_index, orientation, target_width, target_height):
        """Return slice ``slice_index`` as a (target_height, target_width) uint8 image."""
        params = self.params(slice_index, orientation, target_width, target_height)
        out = np.zeros(params.output_width * params.output_height, dtype=np.uint32)
        self.dispatch(params, out)
        ti.sync()
        return out.astype(np.uint8).reshape(params.output_height,
                                            params.output_width)
