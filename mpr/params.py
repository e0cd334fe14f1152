"""Per-dispatch parameter block for the slice kernel.

The block is eight little-endian u32 fields (32 bytes):

    slice_index, orientation, output_width, output_height,
    volume_width, volume_height, volume_depth, padding

``padding`` carries no value; it keeps the block a multiple of 16 bytes
so it can be bound as a uniform buffer by other consumers.
"""

from dataclasses import astuple, dataclass, fields

import numpy as np

WORKGROUP_SIZE = 8  # threads per block edge (8x8x1)

PARAMS_DTYPE = np.dtype([
    ("slice_index", "<u4"),
    ("orientation", "<u4"),
    ("output_width", "<u4"),
    ("output_height", "<u4"),
    ("volume_width", "<u4"),
    ("volume_height", "<u4"),
    ("volume_depth", "<u4"),
    ("padding", "<u4"),
])


def _ceil_div(n, d):
    return (n + d - 1) // d


@dataclass(frozen=True)
class DispatchParams:
    slice_index: int
    orientation: int
    output_width: int
    output_height: int
    volume_width: int
    volume_height: int
    volume_depth: int
    padding: int = 0

    def __post_init__(self):
        # Orientation enums are stored by code; unknown codes stay as-is.
        object.__setattr__(self, "orientation", int(self.orientation))

    def to_bytes(self):
        """Pack into the 32-byte uniform layout."""
        return np.array([astuple(self)], dtype=PARAMS_DTYPE).tobytes()

    @classmethod
    def from_bytes(cls, raw):
        """Unpack a 32-byte block produced by :meth:`to_bytes`."""
        if len(raw) != PARAMS_DTYPE.itemsize:
            raise ValueError(
                f"parameter block must be {PARAMS_DTYPE.itemsize} bytes, "
                f"got {len(raw)}")
        rec = np.frombuffer(raw, dtype=PARAMS_DTYPE)[0]
        return cls(**{f.name: int(rec[f.name]) for f in fields(cls)})

    def workgroups(self):
        """Workgroup counts (x, y, z) covering the output image."""
        return (_ceil_div(self.output_width, WORKGROUP_SIZE),
                _ceil_div(self.output_height, WORKGROUP_SIZE),
                1)

    def grid_shape(self):
        """Thread grid (x, y) launched for these parameters."""
        gx, gy, _ = self.workgroups()
        return gx * WORKGROUP_SIZE, gy * WORKGROUP_SIZE
