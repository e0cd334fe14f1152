"""Enumerations shared by the slice kernels and the host-side API."""

from enum import Enum, IntEnum, auto
from numbers import Integral


class Orientation(IntEnum):
    """Slice orientation; the value is the code passed to the kernel."""
    AXIAL = 0      # normal = depth
    CORONAL = 1    # normal = height
    SAGITTAL = 2   # normal = width

    @classmethod
    def _missing_(cls, value):
        # Unknown codes take the kernel's default branch.
        if isinstance(value, Integral):
            return cls.SAGITTAL
        return None


class Interpolation(Enum):
    NONE = auto()
    LINEAR = auto()


class SortBy(Enum):
    IMAGE_POSITION_PATIENT = auto()
    TABLE_POSITION = auto()
    INSTANCE_NUMBER = auto()
    NONE = auto()
