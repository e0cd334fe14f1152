"""Named presets and CLI argument helpers shared by the entry points."""

import taichi as ti

from mpr.enums import Interpolation, Orientation, SortBy
from mpr.texture import AddressMode, FilterMode, Sampler

# ---------------------------------------------------------------------------
# Presets: CLI name -> value
# ---------------------------------------------------------------------------
SAMPLER_PROFILES = {
    "linear": Sampler(FilterMode.LINEAR, AddressMode.CLAMP_TO_EDGE),
    "nearest": Sampler(FilterMode.NEAREST, AddressMode.CLAMP_TO_EDGE),
}

ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "vulkan": ti.vulkan,
    "cuda": ti.cuda,
    "metal": ti.metal,
}

ORIENTATIONS = {o.name.lower(): o for o in Orientation}

INTERPOLATIONS = {i.name.lower(): i for i in Interpolation}

SORT_KEYS = {
    "position": SortBy.IMAGE_POSITION_PATIENT,
    "table": SortBy.TABLE_POSITION,
    "instance": SortBy.INSTANCE_NUMBER,
    "none": SortBy.NONE,
}


def init_taichi(arch="gpu"):
    """Initialise Taichi on a named backend (``gpu`` falls back to CPU)."""
    ti.init(arch=ARCHES[arch])


# ---------------------------------------------------------------------------
# argparse helpers
# ---------------------------------------------------------------------------
def add_slice_args(parser):
    """Add the slice selection / sampling arguments to a parser."""
    parser.add_argument("--input", required=True,
                        help="DICOM directory or NIfTI file")
    parser.add_argument("--orientation", default="coronal",
                        choices=list(ORIENTATIONS.keys()))
    parser.add_argument("--index", type=int, default=None,
                        help="Slice index (default: centre of the axis)")
    parser.add_argument("--sort-by", default="instance",
                        choices=list(SORT_KEYS.keys()),
                        help="DICOM slice ordering")
    parser.add_argument("--interpolation", default="linear",
                        choices=list(INTERPOLATIONS.keys()),
                        help="CPU path in-plane interpolation")
    parser.add_argument("--sampler", default="linear",
                        choices=list(SAMPLER_PROFILES.keys()),
                        help="Kernel texture sampler")
    parser.add_argument("--arch", default="gpu", choices=list(ARCHES.keys()))


def resolve_slice_args(args):
    """Replace preset names on ``args`` with their values. Returns args."""
    args.orientation = ORIENTATIONS[args.orientation]
    args.sort_by = SORT_KEYS[args.sort_by]
    args.interpolation = INTERPOLATIONS[args.interpolation]
    args.sampler = SAMPLER_PROFILES[args.sampler]
    return args
