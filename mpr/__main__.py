"""CLI entry point: python -m mpr --input dicom/ --orientation coronal"""

import matplotlib
matplotlib.use("Agg")

import argparse
import sys
from pathlib import Path

import matplotlib.pyplot as plt

from mpr.loader import VolumeLoaderError, load_from_directory, load_nifti
from mpr.profiling import step
from mpr.utils import add_slice_args, init_taichi, resolve_slice_args
from mpr.volume import SLICE_AXIS


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Extract one orthogonal slice on the CPU and with the kernel")
    add_slice_args(parser)
    parser.add_argument("--output-dir", type=Path, default=Path("."),
                        help="Where result_gpu.png / result_cpu.png go")
    return resolve_slice_args(parser.parse_args(argv))


def load_volume(path, sort_by, sampler=None):
    """Load a DICOM directory or a .nii / .nii.gz file."""
    path = Path(path)
    if path.is_dir():
        volume = load_from_directory(path, sort_by)
    else:
        volume = load_nifti(path)
    volume.sampler = sampler
    return volume


def save_image(path, image):
    plt.imsave(str(path), image, cmap="gray", vmin=0, vmax=255)
    print(f"  Saved {path}")


def main(argv=None):
    args = parse_args(argv)
    init_taichi(args.arch)

    try:
        with step("load volume"):
            volume = load_volume(args.input, args.sort_by, args.sampler)
    except VolumeLoaderError as e:
        print(f"FATAL: {e}")
        sys.exit(1)

    depth, height, width = volume.dim()
    print(f"Volume: {width}x{height}x{depth}, spacing={volume.spacing} mm")

    index = args.index
    if index is None:
        index = volume.dim()[SLICE_AXIS[args.orientation]] // 2
    print(f"Slice: {args.orientation.name.lower()} #{index}")

    image_gpu = volume.get_image_from_axis_gpu(index, args.orientation)
    with step("cpu slice"):
        image_cpu = volume.get_image_from_axis(index, args.orientation,
                                               args.interpolation)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    save_image(args.output_dir / "result_gpu.png", image_gpu)
    save_image(args.output_dir / "result_cpu.png", image_cpu)


if __name__ == "__main__":
    main()
