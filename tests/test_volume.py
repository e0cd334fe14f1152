"""Tests for mpr/volume.py and mpr/interpolator.py — CPU and kernel slice paths."""

import numpy as np
import pytest

from mpr.enums import Interpolation, Orientation
from mpr.interpolator import bilinear_resize, get_isotropic_dimensions
from mpr.texture import AddressMode, FilterMode, Sampler
from mpr.volume import Volume, normalize_to_u8

NEAREST = Sampler(FilterMode.NEAREST, AddressMode.CLAMP_TO_EDGE)


# ---------------------------------------------------------------------------
# get_isotropic_dimensions
# ---------------------------------------------------------------------------
class TestIsotropicDimensions:
    def test_isotropic_unchanged(self):
        assert get_isotropic_dimensions((1.0, 1.0, 1.0), (10, 20, 30)) == (10, 20, 30)

    def test_thick_slices_expand_depth(self):
        # (z, y, x) = (10, 20, 30), 0.5 mm in-plane, 2 mm slices
        assert get_isotropic_dimensions((0.5, 0.5, 2.0), (10, 20, 30)) == (40, 20, 30)

    def test_truncates(self):
        assert get_isotropic_dimensions((1.0, 1.0, 1.5), (5, 4, 4)) == (7, 4, 4)


# ---------------------------------------------------------------------------
# bilinear_resize
# ---------------------------------------------------------------------------
class TestBilinearResize:
    def test_identity(self):
        src = np.arange(12, dtype=np.float64).reshape(3, 4)
        np.testing.assert_allclose(bilinear_resize(src, 4, 3), src)

    def test_midpoint(self):
        src = np.array([[0.0, 10.0]])
        np.testing.assert_allclose(bilinear_resize(src, 3, 1), [[0.0, 5.0, 10.0]])

    def test_corners_aligned(self):
        src = np.array([[0.0, 10.0], [20.0, 30.0]])
        out = bilinear_resize(src, 5, 7)
        assert out.shape == (7, 5)
        assert out[0, 0] == 0.0
        assert out[-1, -1] == pytest.approx(30.0)
        assert out[3, 2] == pytest.approx(15.0)


# ---------------------------------------------------------------------------
# normalize_to_u8
# ---------------------------------------------------------------------------
class TestNormalize:
    def test_values(self):
        out = normalize_to_u8(np.array([0, 32768, 65535], dtype=np.uint16))
        np.testing.assert_array_equal(out, [0, 127, 255])
        assert out.dtype == np.uint8


# ---------------------------------------------------------------------------
# Volume — CPU path
# ---------------------------------------------------------------------------
class TestVolumeCPU:
    def test_dim(self, coded_volume):
        vol, _ = coded_volume()
        assert Volume(vol, (1.0, 1.0, 1.0)).dim() == (3, 4, 5)

    def test_slice_shapes(self, coded_volume):
        v = Volume(coded_volume()[0], (1.0, 1.0, 1.0))
        assert v.get_slice_from_axis(0, Orientation.AXIAL).shape == (4, 5)
        assert v.get_slice_from_axis(0, Orientation.CORONAL).shape == (3, 5)
        assert v.get_slice_from_axis(0, Orientation.SAGITTAL).shape == (3, 4)

    def test_image_without_interpolation(self, coded_volume):
        vol, codes = coded_volume()
        v = Volume(vol, (1.0, 1.0, 1.0))
        np.testing.assert_array_equal(
            v.get_image_from_axis(2, Orientation.CORONAL), codes[:, 2, :])

    def test_numpy_unknown_code_is_sagittal(self, coded_volume):
        v = Volume(coded_volume()[0], (1.0, 1.0, 1.0))
        np.testing.assert_array_equal(
            v.get_image_from_axis(1, np.int64(7)),
            v.get_image_from_axis(1, Orientation.SAGITTAL))

    @pytest.mark.parametrize("orientation,index", [
        (Orientation.AXIAL, 3),
        (Orientation.CORONAL, 4),
        (Orientation.SAGITTAL, 5),
        (Orientation.AXIAL, -1),
    ])
    def test_out_of_range_index(self, coded_volume, orientation, index):
        v = Volume(coded_volume()[0], (1.0, 1.0, 1.0))
        with pytest.raises(IndexError):
            v.get_image_from_axis(index, orientation)

    def test_linear_resamples_to_isotropic(self, coded_volume):
        v = Volume(coded_volume()[0], (1.0, 1.0, 2.0))
        assert v.interpolated_dim == (6, 4, 5)
        image = v.get_image_from_axis(1, Orientation.CORONAL, Interpolation.LINEAR)
        assert image.shape == (6, 5)
        image = v.get_image_from_axis(1, Orientation.SAGITTAL, Interpolation.LINEAR)
        assert image.shape == (6, 4)

    def test_linear_axial_unchanged(self, coded_volume):
        vol, codes = coded_volume()
        v = Volume(vol, (1.0, 1.0, 2.0))
        np.testing.assert_array_equal(
            v.get_image_from_axis(0, Orientation.AXIAL, Interpolation.LINEAR),
            codes[0])

    def test_plane_size(self, coded_volume):
        v = Volume(coded_volume()[0], (1.0, 1.0, 2.0))
        assert v.plane_size(Orientation.AXIAL) == (5, 4)
        assert v.plane_size(Orientation.CORONAL) == (5, 6)
        assert v.plane_size(Orientation.SAGITTAL) == (4, 6)


# ---------------------------------------------------------------------------
# Volume — kernel path
# ---------------------------------------------------------------------------
class TestVolumeGPU:
    @pytest.mark.parametrize("orientation,index", [
        (Orientation.AXIAL, 2),
        (Orientation.CORONAL, 1),
        (Orientation.SAGITTAL, 3),
    ])
    def test_matches_cpu_when_isotropic(self, coded_volume, orientation, index):
        vol, _ = coded_volume()
        v = Volume(vol, (1.0, 1.0, 1.0), sampler=NEAREST)
        np.testing.assert_array_equal(
            v.get_image_from_axis_gpu(index, orientation),
            v.get_image_from_axis(index, orientation))

    def test_isotropic_target_size(self, coded_volume):
        v = Volume(coded_volume()[0], (1.0, 1.0, 2.0))
        assert v.get_image_from_axis_gpu(0, Orientation.CORONAL).shape == (6, 5)
        assert v.get_image_from_axis_gpu(0, Orientation.SAGITTAL).shape == (6, 4)

    def test_sampler_created_once(self, coded_volume):
        v = Volume(coded_volume()[0], (1.0, 1.0, 1.0))
        assert v.slice_sampler is None
        v.get_image_from_axis_gpu(0, Orientation.AXIAL)
        first = v.slice_sampler
        v.get_image_from_axis_gpu(1, Orientation.AXIAL)
        assert v.slice_sampler is first

    def test_out_of_range_index(self, coded_volume):
        v = Volume(coded_volume()[0], (1.0, 1.0, 1.0))
        with pytest.raises(IndexError):
            v.get_image_from_axis_gpu(3, Orientation.AXIAL)
        assert v.slice_sampler is None
