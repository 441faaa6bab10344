"""Tests for the array-backed data access and result maps."""

import numpy as np
import pytest

from flimfit.core.domain.config import FitParams
from flimfit.core.domain.results import FitOutcome, FitStatus
from flimfit.core.shared.exceptions import DataIOError
from flimfit.io.data_access import UNFITTED, ArrayDataAccess, ResultMaps, read_image

from conftest import N_SAMPLES, X_INC


class TestArrayDataAccess:
    """Tests for loading traces from an image."""

    def test_shapes(self, decay_image):
        image, _ = decay_image
        access = ArrayDataAccess(image)
        assert access.spatial_shape == (3, 4)
        assert access.n_samples == N_SAMPLES
        assert access.positions()[:3] == [(0, 0), (0, 1), (0, 2)]
        assert len(access.positions()) == 12

    def test_lifetime_axis_moved_last(self, decay_image):
        image, _ = decay_image
        access = ArrayDataAccess.from_params(np.moveaxis(image, -1, 0), FitParams(lt_axis=0))
        assert access.spatial_shape == (3, 4)
        np.testing.assert_array_equal(access.data[1, 2], image[1, 2])

    def test_rejects_single_trace(self):
        with pytest.raises(DataIOError, match="at least 2-D"):
            ArrayDataAccess(np.ones(10))

    @pytest.mark.parametrize("lt_axis", [3, 5, -4])
    def test_rejects_lifetime_axis_out_of_range(self, lt_axis):
        with pytest.raises(DataIOError, match="out of range"):
            ArrayDataAccess(np.ones((2, 2, 8)), lt_axis=lt_axis)

    def test_pixel_count_ignores_lifetime_axis(self):
        access = ArrayDataAccess(np.ones((8, 2, 3)), lt_axis=0)
        assert access.n_pixels == 6

    def test_rejects_mismatched_param_map(self, decay_image):
        image, _ = decay_image
        with pytest.raises(DataIOError, match="param_map"):
            ArrayDataAccess(image, param_map=np.ones((4, 3, 3)))

    def test_batches(self):
        access = ArrayDataAccess(np.ones((2, 3, 8)))
        batches = list(access.batches(4))
        assert [len(b) for b in batches] == [4, 2]
        assert batches[1] == [(1, 1), (1, 2)]

    def test_load_window(self, decay_image):
        image, _ = decay_image
        params = FitParams(x_inc=X_INC, fit_start=5, fit_end=50)
        access = ArrayDataAccess(image)
        trans = np.zeros(45)
        param = np.zeros(3)
        assert access.load_data(trans, param, params, (2, 1))
        np.testing.assert_array_equal(trans, image[2, 1, 5:50])

    def test_load_window_with_instrument_response(self, decay_image):
        image, _ = decay_image
        params = FitParams(x_inc=X_INC, fit_start=5, fit_end=50, instr=[1.0])
        trans = np.zeros(50)
        assert ArrayDataAccess(image).load_data(trans, np.zeros(3), params, (0, 0))
        np.testing.assert_array_equal(trans, image[0, 0, :50])

    def test_below_threshold_is_skipped(self, decay_image):
        image, _ = decay_image
        total = image[0, 3].sum()
        access = ArrayDataAccess(image)
        trans = np.zeros(N_SAMPLES)
        assert not access.load_data(trans, np.zeros(3), FitParams(i_thresh=total + 1), (0, 3))
        assert access.load_data(trans, np.zeros(3), FitParams(i_thresh=total), (0, 3))

    def test_non_finite_is_skipped(self, decay_image):
        image, _ = decay_image
        image = image.copy()
        image[1, 1, 7] = np.inf
        trans = np.zeros(N_SAMPLES)
        assert not ArrayDataAccess(image).load_data(trans, np.zeros(3), FitParams(), (1, 1))

    def test_initial_guess_sources(self, decay_image):
        image, truth = decay_image
        trans = np.zeros(N_SAMPLES)
        param = np.zeros(3)

        estimated = ArrayDataAccess(image)
        estimated.load_data(trans, param, FitParams(x_inc=X_INC), (0, 0))
        assert param[2] == pytest.approx(2.0, rel=0.25)

        ArrayDataAccess(image).load_data(
            trans, param, FitParams(x_inc=X_INC, param=[1.0, 2.0, 3.0]), (0, 0)
        )
        np.testing.assert_array_equal(param, [1.0, 2.0, 3.0])

        mapped = ArrayDataAccess(image, param_map=truth)
        mapped.load_data(trans, param, FitParams(x_inc=X_INC, param=[1.0, 2.0, 3.0]), (0, 0))
        np.testing.assert_array_equal(param, truth[0, 0])


class TestResultMaps:
    """Tests for the per-pixel result sink."""

    def test_initial_state(self):
        maps = ResultMaps((2, 2))
        assert np.all(maps.status == UNFITTED)
        assert np.isnan(maps.chisq).all()
        assert maps.param is None
        assert maps.fitted is None
        assert maps.residuals is None
        assert maps.status_counts() == {}

    def test_maps_allocated_on_demand(self):
        maps = ResultMaps((2, 2))
        maps.store((0, 1), FitOutcome(FitStatus.OK, 1.5, param=np.array([1.0, 2.0, 3.0])))
        assert maps.param.shape == (2, 2, 3)
        assert maps.fitted is None
        np.testing.assert_array_equal(maps.param[0, 1], [1.0, 2.0, 3.0])
        assert np.isnan(maps.param[1, 1]).all()
        assert maps.chisq[0, 1] == 1.5

    def test_status_counts(self):
        maps = ResultMaps((3,))
        curve = np.zeros(4)
        maps.store((0,), FitOutcome(FitStatus.OK, 1.0, fitted=curve, residuals=curve))
        maps.store((1,), FitOutcome(FitStatus.INSUFFICIENT_SIGNAL, -1.0))
        maps.store((2,), FitOutcome(FitStatus.OK, 2.0))
        assert maps.status_counts() == {FitStatus.OK: 2, FitStatus.INSUFFICIENT_SIGNAL: 1}
        assert maps.fitted.shape == (3, 4)
        assert maps.residuals.shape == (3, 4)

    def test_commit_through_access(self, decay_image):
        image, _ = decay_image
        access = ArrayDataAccess(image)
        access.commit_results(FitParams(), FitOutcome(FitStatus.DIVERGED, -1.0), (2, 3))
        assert access.maps.status[2, 3] == FitStatus.DIVERGED
        assert access.maps.status_counts() == {FitStatus.DIVERGED: 1}


class TestReadImage:
    """Tests for read_image."""

    def test_reads_npy(self, tmp_path, decay_image):
        image, _ = decay_image
        path = tmp_path / "decays.npy"
        np.save(path, image)
        np.testing.assert_array_equal(read_image(path), image)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataIOError, match="not found"):
            read_image(tmp_path / "missing.npy")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "decays.txt"
        path.write_text("1 2 3")
        with pytest.raises(DataIOError, match="Unsupported"):
            read_image(path)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "decays.npy"
        path.write_bytes(b"not an array")
        with pytest.raises(DataIOError, match="Could not read"):
            read_image(path)
