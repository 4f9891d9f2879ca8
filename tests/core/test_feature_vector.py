import numpy as np
import pytest

from gamtrain.core.feature_vector import (
    dense_with_dropout,
    flatten_with_dropout,
    get_label,
)

from tests.conftest import make_fv


def test_flatten_merges_strings_as_ones():
    fv = make_fv(floats={"loc": {"x": 2}}, strings={"tag": {"a", "b"}})

    assert fv.flatten() == {"loc": {"x": 2.0}, "tag": {"a": 1.0, "b": 1.0}}


def test_dense_returns_arrays():
    fv = make_fv(dense={"pos": {"xy": [1, 2]}})
    out = fv.dense()
    np.testing.assert_array_equal(out["pos"]["xy"], [1.0, 2.0])


def test_zero_dropout_draws_nothing():
    class Exploding:
        def random(self, *args):
            raise AssertionError("no draw expected")

    fv = make_fv(floats={"loc": {"x": 1.0}}, dense={"pos": {"xy": [1, 2]}})

    assert flatten_with_dropout(fv, 0.0, Exploding()) == fv.flatten()
    assert set(dense_with_dropout(fv, 0.0, Exploding())) == {"pos"}


def test_dropout_removes_roughly_the_right_share():
    fv = make_fv(floats={"f": {str(i): 1.0 for i in range(2000)}})
    kept = flatten_with_dropout(fv, 0.5, np.random.default_rng(0))

    assert 800 < len(kept["f"]) < 1200


def test_get_label_raw_and_thresholded():
    fv = make_fv(label=0.7)

    assert get_label(fv, "LABEL") == pytest.approx(0.7)
    assert get_label(fv, "LABEL", 0.5) == 1.0
    assert get_label(fv, "LABEL", 0.7) == -1.0


def test_get_label_missing_family():
    with pytest.raises(KeyError):
        get_label(make_fv(floats={"loc": {"x": 1.0}}), "LABEL")
