import numpy as np
import pytest

from gamtrain.core.functions import Linear, MultiDimensionSpline, Spline
from gamtrain.core.model import AdditiveModel
from gamtrain.io.model_artifact import save_model
from gamtrain.training.engines.model_init_engine import init_model, model_initialization
from gamtrain.utils.errors import ModelInitError

from tests.conftest import make_fv


def test_uniform_init_variants(make_params, linear_examples):
    model = model_initialization(make_params(), linear_examples, np.random.default_rng(0))

    spline = model.get_function("loc", "x")
    assert isinstance(spline, Spline)
    assert spline.num_bins == 4
    assert spline.linfinity_norm() == 0.0
    assert isinstance(model.get_function("tag", "hot"), Spline)
    assert "LABEL" not in model.weights


def test_uniform_init_honours_linear_feature(make_params, linear_examples):
    params = make_params(linear_feature=["loc"])
    model = model_initialization(params, linear_examples, np.random.default_rng(0))

    assert isinstance(model.get_function("loc", "x"), Linear)


def test_uniform_init_string_feature_in_linear_family(make_params, linear_examples):
    model = model_initialization(
        make_params(linear_feature=["tag"]), linear_examples, np.random.default_rng(0)
    )

    assert isinstance(model.get_function("tag", "hot"), Linear)
    assert isinstance(model.get_function("loc", "x"), Spline)


def test_uniform_init_honours_min_count(make_params, linear_examples):
    linear_examples[0].float_features["rare"] = {"r": 1.0}
    params = make_params(min_count=2)

    model = model_initialization(params, linear_examples, np.random.default_rng(0))

    assert not model.contains("rare", "r")
    assert model.contains("loc", "x")


def test_uniform_init_skips_dense_features(make_params):
    examples = [
        make_fv(floats={"loc": {"x": float(i)}}, dense={"pos": {"xy": [0.0, 1.0]}}, label=1.0)
        for i in range(5)
    ]
    model = model_initialization(make_params(), examples, np.random.default_rng(0))

    assert "pos" not in model.weights


def test_dynamic_init_builds_trees(make_params, linear_examples):
    params = make_params(dynamic_buckets={"max_tree_depth": 2, "min_leaf_count": 5})

    model = model_initialization(params, linear_examples, np.random.default_rng(0))

    assert isinstance(model.get_function("loc", "x"), MultiDimensionSpline)
    assert isinstance(model.get_function("tag", "hot"), Linear)


def test_fresh_model_gets_priors(make_params, linear_examples):
    params = make_params(prior=["tag,hot,0.5,1.5", "bad,prior"])
    warnings = []

    model = model_initialization(
        params, linear_examples, np.random.default_rng(0), warnings=warnings
    )

    np.testing.assert_allclose(model.get_function("tag", "hot").weights, np.linspace(0.5, 1.5, 4))
    assert len(warnings) == 1
    assert "bad,prior" in warnings[0]


def test_init_model_is_extended_not_overwritten(make_params, linear_examples, tmp_path):
    seed_model = AdditiveModel()
    seed_model.add_function("loc", "x", Spline(0.0, 1.0, 2, np.array([0.7, -0.7])), True)
    save_model(seed_model, tmp_path / "seed")

    params = make_params(init_model=str(tmp_path / "seed"), prior=["loc,x,5.0,5.0"])
    model = model_initialization(params, linear_examples, np.random.default_rng(0))

    # existing function kept as is, priors not re-applied
    np.testing.assert_allclose(model.get_function("loc", "x").weights, [0.7, -0.7])
    assert model.contains("tag", "hot")


def test_init_model_missing_path(make_params, linear_examples, tmp_path):
    params = make_params(init_model=str(tmp_path / "nowhere"))
    with pytest.raises(ModelInitError):
        model_initialization(params, linear_examples, np.random.default_rng(0))


def test_nothing_passes_min_count(make_params, linear_examples):
    with pytest.raises(ModelInitError):
        model_initialization(make_params(min_count=10_000), linear_examples, np.random.default_rng(0))


def test_init_model_overwrite_flag(make_params, linear_examples):
    model = AdditiveModel()
    original = Spline(0.0, 1.0, 2)
    model.add_function("loc", "x", original, True)

    init_model(make_params(), linear_examples, model, False, np.random.default_rng(0))
    assert model.get_function("loc", "x") is original

    init_model(make_params(), linear_examples, model, True, np.random.default_rng(0))
    assert model.get_function("loc", "x") is not original
