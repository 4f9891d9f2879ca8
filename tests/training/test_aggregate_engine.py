import numpy as np
import pytest

from gamtrain.core.functions import Linear, Spline
from gamtrain.core.model import AdditiveModel
from gamtrain.training.engines.aggregate_engine import (
    aggregate_bags,
    aggregate_func_weights,
    group_by_feature,
)
from gamtrain.training.engines.bag_engine import BagResult
from gamtrain.utils.errors import FunctionShapeMismatch


def _result(index, functions):
    return BagResult(index=index, num_bins=None, num_examples=1, mean_loss=0.0, functions=functions)


def test_aggregate_func_weights_averages_then_smooths():
    funcs = [
        Spline(0.0, 1.0, 2, np.array([1.0, 1.0])),
        Spline(0.0, 1.0, 2, np.array([3.0, 3.0])),
    ]

    out = aggregate_func_weights(funcs, 0.5, 2, 0.0)

    np.testing.assert_allclose(out.weights, [2.0, 2.0])


def test_group_by_feature_orders_by_bag_index():
    a = Spline(0.0, 1.0, 2)
    b = Spline(0.0, 1.0, 2)

    grouped = group_by_feature([_result(1, {("loc", "x"): b}), _result(0, {("loc", "x"): a})])

    assert grouped[("loc", "x")][0] is a
    assert grouped[("loc", "x")][1] is b


def test_aggregate_bags_installs_mean_of_bags(make_params):
    params = make_params(num_bags=2, num_bins=2)
    model = AdditiveModel()
    model.add_function("loc", "x", Spline(0.0, 1.0, 2), True)

    results = [
        _result(0, {("loc", "x"): Spline(0.0, 1.0, 2, np.array([1.0, 1.0]))}),
        _result(1, {("loc", "x"): Spline(0.0, 1.0, 2, np.array([3.0, 3.0]))}),
    ]

    summary = aggregate_bags(results, model, params)

    assert summary.installed == 1
    assert summary.dropped == 0
    np.testing.assert_allclose(model.get_function("loc", "x").weights, [2.0, 2.0])


def test_aggregate_bags_scale_is_one_over_num_bags(make_params):
    params = make_params(num_bags=4)
    model = AdditiveModel()
    model.add_function("tag", "hot", Linear(1.0, 1.0), True)

    # only two of four bags report the feature
    results = [
        _result(i, {("tag", "hot"): Linear(1.0, 1.0, np.array([4.0, 0.0]))})
        for i in range(2)
    ]
    aggregate_bags(results, model, params)

    np.testing.assert_allclose(model.get_function("tag", "hot").weights, [2.0, 0.0])


def test_aggregate_bags_drops_unknown_keys(make_params):
    params = make_params(num_bags=1)
    model = AdditiveModel()
    model.add_function("loc", "x", Spline(0.0, 1.0, 4), True)

    results = [
        _result(0, {
            ("loc", "x"): Spline(0.0, 1.0, 4, np.ones(4)),
            ("loc", "y"): Spline(0.0, 1.0, 4, np.ones(4)),
        })
    ]
    summary = aggregate_bags(results, model, params)

    assert summary.dropped == 1
    assert not model.contains("loc", "y")
    assert model.num_functions == 1


def test_aggregate_bags_rejects_mixed_variants(make_params):
    params = make_params(num_bags=2)
    model = AdditiveModel()
    model.add_function("loc", "x", Spline(0.0, 1.0, 4), True)

    results = [
        _result(0, {("loc", "x"): Spline(0.0, 1.0, 4)}),
        _result(1, {("loc", "x"): Linear(0.0, 1.0)}),
    ]
    with pytest.raises(FunctionShapeMismatch):
        aggregate_bags(results, model, params)


def test_aggregate_bags_brings_multiscale_back_to_num_bins(make_params):
    params = make_params(num_bags=2, num_bins=3)
    model = AdditiveModel()
    model.add_function("loc", "x", Spline(0.0, 1.0, 3), True)

    results = [
        _result(0, {("loc", "x"): Spline(0.0, 1.0, 2, np.array([0.0, 2.0]))}),
        _result(1, {("loc", "x"): Spline(0.0, 1.0, 5, np.linspace(0.0, 2.0, 5))}),
    ]
    aggregate_bags(results, model, params)

    func = model.get_function("loc", "x")
    assert func.num_bins == 3
    np.testing.assert_allclose(func.weights, [0.0, 1.0, 2.0])
