import json

import numpy as np
import pytest
import yaml

from gamtrain.config.trainer_config import TrainerConfig
from gamtrain.io.model_artifact import META_FILE, MODEL_FILE, load_model
from gamtrain.observability.instrumentation import Instrumentation
from gamtrain.training import build_training_pipeline, train
from gamtrain.utils.errors import ConfigError

from tests.conftest import make_fv

POSITIVE = make_fv(floats={"loc": {"x": 0.9}}, strings={"tag": {"hot"}})
NEGATIVE = make_fv(floats={"loc": {"x": 0.1}})


def test_train_learns_separable_data(base_config, linear_examples):
    model = train(linear_examples, base_config)

    assert model.num_functions > 0
    assert model.score(POSITIVE) > model.score(NEGATIVE)


def test_train_writes_checkpoint_every_iteration(base_config, linear_examples, tmp_path):
    inst = Instrumentation(enabled=True)
    ctx = build_training_pipeline(TrainerConfig(**base_config), inst).run(
        linear_examples, run_id="run-1"
    )

    out = tmp_path / "model"
    assert (out / MODEL_FILE).exists()
    meta = json.loads((out / META_FILE).read_text())
    assert meta["iteration"] == 2
    assert meta["run_id"] == "run-1"
    assert set(meta["metrics"]) == {"loss@1", "loss@2"}

    reloaded = load_model(out)
    assert reloaded.num_functions == ctx.model.num_functions
    assert reloaded.score(POSITIVE) == pytest.approx(ctx.model.score(POSITIVE))

    assert set(ctx.bag_losses) == {0, 1}
    assert "bags@1" in inst.timeline
    assert [i for i, _ in inst.metrics.history["mean_loss"]] == [1, 2]
    assert set(inst.stage_totals) >= {"bagging", "bags", "aggregate", "prune", "checkpoint"}


def test_train_restarts_from_checkpoint(base_config, linear_examples, tmp_path):
    first = train(linear_examples, {**base_config, "iterations": 1})

    resumed_cfg = {
        **base_config,
        "iterations": 1,
        "init_model": str(tmp_path / "model"),
        "model_output": str(tmp_path / "resumed"),
    }
    second = train(linear_examples, resumed_cfg)

    assert set(k for k, _ in second.iter_functions()) >= set(k for k, _ in first.iter_functions())


def test_train_from_yaml_block(base_config, linear_examples, tmp_path):
    path = tmp_path / "train.yml"
    path.write_text(yaml.safe_dump({"model_config": base_config}))

    model = train(linear_examples, path, key="model_config")

    assert model.num_functions > 0


def test_train_prunes_everything_with_high_threshold(base_config, linear_examples):
    model = train(linear_examples, {**base_config, "iterations": 1, "linfinity_threshold": 100.0})
    assert model.num_functions == 0


@pytest.mark.parametrize("loss", ["hinge", "regression"])
def test_train_other_losses(base_config, linear_examples, loss):
    model = train(linear_examples, {**base_config, "loss": loss, "num_bins": 3})
    assert model.num_functions > 0


def test_train_multiscale_ends_at_num_bins(base_config, linear_examples):
    model = train(linear_examples, {**base_config, "multiscale": [3, 8]})
    assert model.get_function("loc", "x").num_bins == base_config["num_bins"]


def test_train_with_worker_processes(base_config, linear_examples):
    model = train(linear_examples, {**base_config, "max_workers": 2})

    assert model.score(POSITIVE) > model.score(NEGATIVE)


def test_train_is_reproducible_with_seed(base_config, linear_examples, tmp_path):
    a = train(linear_examples, base_config)
    b = train(linear_examples, {**base_config, "model_output": str(tmp_path / "b")})

    np.testing.assert_allclose(
        a.get_function("loc", "x").weights, b.get_function("loc", "x").weights
    )


def test_train_rejects_unknown_loss(base_config, linear_examples):
    with pytest.raises(ConfigError):
        train(linear_examples, {**base_config, "loss": "poisson"})


def test_malformed_prior_surfaces_in_context_warnings(base_config, linear_examples):
    config = TrainerConfig(**{**base_config, "prior": ["loc,x,0.0,1.0", "bad,prior"]})
    ctx = build_training_pipeline(config, Instrumentation(enabled=False)).run(linear_examples)

    assert len(ctx.warnings) == 1
    assert "malformed" in ctx.warnings[0]
