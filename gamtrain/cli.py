#!filepath: gamtrain/cli.py
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich import print

from gamtrain import __version__, logs
from gamtrain.config.log_config import LogConfig
from gamtrain.config.trainer_config import load_trainer_config
from gamtrain.io.example_reader import read_examples
from gamtrain.training.pipeline import build_training_pipeline
from gamtrain.utils.errors import UserInputError

app = typer.Typer(help="Additive model (GAM) trainer CLI")


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def train(
    config: Path = typer.Option(..., "--config", "-c", help="training YAML"),
    data: Path = typer.Option(..., "--data", "-d", help="parquet file of examples"),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="trainer block inside the YAML"),
    log_dir: Optional[str] = typer.Option(None, "--log-dir", help="overrides log.dir"),
):
    """
    Train an additive model and checkpoint it to model_output every iteration.
    """
    try:
        raw = yaml.safe_load(config.read_text(encoding="utf-8")) if config.exists() else None
        if raw is None:
            raise UserInputError(f"Config file not found or empty: {config}")
        if not isinstance(raw, dict):
            raise UserInputError(
                f"Config root must be a mapping, got {type(raw).__name__}: {config}"
            )

        log_cfg = LogConfig(**(raw.get("log") or {}))
        logs.reconfigure(
            log_dir=log_dir or log_cfg.dir,
            rotation=log_cfg.rotation,
            retention=log_cfg.retention,
            log_level=log_cfg.level,
        )

        cfg = load_trainer_config(raw, key)
        examples = read_examples(data)
    except UserInputError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    print(f"[green]Training {cfg.loss} additive model on {len(examples)} examples[/green]")

    ctx = build_training_pipeline(cfg).run(examples)

    print(
        f"[blue]Done: {ctx.model.num_functions} functions -> {cfg.model_output}[/blue]"
    )


if __name__ == "__main__":
    app()

# python -m gamtrain.cli train --config train.yml --key model_config --data examples.parquet
