"""
Heat diffusion runner - Hydra + MLflow integration for the stencil solvers.

Single runs:
    # Naive kernel, defaults from conf/config.yaml
    uv run python run_solver.py

    # Tiled kernel, 8th order, CUDA
    uv run python run_solver.py solver=tiled order=8 backend=cuda

Parameter sweeps (multirun mode):
    uv run python run_solver.py -m solver=naive,rowblocked,tiled order=2,4,8

MLflow modes:
    local   - file-based ./mlruns (default)
    remote  - tracking server from .env (MLFLOW_TRACKING_URI and credentials)
"""

import logging
import os
import sys
from pathlib import Path

import hydra
import mlflow
from dotenv import load_dotenv
from hydra.utils import instantiate
from mlflow.tracking import MlflowClient
from omegaconf import DictConfig, OmegaConf

# Load .env file (for MLflow credentials)
load_dotenv()

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from heat2d.initial import create_initial_field  # noqa: E402

log = logging.getLogger(__name__)


# =============================================================================
# Solver Factory
# =============================================================================


def create_solver(cfg: DictConfig):
    """Instantiate solver using Hydra's instantiate on solver subtree.

    Common parameters from root config are passed to the solver constructor;
    the initial field is built from ``cfg.initial``.
    """
    solver_cfg = OmegaConf.masked_copy(cfg.solver, [k for k in cfg.solver if k != "name"])
    factory = instantiate(
        solver_cfg,
        nx=cfg.nx,
        ny=cfg.ny,
        order=cfg.order,
        xcfl=cfg.xcfl,
        ycfl=cfg.ycfl,
        iters=cfg.iters,
        backend=cfg.backend,
        boundary=cfg.boundary,
        boundary_value=cfg.boundary_value,
        log_every=cfg.log_every,
        num_threads=cfg.num_threads,
        _convert_="partial",
        _partial_=True,
    )
    initial = OmegaConf.to_container(cfg.initial)
    field = create_initial_field(initial.pop("name"), cfg.nx, cfg.ny, **initial)
    return factory(initial_field=field)


# =============================================================================
# MLflow Logging
# =============================================================================


def setup_mlflow(cfg: DictConfig) -> str:
    """Point MLflow at the local store or the .env server; return the experiment name."""
    if cfg.mlflow.mode == "local":
        os.environ.pop("MLFLOW_TRACKING_URI", None)
        mlflow.set_tracking_uri(cfg.mlflow.tracking_uri)
    else:
        mlflow.set_tracking_uri(os.environ["MLFLOW_TRACKING_URI"])

    mlflow.set_experiment(cfg.experiment_name)
    return cfg.experiment_name


def log_metrics_and_timeseries(solver, run_id: str):
    """Log final metrics and timeseries to MLflow."""
    mlflow.log_metrics(solver.metrics.to_mlflow())

    if solver.time_series is not None:
        batch_metrics = solver.time_series.to_mlflow_batch()
        if batch_metrics:
            MlflowClient().log_batch(run_id=run_id, metrics=batch_metrics)


# =============================================================================
# Main Entry Point
# =============================================================================


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Hydra entry point - runs solver with MLflow tracking."""
    log.info(f"Solver: {cfg.solver.name}, {cfg.nx}x{cfg.ny}, order={cfg.order}, backend={cfg.backend}")

    experiment_name = setup_mlflow(cfg)
    log.info(f"MLflow experiment: {experiment_name}")

    solver = create_solver(cfg)
    run_name = f"{cfg.solver.name}_o{cfg.order}_{cfg.nx}x{cfg.ny}_{cfg.backend}"

    with mlflow.start_run(run_name=run_name, tags={"solver": cfg.solver.name}) as run:
        mlflow.log_params(solver.params.to_mlflow())
        mlflow.log_dict(OmegaConf.to_container(cfg), "config.yaml")

        log.info("Starting solver...")
        solver.solve()

        log_metrics_and_timeseries(solver, run.info.run_id)

        log.info(f"Done:\n{solver.metrics.to_dataframe().to_string(index=False)}")


if __name__ == "__main__":
    main()
