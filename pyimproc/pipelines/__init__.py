"""Config-driven image pipelines."""

from .registry import OPERATION_REGISTRY, apply_operation, register_operation
from .runner import PipelineConfig, StepConfig, run_pipeline

__all__ = [
    "OPERATION_REGISTRY",
    "PipelineConfig",
    "StepConfig",
    "apply_operation",
    "register_operation",
    "run_pipeline",
]
