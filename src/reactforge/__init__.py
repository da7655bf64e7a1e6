"""
reactforge: generate, check and compile Reactive Network contracts.

A caller describes an automation ("when event E is emitted by contract A on
chain X, call function F on contract B on chain Y") and the pipeline returns
the Solidity source of a reactive contract together with its ABI and
bytecode, or a failure tagged with the stage that stopped it.
"""

from .errors import (
    ReactForgeError,
    ConfigError,
    GenerationError,
    TemplateError,
    StructuralError,
    CompilationError,
)
from .settings import PipelineSettings
from .types import (
    AutomationConfig,
    EventFunctionPair,
    GeneratedSource,
    ValidationReport,
    CompilationArtifact,
    PipelineSuccess,
    PipelineFailure,
    PipelineResult,
    Stage,
)
from .pipeline import Pipeline

__all__ = [
    "Pipeline",
    "PipelineSettings",
    # types
    "AutomationConfig",
    "EventFunctionPair",
    "GeneratedSource",
    "ValidationReport",
    "CompilationArtifact",
    "PipelineSuccess",
    "PipelineFailure",
    "PipelineResult",
    "Stage",
    # errors
    "ReactForgeError",
    "ConfigError",
    "GenerationError",
    "TemplateError",
    "StructuralError",
    "CompilationError",
]
