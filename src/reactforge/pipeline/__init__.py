"""
reactforge Pipeline Subpackage.

One module per stage, plus the orchestrator that sequences them:
ConfigValidator -> ContractGenerator -> StructuralValidator -> CompilationAdapter.
Each stage raises a ReactForgeError subclass on failure; only the Pipeline
turns those into PipelineFailure values.
"""

from .config_validator import ConfigValidator
from .generator import ContractGenerator
from .structural_validator import RULES, StructuralRule, StructuralValidator
from .compilation import ArtifactCache, CompilationAdapter
from .orchestrator import Pipeline

__all__ = [
    "ConfigValidator",
    "ContractGenerator",
    "StructuralValidator",
    "StructuralRule",
    "RULES",
    "CompilationAdapter",
    "ArtifactCache",
    "Pipeline",
]
