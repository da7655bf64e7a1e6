"""Sequences the pipeline stages and turns stage errors into results."""
from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

from reactforge.errors import (
    CompilationError,
    ConfigError,
    GenerationError,
    StructuralError,
)
from reactforge.pipeline.compilation import CompilationAdapter
from reactforge.pipeline.config_validator import ConfigValidator
from reactforge.pipeline.generator import ContractGenerator
from reactforge.pipeline.structural_validator import StructuralValidator
from reactforge.settings import PipelineSettings
from reactforge.types import (
    GeneratedSource,
    PipelineFailure,
    PipelineResult,
    PipelineSuccess,
    Stage,
)

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Runs validation, generation, structural checks and compilation in order.

    A run stops at the first failing stage and reports it; nothing is
    retried and no state is carried from one run to the next. Every stage
    can be swapped for a test double through the constructor.
    """

    def __init__(
        self,
        settings: Optional[PipelineSettings] = None,
        validator: Optional[ConfigValidator] = None,
        generator: Optional[ContractGenerator] = None,
        structural: Optional[StructuralValidator] = None,
        compiler: Optional[CompilationAdapter] = None,
    ) -> None:
        self.settings = settings or PipelineSettings()
        self._validator = validator or ConfigValidator()
        self._generator = generator or ContractGenerator()
        self._structural = structural or StructuralValidator(self.settings)
        self._compiler = compiler or CompilationAdapter(self.settings)

    def generate(self, raw: Any) -> GeneratedSource:
        """
        Validate `raw` and generate source, without compiling.

        Raises:
            ConfigError: If the configuration is invalid.
            GenerationError: If the source cannot be generated.
        """
        config = self._validator.validate(raw)
        return self._generator.generate(config)

    def run(self, raw: Any) -> PipelineResult:
        """
        Full run from an automation configuration to ABI and bytecode.

        Structural findings on generated source are advisory: they are
        reported as warnings and compilation proceeds.

        Args:
            raw: The automation configuration as a mapping.

        Returns:
            PipelineSuccess, or PipelineFailure tagged with the failing stage.
        """
        start = time.perf_counter()
        try:
            config = self._validator.validate(raw)
        except ConfigError as e:
            return PipelineFailure(stage=Stage.CONFIG, detail=str(e), errors=e.violations)

        try:
            generated = self._generator.generate(config)
        except GenerationError as e:
            return PipelineFailure(stage=Stage.GENERATION, detail=str(e), errors=[str(e)])
        logger.debug("Generation finished in %.3fs", time.perf_counter() - start)

        report = self._structural.check(generated.text)
        if not report.is_valid:
            logger.warning(
                "Generated source for %s failed structural rule(s) %s; compiling anyway",
                generated.contract_name,
                ", ".join(report.failed_rules()),
            )
        warnings = report.errors + report.warnings

        result = self._compile(generated.text, generated.contract_name, warnings)
        logger.info(
            "Pipeline run for %s finished with %s in %.3fs",
            generated.contract_name,
            result.status,
            time.perf_counter() - start,
        )
        return result

    def run_source(self, source: str, contract_name: Optional[str] = None) -> PipelineResult:
        """
        Check and compile externally supplied (e.g. hand-edited) source.

        Unlike `run`, any error-severity structural finding stops the run.

        Args:
            source: Complete Solidity source text.
            contract_name: Contract to extract; defaults to the reactive
                contract declared in `source`.
        """
        try:
            report = self._structural.enforce(source)
        except StructuralError as e:
            return PipelineFailure(
                stage=Stage.STRUCTURAL,
                detail=str(e),
                errors=e.report.errors,
                warnings=e.report.warnings,
                source=source,
            )

        target = contract_name or self._structural.contract_name(source)
        if target is None:
            return PipelineFailure(
                stage=Stage.COMPILATION,
                detail="No contract declaration found in source",
                errors=["No contract declaration found in source"],
                warnings=report.warnings,
                kind=CompilationError.MISSING_CONTRACT,
                source=source,
            )
        return self._compile(source, target, report.warnings)

    def _compile(self, source: str, contract_name: str, warnings: List[str]) -> PipelineResult:
        try:
            artifact = self._compiler.compile(source, contract_name)
        except CompilationError as e:
            errors = [str(d) for d in e.diagnostics if d.severity == "error"] or [str(e)]
            compiler_warnings = [str(d) for d in e.diagnostics if d.severity != "error"]
            return PipelineFailure(
                stage=Stage.COMPILATION,
                detail=str(e),
                errors=errors,
                warnings=warnings + compiler_warnings,
                kind=e.kind,
                source=source,
                diagnostics=e.raw_messages,
            )

        return PipelineSuccess(
            source=source,
            contract_name=contract_name,
            abi=artifact.abi,
            bytecode=artifact.bytecode,
            warnings=warnings + [str(d) for d in artifact.warnings],
        )
