"""Runtime configuration for the reactforge pipeline.

Settings are plain Pydantic models passed explicitly to each stage; there is
no module-level settings singleton. `PipelineSettings.from_env` reads
``REACTFORGE_*`` environment variables for deployments that configure the
pipeline through the process environment. The solc binary cache location is
still controlled by py-solc-x's own ``SOLCX_BINARY_PATH`` variable.
"""
from __future__ import annotations

import os
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

ENV_PREFIX = "REACTFORGE_"

DEFAULT_SOLC_VERSION = "0.8.23"


class PipelineSettings(BaseModel):
    """Tunable parameters of the generation/compilation pipeline.

    Attributes:
        solc_version: Compiler version used for every compilation.
        compile_timeout: Seconds a single compiler invocation may take.
        optimize: Whether to enable the solc optimizer.
        optimize_runs: Optimizer runs when `optimize` is set.
        source_unit_name: Name of the single source unit sent to solc.
        min_gas_limit: Lower bound of the recommended callback gas limit.
        max_gas_limit: Upper bound of the recommended callback gas limit.
        allowed_base_contracts: Bases a reactive contract must inherit from.
        auto_install_solc: Install `solc_version` on first use when missing.
    """
    model_config = ConfigDict(frozen=True)

    solc_version: str = DEFAULT_SOLC_VERSION
    compile_timeout: float = Field(default=60.0, gt=0)
    optimize: bool = False
    optimize_runs: int = Field(default=200, ge=1)
    source_unit_name: str = "Contract.sol"
    min_gas_limit: int = Field(default=100_000, ge=0)
    max_gas_limit: int = Field(default=3_000_000, ge=0)
    allowed_base_contracts: Tuple[str, ...] = ("AbstractReactive", "AbstractPausableReactive")
    auto_install_solc: bool = True

    @model_validator(mode="after")
    def _check_gas_envelope(self) -> "PipelineSettings":
        if self.min_gas_limit > self.max_gas_limit:
            raise ValueError(
                f"min_gas_limit ({self.min_gas_limit}) exceeds max_gas_limit ({self.max_gas_limit})"
            )
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PipelineSettings":
        """
        Build settings from ``REACTFORGE_<FIELD>`` environment variables.

        Unset variables keep their defaults. ``REACTFORGE_ALLOWED_BASE_CONTRACTS``
        is a comma-separated list.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            if name == "allowed_base_contracts":
                values[name] = tuple(part.strip() for part in raw.split(",") if part.strip())
            else:
                values[name] = raw
        return cls.model_validate(values)
