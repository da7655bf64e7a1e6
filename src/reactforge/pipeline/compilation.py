"""Compilation stage: turns source text into one contract's ABI and bytecode.

The adapter speaks solc's standard-JSON protocol through a SolcBackend, then
picks the requested contract out of the multi-contract output (the reactive
contract shares its source unit with the interfaces and abstract bases it
inherits from).
"""
from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Dict, Optional

from reactforge.errors import CompilationError
from reactforge.settings import PipelineSettings
from reactforge.types import CompilationArtifact, Diagnostic
from reactforge.utils.solc import SolcBackend

logger = logging.getLogger(__name__)


class ArtifactCache:
    """
    Read-through cache of compilation artifacts.

    Keys hash the compiler version, source unit name, target contract and the
    full source text, so a changed byte in the source is always a miss.
    """

    def __init__(self) -> None:
        self._artifacts: Dict[str, CompilationArtifact] = {}

    @staticmethod
    def key(version: str, unit_name: str, target: str, source: str) -> str:
        digest = hashlib.sha256()
        for part in (version, unit_name, target, source):
            digest.update(part.encode("utf-8"))
            digest.update(b"\x00")
        return digest.hexdigest()

    def get(self, key: str) -> Optional[CompilationArtifact]:
        return self._artifacts.get(key)

    def put(self, key: str, artifact: CompilationArtifact) -> None:
        self._artifacts[key] = artifact

    def __len__(self) -> int:
        return len(self._artifacts)


class CompilationAdapter:
    """Compiles a single source unit and extracts one named contract."""

    def __init__(
        self,
        settings: Optional[PipelineSettings] = None,
        backend: Optional[SolcBackend] = None,
        cache: Optional[ArtifactCache] = None,
    ) -> None:
        self._settings = settings or PipelineSettings()
        self._backend = backend or SolcBackend(
            self._settings.solc_version, auto_install=self._settings.auto_install_solc
        )
        self._cache = cache

    def build_request(self, source: str) -> Dict[str, Any]:
        """The standard-JSON input document for `source`."""
        request: Dict[str, Any] = {
            "language": "Solidity",
            "sources": {self._settings.source_unit_name: {"content": source}},
            "settings": {
                "outputSelection": {"*": {"*": ["abi", "evm.bytecode.object"]}},
            },
        }
        if self._settings.optimize:
            request["settings"]["optimizer"] = {
                "enabled": True,
                "runs": self._settings.optimize_runs,
            }
        return request

    def compile(
        self, source: str, target_contract_name: str, timeout: Optional[float] = None
    ) -> CompilationArtifact:
        """
        Compile `source` and return the artifact of `target_contract_name`.

        Args:
            source: Complete Solidity source text.
            target_contract_name: Contract to extract from the output.
            timeout: Seconds for this call; defaults to settings.compile_timeout.

        Returns:
            CompilationArtifact with the ABI and bytecode exactly as reported
            by the compiler, and any warnings it emitted.

        Raises:
            CompilationError: ``diagnostics`` if the compiler reported an
                error, ``missing-contract`` if the target is absent from the
                output, ``timeout`` if the compiler overran.
        """
        unit = self._settings.source_unit_name
        cache_key = None
        if self._cache is not None:
            cache_key = ArtifactCache.key(self._backend.version, unit, target_contract_name, source)
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Artifact cache hit for %s", target_contract_name)
                return cached

        start = time.perf_counter()
        output = self._backend.compile_standard(
            self.build_request(source),
            timeout=timeout if timeout is not None else self._settings.compile_timeout,
        )
        logger.info(
            "Compiled %s with solc %s in %.3fs",
            target_contract_name,
            self._backend.version,
            time.perf_counter() - start,
        )

        diagnostics = [Diagnostic.from_solc(entry, source) for entry in output.get("errors", [])]
        errors = [d for d in diagnostics if d.severity == "error"]
        warnings = [d for d in diagnostics if d.severity != "error"]
        if errors:
            raise CompilationError(
                f"{len(errors)} compiler error(s): " + "; ".join(str(d) for d in errors),
                kind=CompilationError.DIAGNOSTICS,
                diagnostics=diagnostics,
            )

        contracts = output.get("contracts", {}).get(unit, {})
        if target_contract_name not in contracts:
            raise CompilationError(
                f"Contract '{target_contract_name}' not found in compiler output"
                f" (available: {', '.join(sorted(contracts)) or 'none'})",
                kind=CompilationError.MISSING_CONTRACT,
                diagnostics=diagnostics,
            )

        compiled = contracts[target_contract_name]
        artifact = CompilationArtifact(
            contract_name=target_contract_name,
            abi=compiled.get("abi", []),
            bytecode=compiled.get("evm", {}).get("bytecode", {}).get("object", ""),
            compiler_version=self._backend.version,
            warnings=warnings,
        )
        if cache_key is not None:
            self._cache.put(cache_key, artifact)
        return artifact
