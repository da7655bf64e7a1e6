import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

from solcx import install_solc
from solcx.exceptions import SolcNotInstalled
from solcx.install import get_executable

from reactforge.errors import CompilationError

logger = logging.getLogger(__name__)


class SolcBackend:
    """
    Runs a pinned solc binary in standard-JSON mode.

    Each call is a fresh, scoped subprocess: nothing is shared between calls,
    so concurrent compilations are independent and a hung compiler is killed
    when its timeout expires.
    """

    def __init__(self, version: str, auto_install: bool = True) -> None:
        self.version = version
        self._auto_install = auto_install
        self._executable: Optional[Path] = None

    @property
    def executable(self) -> Path:
        """Path of the solc binary, installing it first when allowed."""
        if self._executable is None:
            try:
                self._executable = Path(get_executable(self.version))
            except SolcNotInstalled:
                if not self._auto_install:
                    raise
                logger.info("Installing solc %s", self.version)
                install_solc(self.version)
                self._executable = Path(get_executable(self.version))
        return self._executable

    def compile_standard(self, request: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        """
        Send a standard-JSON request to solc and return its parsed output.

        Args:
            request: The standard-JSON input document.
            timeout: Seconds before the compiler process is killed.

        Returns:
            The standard-JSON output document. Compiler diagnostics are part
            of the output, not exceptions.

        Raises:
            CompilationError: ``timeout`` kind if the process overran, or
                ``diagnostics`` kind if solc produced no parseable output.
        """
        try:
            proc = subprocess.run(
                [str(self.executable), "--standard-json"],
                input=json.dumps(request),
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CompilationError(
                f"solc {self.version} did not finish within {timeout:g}s",
                kind=CompilationError.TIMEOUT,
            ) from e

        try:
            return json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            stderr = proc.stderr.strip() or f"exit status {proc.returncode}"
            raise CompilationError(f"solc produced no JSON output: {stderr}") from e
