from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from reactforge.types import Diagnostic, ValidationReport


class ReactForgeError(Exception):
    """
    Base class for all reactforge pipeline errors.

    Every stage of the pipeline raises a subclass of this exception; the
    orchestrator is the only place where they are turned into result values.
    """
    pass


class ConfigError(ReactForgeError):
    """
    Raised when an automation configuration is malformed or semantically invalid.

    Attributes:
        violations: Every problem found in the input, not just the first one,
                    so the caller can present a complete correction list.
    """

    def __init__(self, violations: List[str]):
        """
        Initialize a ConfigError.

        Args:
            violations: Human-readable description of each violation.
        """
        self.violations = list(violations)
        super().__init__(
            f"{len(self.violations)} configuration error(s): " + "; ".join(self.violations)
        )


class GenerationError(ReactForgeError):
    """
    Raised when a value required by the generated source cannot be derived.

    Examples include two pairs resolving to the same topic-0 or a target
    function argument that no log field can supply.
    """
    pass


class TemplateError(ReactForgeError):
    """
    Raised when a skeleton is rendered without a value for one of its placeholders.

    Attributes:
        missing: Sorted placeholder names that had no value.
    """

    def __init__(self, template_id: str, missing: List[str]):
        self.template_id = template_id
        self.missing = sorted(missing)
        super().__init__(
            f"Template '{template_id}' is missing values for: {', '.join(self.missing)}"
        )


class StructuralError(ReactForgeError):
    """
    Raised when externally supplied source fails the structural checks.

    Attributes:
        report: The full ValidationReport, naming every failed rule.
    """

    def __init__(self, report: "ValidationReport"):
        self.report = report
        super().__init__("Structural validation failed: " + "; ".join(report.errors))


class CompilationError(ReactForgeError):
    """
    Raised when the compiler cannot produce the requested contract.

    Attributes:
        kind: Coarse sub-kind, one of ``diagnostics``, ``missing-contract``
              or ``timeout``.
        diagnostics: Diagnostics reported by the compiler (may be empty).
    """

    DIAGNOSTICS = "diagnostics"
    MISSING_CONTRACT = "missing-contract"
    TIMEOUT = "timeout"

    def __init__(
        self,
        message: str,
        kind: str = DIAGNOSTICS,
        diagnostics: Optional[List["Diagnostic"]] = None,
    ):
        """
        Initialize a CompilationError.

        Args:
            message: Description of the failure.
            kind: One of the class-level kind constants.
            diagnostics: Compiler diagnostics to carry for debugging.
        """
        super().__init__(message)
        self.kind = kind
        self.diagnostics = list(diagnostics or [])

    @property
    def raw_messages(self) -> List[str]:
        """Compiler-formatted text of every carried diagnostic."""
        return [d.formatted_message or d.message for d in self.diagnostics]
