import logging
from typing import Any, List

from pydantic import ValidationError

from reactforge.errors import ConfigError
from reactforge.types import AutomationConfig

logger = logging.getLogger(__name__)


class ConfigValidator:
    """Validates raw automation input before any source is generated."""

    @staticmethod
    def validate(raw: Any) -> AutomationConfig:
        """
        Validate a loosely-typed automation configuration.

        Accepts either a ``pairs`` list or a single top-level ``event`` and
        ``function``, with camelCase or snake_case keys.

        Args:
            raw: Mapping as received from the caller (e.g. parsed JSON).

        Returns:
            The validated, normalized AutomationConfig.

        Raises:
            ConfigError: With every violation found, not just the first.
        """
        if isinstance(raw, AutomationConfig):
            return raw
        if not isinstance(raw, dict):
            raise ConfigError([f"configuration must be an object, got {type(raw).__name__}"])

        try:
            config = AutomationConfig.model_validate(raw)
        except ValidationError as e:
            violations = _format_errors(e)
            logger.info("Rejected automation config with %d violation(s)", len(violations))
            raise ConfigError(violations) from e

        logger.debug(
            "Validated automation config: %d pair(s), origin chain %d, destination chain %d",
            len(config.pairs),
            config.origin_chain_id,
            config.destination_chain_id,
        )
        return config


def _format_errors(error: ValidationError) -> List[str]:
    """Turns pydantic errors into ``field.path: message`` strings."""
    violations = []
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"]) or "config"
        message = item["msg"]
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if item["type"] == "missing":
            message = "required field is missing"
        violations.append(f"{path}: {message}")
    return violations
