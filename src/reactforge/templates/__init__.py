"""
reactforge Templates Subpackage.

This package holds the static Solidity skeletons used by the contract
generator, one per structural variant, and the TemplateLibrary that selects
and renders them. Skeletons reference named placeholders written as
``{{NAME}}``; rendering is a literal, single-pass substitution.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Dict, FrozenSet, Mapping

from reactforge.errors import TemplateError
from reactforge.types import AutomationConfig

from . import basic, multi_pair, owner_gated, pausable

__all__ = [
    "TemplateId",
    "TemplateLibrary",
    "PLACEHOLDER_RE",
]

PLACEHOLDER_RE = re.compile(r"\{\{([A-Z0-9_]+)\}\}")


class TemplateId(str, Enum):
    BASIC_SINGLE_PAIR = "basic-single-pair"
    MULTI_PAIR = "multi-pair"
    OWNER_GATED = "owner-gated"
    PAUSABLE = "pausable"


_SKELETONS: Dict[TemplateId, str] = {
    TemplateId.BASIC_SINGLE_PAIR: basic.SKELETON,
    TemplateId.MULTI_PAIR: multi_pair.SKELETON,
    TemplateId.OWNER_GATED: owner_gated.SKELETON,
    TemplateId.PAUSABLE: pausable.SKELETON,
}


class TemplateLibrary:
    """Stateless access to the fixed set of contract skeletons.

    The library knows nothing about automation semantics beyond the variant
    selection rule; deriving placeholder values is the generator's job.
    """

    @staticmethod
    def select_template(config: AutomationConfig) -> TemplateId:
        """
        Pick the structural variant for a configuration.

        Pausable wins regardless of pair count, then owner gating, then the
        number of pairs.
        """
        if config.is_pausable:
            return TemplateId.PAUSABLE
        if config.owner_address:
            return TemplateId.OWNER_GATED
        if len(config.pairs) > 1:
            return TemplateId.MULTI_PAIR
        return TemplateId.BASIC_SINGLE_PAIR

    @staticmethod
    def skeleton(template_id: TemplateId) -> str:
        return _SKELETONS[TemplateId(template_id)]

    @classmethod
    def placeholders(cls, template_id: TemplateId) -> FrozenSet[str]:
        """Names of every placeholder the skeleton references."""
        return frozenset(PLACEHOLDER_RE.findall(cls.skeleton(template_id)))

    @classmethod
    def render(cls, template_id: TemplateId, values: Mapping[str, str]) -> str:
        """
        Substitute placeholder values into a skeleton.

        Args:
            template_id: Variant to render.
            values: Rendered fragment for each placeholder name. Extra names
                are ignored.

        Returns:
            The final source text.

        Raises:
            TemplateError: If a referenced placeholder has no value.
        """
        template_id = TemplateId(template_id)
        skeleton = cls.skeleton(template_id)
        missing = cls.placeholders(template_id) - set(values)
        if missing:
            raise TemplateError(template_id.value, list(missing))
        return PLACEHOLDER_RE.sub(lambda m: str(values[m.group(1)]), skeleton)
