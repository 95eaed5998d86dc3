"""
CredSentry Classifier

Decides whether a name/value pair, or a fragment of free text, is possibly a
credential. Both decisions are pure functions of their input and the compiled
patterns, so one classifier is shared by every worker thread.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from credsentry.core.config import CredentialConfig
from credsentry.core.patterns import CompiledPatterns, compile_patterns


@dataclass(frozen=True)
class CredentialMatch:
    """A positive classification.

    ``category`` names the value pattern that matched; it is empty when the
    variable name alone was the signal.
    """

    category: str = ""


NAME_MATCH = CredentialMatch()


class Classifier:

    def __init__(self, patterns: CompiledPatterns) -> None:
        self.patterns = patterns

    @classmethod
    def from_config(cls, config: CredentialConfig) -> "Classifier":
        return cls(compile_patterns(config))

    @property
    def min_length(self) -> int:
        return self.patterns.min_length

    def classify_named_value(self, name: str, value: str) -> Optional[CredentialMatch]:
        """Classify a declared variable, field, property or attribute.

        The first rule to trigger wins:
        value too short, value excluded, value pattern included (regardless of
        the name), name excluded, name suspicious without the value echoing it.
        """
        p = self.patterns
        if len(value) < p.min_length:
            return None

        # defaults, placeholders and test fixtures
        if _any_search(p.variable_value_exclude, value):
            return None
        if _any_search(p.full_text_value_exclude, value):
            return None

        category = self._value_category(value)
        if category is not None:
            return CredentialMatch(category)

        if self.is_excluded_name(name):
            return None

        for m in p.variable_name:
            # const TOKEN_FIELD = "token" is a name for a concept, not a secret
            if m.search(name) and not m.search(value):
                return NAME_MATCH

        return None

    def classify_free_text(self, text: str) -> Optional[CredentialMatch]:
        """Classify a line, comment body or text node by the shape of its value."""
        p = self.patterns
        if len(text) < p.min_length:
            return None

        if _any_search(p.full_text_value_exclude, text):
            return None

        category = self._value_category(text)
        if category is not None:
            return CredentialMatch(category)
        return None

    def is_excluded_name(self, name: str) -> bool:
        exclusion = self.patterns.variable_name_exclusion
        return exclusion is not None and exclusion.search(name) is not None

    def is_excluded_xml_attribute(self, key: str, value: str) -> bool:
        exclusion = self.patterns.xml_attribute_name_exclusion
        if exclusion is None:
            return False
        return exclusion.search(key) is not None or exclusion.search(value) is not None

    def is_excluded_value(self, value: str) -> bool:
        """True when any value exclusion (declared or full-text) matches."""
        p = self.patterns
        return _any_search(p.variable_value_exclude, value) or _any_search(
            p.full_text_value_exclude, value
        )

    def is_suspicious_name(self, name: str) -> bool:
        return _any_search(self.patterns.variable_name, name)

    def _value_category(self, value: str) -> Optional[str]:
        for category, m in self.patterns.value_include:
            if m.search(value):
                return category
        return None


def _any_search(patterns: Iterable, text: str) -> bool:
    return any(m.search(text) for m in patterns)
