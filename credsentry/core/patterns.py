"""
CredSentry Pattern Compiler

Compiles the configured textual patterns once, before any file is read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from credsentry.core.config import ConfigError, CredentialConfig


class PatternError(ConfigError):
    """Raised when a configured pattern is not a valid regular expression."""


@dataclass(frozen=True)
class CompiledPatterns:
    variable_name: tuple[re.Pattern[str], ...]
    variable_name_exclusion: Optional[re.Pattern[str]]
    xml_attribute_name_exclusion: Optional[re.Pattern[str]]
    # (category name, pattern) in configuration order
    value_include: tuple[tuple[str, re.Pattern[str]], ...]
    variable_value_exclude: tuple[re.Pattern[str], ...]
    full_text_value_exclude: tuple[re.Pattern[str], ...]
    min_length: int


def _compile(pattern: str, setting: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise PatternError(f"invalid pattern in '{setting}': {pattern!r}: {exc}") from exc


def _compile_optional(pattern: str, setting: str) -> Optional[re.Pattern[str]]:
    if not pattern:
        return None
    return _compile(pattern, setting)


def compile_patterns(config: CredentialConfig) -> CompiledPatterns:
    """Compile every pattern in the configuration, failing on the first bad one."""
    return CompiledPatterns(
        variable_name=tuple(
            _compile(p, "variable_name_patterns") for p in config.variable_name_patterns
        ),
        variable_name_exclusion=_compile_optional(
            config.variable_name_exclusion_pattern, "variable_name_exclusion_pattern"
        ),
        xml_attribute_name_exclusion=_compile_optional(
            config.xml_attribute_name_exclusion_pattern, "xml_attribute_name_exclusion_pattern"
        ),
        value_include=tuple(
            (p.name, _compile(p.pattern, f"value_match_patterns[{p.name}]"))
            for p in config.value_match_patterns
        ),
        variable_value_exclude=tuple(
            _compile(p, "variable_value_exclude_patterns")
            for p in config.variable_value_exclude_patterns
        ),
        full_text_value_exclude=tuple(
            _compile(p, "full_text_value_exclude_patterns")
            for p in config.full_text_value_exclude_patterns
        ),
        min_length=config.min_password_length,
    )
