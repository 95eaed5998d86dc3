"""
CredSentry Base Scanner

A scanner understands one file format. It decides whether it can handle a
path and, given one, returns the credential findings in that file.

Scanners:
- PythonSourceScanner
- JSONScanner, YAMLScanner, XMLScanner
- PHPScanner, ShellScanner
- PropertiesScanner, PrivateKeyScanner
- GenericCodeScanner, GenericTextScanner
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from credsentry.core.classifier import Classifier
from credsentry.core.config import CredentialConfig
from credsentry.core.finding import Finding

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class BaseScanner(ABC):
    """
    Minimal scanner interface.
    Each scanner must implement supports_file() and scan_file().
    """

    name: str = "base"
    scan_type: str = ""

    def __init__(self, config: CredentialConfig, classifier: Classifier):
        self.config = config
        self.classifier = classifier

    @property
    def enabled(self) -> bool:
        return self.config.is_scan_type_enabled(self.scan_type)

    @abstractmethod
    def supports_file(self, file_path: PathLike) -> bool:
        """
        Whether this scanner should handle the file.
        """
        raise NotImplementedError

    @abstractmethod
    def scan_file(self, file_path: PathLike) -> List[Finding]:
        """
        Scan one file and return findings. Never raises for unreadable or
        malformed files.
        """
        raise NotImplementedError

    def _read_text(self, file_path: PathLike) -> Optional[str]:
        try:
            with open(file_path, encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError as exc:
            logger.debug("could not read %s: %s", file_path, exc)
            return None

    def _read_lines(self, file_path: PathLike) -> Optional[List[str]]:
        content = self._read_text(file_path)
        if content is None:
            return None
        return content.split("\n")


def split_name_and_extension(file_path: PathLike) -> Tuple[str, str]:
    """Split the base name at its last dot.

    Unlike os.path.splitext, a leading dot starts the extension, so ".env"
    has an empty name and the extension ".env".
    """
    base = os.path.basename(str(file_path))
    idx = base.rfind(".")
    if idx < 0:
        return base, ""
    return base[:idx], base[idx:]


def trim_quotes(value: str) -> str:
    return value.strip("\"'`")


def trim_semicolon(value: str) -> str:
    return value.strip().rstrip(";")


def read_c_style_comment(lines: Sequence[str], start: int) -> Tuple[str, int]:
    """Collect a /* ... */ comment starting at ``lines[start]``.

    Returns the comment body (trimmed lines joined by newlines) and the index
    of the line holding the closing marker. An unterminated comment runs to
    the end of the file.
    """
    first = lines[start].strip()
    if "*/" in first:
        return first, start

    body = [first]
    idx = start
    while idx + 1 < len(lines):
        idx += 1
        line = lines[idx].strip()
        body.append(line)
        if "*/" in line:
            break
    return "\n".join(body), idx
