"""
CredSentry Format Dispatcher

Chooses the scanner for a path. Scanners are asked in a fixed priority
order and the first one that supports the path wins. Properties files are
also handed to the private key scanner, since extensionless files such as
id_rsa look like both.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Type

from credsentry.core.classifier import Classifier
from credsentry.core.config import CredentialConfig
from credsentry.core.finding import Finding
from credsentry.core.scanner import BaseScanner, PathLike
from credsentry.scanners.generic_code import GenericCodeScanner
from credsentry.scanners.generic_text import GenericTextScanner
from credsentry.scanners.json_document import JSONScanner
from credsentry.scanners.php import PHPScanner
from credsentry.scanners.private_key import PrivateKeyScanner
from credsentry.scanners.properties import PropertiesScanner
from credsentry.scanners.python_source import PythonSourceScanner
from credsentry.scanners.shell import ShellScanner
from credsentry.scanners.xml_document import XMLScanner
from credsentry.scanners.yaml_document import YAMLScanner

logger = logging.getLogger(__name__)

# priority order
SCANNER_CLASSES: List[Type[BaseScanner]] = [
    PythonSourceScanner,
    JSONScanner,
    XMLScanner,
    YAMLScanner,
    PHPScanner,
    PropertiesScanner,
    PrivateKeyScanner,
    ShellScanner,
    GenericCodeScanner,
    GenericTextScanner,
]

Emit = Callable[[Finding], None]


class FormatDispatcher:

    def __init__(self, config: CredentialConfig, classifier: Optional[Classifier] = None):
        self.config = config
        self.classifier = classifier or Classifier.from_config(config)
        self.scanners = [cls(config, self.classifier) for cls in SCANNER_CLASSES]
        self._private_key = next(s for s in self.scanners if isinstance(s, PrivateKeyScanner))

    def select_scanner(self, file_path: PathLike) -> Optional[BaseScanner]:
        for scanner in self.scanners:
            if scanner.supports_file(file_path):
                return scanner
        return None

    def scanners_for(self, file_path: PathLike) -> List[BaseScanner]:
        """The selected scanner plus any scanner chained after it."""
        scanner = self.select_scanner(file_path)
        if scanner is None:
            return []

        chain = [scanner]
        # disabling privatekey also turns off the key check on properties files
        if isinstance(scanner, PropertiesScanner) and self._private_key.enabled:
            chain.append(self._private_key)
        return chain

    def parse_file(self, file_path: PathLike, emit: Emit) -> bool:
        """Scan one file, passing each finding to ``emit``.

        Returns True when some scanner handled the file.
        """
        chain = self.scanners_for(file_path)
        for scanner in chain:
            logger.debug("scanning %s with %s", file_path, scanner.name)
            for finding in scanner.scan_file(file_path):
                emit(finding)
        return bool(chain)
