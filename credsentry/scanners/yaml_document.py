"""
CredSentry YAML Scanner

Decodes every document of a YAML stream and walks it for credential-like
fields. Two kinds of otherwise invalid input are tolerated:
- Unquoted %placeholder% values (Symfony-style parameters) are quoted
  before decoding.
- Application-specific tags such as CloudFormation's !Ref are decoded as
  the plain node underneath.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

import yaml

from credsentry.core.config import ScanType
from credsentry.core.finding import FindingKind
from credsentry.core.scanner import PathLike, split_name_and_extension
from credsentry.scanners.structured import TreeDocumentScanner

YAML_EXTENSIONS = {".yaml", ".yml"}

_PLACEHOLDER_LINE = re.compile(
    r"^(?P<prefix>[ \t]*(?:-[ \t]+)?(?:[^\s#%][^#\n]*?:[ \t]+)?)(?P<value>%[^\n]*?)[ \t]*$",
    re.MULTILINE,
)


class _TolerantLoader(yaml.SafeLoader):
    pass


def _construct_tagged(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_mapping(node, deep=True)


_TolerantLoader.add_multi_constructor("!", _construct_tagged)


def quote_placeholders(content: str) -> str:
    """Wrap unquoted values starting with % in double quotes."""

    def _quote(match: re.Match) -> str:
        prefix = match.group("prefix")
        if not prefix.strip():
            # a %YAML or %TAG directive
            return match.group(0)
        value = match.group("value").replace("\\", "\\\\").replace('"', '\\"')
        return f'{prefix}"{value}"'

    return _PLACEHOLDER_LINE.sub(_quote, content)


class YAMLScanner(TreeDocumentScanner):

    name = "yaml"
    scan_type = ScanType.YAML
    variable_kind = FindingKind.YAML_VARIABLE
    list_kind = FindingKind.YAML_LIST_VALUE

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        _, extension = split_name_and_extension(file_path)
        return extension in YAML_EXTENSIONS

    def decode(self, content: str) -> Iterable[Any]:
        try:
            return list(yaml.load_all(quote_placeholders(content), Loader=_TolerantLoader))
        except yaml.YAMLError as exc:
            raise ValueError(str(exc)) from exc
