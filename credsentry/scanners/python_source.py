"""
CredSentry Python Source Scanner

Scans Python modules in two passes:
- Structural: module and class level assignments of string literals are
  classified by name and value; comment blocks and standalone string
  statements (docstrings) are classified as free text.
- Raw lines: every remaining line, with its comment stripped and docstrings
  skipped, is checked for credential-shaped values. This catches keys passed
  straight into function calls. Lines already reported are skipped.
"""

from __future__ import annotations

import ast
import io
import logging
import tokenize
import warnings
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from credsentry.core.config import ScanType
from credsentry.core.finding import Finding, FindingKind
from credsentry.core.scanner import BaseScanner, PathLike, split_name_and_extension

logger = logging.getLogger(__name__)

PYTHON_EXTENSIONS = {".py", ".pyw"}


@dataclass
class _CommentBlock:
    line: int
    end_line: int
    value: str
    text: str


class PythonSourceScanner(BaseScanner):
    """
    Python source scanner built on the ast and tokenize modules.
    """

    name = "python"
    scan_type = ScanType.PYTHON

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        name, extension = split_name_and_extension(file_path)
        if extension not in PYTHON_EXTENSIONS:
            return False

        if self.config.exclude_tests and _is_test_module(name):
            return False
        return True

    def scan_file(self, file_path: PathLike) -> List[Finding]:
        findings: List[Finding] = []
        filename = str(file_path)

        source = self._read_text(file_path)
        if source is None:
            return findings

        try:
            with warnings.catch_warnings():
                # invalid escape sequences in the scanned code
                warnings.simplefilter("ignore")
                tree = ast.parse(source, filename=filename)
            comments = _collect_comments(source)
        except (SyntaxError, ValueError, tokenize.TokenError) as exc:
            logger.debug("could not parse %s: %s", file_path, exc)
            return findings

        found_lines: set[int] = set()

        for var_name, node in _declarations(tree.body):
            if not (isinstance(node, ast.Constant) and isinstance(node.value, str)):
                continue
            if not node.value:
                continue

            match = self.classifier.classify_named_value(var_name, node.value)
            if match is None:
                continue

            end_line = node.end_lineno or node.lineno
            findings.append(Finding(
                file=filename,
                kind=FindingKind.SOURCE_VARIABLE,
                line=node.lineno,
                name=var_name,
                value=ast.get_source_segment(source, node) or repr(node.value),
                credential_type=match.category,
            ))
            found_lines.update(range(node.lineno, end_line + 1))

        docstrings = _docstring_blocks(tree, source)
        docstring_lines: set[int] = set()
        for block in docstrings:
            docstring_lines.update(range(block.line, block.end_line + 1))

        if not self.config.exclude_comments:
            blocks = sorted(_comment_blocks(source, comments) + docstrings, key=lambda b: b.line)
            for block in blocks:
                match = self.classifier.classify_free_text(block.text)
                if match is None:
                    continue
                findings.append(Finding(
                    file=filename,
                    kind=FindingKind.SOURCE_COMMENT,
                    line=block.line,
                    value=block.value,
                    credential_type=match.category,
                ))
                found_lines.update(range(block.line, block.end_line + 1))

        comment_columns = {row: col for row, col, _ in comments}
        for line_no, line in enumerate(source.split("\n"), start=1):
            if line_no in found_lines or line_no in docstring_lines:
                continue

            col = comment_columns.get(line_no)
            if col is not None:
                line = line[:col]
            line = line.strip()

            match = self.classifier.classify_free_text(line)
            if match is not None:
                findings.append(Finding(
                    file=filename,
                    kind=FindingKind.SOURCE_OTHER,
                    line=line_no,
                    value=line,
                    credential_type=match.category,
                ))

        return findings


def _is_test_module(name: str) -> bool:
    return name.startswith("test_") or name.endswith("_test") or name == "conftest"


def _declarations(body: List[ast.stmt]) -> Iterator[Tuple[str, ast.expr]]:
    """Yield (name, value) for assignments at module and class level."""
    for node in body:
        if isinstance(node, ast.ClassDef):
            yield from _declarations(node.body)
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                yield from _assigned(target, node.value)
        elif isinstance(node, ast.AnnAssign) and node.value is not None:
            yield from _assigned(node.target, node.value)


def _assigned(target: ast.expr, value: ast.expr) -> Iterator[Tuple[str, ast.expr]]:
    if isinstance(target, ast.Name):
        yield target.id, value
    elif (
        isinstance(target, (ast.Tuple, ast.List))
        and isinstance(value, (ast.Tuple, ast.List))
        and len(target.elts) == len(value.elts)
    ):
        for t, v in zip(target.elts, value.elts):
            yield from _assigned(t, v)


def _collect_comments(source: str) -> List[Tuple[int, int, str]]:
    """Return (row, col, text) for every comment token."""
    comments = []
    for tok in tokenize.generate_tokens(io.StringIO(source).readline):
        if tok.type == tokenize.COMMENT:
            comments.append((tok.start[0], tok.start[1], tok.string))
    return comments


def _comment_blocks(source: str, comments: List[Tuple[int, int, str]]) -> List[_CommentBlock]:
    """Group full-line comments on consecutive lines; inline comments stand alone."""
    lines = source.split("\n")
    blocks: List[_CommentBlock] = []
    raw: List[str] = []
    start = prev = 0
    prev_full_line = False

    def flush() -> None:
        if raw:
            text = "\n".join(c.lstrip("#").strip() for c in raw)
            blocks.append(_CommentBlock(start, prev, "\n".join(raw), text))

    for row, col, text in comments:
        full_line = not lines[row - 1][:col].strip()
        if raw and full_line and prev_full_line and row == prev + 1:
            raw.append(text)
        else:
            flush()
            raw = [text]
            start = row
        prev = row
        prev_full_line = full_line

    flush()
    return blocks


def _docstring_blocks(tree: ast.AST, source: str) -> List[_CommentBlock]:
    """Standalone string statements, which Python uses as block comments."""
    blocks = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Expr):
            continue
        value = node.value
        if not (isinstance(value, ast.Constant) and isinstance(value.value, str)):
            continue
        blocks.append(_CommentBlock(
            line=value.lineno,
            end_line=value.end_lineno or value.lineno,
            value=ast.get_source_segment(source, value) or value.value,
            text=value.value,
        ))
    return sorted(blocks, key=lambda b: b.line)
