"""JSON key extraction by depth-first traversal of the parsed document."""

import json
import re
from pathlib import Path
from typing import Any

from ..scan_logging import LogCategory, get_category_logger
from .models import ImportInfo, RefactoringType, ReferenceInfo, VariableInfo
from .parser import LanguageParser

logger = get_category_logger(LogCategory.PARSER)

# Strings are matched first so comment markers inside them survive
JSONC_COMMENTS = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*[\s\S]*?\*/')


def strip_json_comments(content: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals."""
    return JSONC_COMMENTS.sub(lambda match: match.group(1) or "", content)


def json_type(value: Any) -> str:
    """Name of the JSON type of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def json_items(node: Any) -> list[tuple[str, Any]]:
    """Key/value pairs of a container; array elements are keyed by index."""
    if isinstance(node, dict):
        return list(node.items())
    if isinstance(node, list):
        return [(str(index), value) for index, value in enumerate(node)]
    return []


class JSONParser(LanguageParser):
    """Parser that turns every key at every depth into a property declaration."""

    LANGUAGE = "json"
    SUPPORTED_EXTENSIONS = (".json", ".jsonc")
    SUPPORTED_REFACTORINGS = frozenset({RefactoringType.RENAME})

    def parse_variables(self, content: str, file_path: str) -> list[VariableInfo]:
        """Extract keys; invalid or too deeply nested JSON is logged and yields an empty list."""
        if Path(file_path).suffix.lower() == ".jsonc":
            content = strip_json_comments(content)

        try:
            document = json.loads(content)
            return self._traverse(document, file_path)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Invalid JSON in {file_path}: {e}")
            return []

    def _traverse(self, document: Any, file_path: str) -> list[VariableInfo]:
        """Depth-first walk with an explicit stack, emitting each key before its children."""
        variables: list[VariableInfo] = []
        stack = [("", iter(json_items(document)))]
        while stack:
            path, entries = stack[-1]
            entry = next(entries, None)
            if entry is None:
                stack.pop()
                continue

            key, value = entry
            variables.append(
                VariableInfo(
                    name=key,
                    type=json_type(value),
                    declaration_type="property",
                    line=0,
                    character=0,
                    file_path=file_path,
                    scope=path or "root",
                    value=value
                    if isinstance(value, str)
                    else json.dumps(value, separators=(",", ":")),
                )
            )
            if isinstance(value, dict | list):
                stack.append((f"{path}.{key}" if path else key, iter(json_items(value))))
        return variables

    def parse_imports(self, content: str) -> list[ImportInfo]:
        return []

    def get_variable_references(self, content: str, name: str) -> list[ReferenceInfo]:
        return []
