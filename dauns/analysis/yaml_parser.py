"""Line-oriented YAML key extraction with indentation-derived scopes."""

import re

from .models import ImportInfo, RefactoringType, VariableInfo
from .parser import LanguageParser

KEY_VALUE = re.compile(r"^(\s*)([a-zA-Z_][a-zA-Z0-9_-]*)\s*:(?:\s+(.*))?$")

INDENT_UNIT = 2


def infer_yaml_type(value: str) -> str:
    """Infer a type label from the shape of a scalar or inline collection."""
    if not value:
        return "null"
    if value in ("true", "false"):
        return "boolean"
    if re.fullmatch(r"\d+", value):
        return "number"
    if re.fullmatch(r"\d*\.\d+", value):
        return "float"
    if value.startswith("[") and value.endswith("]"):
        return "array"
    if value.startswith("{") and value.endswith("}"):
        return "object"
    return "string"


class YAMLParser(LanguageParser):
    """Parser for YAML mappings, one ``key: value`` line at a time."""

    LANGUAGE = "yaml"
    SUPPORTED_EXTENSIONS = (".yml", ".yaml")
    SUPPORTED_REFACTORINGS = frozenset({RefactoringType.RENAME})

    def parse_variables(self, content: str, file_path: str) -> list[VariableInfo]:
        variables = []
        for line_number, line in enumerate(content.split("\n"), start=1):
            match = KEY_VALUE.match(line.rstrip("\r"))
            if not match:
                continue
            indent, key = match.group(1), match.group(2)
            value = (match.group(3) or "").strip()
            variables.append(
                VariableInfo(
                    name=key,
                    type=infer_yaml_type(value),
                    declaration_type="property",
                    line=line_number,
                    character=len(indent),
                    file_path=file_path,
                    scope=f"level-{len(indent) // INDENT_UNIT}",
                    value=value,
                )
            )
        return variables

    def parse_imports(self, content: str) -> list[ImportInfo]:
        return []
