"""Python variable and import extraction using per-line patterns."""

import re
from collections.abc import Callable, Iterator

from .models import ImportInfo, ImportType, RefactoringType, VariableInfo
from .parser import LanguageParser

IDENTIFIER = r"[a-zA-Z_][a-zA-Z0-9_]*"

ASSIGNMENT = re.compile(rf"^(\s*)({IDENTIFIER})\s*=(?!=)\s*(.+)$")
FUNCTION_DEF = re.compile(rf"def\s+{IDENTIFIER}\s*\((.*)\)\s*(?:->\s*[^:]+)?:")
SELF_ATTRIBUTE = re.compile(rf"self\.({IDENTIFIER})\s*=\s*(.+)$")
FOR_LOOP = re.compile(rf"for\s+({IDENTIFIER})\s+in\s+(.+):")
GLOBAL = re.compile(rf"\bglobal\s+({IDENTIFIER})")
NONLOCAL = re.compile(rf"\bnonlocal\s+({IDENTIFIER})")

PARAMETER_NAME = re.compile(rf"^\*{{0,2}}\s*({IDENTIFIER})")

IMPORT_LINE = re.compile(r"^(\s*)import\s+(.+)$")
FROM_IMPORT_LINE = re.compile(r"^(\s*)from\s+(\S+)\s+import\s+(.+)$")
ALIAS_SPLIT = re.compile(r"\s+as\s+")

# (name, value, column of the name) triples produced by one pattern on one line
Extraction = Iterator[tuple[str, str, int]]


def infer_python_type(value: str) -> str:
    """Infer a builtin type name from literal value text."""
    value = value.strip()
    if re.fullmatch(r"""(["']).*\1""", value, re.DOTALL):
        return "str"
    if re.fullmatch(r"\d+", value):
        return "int"
    if re.fullmatch(r"\d*\.\d+", value):
        return "float"
    if value in ("True", "False"):
        return "bool"
    if re.fullmatch(r"\[.*\]", value, re.DOTALL):
        return "list"
    if re.fullmatch(r"\{.*\}", value, re.DOTALL):
        return "dict"
    if re.fullmatch(r"\(.*\)", value, re.DOTALL):
        return "tuple"
    return "Any"


def _split_parameters(parameters: str) -> list[str]:
    """Split a parameter list on top-level commas."""
    parts, depth, current = [], 0, []
    for char in parameters:
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def _assignments(line: str) -> Extraction:
    match = ASSIGNMENT.match(line)
    if match:
        yield match.group(2), match.group(3), match.start(2)


def _function_parameters(line: str) -> Extraction:
    match = FUNCTION_DEF.search(line)
    if not match:
        return
    offset = match.start(1)
    for part in _split_parameters(match.group(1)):
        name_match = PARAMETER_NAME.match(part.strip())
        if name_match and name_match.group(1) not in ("self", "cls"):
            column = line.find(name_match.group(1), offset)
            yield name_match.group(1), "function", max(column, 0)
        offset += len(part) + 1


def _self_attributes(line: str) -> Extraction:
    for match in SELF_ATTRIBUTE.finditer(line):
        yield match.group(1), match.group(2), match.start(1)


def _loop_variables(line: str) -> Extraction:
    for match in FOR_LOOP.finditer(line):
        yield match.group(1), "loop variable", match.start(1)


def _globals(line: str) -> Extraction:
    for match in GLOBAL.finditer(line):
        yield match.group(1), "global", match.start(1)


def _nonlocals(line: str) -> Extraction:
    for match in NONLOCAL.finditer(line):
        yield match.group(1), "nonlocal", match.start(1)


class PythonParser(LanguageParser):
    """Parser for Python sources."""

    LANGUAGE = "python"
    SUPPORTED_EXTENSIONS = (".py", ".pyw", ".pyx")
    SUPPORTED_REFACTORINGS = frozenset(
        {
            RefactoringType.RENAME,
            RefactoringType.EXTRACT,
            RefactoringType.CONVERT,
            RefactoringType.INLINE,
        }
    )

    EXTRACTORS: tuple[Callable[[str], Extraction], ...] = (
        _assignments,
        _function_parameters,
        _self_attributes,
        _loop_variables,
        _globals,
        _nonlocals,
    )

    def parse_variables(self, content: str, file_path: str) -> list[VariableInfo]:
        variables = []
        for line_number, line in enumerate(content.split("\n"), start=1):
            for extractor in self.EXTRACTORS:
                for name, value, column in extractor(line):
                    variables.append(
                        VariableInfo(
                            name=name,
                            type=infer_python_type(value),
                            declaration_type="python-variable",
                            line=line_number,
                            character=column,
                            file_path=file_path,
                            scope="unknown",
                            value=value,
                        )
                    )
        return variables

    def parse_imports(self, content: str) -> list[ImportInfo]:
        """Extract ``import a, b as c`` and ``from m import x as y, z`` statements."""
        imports = []
        for line_number, line in enumerate(content.split("\n"), start=1):
            match = IMPORT_LINE.match(line)
            if match:
                for module in match.group(2).split(","):
                    module_name, alias = self._split_alias(module)
                    if module_name:
                        imports.append(
                            ImportInfo(
                                name=alias,
                                path=module_name,
                                line=line_number,
                                character=line.find(module_name),
                                type=ImportType.IMPORT,
                            )
                        )

            match = FROM_IMPORT_LINE.match(line)
            if match:
                module = match.group(2)
                items = match.group(3).strip().strip("()")
                search_from = match.start(3)
                for item in items.split(","):
                    item_name, alias = self._split_alias(item)
                    if item_name:
                        imports.append(
                            ImportInfo(
                                name=alias,
                                path=f"{module}.{item_name}",
                                line=line_number,
                                character=line.find(item_name, search_from),
                                type=ImportType.FROM,
                            )
                        )
        return imports

    @staticmethod
    def _split_alias(entry: str) -> tuple[str, str]:
        parts = ALIAS_SPLIT.split(entry.strip())
        name = parts[0].strip()
        alias = parts[1].strip() if len(parts) > 1 else name
        return name, alias
