"""Vue single-file component parser.

The ``<script>`` block is handed to the JavaScript parser; the ``<template>``
block is scanned with directive patterns. Positions are reported relative to
the ``.vue`` file, not to the block.
"""

import dataclasses
import re

from .javascript_parser import JavaScriptParser
from .models import ImportInfo, RefactoringType, ReferenceInfo, VariableInfo
from .parser import LanguageParser, find_references_in_text
from .text_document import Position, StringDocument

SCRIPT_BLOCK = re.compile(r"<script[^>]*>([\s\S]*?)</script>", re.IGNORECASE)
TEMPLATE_BLOCK = re.compile(r"<template[^>]*>([\s\S]*?)</template>", re.IGNORECASE)

TEMPLATE_PATTERNS = (
    # v-for="item in items"
    re.compile(r'v-for="([a-zA-Z_][a-zA-Z0-9_]*)\s+in\s+([^"]+)"'),
    # v-model="name"
    re.compile(r'v-model="([^"]+)"'),
    # {{ name }}
    re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_.]*)\s*\}\}"),
    # :prop="name"
    re.compile(r':[\w-]+="\s*([a-zA-Z_][a-zA-Z0-9_.]*)\s*"'),
)


class Block:
    """A tag body cut out of a component, with its start position in the file."""

    def __init__(self, text: str, start: Position):
        self.text = text
        self.start = start

    def to_file_position(self, line: int, character: int) -> tuple[int, int]:
        """Map a 1-based line and 0-based column inside the block to file coordinates."""
        if line == 1:
            character += self.start.character
        return line + self.start.line, character


def _find_block(pattern: re.Pattern[str], content: str) -> Block | None:
    match = pattern.search(content)
    if match is None:
        return None
    start = StringDocument(content).position_at(match.start(1))
    return Block(match.group(1), start)


class VueParser(LanguageParser):
    """Parser for ``.vue`` single-file components."""

    LANGUAGE = "vue"
    SUPPORTED_EXTENSIONS = (".vue",)
    SUPPORTED_REFACTORINGS = frozenset({RefactoringType.RENAME, RefactoringType.EXTRACT})
    WORD_CHARS = r"\w$"

    def __init__(self, script_parser: JavaScriptParser | None = None):
        self.script_parser = script_parser or JavaScriptParser()

    def parse_variables(self, content: str, file_path: str) -> list[VariableInfo]:
        variables = []

        script = _find_block(SCRIPT_BLOCK, content)
        if script:
            for variable in self.script_parser.parse_variables(script.text, file_path):
                line, character = script.to_file_position(
                    variable.line, variable.character
                )
                variables.append(
                    dataclasses.replace(variable, line=line, character=character)
                )

        template = _find_block(TEMPLATE_BLOCK, content)
        if template:
            variables.extend(self._parse_template_variables(template, file_path))

        return variables

    def _parse_template_variables(
        self, template: Block, file_path: str
    ) -> list[VariableInfo]:
        variables = []
        for index, line in enumerate(template.text.split("\n")):
            for pattern in TEMPLATE_PATTERNS:
                for match in pattern.finditer(line):
                    name = match.group(1)
                    if not name:
                        continue
                    file_line, character = template.to_file_position(
                        index + 1, match.start(1)
                    )
                    variables.append(
                        VariableInfo(
                            name=name,
                            type="any",
                            declaration_type="vue-template-variable",
                            line=file_line,
                            character=character,
                            file_path=file_path,
                            scope="template",
                            value=name,
                        )
                    )
        return variables

    def parse_imports(self, content: str) -> list[ImportInfo]:
        script = _find_block(SCRIPT_BLOCK, content)
        if script is None:
            return []
        imports = []
        for item in self.script_parser.parse_imports(script.text):
            line, character = script.to_file_position(item.line, item.character)
            imports.append(dataclasses.replace(item, line=line, character=character))
        return imports

    def get_variable_references(self, content: str, name: str) -> list[ReferenceInfo]:
        """Collect references from the script block, then the template block."""
        references = []
        for block in (
            _find_block(SCRIPT_BLOCK, content),
            _find_block(TEMPLATE_BLOCK, content),
        ):
            if block is None:
                continue
            for reference in find_references_in_text(block.text, name, self.WORD_CHARS):
                line, character = block.to_file_position(
                    reference.line, reference.character
                )
                references.append(
                    dataclasses.replace(reference, line=line, character=character)
                )
        return references
