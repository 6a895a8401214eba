"""JavaScript/TypeScript variable extraction with textual type inference."""

import re
from dataclasses import dataclass

from .models import ImportInfo, ImportType, RefactoringType, VariableInfo
from .parser import LanguageParser
from .text_document import StringDocument, TextDocument

IDENTIFIER = r"[a-zA-Z_$][a-zA-Z0-9_$]*"

DECLARATION_PATTERNS = {
    kind: re.compile(rf"\b{kind}\s+({IDENTIFIER})") for kind in ("const", "let", "var")
}

# A declaration keyword only counts when it starts a statement
STATEMENT_BOUNDARY = frozenset(" \n\t\r;{")

NUMBER_LITERAL = re.compile(
    r"[+-]?(?:0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)
CONSTRUCTOR = re.compile(rf"new\s+({IDENTIFIER})")

ES_IMPORT = re.compile(r"""import\s+(?:(?:{[^}]+}|\w+)\s+from\s+)?["'](.*?\.js)["']""")
REQUIRE_CALL = re.compile(r"""require\s*\(\s*["'](.*?\.js)["']\s*\)""")


@dataclass(frozen=True)
class ScannedVariable:
    """Raw declaration found by the document scanner (0-based position)."""

    name: str
    kind: str
    type: str
    line: int
    character: int


def infer_type(text: str, start: int) -> str:
    """Infer a type label from the right-hand side that follows ``start``.

    The assignment must belong to the same statement: a ``;`` or newline
    before the ``=`` means the declaration has no initializer.
    """
    assignment = text.find("=", start)
    if assignment == -1:
        return "unknown"

    between = text[start:assignment]
    if ";" in between or "\n" in between:
        return "unknown"

    end = len(text)
    for terminator in (";", "\n"):
        index = text.find(terminator, assignment)
        if index != -1:
            end = min(end, index)

    sample = text[assignment + 1 : end].strip()

    comment = sample.find("//")
    if comment != -1:
        sample = sample[:comment].strip()

    if sample.startswith(('"', "'", "`")):
        return "string"
    if sample.startswith("["):
        return "array"
    if sample.startswith("{"):
        return "object"
    if sample in ("true", "false"):
        return "boolean"
    if sample == "null":
        return "null"
    if sample == "undefined":
        return "undefined"
    if sample and NUMBER_LITERAL.fullmatch(sample):
        return "number"
    if sample.startswith(("function", "(")) or "=>" in sample:
        return "function"
    if sample.startswith("new "):
        constructor = CONSTRUCTOR.match(sample)
        return constructor.group(1) if constructor else "instance"
    return "unknown"


def scan_variables_in_document(document: TextDocument) -> list[ScannedVariable]:
    """Find ``const``/``let``/``var`` declarations in a document.

    Results are grouped by declaration kind (all ``const`` first, then
    ``let``, then ``var``), each group in text order.
    """
    text = document.get_text()
    variables: list[ScannedVariable] = []

    for kind, pattern in DECLARATION_PATTERNS.items():
        for match in pattern.finditer(text):
            before = text[match.start() - 1] if match.start() > 0 else " "
            if before not in STATEMENT_BOUNDARY:
                continue

            position = document.position_at(match.start(1))
            variables.append(
                ScannedVariable(
                    name=match.group(1),
                    kind=kind,
                    type=infer_type(text, match.end()),
                    line=position.line,
                    character=position.character,
                )
            )

    return variables


class JavaScriptParser(LanguageParser):
    """Parser for the JavaScript/TypeScript family."""

    LANGUAGE = "javascript"
    SUPPORTED_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")
    SUPPORTED_REFACTORINGS = frozenset(
        {
            RefactoringType.RENAME,
            RefactoringType.EXTRACT,
            RefactoringType.CONVERT,
            RefactoringType.INLINE,
        }
    )
    WORD_CHARS = r"\w$"

    def parse_variables(self, content: str, file_path: str) -> list[VariableInfo]:
        document = StringDocument(content, file_path)
        return [
            VariableInfo(
                name=variable.name,
                type=variable.type,
                declaration_type=variable.kind,
                line=variable.line + 1,
                character=variable.character,
                file_path=file_path,
                scope="unknown",
            )
            for variable in scan_variables_in_document(document)
        ]

    def parse_imports(self, content: str) -> list[ImportInfo]:
        """Extract ES-module imports and require calls of ``.js`` paths."""
        document = StringDocument(content)
        imports = []

        for pattern, import_type in (
            (ES_IMPORT, ImportType.IMPORT),
            (REQUIRE_CALL, ImportType.REQUIRE),
        ):
            for match in pattern.finditer(content):
                position = document.position_at(match.start())
                imports.append(
                    ImportInfo(
                        name=match.group(1),
                        path=match.group(1),
                        line=position.line + 1,
                        character=position.character,
                        type=import_type,
                    )
                )

        return imports
