"""Language parser abstraction and the extension-keyed parser registry."""

import re
from abc import ABC, abstractmethod
from pathlib import Path

from ..scan_logging import LogCategory, get_category_logger
from .models import ImportInfo, RefactoringType, ReferenceInfo, VariableInfo
from .text_document import StringDocument

logger = get_category_logger(LogCategory.PARSER)

CONTEXT_RADIUS = 20


def identifier_pattern(name: str, word_chars: str = r"\w") -> re.Pattern[str]:
    """Compile a pattern matching ``name`` literally, delimited by non-word characters."""
    return re.compile(
        rf"(?<![{word_chars}]){re.escape(name)}(?![{word_chars}])", re.MULTILINE
    )


def find_references_in_text(
    content: str,
    name: str,
    word_chars: str = r"\w",
    line_offset: int = 0,
) -> list[ReferenceInfo]:
    """Find every delimited occurrence of ``name`` in ``content``.

    Args:
        content: Text to scan.
        name: Identifier to look for, matched literally.
        word_chars: Character class body of characters that continue an identifier.
        line_offset: Added to each 1-based line (for text cut out of a larger file).

    Returns:
        One ReferenceInfo per occurrence, in text order.
    """
    if not name:
        return []

    document = StringDocument(content)
    references = []
    for match in identifier_pattern(name, word_chars).finditer(content):
        position = document.position_at(match.start())
        line_text = document.line_at(position.line)
        context_start = max(0, position.character - CONTEXT_RADIUS)
        context_end = min(len(line_text), position.character + len(name) + CONTEXT_RADIUS)
        references.append(
            ReferenceInfo(
                line=position.line + 1 + line_offset,
                character=position.character,
                context=line_text[context_start:context_end],
            )
        )
    return references


class LanguageParser(ABC):
    """Abstract base class for per-language variable extractors.

    Subclasses declare ``LANGUAGE`` and ``SUPPORTED_EXTENSIONS`` and implement
    the four extraction operations. None of them raise on malformed input.
    """

    LANGUAGE: str = ""
    SUPPORTED_EXTENSIONS: tuple[str, ...] = ()
    SUPPORTED_REFACTORINGS: frozenset[RefactoringType] = frozenset()

    # Characters that may continue an identifier in this language
    WORD_CHARS = r"\w"

    @property
    def language(self) -> str:
        return self.LANGUAGE

    @property
    def file_extensions(self) -> tuple[str, ...]:
        return self.SUPPORTED_EXTENSIONS

    def can_parse(self, file_path: Path | str) -> bool:
        """Check if this parser handles the file's extension."""
        return Path(file_path).suffix.lower() in self.SUPPORTED_EXTENSIONS

    @abstractmethod
    def parse_variables(self, content: str, file_path: str) -> list[VariableInfo]:
        """Extract declarations from raw file content."""

    @abstractmethod
    def parse_imports(self, content: str) -> list[ImportInfo]:
        """Extract import-like statements (empty for formats without imports)."""

    def get_variable_references(self, content: str, name: str) -> list[ReferenceInfo]:
        """Find all delimited literal occurrences of ``name``."""
        return find_references_in_text(content, name, self.WORD_CHARS)

    def get_supported_refactorings(self) -> frozenset[RefactoringType]:
        return self.SUPPORTED_REFACTORINGS

    def __repr__(self) -> str:
        return f"{type(self).__name__}(extensions={list(self.SUPPORTED_EXTENSIONS)})"


class ParserRegistry:
    """Registry mapping file extensions (with leading dot) to parser instances."""

    def __init__(self, register_defaults: bool = True):
        self._parsers: dict[str, LanguageParser] = {}
        if register_defaults:
            self._register_default_parsers()

    def _register_default_parsers(self) -> None:
        """Register the built-in language parsers."""
        from .javascript_parser import JavaScriptParser
        from .json_parser import JSONParser
        from .python_parser import PythonParser
        from .vue_parser import VueParser
        from .yaml_parser import YAMLParser

        for parser in (
            JavaScriptParser(),
            PythonParser(),
            VueParser(),
            JSONParser(),
            YAMLParser(),
        ):
            self.register_parser(parser)

    def register_parser(self, parser: LanguageParser) -> None:
        """Register a parser for all of its extensions, replacing earlier mappings."""
        for extension in parser.file_extensions:
            previous = self._parsers.get(extension.lower())
            if previous is not None and previous is not parser:
                logger.debug(
                    f"Replacing {type(previous).__name__} with "
                    f"{type(parser).__name__} for {extension}"
                )
            self._parsers[extension.lower()] = parser

    def get_parser(self, extension: str) -> LanguageParser | None:
        """Get the parser registered for an extension such as ``.py``."""
        return self._parsers.get(extension.lower())

    def get_parser_for_file(self, file_path: Path | str) -> LanguageParser | None:
        """Get the parser for a file based on its suffix."""
        return self.get_parser(Path(file_path).suffix)

    def get_supported_extensions(self) -> list[str]:
        return list(self._parsers)

    def is_supported(self, file_path: Path | str) -> bool:
        return self.get_parser_for_file(file_path) is not None
