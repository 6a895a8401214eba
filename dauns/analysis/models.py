"""Data models for variables, imports and references extracted from source text."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class RefactoringType(Enum):
    """Refactorings a parser can advertise to editor integrations."""

    RENAME = "rename"
    EXTRACT = "extract"
    CONVERT = "convert"
    INLINE = "inline"
    MOVE = "move"
    SPLIT = "split"


class ImportType(Enum):
    """Syntactic form of an import statement."""

    IMPORT = "import"
    REQUIRE = "require"
    FROM = "from"


@dataclass(frozen=True)
class ReferenceInfo:
    """A textual occurrence of an identifier.

    Attributes:
        line: 1-based line number.
        character: 0-based column of the first character of the identifier.
        context: Up to 20 characters either side of the occurrence.
    """

    line: int
    character: int
    context: str


@dataclass(frozen=True)
class ImportInfo:
    """One name brought in by an import/require statement (unresolved)."""

    name: str
    path: str
    line: int
    character: int
    type: ImportType

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass(frozen=True)
class VariableInfo:
    """A declaration found by a parser.

    Attributes:
        name: Identifier, property or key name.
        type: Inferred type label (language specific, e.g. ``string``, ``int``).
        declaration_type: How it was declared (``const``, ``property``, ...).
        line: 1-based line, or 0 for formats without declaration positions.
        character: 0-based column of the name, or 0 for line-less formats.
        file_path: File the declaration was read from.
        scope: Textual scope label (``root``, ``level-1``, ``template``, ...).
        value: Raw value text when the parser captured one.
        references: Occurrences attached by analysis layers.
    """

    name: str
    type: str
    declaration_type: str
    line: int
    character: int
    file_path: str
    scope: str
    value: str | None = None
    references: tuple[ReferenceInfo, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain types for cross-process transfer and JSON output."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VariableInfo":
        """Rebuild a VariableInfo produced by ``to_dict``."""
        references = tuple(
            ReferenceInfo(**reference) for reference in data.get("references", ())
        )
        return cls(
            name=data["name"],
            type=data["type"],
            declaration_type=data["declaration_type"],
            line=data["line"],
            character=data["character"],
            file_path=data["file_path"],
            scope=data["scope"],
            value=data.get("value"),
            references=references,
        )
