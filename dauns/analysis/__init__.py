"""Variable extraction: data model, language parsers and usage analysis."""

from .javascript_parser import JavaScriptParser, infer_type, scan_variables_in_document
from .json_parser import JSONParser
from .models import (
    ImportInfo,
    ImportType,
    RefactoringType,
    ReferenceInfo,
    VariableInfo,
)
from .parser import LanguageParser, ParserRegistry, find_references_in_text
from .python_parser import PythonParser, infer_python_type
from .text_document import Position, StringDocument, TextDocument
from .usage import (
    CrossReferenceTracker,
    FileReference,
    UnusedVariable,
    UnusedVariableDetector,
    VariableReference,
)
from .vue_parser import VueParser
from .yaml_parser import YAMLParser, infer_yaml_type

__all__ = [
    # Models
    "VariableInfo",
    "ImportInfo",
    "ImportType",
    "ReferenceInfo",
    "RefactoringType",
    # Documents
    "Position",
    "TextDocument",
    "StringDocument",
    # Parsers
    "LanguageParser",
    "ParserRegistry",
    "find_references_in_text",
    "JavaScriptParser",
    "PythonParser",
    "VueParser",
    "JSONParser",
    "YAMLParser",
    "infer_type",
    "infer_python_type",
    "infer_yaml_type",
    "scan_variables_in_document",
    # Usage analysis
    "CrossReferenceTracker",
    "FileReference",
    "VariableReference",
    "UnusedVariable",
    "UnusedVariableDetector",
]
