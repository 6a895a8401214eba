"""Dauns: multi-language variable extraction and cross-reference scanning."""

__version__ = "1.0.0"

from .analysis import ParserRegistry, VariableInfo  # noqa: E402
from .config import DaunsConfig, load_config  # noqa: E402
from .scanner import VariableScanner  # noqa: E402

__all__ = [
    "__version__",
    "ParserRegistry",
    "VariableInfo",
    "DaunsConfig",
    "load_config",
    "VariableScanner",
]
