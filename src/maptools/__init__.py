"""Declarative document transformation: compile mapping rules, apply them to documents."""

from maptools.mapping import (
    ConverterRegistry,
    DataTransformer,
    Fragment,
    MalformedConfigurationError,
    Transformation,
    compile_document,
    evaluate,
)
from maptools.converters import BUILTIN_CONVERTERS

__version__ = "0.1.0"

__all__ = [
    "BUILTIN_CONVERTERS",
    "ConverterRegistry",
    "DataTransformer",
    "Fragment",
    "MalformedConfigurationError",
    "Transformation",
    "compile_document",
    "evaluate",
]
