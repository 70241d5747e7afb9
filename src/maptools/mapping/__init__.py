from .types import Fragment, Transformation, MalformedConfigurationError
from .registry import ConverterRegistry
from .compiler import compile_document, parse_rule
from .interpreter import EvaluationContext, evaluate
from .engine import DataTransformer

__all__ = [
    "Fragment",
    "Transformation",
    "MalformedConfigurationError",
    "ConverterRegistry",
    "compile_document",
    "parse_rule",
    "EvaluationContext",
    "evaluate",
    "DataTransformer",
]
