from __future__ import annotations

from typing import Any, Mapping, Optional

from maptools.log import get_logger
from maptools.mapping.compiler import compile_document
from maptools.mapping.interpreter import evaluate
from maptools.mapping.registry import ConverterRegistry, DatatypeConverter
from maptools.mapping.types import Transformation

logger = get_logger(__name__)


class DataTransformer:
    """
    Compiles transformation documents and applies them to input data.

    Each instance owns its converter registry. Transformations keep a
    reference to the instance that compiled them, so converters registered
    here are the ones used at evaluation time.
    """

    def __init__(
        self,
        converters: Optional[Mapping[str, DatatypeConverter]] = None,
        registry: Optional[ConverterRegistry] = None,
    ):
        self.registry = registry if registry is not None else ConverterRegistry()
        if converters:
            self.registry.register_all(converters)

    def register_converter(self, name: str, converter: DatatypeConverter) -> "DataTransformer":
        self.registry.register(name, converter)
        return self

    def register_converters(self, converters: Mapping[str, DatatypeConverter]) -> "DataTransformer":
        self.registry.register_all(converters)
        return self

    def create_transformation(self, document: Mapping[str, Any]) -> Transformation:
        """Compile `document`; raises MalformedConfigurationError on any defect."""
        return compile_document(document, self.registry, transformer=self)

    compile = create_transformation

    def transform(self, data: Any, transformation: Transformation) -> Any:
        return evaluate(data, transformation, self.registry)

    def transform_many(self, items, transformation: Transformation):
        for data in items:
            yield self.transform(data, transformation)
