from __future__ import annotations

from collections.abc import Callable
from typing import Any, Dict, Iterator, List, Mapping, Optional

from maptools.mapping.types import NESTED_PREFIX

DatatypeConverter = Callable[[Any], Any]


class ConverterRegistry:
    """
    Mutable name -> converter table owned by one engine.

    Converters are expected to be synchronous, side-effect free functions of
    one argument. Registering an existing name replaces the function; there
    is no removal. Mutation is not synchronized.
    """

    def __init__(self, converters: Optional[Mapping[str, DatatypeConverter]] = None):
        self._converters: Dict[str, DatatypeConverter] = {}
        if converters:
            self.register_all(converters)

    def register(self, name: str, converter: DatatypeConverter) -> "ConverterRegistry":
        if not isinstance(name, str) or not name:
            raise ValueError(f"Converter name must be a non-empty string, got {name!r}")
        if name.startswith(NESTED_PREFIX):
            raise ValueError(f"Converter name '{name}' clashes with nested mapping prefix '{NESTED_PREFIX}'")
        if not callable(converter):
            raise TypeError(f"Converter '{name}' must be callable, got {type(converter).__name__}")
        self._converters[name] = converter
        return self

    def register_all(self, converters: Mapping[str, DatatypeConverter]) -> "ConverterRegistry":
        for name, converter in converters.items():
            self.register(name, converter)
        return self

    def has(self, name: str) -> bool:
        return name in self._converters

    def get(self, name: str) -> Optional[DatatypeConverter]:
        return self._converters.get(name)

    def names(self) -> List[str]:
        return sorted(self._converters)

    def __contains__(self, name: object) -> bool:
        return name in self._converters

    def __len__(self) -> int:
        return len(self._converters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
