from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Tuple, Union

if TYPE_CHECKING:
    from maptools.mapping.engine import DataTransformer

RULE_SEPARATOR = ":"
PATH_SEPARATOR = "."
ARRAY_SUFFIX = "[]"
NESTED_PREFIX = "$"

# virtual path segments, never read from input data
ROOT_SEGMENT = "$root"
PARENT_SEGMENT = "$parent"


class MalformedConfigurationError(ValueError):
    """Raised when a transformation document cannot be compiled."""


@dataclass(frozen=True)
class Fragment:
    """
    A compiled leaf rule.

    `path` is the dotted source path split into segments. `datatype` is a
    registered converter name or, when it starts with `$`, the name of a
    nested mapping. `is_array` means the extracted value is a sequence whose
    elements are resolved one by one.
    """

    path: Tuple[str, ...]
    datatype: str
    is_array: bool = False

    @property
    def is_nested(self) -> bool:
        return self.datatype.startswith(NESTED_PREFIX)

    def rule(self) -> str:
        suffix = ARRAY_SUFFIX if self.is_array else ""
        return f"{PATH_SEPARATOR.join(self.path)}{RULE_SEPARATOR}{self.datatype}{suffix}"


# Fragment | list of trees | dict of trees
FragmentTree = Union[Fragment, List["FragmentTree"], Dict[str, "FragmentTree"]]
NestedMappings = Mapping[str, FragmentTree]


@dataclass(frozen=True, eq=False)
class Transformation:
    """
    Compiled transformation bound to the engine that produced it.

    Instances are read-only and can be applied to any number of inputs.
    """

    properties: FragmentTree
    nested: NestedMappings
    transformer: "DataTransformer" = field(repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.nested, MappingProxyType):
            object.__setattr__(self, "nested", MappingProxyType(dict(self.nested)))

    def transform(self, data: Any) -> Any:
        return self.transformer.transform(data, self)

    __call__ = transform
