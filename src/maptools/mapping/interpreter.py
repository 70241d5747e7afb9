from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from maptools.log import get_logger
from maptools.mapping.registry import ConverterRegistry
from maptools.mapping.types import (
    NESTED_PREFIX,
    PARENT_SEGMENT,
    ROOT_SEGMENT,
    Fragment,
    FragmentTree,
    NestedMappings,
    Transformation,
)

logger = get_logger(__name__)

ABSENT = object()


@dataclass(frozen=True)
class EvaluationContext:
    """
    Where a path is evaluated.

    `scope` is the object paths are read from, `parent` the context a nested
    mapping was entered from (None at the top level) and `root` the original
    input document.
    """

    scope: Any
    parent: Optional["EvaluationContext"]
    root: Any

    @classmethod
    def top(cls, data: Any) -> "EvaluationContext":
        return cls(data, None, data)

    def enter(self, value: Any) -> "EvaluationContext":
        return EvaluationContext(value, self, self.root)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def get_item(scope: Any, segment: str) -> Any:
    """One step of path extraction. Returns ABSENT instead of raising."""
    if isinstance(scope, Mapping):
        return scope[segment] if segment in scope else ABSENT
    if _is_sequence(scope) and segment.isascii() and segment.isdigit():
        idx = int(segment)
        return scope[idx] if idx < len(scope) else ABSENT
    return ABSENT


def extract(context: EvaluationContext, path: Sequence[str]) -> Any:
    """
    Read `path` from the context's scope.

    `$root` is the input document at any position in the path. `$parent`
    steps to the enclosing context as long as the path has not yet entered
    real data; afterwards, and at the top level, it is absent.
    """
    ctx: Optional[EvaluationContext] = context
    value = context.scope
    for segment in path:
        if segment == ROOT_SEGMENT:
            ctx = EvaluationContext.top(context.root)
            value = ctx.scope
        elif segment == PARENT_SEGMENT:
            if ctx is None or ctx.parent is None:
                return ABSENT
            ctx = ctx.parent
            value = ctx.scope
        else:
            ctx = None
            value = get_item(value, segment)
            if value is ABSENT:
                return ABSENT
    return value


def evaluate_tree(
    tree: FragmentTree,
    context: EvaluationContext,
    nested: NestedMappings,
    registry: ConverterRegistry,
) -> Any:
    if isinstance(tree, Fragment):
        value = extract(context, tree.path)
        if value is ABSENT or value is None:
            return [] if tree.is_array else None
        return resolve(value, context, tree.datatype, tree.is_array, nested, registry)
    if isinstance(tree, list):
        return [evaluate_tree(item, context, nested, registry) for item in tree]
    return {key: evaluate_tree(item, context, nested, registry) for key, item in tree.items()}


def resolve(
    value: Any,
    context: EvaluationContext,
    datatype: str,
    is_array: bool,
    nested: NestedMappings,
    registry: ConverterRegistry,
) -> Any:
    """
    Turn an extracted value into its output value.

    Arrays are resolved element-wise (non-sequences give []), `$` datatypes
    evaluate the nested mapping with `value` as the new scope, anything else
    goes through the registered converter. Converter errors propagate.
    """
    if is_array:
        if not _is_sequence(value):
            return []
        return [resolve(item, context, datatype, False, nested, registry) for item in value]

    if datatype.startswith(NESTED_PREFIX):
        return evaluate_tree(nested[datatype], context.enter(value), nested, registry)

    converter = registry.get(datatype)
    if converter is None:
        # registry changed after compile
        logger.debug("no converter registered for %r; returning None", datatype)
        return None
    return converter(value)


def evaluate(
    data: Any,
    transformation: Transformation,
    registry: Optional[ConverterRegistry] = None,
) -> Any:
    """Apply a compiled transformation to one input document."""
    if registry is None:
        registry = transformation.transformer.registry
    return evaluate_tree(
        transformation.properties,
        EvaluationContext.top(data),
        transformation.nested,
        registry,
    )
