from __future__ import annotations

from typing import TYPE_CHECKING, Any, Collection, Dict, Iterable, List, Mapping, Optional

from maptools.log import get_logger
from maptools.mapping.registry import ConverterRegistry
from maptools.mapping.types import (
    ARRAY_SUFFIX,
    NESTED_PREFIX,
    PARENT_SEGMENT,
    PATH_SEPARATOR,
    ROOT_SEGMENT,
    RULE_SEPARATOR,
    Fragment,
    FragmentTree,
    MalformedConfigurationError,
    Transformation,
)

if TYPE_CHECKING:
    from maptools.mapping.engine import DataTransformer

logger = get_logger(__name__)


def parse_rule(
    rule: str,
    nested_names: Collection[str],
    registry: ConverterRegistry,
    location: str = "",
) -> Fragment:
    """
    Parse one `path:datatype` / `path:datatype[]` rule into a Fragment.

    The datatype must name a nested mapping (`$name`) or a converter known
    to `registry` right now.
    """
    where = f" at {location}" if location else ""
    parts = rule.split(RULE_SEPARATOR)
    if len(parts) != 2 or not parts[0]:
        raise MalformedConfigurationError(f"Malformed mapping rule{where}: {rule!r}")

    path, datatype = parts
    is_array = datatype.endswith(ARRAY_SUFFIX)
    if is_array:
        datatype = datatype[: -len(ARRAY_SUFFIX)]

    if datatype.startswith(NESTED_PREFIX):
        if datatype not in nested_names:
            raise MalformedConfigurationError(f"Undefined nested mapping{where}: {datatype}")
    elif not registry.has(datatype):
        raise MalformedConfigurationError(f"Undefined datatype{where}: {datatype!r}")

    return Fragment(tuple(path.split(PATH_SEPARATOR)), datatype, is_array)


def _join(location: str, key: str) -> str:
    return f"{location}{PATH_SEPARATOR}{key}" if location else key


def compile_mapping(
    data: Any,
    nested_names: Collection[str],
    registry: ConverterRegistry,
    location: str = "properties",
) -> FragmentTree:
    """Compile a mapping specification, keeping its list/dict shape."""
    if isinstance(data, str):
        return parse_rule(data, nested_names, registry, location)
    if isinstance(data, (list, tuple)):
        return [
            compile_mapping(v, nested_names, registry, f"{location}[{i}]")
            for i, v in enumerate(data)
        ]
    if isinstance(data, Mapping):
        return {
            str(k): compile_mapping(v, nested_names, registry, _join(location, str(k)))
            for k, v in data.items()
        }
    raise MalformedConfigurationError(
        f"Unsupported mapping value at {location}: {type(data).__name__} "
        "(expected rule string, list or mapping)"
    )


def compile_nested(data: Any, registry: ConverterRegistry) -> Dict[str, FragmentTree]:
    """Compile the `nested` section; every name is known to every mapping."""
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise MalformedConfigurationError(
            f"Nested mappings must be a mapping, got {type(data).__name__}"
        )

    names = [str(k) for k in data]
    for name in names:
        if not name.startswith(NESTED_PREFIX) or name == NESTED_PREFIX:
            raise MalformedConfigurationError(
                f"Nested mapping name must start with '{NESTED_PREFIX}': {name!r}"
            )

    nested_names = frozenset(names)
    return {
        str(name): compile_mapping(spec, nested_names, registry, _join("nested", str(name)))
        for name, spec in data.items()
    }


def _iter_fragments(tree: FragmentTree):
    if isinstance(tree, Fragment):
        yield tree
    elif isinstance(tree, list):
        for item in tree:
            yield from _iter_fragments(item)
    else:
        for item in tree.values():
            yield from _iter_fragments(item)


def _stays_on_context(path) -> bool:
    # `$root` / `$parent` only paths re-enter an existing scope; `$parent`
    # after `$root` is always absent.
    seen_root = False
    for seg in path:
        if seg == ROOT_SEGMENT:
            seen_root = True
        elif seg == PARENT_SEGMENT:
            if seen_root:
                return False
        else:
            return False
    return True


def reachable_nested(properties: FragmentTree, nested: Mapping[str, FragmentTree]) -> List[str]:
    """Nested mapping names evaluation can reach from `properties`, in discovery order."""
    found: List[str] = []
    pending = [properties]
    while pending:
        tree = pending.pop()
        for f in _iter_fragments(tree):
            if f.is_nested and f.datatype not in found:
                found.append(f.datatype)
                pending.append(nested[f.datatype])
    return found


def find_nested_cycle(
    nested: Mapping[str, FragmentTree],
    start: Optional[Iterable[str]] = None,
) -> Optional[List[str]]:
    """
    Return a chain of nested mapping names that references itself without
    consuming any real path segment, or None. Only chains reachable from
    `start` (default: every nested mapping) are searched.

    Such a chain recurses forever on any non-null input. Cycles that descend
    into the data are bounded by the depth of the data and are allowed, and
    so are array edges: a non-sequence scope resolves them to [].
    """
    edges: Dict[str, List[str]] = {}
    for name, tree in nested.items():
        edges[name] = [
            f.datatype
            for f in _iter_fragments(tree)
            if f.is_nested and not f.is_array and _stays_on_context(f.path)
        ]

    done = set()

    def visit(name: str, stack: List[str]) -> Optional[List[str]]:
        if name in stack:
            return stack[stack.index(name):] + [name]
        if name in done:
            return None
        stack.append(name)
        for target in edges.get(name, []):
            cycle = visit(target, stack)
            if cycle:
                return cycle
        stack.pop()
        done.add(name)
        return None

    for name in (edges if start is None else start):
        cycle = visit(name, [])
        if cycle:
            return cycle
    return None


def compile_document(
    document: Any,
    registry: ConverterRegistry,
    transformer: Optional["DataTransformer"] = None,
) -> Transformation:
    """
    Compile a transformation document `{properties, nested?}`.

    Validation is eager: a returned Transformation references only known
    converters and known nested mappings. Any violation raises
    MalformedConfigurationError and nothing is returned.
    """
    if not isinstance(document, Mapping):
        raise MalformedConfigurationError(
            f"Transformation document must be a mapping, got {type(document).__name__}"
        )
    if document.get("properties") is None:
        raise MalformedConfigurationError("Configuration properties are missing")

    nested = compile_nested(document.get("nested"), registry)
    properties = compile_mapping(document["properties"], nested.keys(), registry)

    cycle = find_nested_cycle(nested, reachable_nested(properties, nested))
    if cycle:
        raise MalformedConfigurationError(
            "Nested mappings reference each other without consuming input: "
            + " -> ".join(cycle)
        )

    if transformer is None:
        from maptools.mapping.engine import DataTransformer
        transformer = DataTransformer(registry=registry)

    logger.debug("compiled transformation with nested mappings %s", sorted(nested))
    return Transformation(properties, nested, transformer)
