from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

YAML_SUFFIXES = {".yaml", ".yml"}


def _read_structured(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: invalid YAML") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: invalid JSON") from e


def load_document(path: Path) -> Dict[str, Any]:
    """
    Load a transformation document from YAML or JSON.

    Only the outer shape is checked here; rules are validated when the
    document is compiled.
    """
    path = Path(path).expanduser().resolve()
    if not path.is_file():
        raise FileNotFoundError(path)

    doc = _read_structured(path)
    if not isinstance(doc, dict):
        raise ValueError(f"{path}: transformation document must be a mapping")
    return doc


def load_inputs(path: Path) -> List[Any]:
    """
    Load input documents.

    - .jsonl : one document per line, blank lines skipped
    - .json / .yaml / .yml : a single document, or a list of documents
    """
    path = Path(path).expanduser().resolve()
    if not path.is_file():
        raise FileNotFoundError(path)

    if path.suffix.lower() == ".jsonl":
        docs: List[Any] = []
        with path.open("r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    docs.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise ValueError(f"{path}:{lineno}: invalid JSON") from e
        return docs

    data = _read_structured(path)
    return data if isinstance(data, list) else [data]


def load_converters(spec: str) -> Mapping[str, Any]:
    """Import `package.module:attribute`, which must be a dict of converters."""
    if ":" not in spec:
        raise ValueError(f"converter spec must look like 'module:attribute', got {spec!r}")
    module_name, attr = spec.split(":", 1)
    module = importlib.import_module(module_name)
    try:
        converters = getattr(module, attr)
    except AttributeError as e:
        raise ValueError(f"{module_name} has no attribute {attr!r}") from e
    if not isinstance(converters, Mapping):
        raise ValueError(f"{spec} must be a mapping of name -> converter")
    return converters
