from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from maptools.converters import BUILTIN_CONVERTERS, list_converters
from maptools.data.io import write_jsonl, write_table
from maptools.load import load_converters, load_document, load_inputs
from maptools.log import get_logger, set_level
from maptools.mapping.engine import DataTransformer
from maptools.mapping.types import Fragment, MalformedConfigurationError, Transformation

app = typer.Typer(help="map-tools CLI")
logger = get_logger("maptools.cli")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    if verbose:
        set_level("DEBUG")


# -----------------------------
# helpers
# -----------------------------

def _build_transformer(converters: Optional[List[str]], builtins: bool) -> DataTransformer:
    t = DataTransformer(BUILTIN_CONVERTERS if builtins else None)
    for spec in converters or []:
        try:
            t.register_converters(load_converters(spec))
        except (ImportError, ValueError, TypeError) as e:
            raise typer.BadParameter(f"--converters {spec}: {e}")
    return t


def _compile(mapping: Path, transformer: DataTransformer) -> Transformation:
    try:
        doc = load_document(mapping)
        return transformer.create_transformation(doc)
    except (FileNotFoundError, MalformedConfigurationError, ValueError) as e:
        raise typer.BadParameter(f"{mapping}: {e}")


def _render_tree(tree: Any) -> Any:
    if isinstance(tree, Fragment):
        return tree.rule()
    if isinstance(tree, list):
        return [_render_tree(t) for t in tree]
    return {k: _render_tree(v) for k, v in tree.items()}


def summarize(transformation: Transformation) -> Dict[str, Any]:
    return {
        "properties": _render_tree(transformation.properties),
        "nested": {k: _render_tree(v) for k, v in transformation.nested.items()},
    }


# -----------------------------
# commands
# -----------------------------

@app.command()
def check(
    mapping: Path = typer.Argument(..., help="Transformation document (.yaml/.yml/.json)"),
    converters: List[str] = typer.Option(None, "--converters", "-c", help="module:attribute dict of converters (repeatable)"),
    builtins: bool = typer.Option(True, "--builtins/--no-builtins", help="Register built-in converters"),
):
    """Compile a transformation document and print the compiled rules."""
    t = _build_transformer(converters, builtins)
    transformation = _compile(mapping, t)
    typer.echo(json.dumps(summarize(transformation), indent=2))


@app.command()
def apply(
    mapping: Path = typer.Argument(..., help="Transformation document (.yaml/.yml/.json)"),
    inputs: Path = typer.Argument(..., help="Input documents (.jsonl, .json or .yaml)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write results (.jsonl, .csv, .parquet)"),
    converters: List[str] = typer.Option(None, "--converters", "-c", help="module:attribute dict of converters (repeatable)"),
    builtins: bool = typer.Option(True, "--builtins/--no-builtins", help="Register built-in converters"),
):
    """Apply a transformation document to every input document."""
    t = _build_transformer(converters, builtins)
    transformation = _compile(mapping, t)
    try:
        docs = load_inputs(inputs)
    except (FileNotFoundError, ValueError) as e:
        raise typer.BadParameter(f"{inputs}: {e}")

    results = list(t.transform_many(docs, transformation))
    logger.info("transformed %d document(s) from %s", len(results), inputs)

    if out is None:
        typer.echo(json.dumps(results, indent=2, ensure_ascii=False))
        return
    if out.suffix.lower() == ".jsonl":
        write_jsonl(out, results)
    else:
        try:
            write_table(out, results)
        except ValueError as e:
            raise typer.BadParameter(str(e))
    typer.secho(f"Wrote {len(results)} record(s) to {out}", fg=typer.colors.GREEN)


@app.command("converters")
def converters_cmd():
    """List built-in converter names."""
    for name in list_converters():
        typer.echo(name)


if __name__ == "__main__":
    app()
