"""Pipeline file loading."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from stagecoach.errors import DefinitionError
from stagecoach.pipeline import Pipeline

if TYPE_CHECKING:
    from stagecoach.tasks.registry import TaskRegistry


def load_document(path: str | Path) -> dict[str, Any]:
    """Read and parse a YAML pipeline file."""
    path = Path(path)
    if not path.is_file():
        raise DefinitionError(f"Pipeline file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DefinitionError(f"Pipeline file {path} is not valid YAML: {e}", cause=e) from e

    if not isinstance(document, dict):
        raise DefinitionError(f"Pipeline file {path} must contain a mapping")
    return document


def load_pipeline(
    path: str | Path,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    registry: TaskRegistry | None = None,
) -> Pipeline:
    """
    Load a pipeline from a YAML file and resolve its bindings.

    Args:
        path: Pipeline file
        overrides: Binding values that win over defaults and the environment
        environ: Environment to resolve from (default: os.environ)
        registry: When given, every stage is also checked against it

    Raises:
        DefinitionError: Missing or malformed file, invalid pipeline, missing bindings
    """
    document = load_document(path)
    pipeline = Pipeline.from_dict(document, overrides=overrides, environ=environ)
    if not document.get("name"):
        pipeline = dataclasses.replace(pipeline, name=Path(path).stem)
    if registry is not None:
        pipeline.validate(registry)
    return pipeline


def parse_assignments(pairs: list[str] | None) -> dict[str, str]:
    """
    Parse ``NAME=VALUE`` command-line assignments.

    Raises:
        DefinitionError: An entry has no '=' or an empty name
    """
    values: dict[str, str] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise DefinitionError(f"Expected NAME=VALUE, got '{pair}'")
        values[name.strip()] = value
    return values
