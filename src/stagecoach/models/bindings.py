"""
EnvironmentBindings - the read-only variables a pipeline run sees.

Bindings are resolved once at run start from three layers (later wins):

1. defaults declared by the pipeline
2. the process environment
3. explicit overrides (``--set NAME=VALUE`` on the command line)

After construction the mapping cannot change. Stages read it through
``substitute()``, which replaces ``{NAME}`` placeholders. Placeholders with
no binding are left untouched so shell braces such as ``awk '{print $1}'``
survive substitution.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from stagecoach.errors import DefinitionError

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

MASK = "***"


class EnvironmentBindings(Mapping[str, str]):
    """
    Immutable name -> value mapping with placeholder substitution.

    Attributes:
        secrets: Names whose values are masked by ``mask()``

    Example:
        bindings = EnvironmentBindings.resolve(
            required=["IMAGE"],
            defaults={"TAG": "latest"},
            overrides={"COMMIT": "a1b2c3d"},
        )
        bindings.substitute("docker push {IMAGE}:{COMMIT}")
    """

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        secrets: Iterable[str] = (),
    ) -> None:
        self._values = MappingProxyType({str(k): str(v) for k, v in (values or {}).items()})
        self.secrets = frozenset(secrets)

    @classmethod
    def resolve(
        cls,
        required: Iterable[str] = (),
        defaults: Mapping[str, Any] | None = None,
        overrides: Mapping[str, Any] | None = None,
        secrets: Iterable[str] = (),
        environ: Mapping[str, str] | None = None,
    ) -> EnvironmentBindings:
        """
        Build bindings from defaults, the environment, and overrides.

        Only names that are declared (required, defaulted or overridden) are
        taken from the environment, so the run does not see unrelated
        process variables.

        Raises:
            DefinitionError: If a required name has no value in any layer
        """
        environ = os.environ if environ is None else environ
        defaults = dict(defaults or {})
        overrides = dict(overrides or {})
        required = list(required)

        names = set(required) | set(defaults) | set(overrides)
        values: dict[str, Any] = dict(defaults)
        for name in names:
            if name in environ:
                values[name] = environ[name]
        values.update(overrides)

        missing = sorted(name for name in required if not values.get(name))
        if missing:
            raise DefinitionError(
                f"Missing required environment bindings: {', '.join(missing)}",
                problems=[f"{name} is required but not set" for name in missing],
            )

        return cls(values, secrets=secrets)

    def with_values(self, **values: Any) -> EnvironmentBindings:
        """Return new bindings with extra values layered on top."""
        merged = dict(self._values)
        merged.update(values)
        return EnvironmentBindings(merged, secrets=self.secrets)

    def substitute(self, text: str) -> str:
        """Replace {NAME} placeholders with bound values."""

        def replacer(match: re.Match[str]) -> str:
            key = match.group(1)
            if key in self._values:
                return self._values[key]
            return match.group(0)

        return _PLACEHOLDER.sub(replacer, text)

    def substitute_all(self, value: Any) -> Any:
        """Substitute placeholders recursively in strings, lists and dicts."""
        if isinstance(value, str):
            return self.substitute(value)
        if isinstance(value, list | tuple):
            return type(value)(self.substitute_all(v) for v in value)
        if isinstance(value, dict):
            return {k: self.substitute_all(v) for k, v in value.items()}
        return value

    def mask(self, text: str) -> str:
        """Mask secret values in text for logging."""
        masked = text
        for name in self.secrets:
            value = self._values.get(name)
            if value:
                masked = masked.replace(value, MASK)
        return masked

    def mask_all(self, value: Any) -> Any:
        """Mask secret values recursively in strings, lists and dicts."""
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, list | tuple):
            return type(value)(self.mask_all(v) for v in value)
        if isinstance(value, dict):
            return {k: self.mask_all(v) for k, v in value.items()}
        return value

    def unresolved(self, text: str) -> list[str]:
        """Placeholder names in text that have no binding."""
        return [name for name in _PLACEHOLDER.findall(text) if name not in self._values]

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        shown = {k: (MASK if k in self.secrets else v) for k, v in self._values.items()}
        return f"EnvironmentBindings({shown!r})"
