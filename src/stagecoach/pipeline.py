"""
Pipeline definition.

A pipeline is an ordered list of stages, the environment bindings they run
against, and the post-run hooks. Definitions are validated when they are
built, so an invalid pipeline fails with DefinitionError before any stage
runs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stagecoach.errors import DefinitionError
from stagecoach.hooks import HookSet
from stagecoach.models.bindings import EnvironmentBindings
from stagecoach.models.stage import Stage

if TYPE_CHECKING:
    from stagecoach.tasks.registry import TaskRegistry


def _name_problems(stages: Iterable[Stage], where: str) -> list[str]:
    problems: list[str] = []
    seen: set[str] = set()
    for index, stage in enumerate(stages):
        if not stage.name or not stage.name.strip():
            problems.append(f"{where} #{index + 1} has an empty name")
            continue
        if stage.name in seen:
            problems.append(f"{where} name '{stage.name}' is not unique")
        seen.add(stage.name)
    return problems


@dataclass(frozen=True)
class Pipeline:
    """
    A validated pipeline definition.

    Attributes:
        name: Pipeline name (used in logs)
        stages: Stages in execution order
        bindings: Environment bindings every stage sees
        hooks: Post-run hooks

    Raises:
        DefinitionError: No stages, or empty/duplicate stage names

    Example:
        pipeline = Pipeline(
            name="web",
            stages=[
                Stage("build", commands=("mvn -B package",)),
                Stage("deploy", commands=("docker run -d {IMAGE}:{COMMIT}",)),
            ],
            bindings=EnvironmentBindings({"IMAGE": "acme/web", "COMMIT": "a1b2c3d"}),
        )
    """

    name: str
    stages: tuple[Stage, ...]
    bindings: EnvironmentBindings = field(default_factory=EnvironmentBindings)
    hooks: HookSet = field(default_factory=HookSet)

    def __post_init__(self) -> None:
        if not isinstance(self.stages, tuple):
            object.__setattr__(self, "stages", tuple(self.stages))

        problems: list[str] = []
        if not self.stages:
            problems.append("Pipeline has no stages")
        problems.extend(_name_problems(self.stages, "Stage"))
        problems.extend(_name_problems(self.hooks.success, "Success hook"))
        problems.extend(_name_problems(self.hooks.failure, "Failure hook"))
        problems.extend(_name_problems(self.hooks.always, "Always hook"))
        if problems:
            raise DefinitionError(f"Invalid pipeline '{self.name}': {'; '.join(problems)}", problems=problems)

    @property
    def stage_names(self) -> list[str]:
        return [s.name for s in self.stages]

    def stage(self, name: str) -> Stage:
        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(name)

    def validate(self, registry: TaskRegistry) -> None:
        """
        Check every stage and hook against the task registry.

        Raises:
            DefinitionError: Unknown stage types or missing task parameters
        """
        problems: list[str] = []
        candidates = [("Stage", s) for s in self.stages] + [
            (f"{phase.value.capitalize()} hook", h) for phase, h in self.hooks.all_hooks()
        ]
        for label, stage in candidates:
            if not registry.has(stage.type):
                problems.append(f"{label} '{stage.name}' has unknown type '{stage.type}'")
                continue
            problems.extend(registry.get(stage.type).validate(stage))
            if stage.timeout is not None and stage.timeout <= 0:
                problems.append(f"{label} '{stage.name}' has a non-positive timeout")
        if problems:
            raise DefinitionError(f"Invalid pipeline '{self.name}': {'; '.join(problems)}", problems=problems)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        overrides: Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Pipeline:
        """
        Build a pipeline from a parsed pipeline document.

        The ``environment`` section declares ``required`` names, ``defaults``
        and ``secrets``; bindings are resolved here from defaults, the
        environment and ``overrides``.

        Raises:
            DefinitionError: Malformed document, invalid stages or missing bindings
        """
        if not isinstance(data, Mapping):
            raise DefinitionError("Pipeline document must be a mapping")

        env_section = data.get("environment") or {}
        if not isinstance(env_section, Mapping):
            raise DefinitionError("'environment' must be a mapping")

        raw_stages = data.get("stages")
        if not isinstance(raw_stages, list):
            raise DefinitionError("'stages' must be a list")

        raw_hooks = data.get("hooks") or {}
        if not isinstance(raw_hooks, Mapping):
            raise DefinitionError("'hooks' must be a mapping")

        problems: list[str] = []
        for index, entry in enumerate(raw_stages):
            if not isinstance(entry, Mapping):
                problems.append(f"Stage #{index + 1} must be a mapping")
        for phase, entries in raw_hooks.items():
            if phase not in ("always", "success", "failure"):
                problems.append(f"Unknown hook phase '{phase}'")
            elif not isinstance(entries, list) or not all(isinstance(e, Mapping) for e in entries):
                problems.append(f"Hooks for '{phase}' must be a list of mappings")
        if problems:
            raise DefinitionError("; ".join(problems), problems=problems)

        try:
            stages = tuple(Stage.from_dict(dict(entry)) for entry in raw_stages)
            hooks = HookSet.from_dict(dict(raw_hooks))
        except (TypeError, ValueError) as e:
            raise DefinitionError(f"Invalid stage definition: {e}", cause=e) from e

        bindings = EnvironmentBindings.resolve(
            required=env_section.get("required") or [],
            defaults=env_section.get("defaults") or {},
            overrides=overrides,
            secrets=env_section.get("secrets") or [],
            environ=environ,
        )

        return cls(
            name=str(data.get("name") or "pipeline"),
            stages=stages,
            bindings=bindings,
            hooks=hooks,
        )
