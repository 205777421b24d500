"""Tests for EnvironmentBindings resolution, substitution and masking."""

from __future__ import annotations

import pytest

from stagecoach.errors import DefinitionError
from stagecoach.models.bindings import EnvironmentBindings


class TestResolve:
    """Layering of defaults, environment and overrides."""

    def test_defaults_only(self) -> None:
        bindings = EnvironmentBindings.resolve(defaults={"TAG": "latest"}, environ={})
        assert bindings["TAG"] == "latest"

    def test_environment_beats_defaults(self) -> None:
        bindings = EnvironmentBindings.resolve(defaults={"TAG": "latest"}, environ={"TAG": "v2"})
        assert bindings["TAG"] == "v2"

    def test_overrides_beat_environment(self) -> None:
        bindings = EnvironmentBindings.resolve(
            defaults={"TAG": "latest"},
            overrides={"TAG": "v3"},
            environ={"TAG": "v2"},
        )
        assert bindings["TAG"] == "v3"

    def test_required_from_environment(self) -> None:
        bindings = EnvironmentBindings.resolve(required=["IMAGE"], environ={"IMAGE": "acme/web"})
        assert bindings["IMAGE"] == "acme/web"

    def test_undeclared_environment_is_ignored(self) -> None:
        bindings = EnvironmentBindings.resolve(required=["IMAGE"], environ={"IMAGE": "x", "HOME": "/root"})
        assert "HOME" not in bindings
        assert list(bindings) == ["IMAGE"]

    def test_missing_required_raises(self) -> None:
        with pytest.raises(DefinitionError) as exc_info:
            EnvironmentBindings.resolve(required=["IMAGE", "REGISTRY"], environ={})

        assert exc_info.value.problems == ["IMAGE is required but not set", "REGISTRY is required but not set"]

    def test_empty_required_value_is_missing(self) -> None:
        with pytest.raises(DefinitionError):
            EnvironmentBindings.resolve(required=["IMAGE"], environ={"IMAGE": ""})

    def test_required_satisfied_by_override(self) -> None:
        bindings = EnvironmentBindings.resolve(required=["COMMIT"], overrides={"COMMIT": "abc"}, environ={})
        assert bindings["COMMIT"] == "abc"

    def test_values_are_strings(self) -> None:
        bindings = EnvironmentBindings.resolve(defaults={"PORT": 8080}, environ={})
        assert bindings["PORT"] == "8080"


class TestImmutability:
    def test_cannot_assign(self) -> None:
        bindings = EnvironmentBindings({"A": "1"})
        with pytest.raises(TypeError):
            bindings["A"] = "2"  # type: ignore[index]

    def test_with_values_returns_new_bindings(self) -> None:
        bindings = EnvironmentBindings({"A": "1"}, secrets=["A"])
        extended = bindings.with_values(B="2")

        assert "B" not in bindings
        assert extended["A"] == "1"
        assert extended["B"] == "2"
        assert extended.secrets == frozenset({"A"})


class TestSubstitute:
    """{NAME} placeholder substitution."""

    def test_substitutes_known_names(self) -> None:
        bindings = EnvironmentBindings({"IMAGE": "acme/web", "COMMIT": "a1b2c3d"})
        assert bindings.substitute("docker push {IMAGE}:{COMMIT}") == "docker push acme/web:a1b2c3d"

    def test_unknown_placeholders_untouched(self) -> None:
        bindings = EnvironmentBindings({"A": "1"})
        assert bindings.substitute("awk '{print $1}' {A} {MISSING}") == "awk '{print $1}' 1 {MISSING}"

    def test_substitute_all_nested(self) -> None:
        bindings = EnvironmentBindings({"HOST": "web"})
        value = {"url": "http://{HOST}/health", "hosts": ["{HOST}-1", "{HOST}-2"], "retries": 3}

        assert bindings.substitute_all(value) == {
            "url": "http://web/health",
            "hosts": ["web-1", "web-2"],
            "retries": 3,
        }

    def test_unresolved(self) -> None:
        bindings = EnvironmentBindings({"A": "1"})
        assert bindings.unresolved("{A} {B} {C}") == ["B", "C"]


class TestMasking:
    def test_mask_replaces_secret_values(self) -> None:
        bindings = EnvironmentBindings({"TOKEN": "s3cr3t", "USER": "ci"}, secrets=["TOKEN"])
        assert bindings.mask("login ci with s3cr3t") == "login ci with ***"

    def test_repr_hides_secrets(self) -> None:
        bindings = EnvironmentBindings({"TOKEN": "s3cr3t"}, secrets=["TOKEN"])
        assert "s3cr3t" not in repr(bindings)

    def test_empty_secret_value_is_ignored(self) -> None:
        bindings = EnvironmentBindings({"TOKEN": ""}, secrets=["TOKEN"])
        assert bindings.mask("plain text") == "plain text"

    def test_mask_all_nested(self) -> None:
        bindings = EnvironmentBindings({"TOKEN": "s3cr3t"}, secrets=["TOKEN"])
        masked = bindings.mask_all({"stdout": "s3cr3t", "commands": [{"stderr": "bad s3cr3t"}], "returncode": 0})
        assert masked == {"stdout": "***", "commands": [{"stderr": "bad ***"}], "returncode": 0}
