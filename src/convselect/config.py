"""convselect Solver Options.

Explicit switches that gate family-level applicability:
- SolverOptions - frozen options passed to the solver
- load_options() - Load options from a YAML file
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from convselect.dtypes import DEFAULT_ELEMENT_TYPES, ElementType
from convselect.exceptions import ConfigurationError

DEFAULT_ALLOWED_TARGETS: frozenset[str] = frozenset({"gfx908", "gfx90a"})


@dataclass(frozen=True)
class SolverOptions:
    """Options for the convolution family.

    Attributes:
        disable_family: If True, the family is never applicable.
        require_determinism: If True, the family is never applicable
            because its kernels may not be deterministic.
        allowed_targets: Device targets the family is known to work on.
        element_types: Element variants the family is instantiated for.
    """
    disable_family: bool = False
    require_determinism: bool = False
    allowed_targets: frozenset[str] = DEFAULT_ALLOWED_TARGETS
    element_types: frozenset[ElementType] = field(
        default_factory=lambda: DEFAULT_ELEMENT_TYPES
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "disable_family": self.disable_family,
            "require_determinism": self.require_determinism,
            "allowed_targets": sorted(self.allowed_targets),
            "element_types": sorted(e.value for e in self.element_types),
        }


_BOOL_KEYS = ("disable_family", "require_determinism")
_LIST_KEYS = ("allowed_targets", "element_types")


def options_from_dict(data: dict[str, Any]) -> SolverOptions:
    """Build SolverOptions from a plain mapping.

    Raises:
        ConfigurationError: On unknown keys or wrongly typed values.
    """
    unknown = set(data) - set(_BOOL_KEYS) - set(_LIST_KEYS)
    if unknown:
        key = sorted(unknown)[0]
        raise ConfigurationError(
            f"Unknown option '{key}'",
            config_key=key,
            expected=sorted(_BOOL_KEYS + _LIST_KEYS),
            got=key,
        )

    kwargs: dict[str, Any] = {}
    for key in _BOOL_KEYS:
        if key in data:
            value = data[key]
            if not isinstance(value, bool):
                raise ConfigurationError(
                    f"Option '{key}' must be a boolean",
                    config_key=key,
                    expected="bool",
                    got=value,
                )
            kwargs[key] = value

    for key in _LIST_KEYS:
        if key in data:
            value = data[key]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(
                    f"Option '{key}' must be a list of strings",
                    config_key=key,
                    expected="list[str]",
                    got=value,
                )
            kwargs[key] = frozenset(value)

    if "element_types" in kwargs:
        try:
            kwargs["element_types"] = frozenset(
                ElementType(v) for v in kwargs["element_types"]
            )
        except ValueError as e:
            raise ConfigurationError(
                f"Option 'element_types' has an unknown element type: {e}",
                config_key="element_types",
                expected=[t.value for t in ElementType],
                got=data["element_types"],
            ) from e

    return SolverOptions(**kwargs)


def load_options(path: str) -> SolverOptions:
    """Load solver options from a YAML file.

    Args:
        path: Path to YAML options file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigurationError: If the file content is invalid.

    YAML format::

        disable_family: false
        require_determinism: false
        allowed_targets: [gfx908, gfx90a]
        element_types: [int8]
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Options file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        return SolverOptions()
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid options file format: {path}",
            expected="mapping",
            got=type(data).__name__,
        )
    return options_from_dict(data)
