"""
convselect Performance Config

Enumerable, serializable choice of exactly one applicable candidate.

Lifecycle::

    UNINITIALIZED --heuristic_init()--> POPULATED --advance()*--> EXHAUSTED

Only the candidate identity is persisted and compared. The ordinal index
and the applicable list are search scaffolding, rebuilt by
heuristic_init() against the live catalog; the index of a given identity
may differ between catalog builds.
"""
from __future__ import annotations

import json
import logging
from enum import Enum, unique
from typing import TYPE_CHECKING, Any

from convselect.dtypes import dtype_to_str, resolve_element_type
from convselect.exceptions import ConfigInvariantError
from convselect.layout import derive

if TYPE_CHECKING:
    from convselect.applicability import ApplicabilityFilter
    from convselect.models.problem import ProblemDescriptor

logger = logging.getLogger(__name__)


@unique
class ConfigState(str, Enum):
    """Search state of a PerformanceConfig.

    Members:
        UNINITIALIZED: No applicable list materialized.
        POPULATED: Applicable list built; more candidates remain.
        EXHAUSTED: Positioned on the last applicable candidate.
    """

    UNINITIALIZED = "uninitialized"
    POPULATED = "populated"
    EXHAUSTED = "exhausted"


class PerformanceConfig:
    """Selection of one candidate, plus the scaffolding to step through all.

    Owned by a single search at a time; not thread-safe. Compared by
    identity but unhashable, since the identity changes as it advances.

    Example:
        config = PerformanceConfig()
        config.heuristic_init(problem, applicability)
        while True:
            run(config.kernel_id)
            if not config.advance():
                break
    """

    __slots__ = ("_kernel_id", "_index", "_applicable")

    def __init__(self, kernel_id: str | None = None) -> None:
        """Create a config, optionally carrying a persisted identity.

        Args:
            kernel_id: Candidate identity restored from a tuning record.
        """
        self._kernel_id = kernel_id
        self._index = 0
        self._applicable: list[str] = []

    @property
    def kernel_id(self) -> str | None:
        """Identity of the selected candidate."""
        return self._kernel_id

    @property
    def index(self) -> int:
        """Ordinal of the selected candidate in the applicable list."""
        return self._index

    @property
    def applicable(self) -> tuple[str, ...]:
        """Identities of applicable candidates in catalog order."""
        return tuple(self._applicable)

    @property
    def state(self) -> ConfigState:
        if not self._applicable:
            return ConfigState.UNINITIALIZED
        if self._index + 1 < len(self._applicable):
            return ConfigState.POPULATED
        return ConfigState.EXHAUSTED

    def heuristic_init(
        self,
        problem: "ProblemDescriptor",
        applicability: "ApplicabilityFilter",
    ) -> None:
        """Probe every catalog candidate and select the first applicable one.

        Args:
            problem: Problem to build the applicable list for.
            applicability: Filter bound to the live catalog.

        Raises:
            ConfigInvariantError: If the dtype has no instantiation, the
                catalog is empty, or no candidate accepts the problem.
                Each means family-level applicability should already have
                rejected the problem.
        """
        dtype = problem.dtype
        if resolve_element_type(dtype, applicability.options.element_types) is None:
            raise ConfigInvariantError(
                f"No instantiation of '{applicability.family}' for dtype {dtype_to_str(dtype)}",
                problem=problem.summary(),
            )

        candidates = applicability.enumerate(dtype)
        if not candidates:
            raise ConfigInvariantError(
                f"Catalog returned no candidates for '{applicability.family}'",
                problem=problem.summary(),
            )

        args = derive(problem)
        applicable = [
            c.identity for c in candidates if applicability.probe(c, args, dtype)
        ]
        if not applicable:
            raise ConfigInvariantError(
                f"None of {len(candidates)} candidates accepts the problem",
                problem=problem.summary(),
            )

        self._applicable = applicable
        self._index = 0
        self._kernel_id = applicable[0]

        logger.debug(
            "Heuristic init: %d/%d candidates applicable, selected %s",
            len(applicable),
            len(candidates),
            self._kernel_id,
        )

    def advance(self) -> bool:
        """Step to the next applicable candidate.

        Returns:
            True if the config moved, False if no candidates remain (the
            config is left unchanged).
        """
        if self._index + 1 < len(self._applicable):
            self._index += 1
            self._kernel_id = self._applicable[self._index]
            logger.debug("Advanced to #%d %s", self._index, self._kernel_id)
            return True
        return False

    def set_next_value(
        self,
        problem: "ProblemDescriptor",
        applicability: "ApplicabilityFilter",
    ) -> bool:
        """Search-driver step: initialize on first call, advance after.

        Returns:
            True while a (new) value is available.
        """
        if not self._applicable:
            self.heuristic_init(problem, applicability)
            return True
        return self.advance()

    def is_valid_value(self) -> bool:
        """Whether the ordinal addresses an entry of the applicable list."""
        return self._index < len(self._applicable)

    def is_valid(
        self,
        problem: "ProblemDescriptor",
        applicability: "ApplicabilityFilter",
    ) -> bool:
        """Revalidate the identity against the live catalog and a problem.

        Returns False, without raising, when the identity is missing from
        the catalog's current enumeration (stale config) or the candidate
        rejects the problem.
        """
        if self._kernel_id is None:
            return False

        dtype = problem.dtype
        if resolve_element_type(dtype, applicability.options.element_types) is None:
            return False

        candidate = applicability.find(dtype, self._kernel_id)
        if candidate is None:
            logger.debug("Config %s is stale: not in catalog", self._kernel_id)
            return False

        return applicability.probe(candidate, derive(problem), dtype)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PerformanceConfig):
            return NotImplemented
        return self._kernel_id == other._kernel_id

    # Mutable: advance() rewrites the identity. Key dicts on kernel_id.
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"PerformanceConfig(kernel_id={self._kernel_id!r}, "
            f"index={self._index}, applicable={len(self._applicable)})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the persisted identity.

        Returns:
            Dict with the 'kernel_id' key.
        """
        return {"kernel_id": self._kernel_id}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PerformanceConfig:
        """Restore a config from its persisted identity.

        The result is UNINITIALIZED; call is_valid() before invoking it.
        """
        return cls(kernel_id=d["kernel_id"])

    @classmethod
    def from_json(cls, json_str: str) -> PerformanceConfig:
        return cls.from_dict(json.loads(json_str))
