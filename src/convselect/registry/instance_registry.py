"""
convselect Instance Registry

Ordered in-memory CandidateCatalog.
Thread-safe registration and lookup; registration order is enumeration order.
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import TYPE_CHECKING, Sequence

from convselect.dtypes import dtype_to_str

if TYPE_CHECKING:
    import torch

    from convselect.catalog import CandidateHandle

logger = logging.getLogger(__name__)

_Key = tuple["torch.dtype", str]


class InstanceRegistry:
    """Catalog of candidate kernels keyed by (dtype, family).

    Candidates are enumerated in registration order, which is stable
    for the life of the registry. All public methods are thread-safe.
    """

    __slots__ = ("_lock", "_candidates")

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._lock = RLock()
        self._candidates: dict[_Key, list["CandidateHandle"]] = {}

    def register(
        self,
        candidate: "CandidateHandle",
        dtype: "torch.dtype",
        family: str,
    ) -> None:
        """Append a candidate to the (dtype, family) enumeration.

        Raises:
            ValueError: If the identity is already registered under the key.
        """
        with self._lock:
            entries = self._candidates.setdefault((dtype, family), [])
            if any(c.identity == candidate.identity for c in entries):
                raise ValueError(
                    f"Candidate '{candidate.identity}' is already registered "
                    f"for {dtype_to_str(dtype)}/{family}"
                )
            entries.append(candidate)

    def register_many(
        self,
        candidates: Sequence["CandidateHandle"],
        dtype: "torch.dtype",
        family: str,
    ) -> None:
        """Register several candidates atomically, preserving their order.

        Raises:
            ValueError: If any identity is duplicated, in the batch or
                against existing entries. Nothing is registered then.
        """
        with self._lock:
            existing = {c.identity for c in self._candidates.get((dtype, family), [])}
            ids = [c.identity for c in candidates]
            if len(ids) != len(set(ids)):
                raise ValueError("Duplicate candidate identity in batch")
            clash = existing.intersection(ids)
            if clash:
                raise ValueError(
                    f"Candidates already registered: {sorted(clash)}"
                )
            self._candidates.setdefault((dtype, family), []).extend(candidates)

    def unregister(
        self,
        kernel_id: str,
        dtype: "torch.dtype",
        family: str,
    ) -> bool:
        """Remove a candidate.

        Returns:
            True if removed, False if not found.
        """
        with self._lock:
            entries = self._candidates.get((dtype, family))
            if not entries:
                return False
            for i, candidate in enumerate(entries):
                if candidate.identity == kernel_id:
                    del entries[i]
                    if not entries:
                        del self._candidates[(dtype, family)]
                    logger.debug("Unregistered candidate %s", kernel_id)
                    return True
            return False

    def enumerate(
        self,
        dtype: "torch.dtype",
        family: str,
    ) -> list["CandidateHandle"]:
        """Candidates for (dtype, family) in registration order."""
        with self._lock:
            return list(self._candidates.get((dtype, family), []))

    def identities(self, dtype: "torch.dtype", family: str) -> list[str]:
        """Candidate identities for (dtype, family) in enumeration order."""
        return [c.identity for c in self.enumerate(dtype, family)]

    def clear(self) -> None:
        with self._lock:
            self._candidates.clear()

    @property
    def candidate_count(self) -> int:
        """Number of registered candidates across all keys."""
        with self._lock:
            return sum(len(v) for v in self._candidates.values())

    @property
    def families(self) -> frozenset[str]:
        with self._lock:
            return frozenset(family for _, family in self._candidates)
