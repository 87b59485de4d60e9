"""
convselect Applicability Filter

Decides whether the convolution family, and each candidate in it, can
execute a problem. Rejection is a normal outcome reported as a boolean
(or as Reason codes for explanation), never as an exception.

Family-level checks short-circuit on the first failure; only when all
of them hold is the catalog consulted, and then only until the first
candidate accepts (existence, not selection).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from convselect import reasons as rc
from convselect.catalog import GROUPED_CONV_FWD_LAYER_QUANT
from convselect.config import SolverOptions
from convselect.dtypes import dtype_to_str, resolve_element_type
from convselect.layout import derive
from convselect.reasons import Reason, make_reason

if TYPE_CHECKING:
    import torch

    from convselect.catalog import CandidateCatalog, CandidateHandle
    from convselect.context import ExecutionContext
    from convselect.models.problem import ProblemDescriptor
    from convselect.models.shape import ConvArgs

logger = logging.getLogger(__name__)


@dataclass
class ApplicabilityReport:
    """Explanation of an applicability decision.

    Attributes:
        family: Operation family checked.
        problem: Problem summary.
        reasons: Family-level rejection reasons (empty if applicable).
        accepted: Identities of candidates that accept the problem.
        rejected: Candidate identity -> rejection reasons.
    """

    family: str
    problem: str
    reasons: list[Reason] = field(default_factory=list)
    accepted: list[str] = field(default_factory=list)
    rejected: dict[str, list[Reason]] = field(default_factory=dict)

    @property
    def applicable(self) -> bool:
        return not self.reasons and bool(self.accepted)

    def to_dict(self) -> dict[str, Any]:
        return {
            "family": self.family,
            "problem": self.problem,
            "applicable": self.applicable,
            "reasons": [r.to_dict() for r in self.reasons],
            "accepted": list(self.accepted),
            "rejected": {
                kid: [r.to_dict() for r in rs] for kid, rs in self.rejected.items()
            },
        }


def _check_strides(args: "ConvArgs") -> list[Reason]:
    if args.has_unit_strides:
        return []
    return [make_reason(
        rc.CONV_STRIDE_UNSUPPORTED,
        f"Convolution stride {args.conv_strides} is not (1, 1)",
    )]


class ApplicabilityFilter:
    """Family- and candidate-level applicability for one operation family.

    The catalog is read-only here and may be shared between filters.
    """

    __slots__ = ("_catalog", "_options", "_family")

    def __init__(
        self,
        catalog: "CandidateCatalog",
        options: SolverOptions | None = None,
        family: str = GROUPED_CONV_FWD_LAYER_QUANT,
    ) -> None:
        self._catalog = catalog
        self._options = options or SolverOptions()
        self._family = family

    @property
    def family(self) -> str:
        return self._family

    @property
    def options(self) -> SolverOptions:
        return self._options

    # ------------------------------------------------------------------
    # Catalog access
    # ------------------------------------------------------------------

    def enumerate(self, dtype: "torch.dtype") -> list["CandidateHandle"]:
        """Candidates for dtype in catalog order."""
        return list(self._catalog.enumerate(dtype, self._family))

    def find(self, dtype: "torch.dtype", kernel_id: str) -> "CandidateHandle | None":
        """Resolve an identity against the live catalog."""
        for candidate in self._catalog.enumerate(dtype, self._family):
            if candidate.identity == kernel_id:
                return candidate
        return None

    # ------------------------------------------------------------------
    # Candidate level
    # ------------------------------------------------------------------

    def probe(
        self,
        candidate: "CandidateHandle",
        args: "ConvArgs",
        dtype: "torch.dtype",
    ) -> bool:
        """Ask the candidate's own support oracle."""
        supported = candidate.probe(args, dtype)
        if not supported:
            logger.debug(
                "Candidate %s rejected %s args", candidate.identity, dtype_to_str(dtype)
            )
        return supported

    def check_candidate(
        self,
        problem: "ProblemDescriptor",
        candidate: "CandidateHandle",
        args: "ConvArgs | None" = None,
    ) -> list[Reason]:
        """Per-candidate checks, short-circuiting on the first failure.

        Args:
            problem: Problem to check.
            candidate: Candidate to check.
            args: Pre-derived arguments for problem, if already available.

        Returns:
            Empty list if applicable, else a single failure reason.
        """
        if args is None:
            args = derive(problem)

        if not args.has_unit_strides:
            return [make_reason(
                rc.CONV_STRIDE_UNSUPPORTED,
                f"Convolution stride {args.conv_strides} is not (1, 1)",
                candidate.identity,
            )]

        if not self.probe(candidate, args, problem.dtype):
            return [make_reason(
                rc.CANDIDATE_PROBE_REJECTED,
                "Support probe rejected the derived arguments",
                candidate.identity,
            )]

        return []

    def is_applicable(
        self,
        problem: "ProblemDescriptor",
        candidate: "CandidateHandle",
    ) -> bool:
        """Whether a single candidate can execute the problem."""
        return not self.check_candidate(problem, candidate)

    # ------------------------------------------------------------------
    # Family level
    # ------------------------------------------------------------------

    def check_preconditions(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
    ) -> list[Reason]:
        """Family-level checks that need no catalog access.

        Returns:
            Empty list if all hold, else the first failing reason.
        """
        opts = self._options

        if opts.disable_family:
            return [make_reason(rc.FAMILY_DISABLED, f"Family '{self._family}' is disabled")]

        if opts.require_determinism:
            return [make_reason(
                rc.DETERMINISM_REQUIRED,
                "Deterministic execution is required",
            )]

        if not problem.has_uniform_dtype:
            return [make_reason(
                rc.MIXED_DTYPE_UNSUPPORTED,
                f"Element types differ: in={dtype_to_str(problem.in_dtype)} "
                f"wei={dtype_to_str(problem.weight_dtype)} "
                f"out={dtype_to_str(problem.out_dtype)}",
            )]

        if not problem.direction.is_forward:
            return [make_reason(
                rc.DIRECTION_UNSUPPORTED,
                f"Direction '{problem.direction.value}' is not forward",
            )]

        if not problem.is_2d:
            return [make_reason(
                rc.SPATIAL_DIMS_UNSUPPORTED,
                f"Problem has {problem.spatial_dims} spatial dims, need 2",
            )]

        if not problem.layout.is_channel_last:
            return [make_reason(
                rc.LAYOUT_UNSUPPORTED,
                f"Layout '{problem.layout.value}' is not channel-last",
            )]

        if context.target not in opts.allowed_targets:
            return [make_reason(
                rc.TARGET_UNSUPPORTED,
                f"Target '{context.target}' not in {sorted(opts.allowed_targets)}",
            )]

        if resolve_element_type(problem.dtype, opts.element_types) is None:
            return [make_reason(
                rc.DTYPE_UNSUPPORTED,
                f"No instantiation for dtype {dtype_to_str(problem.dtype)}",
            )]

        return []

    def check_family(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
    ) -> list[Reason]:
        """Full family-level applicability.

        Returns:
            Empty list if at least one candidate can execute the
            problem, else a single failure reason.
        """
        reasons = self.check_preconditions(context, problem)
        if reasons:
            logger.debug("Family %s rejected %s: %s", self._family, problem.summary(), reasons[0])
            return reasons

        args = derive(problem)
        reasons = _check_strides(args)
        if reasons:
            return reasons

        for candidate in self._catalog.enumerate(problem.dtype, self._family):
            if self.probe(candidate, args, problem.dtype):
                return []

        logger.debug("No candidate of %s accepts %s", self._family, problem.summary())
        return [make_reason(
            rc.NO_APPLICABLE_CANDIDATE,
            f"No candidate of '{self._family}' accepts the problem",
        )]

    def is_family_applicable(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
    ) -> bool:
        """Boolean view of check_family()."""
        return not self.check_family(context, problem)

    def explain(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
    ) -> ApplicabilityReport:
        """Explain the decision, listing every candidate's verdict.

        Reports the same family-level reason as check_family(); once
        those checks pass, every candidate is probed rather than only
        up to the first acceptance.
        """
        report = ApplicabilityReport(family=self._family, problem=problem.summary())

        report.reasons = self.check_preconditions(context, problem)
        if report.reasons:
            return report

        args = derive(problem)
        report.reasons = _check_strides(args)
        if report.reasons:
            return report

        for candidate in self._catalog.enumerate(problem.dtype, self._family):
            candidate_reasons = self.check_candidate(problem, candidate, args)
            if candidate_reasons:
                report.rejected[candidate.identity] = candidate_reasons
            else:
                report.accepted.append(candidate.identity)

        if not report.accepted:
            report.reasons = [make_reason(
                rc.NO_APPLICABLE_CANDIDATE,
                f"No candidate of '{self._family}' accepts the problem",
            )]
        return report
