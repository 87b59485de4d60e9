"""
convselect - Kernel selection for grouped forward convolution

Enumerates candidate kernels for a convolution problem, steps a
performance config through the applicable ones for empirical search,
persists the choice by identity and marshals invocation arguments.

Main APIs:
- ConvSolver.is_applicable(): Family-level applicability
- ConvSolver.default_config(): First applicable candidate
- PerformanceConfig.advance() / is_valid(): Search stepping and revalidation
- ConvSolver.invoke(): Build and submit an execution request
- derive(): Native extents and strides for a problem
"""

__version__ = "0.1.0"

from convselect.applicability import ApplicabilityFilter, ApplicabilityReport
from convselect.catalog import (
    DEFAULT_ELEMENTWISE,
    GROUPED_CONV_FWD_LAYER_QUANT,
    PASS_THROUGH,
    CandidateCatalog,
    CandidateHandle,
    ElementwiseOp,
    ElementwiseOps,
    ExecutionBackend,
    ExecutionRequest,
    IOBuffers,
    KernelInstance,
    SearchDriver,
    activation_mul_clamp,
)
from convselect.config import SolverOptions, load_options
from convselect.context import ExecutionContext
from convselect.dtypes import ElementType, resolve_element_type
from convselect.enums import Direction, TensorLayout
from convselect.exceptions import (
    CandidateNotFoundError,
    ConfigInvariantError,
    ConfigurationError,
    ConvSelectError,
    InvalidProblemError,
    KernelExecutionError,
)
from convselect.layout import NATIVE_AXIS_ORDER, derive
from convselect.models import ConvArgs, ProblemDescriptor, ShapeTuple
from convselect.perf_config import ConfigState, PerformanceConfig
from convselect.reasons import Reason, ReasonCategory
from convselect.registry import InstanceRegistry
from convselect.solver import ConvSolver, Solution

__all__ = [
    "__version__",
    # Solver
    "ConvSolver",
    "Solution",
    "PerformanceConfig",
    "ConfigState",
    "ApplicabilityFilter",
    "ApplicabilityReport",
    # Models
    "ProblemDescriptor",
    "ShapeTuple",
    "ConvArgs",
    "derive",
    "NATIVE_AXIS_ORDER",
    # Catalog
    "GROUPED_CONV_FWD_LAYER_QUANT",
    "CandidateCatalog",
    "CandidateHandle",
    "KernelInstance",
    "InstanceRegistry",
    "ExecutionBackend",
    "ExecutionRequest",
    "ExecutionContext",
    "IOBuffers",
    "SearchDriver",
    "ElementwiseOp",
    "ElementwiseOps",
    "PASS_THROUGH",
    "DEFAULT_ELEMENTWISE",
    "activation_mul_clamp",
    # Options
    "SolverOptions",
    "load_options",
    # Enums
    "Direction",
    "TensorLayout",
    "ElementType",
    "resolve_element_type",
    # Reasons
    "Reason",
    "ReasonCategory",
    # Exceptions
    "ConvSelectError",
    "InvalidProblemError",
    "ConfigInvariantError",
    "CandidateNotFoundError",
    "KernelExecutionError",
    "ConfigurationError",
]
