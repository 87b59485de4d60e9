"""
convselect data models.

This module provides:
- ProblemDescriptor: Immutable convolution problem description
- ShapeTuple: Extents/strides/axes of one tensor
- ConvArgs: Derived invocation arguments
"""
from __future__ import annotations

from convselect.models.problem import ProblemDescriptor, conv_output_size
from convselect.models.shape import ConvArgs, ShapeTuple, permute

__all__ = [
    "ProblemDescriptor",
    "conv_output_size",
    "ConvArgs",
    "ShapeTuple",
    "permute",
]
