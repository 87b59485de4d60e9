"""
convselect Element Types

Closed dispatch from torch dtypes to the element-type variants the
convolution family can be instantiated for.

This module provides:
- ElementType: Tagged element variants
- resolve_element_type(): torch dtype -> ElementType
- dtype_to_str() / str_to_dtype(): serialization helpers
"""
from __future__ import annotations

from enum import Enum, unique
from typing import Final

import torch


@unique
class ElementType(str, Enum):
    """Element-type variants of the convolution family.

    Members:
        INT8: 8-bit signed integer (quantized inference)
        HALF: IEEE half precision
        BFLOAT16: bfloat16
        FLOAT: IEEE single precision
        INT32: 32-bit signed integer
        DOUBLE: IEEE double precision
    """

    INT8 = "int8"
    HALF = "float16"
    BFLOAT16 = "bfloat16"
    FLOAT = "float32"
    INT32 = "int32"
    DOUBLE = "float64"

    @property
    def torch_dtype(self) -> torch.dtype:
        """The torch dtype carried by this variant."""
        return _ELEMENT_TO_DTYPE[self]


_DTYPE_TO_ELEMENT: Final[dict[torch.dtype, ElementType]] = {
    torch.int8: ElementType.INT8,
    torch.float16: ElementType.HALF,
    torch.bfloat16: ElementType.BFLOAT16,
    torch.float32: ElementType.FLOAT,
    torch.int32: ElementType.INT32,
    torch.float64: ElementType.DOUBLE,
}

_ELEMENT_TO_DTYPE: Final[dict[ElementType, torch.dtype]] = {
    v: k for k, v in _DTYPE_TO_ELEMENT.items()
}

DEFAULT_ELEMENT_TYPES: Final[frozenset[ElementType]] = frozenset({ElementType.INT8})


def resolve_element_type(
    dtype: torch.dtype,
    enabled: frozenset[ElementType] = DEFAULT_ELEMENT_TYPES,
) -> ElementType | None:
    """Map a torch dtype onto an enabled element variant.

    Args:
        dtype: Element dtype of the problem.
        enabled: Variants the family is instantiated for.

    Returns:
        The matching ElementType, or None if the dtype is unknown or
        its variant is not enabled.
    """
    element = _DTYPE_TO_ELEMENT.get(dtype)
    if element is None or element not in enabled:
        return None
    return element


def dtype_to_str(dtype: torch.dtype) -> str:
    """Convert torch dtype to string."""
    return str(dtype).replace("torch.", "")


def str_to_dtype(dtype_str: str) -> torch.dtype:
    """Convert string to torch dtype.

    Raises:
        ValueError: If the string names no supported dtype.
    """
    try:
        return ElementType(dtype_str).torch_dtype
    except ValueError:
        raise ValueError(f"Unknown dtype string: {dtype_str!r}") from None
