"""
convselect candidate registries.

This module provides:
- InstanceRegistry: Ordered in-memory candidate catalog
"""
from __future__ import annotations

from convselect.registry.instance_registry import InstanceRegistry

__all__ = ["InstanceRegistry"]
