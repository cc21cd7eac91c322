"""Registries resolving locations to declarations and regions."""

from .field import FieldRegistry
from .region import (
    CompoundRegionRegistry,
    FieldRegionRegistry,
    MethodRegionRegistry,
    ParameterRegionRegistry,
    RegionRegistry,
)

__all__ = [
    "FieldRegistry",
    "RegionRegistry",
    "FieldRegionRegistry",
    "MethodRegionRegistry",
    "ParameterRegionRegistry",
    "CompoundRegionRegistry",
]
