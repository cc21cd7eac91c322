"""Data models and transfer objects."""

from .field_record import ClassFieldRecord, FieldDeclarationRecord
from .fix import TOP_LEVEL, Action, Fix
from .location import Location, LocationKind
from .region import Error, Region

__all__ = [
    # Location models
    "LocationKind",
    "Location",
    # Fix models
    "Action",
    "Fix",
    "TOP_LEVEL",
    # Region and error models
    "Region",
    "Error",
    # Field declaration models
    "FieldDeclarationRecord",
    "ClassFieldRecord",
]
