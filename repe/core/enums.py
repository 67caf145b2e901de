"""Shared enums for models and API."""

from enum import Enum


class Units(str, Enum):
    """Display units for weights and distances."""

    METRIC = "metric"
    IMPERIAL = "imperial"


class WorkoutSource(str, Enum):
    """Where a workout row came from."""

    CUSTOM = "custom"
    TEMPLATE = "template"
    IMPORTED = "imported"


class OperationType(str, Enum):
    """Mutation kinds held by the offline queue."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
