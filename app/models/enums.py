"""PostgreSQL-backed enum types for all ORM models.

Each StrEnum maps 1:1 to a PostgreSQL CREATE TYPE ... AS ENUM.
These are separate from the Pydantic StrEnum in app/config.py:
config enums validate settings, ORM enums type database columns.
"""

from enum import StrEnum

# ── Auth enums ──────────────────────────────────────────────────────────────


class UserRoleEnum(StrEnum):
    """User authorization roles."""

    farmer = "farmer"
    scientist = "scientist"


# ── Crop enums ──────────────────────────────────────────────────────────────


class CropStatusEnum(StrEnum):
    """Lifecycle of one growing cycle. Stored by value (capitalized)."""

    active = "Active"
    harvested = "Harvested"
    abandoned = "Abandoned"


class ActionTypeEnum(StrEnum):
    """Field action vocabulary shared by crop history and the action log."""

    sowing = "sowing"
    watering = "watering"
    fertilization = "fertilization"
    harvest = "harvest"
    pruning = "pruning"
    other = "other"


# ── Notification enums ──────────────────────────────────────────────────────


class AlertTypeEnum(StrEnum):
    info = "info"
    warning = "warning"
    success = "success"
    error = "error"


class PriorityEnum(StrEnum):
    low = "low"
    medium = "medium"
    high = "high"


class RecommendationStatusEnum(StrEnum):
    """Advisory lifecycle: pending -> read -> completed."""

    pending = "pending"
    read = "read"
    completed = "completed"
