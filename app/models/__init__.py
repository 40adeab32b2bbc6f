"""ORM model registry: importing this module registers every table on Base.metadata.

Alembic ``env.py`` imports ``Base`` from here (not from ``base.py``) so that
autogenerate sees all tables.  Application code can also do::

    from app.models import CropRecord, SensorReading, ...
"""

# ── Activity ────────────────────────────────────────────────────────────────
from app.models.activity import ActionLogEntry, Alert

# ── Base & Mixins ───────────────────────────────────────────────────────────
from app.models.base import (
    Base,
    TimeSeriesMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)

# ── Crop records ────────────────────────────────────────────────────────────
from app.models.crops import CropRecord

# ── Enums ───────────────────────────────────────────────────────────────────
from app.models.enums import (
    ActionTypeEnum,
    AlertTypeEnum,
    CropStatusEnum,
    PriorityEnum,
    RecommendationStatusEnum,
    UserRoleEnum,
)

# ── Advisory ────────────────────────────────────────────────────────────────
from app.models.recommendations import Recommendation

# ── Time-series sensor models ──────────────────────────────────────────────
from app.models.sensors import SensorReading

# ── Identity ────────────────────────────────────────────────────────────────
from app.models.users import User

__all__ = [
    # Activity
    "ActionLogEntry",
    "ActionTypeEnum",
    "Alert",
    "AlertTypeEnum",
    # Base & mixins
    "Base",
    # Crop records
    "CropRecord",
    "CropStatusEnum",
    "PriorityEnum",
    # Advisory
    "Recommendation",
    "RecommendationStatusEnum",
    # Time-series
    "SensorReading",
    "TimeSeriesMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Identity
    "User",
    "UserRoleEnum",
]
