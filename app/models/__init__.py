"""Database models."""

# Import all models here to ensure they're recognized by SQLAlchemy
from app.models.user import User
from app.models.weight_entry import WeightEntry

__all__ = [
    "User",
    "WeightEntry",
]
