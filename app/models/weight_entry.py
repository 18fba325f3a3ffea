from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    Float,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class WeightEntry(Base):
    """One weight measurement per user per calendar date.

    Column names match the existing ``WeightHistory`` table so stored data
    stays readable.
    """

    __tablename__ = "WeightHistory"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        "userId", Integer, ForeignKey("Users.userId", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False)
    weight = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    age = Column(Integer, nullable=False)
    bmi = Column(Float, nullable=False)

    user = relationship("User", back_populates="weight_entries")

    __table_args__ = (
        UniqueConstraint("userId", "date", name="uq_weight_history_user_date"),
        CheckConstraint("weight > 0 AND weight <= 1000", name="ck_weight_history_weight_range"),
        CheckConstraint("height > 0 AND height <= 300", name="ck_weight_history_height_range"),
        CheckConstraint("bmi > 0 AND bmi <= 100", name="ck_weight_history_bmi_range"),
    )
