"""
Modèle SQLAlchemy pour les offres publiées par les parents.
"""

import uuid
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Offer(Base):
    __tablename__ = "offers"
    __table_args__ = (
        CheckConstraint("budget_min > 0", name="ck_offers_budget_min_positive"),
        CheckConstraint("budget_max >= budget_min", name="ck_offers_budget_range"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    parent_id = Column(UUID(as_uuid=True), ForeignKey("accounts.id"), nullable=False)
    subject = Column(String(100), nullable=False)
    level = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    address = Column(String(255), nullable=False)
    frequency = Column(String(100), nullable=False)  # ex. "2 fois par semaine"
    budget_min = Column(Integer, nullable=False)      # FCFA
    budget_max = Column(Integer, nullable=False)
    status = Column(String(20), default="open")       # open, in_progress, closed
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
