"""
Modèle SQLAlchemy pour les candidatures des répétiteurs.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Application(Base):
    """Candidature d'un répétiteur à une offre, au plus une par couple (offre, répétiteur)."""
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("offer_id", "tutor_id", name="uq_applications_offer_tutor"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    offer_id = Column(UUID(as_uuid=True), ForeignKey("offers.id", ondelete="CASCADE"), nullable=False)
    tutor_id = Column(UUID(as_uuid=True), ForeignKey("accounts.id"), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), default="pending")  # pending, accepted, rejected
    created_at = Column(DateTime, server_default=func.now())
    decided_at = Column(DateTime, nullable=True)
