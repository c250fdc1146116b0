"""
Modèle SQLAlchemy pour les contrats (engagement parent ↔ répétiteur).
Créé lorsqu'un parent accepte une candidature.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    offer_id = Column(UUID(as_uuid=True), ForeignKey("offers.id", ondelete="CASCADE"), nullable=False)
    application_id = Column(
        UUID(as_uuid=True), ForeignKey("applications.id", ondelete="SET NULL"), unique=True, nullable=True
    )
    parent_id = Column(UUID(as_uuid=True), ForeignKey("accounts.id"), nullable=False)
    tutor_id = Column(UUID(as_uuid=True), ForeignKey("accounts.id"), nullable=False)

    # Copie des conditions de l'offre au moment de l'acceptation
    subject = Column(String(100), nullable=False)
    level = Column(String(100), nullable=False)
    frequency = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)
    agreed_rate = Column(Integer, nullable=True)  # FCFA

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)        # Renseignée à la clôture
    status = Column(String(20), default="active")  # active, completed, cancelled

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
