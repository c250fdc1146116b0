"""
Modèle SQLAlchemy pour le profil répétiteur (1:1 avec un compte tutor).

Pas de colonne « profil complet » : l'indicateur est recalculé à chaque lecture
à partir des champs (voir profile_service.is_profile_complete).
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID

from app.database import Base


class TutorProfile(Base):
    __tablename__ = "tutor_profiles"

    account_id = Column(UUID(as_uuid=True), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True)
    bio = Column(Text, nullable=True)
    subjects = Column(ARRAY(String(100)), nullable=False, default=list)
    levels = Column(ARRAY(String(100)), nullable=False, default=list)
    availability = Column(ARRAY(String(100)), nullable=False, default=list)  # ex. "Lundi soir"
    location = Column(String(255), nullable=True)
    hourly_rate = Column(Integer, nullable=True)  # FCFA, indicatif
    years_experience = Column(Integer, default=0)

    # Modifiés uniquement par un admin après revue des pièces (diplôme, CNI)
    documents_validated = Column(Boolean, default=False)
    documents_validated_at = Column(DateTime, nullable=True)
    documents_validated_by = Column(UUID(as_uuid=True), ForeignKey("accounts.id"), nullable=True)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
