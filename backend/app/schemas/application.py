"""
Schémas Pydantic pour les candidatures.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.contract import ContractResponse


class ApplicationCreate(BaseModel):
    """Message de présentation envoyé par le répétiteur (longueur vérifiée par le moteur de cycle de vie)."""
    message: str


class ApplicationDecision(BaseModel):
    decision: str                       # accept, reject
    agreed_rate: Optional[int] = None   # Tarif convenu (FCFA), pris en compte à l'acceptation


class ApplicationResponse(BaseModel):
    id: uuid.UUID
    offer_id: uuid.UUID
    tutor_id: uuid.UUID
    message: str
    status: str
    created_at: Optional[datetime]
    decided_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReceivedApplication(ApplicationResponse):
    """Candidature vue par le parent, avec l'identité du répétiteur."""
    tutor_full_name: str
    tutor_phone: str
    tutor_avatar_url: Optional[str] = None


class TutorApplication(ApplicationResponse):
    """Candidature vue par le répétiteur, avec le résumé de l'offre."""
    offer_subject: str
    offer_level: str
    offer_status: str


class DecisionResult(BaseModel):
    """Résultat d'une décision : la candidature mise à jour et le contrat éventuel."""
    application: ApplicationResponse
    contract: Optional[ContractResponse] = None
