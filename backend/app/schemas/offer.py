"""
Schémas Pydantic pour les offres.

Les règles métier (champs obligatoires, cohérence du budget) sont vérifiées par
le moteur de cycle de vie après le contrôle de permission ; ces schémas ne font
que nettoyer les saisies.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class OfferCreate(BaseModel):
    subject: str
    level: str
    description: str
    address: str
    frequency: str
    budget_min: int
    budget_max: int

    @field_validator("subject", "level", "description", "address", "frequency")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class OfferStatusUpdate(BaseModel):
    status: str  # open, in_progress, closed


class OfferResponse(BaseModel):
    id: uuid.UUID
    parent_id: uuid.UUID
    subject: str
    level: str
    description: str
    address: str
    frequency: str
    budget_min: int
    budget_max: int
    status: str
    applications_count: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class OfferDeletionReport(BaseModel):
    """Rapport de suppression en cascade d'une offre."""
    offer_id: uuid.UUID
    contracts_deleted: int
    applications_deleted: int
