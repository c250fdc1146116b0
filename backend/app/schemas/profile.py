"""
Schémas Pydantic pour le profil répétiteur.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator


class TutorProfileUpdate(BaseModel):
    """
    Champs modifiables par le répétiteur lui-même (mise à jour partielle).
    Les bornes (bio, tarif, expérience) sont vérifiées par profile_service.
    """
    bio: Optional[str] = None
    subjects: Optional[List[str]] = None
    levels: Optional[List[str]] = None
    availability: Optional[List[str]] = None
    location: Optional[str] = None
    hourly_rate: Optional[int] = None
    years_experience: Optional[int] = None

    @field_validator("bio")
    @classmethod
    def strip_bio(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    @field_validator("subjects", "levels", "availability")
    @classmethod
    def strip_items(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        # Dédoublonnage en conservant l'ordre de saisie
        return list(dict.fromkeys(item.strip() for item in v if item.strip()))


class DocumentsValidationUpdate(BaseModel):
    documents_validated: bool


class TutorProfileResponse(BaseModel):
    account_id: uuid.UUID
    full_name: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None
    bio: Optional[str]
    subjects: List[str]
    levels: List[str]
    availability: List[str]
    location: Optional[str]
    hourly_rate: Optional[int]
    years_experience: Optional[int]
    documents_validated: bool
    documents_validated_at: Optional[datetime] = None
    complete: bool  # Recalculé à chaque lecture, jamais stocké
