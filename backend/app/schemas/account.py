"""
Schémas Pydantic pour les comptes.

Le numéro de téléphone sert d'identifiant de connexion : format ivoirien
(10 chiffres, préfixe +225 optionnel), stocké normalisé en +225XXXXXXXXXX.
"""

import re
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.services.access_policy import SELF_REGISTRATION_ROLES

PHONE_REGEX = re.compile(r"^(\+225)?[0-9]{10}$")


def normalize_phone(raw: str) -> str:
    """Valide et normalise un numéro ivoirien. Lève ValueError si le format est invalide."""
    value = re.sub(r"[\s.\-]", "", raw)
    if not PHONE_REGEX.match(value):
        raise ValueError("Format de téléphone invalide. Exemple : 0701020304 ou +2250701020304")
    if value.startswith("+225"):
        return value
    return "+225" + value


def normalize_full_name(raw: str) -> str:
    """Nom affiché : 2 à 100 caractères une fois les espaces retirés."""
    value = raw.strip()
    if len(value) < 2:
        raise ValueError("Le nom doit contenir au moins 2 caractères.")
    if len(value) > 100:
        raise ValueError("Le nom est trop long.")
    return value


class AccountRegister(BaseModel):
    """Création du compte après authentification auprès du fournisseur d'identité."""
    full_name: str
    phone: str
    role: str  # tutor ou parent

    @field_validator("full_name")
    @classmethod
    def full_name_length(cls, v: str) -> str:
        return normalize_full_name(v)

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, v: str) -> str:
        return normalize_phone(v)

    @field_validator("role")
    @classmethod
    def self_registration_role(cls, v: str) -> str:
        if v not in SELF_REGISTRATION_ROLES:
            raise ValueError(f"Type de compte invalide. Valeurs acceptées : {SELF_REGISTRATION_ROLES}")
        return v


class AccountActiveUpdate(BaseModel):
    is_active: bool


class AccountUpdate(BaseModel):
    """Modification de son propre compte : nom et/ou téléphone."""
    full_name: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def full_name_length(cls, v: Optional[str]) -> Optional[str]:
        return normalize_full_name(v) if v is not None else v

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v) if v is not None else v


class AccountRoleUpdate(BaseModel):
    role: str  # rôle vérifié par le service, après le contrôle de permission


class AccountResponse(BaseModel):
    id: uuid.UUID
    full_name: str
    phone: str
    avatar_url: Optional[str] = None
    is_active: bool
    roles: List[str]
    created_at: Optional[datetime]
