"""
Service métier pour les profils répétiteurs.

Le répétiteur modifie ses champs en libre-service ; un administrateur ne modifie
que l'indicateur documents_validated (après revue des pièces déposées).
L'indicateur « profil complet » est une fonction pure des champs, recalculée
à chaque lecture.
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import NotFound, ValidationError
from app.models.account import Account
from app.models.tutor_profile import TutorProfile
from app.schemas.profile import TutorProfileResponse, TutorProfileUpdate
from app.services import access_policy
from app.services.access_policy import Actor

logger = logging.getLogger(__name__)

MIN_BIO_LENGTH = 50
MAX_BIO_LENGTH = 1000
HOURLY_RATE_RANGE = (1000, 100000)  # FCFA
YEARS_EXPERIENCE_RANGE = (0, 50)
LIST_FIELDS = {"subjects", "levels", "availability"}


def is_profile_complete(profile: Any) -> bool:
    """
    Vrai si et seulement si : bio ≥ 50 caractères, au moins une matière,
    un niveau et une disponibilité, et une localisation renseignée.
    """
    if profile is None:
        return False
    return bool(
        profile.bio
        and len(profile.bio) >= MIN_BIO_LENGTH
        and profile.subjects
        and profile.levels
        and profile.availability
        and (profile.location or "").strip()
    )


def validate_profile_update(data: TutorProfileUpdate) -> None:
    """Bornes des champs saisis par le répétiteur. Lève ValidationError."""
    if data.bio is not None and len(data.bio) > MAX_BIO_LENGTH:
        raise ValidationError(f"La biographie ne peut pas dépasser {MAX_BIO_LENGTH} caractères.")
    low, high = HOURLY_RATE_RANGE
    if data.hourly_rate is not None and not low <= data.hourly_rate <= high:
        raise ValidationError("Le tarif horaire doit être compris entre 1 000 et 100 000 FCFA.")
    low, high = YEARS_EXPERIENCE_RANGE
    if data.years_experience is not None and not low <= data.years_experience <= high:
        raise ValidationError("L'expérience doit être comprise entre 0 et 50 ans.")


def new_profile(account_id: uuid.UUID) -> TutorProfile:
    """Profil vide créé à l'inscription d'un répétiteur."""
    return TutorProfile(
        account_id=account_id,
        subjects=[],
        levels=[],
        availability=[],
        years_experience=0,
        documents_validated=False,
    )


def get_tutor_profile(db: Session, tutor_id: uuid.UUID) -> TutorProfileResponse:
    """Retourne le profil d'un répétiteur. Lève NotFound s'il n'existe pas."""
    profile = db.get(TutorProfile, tutor_id)
    if profile is None:
        raise NotFound("Profil répétiteur introuvable.")
    return _to_response(profile, db.get(Account, tutor_id))


def get_own_profile(db: Session, actor: Actor) -> TutorProfileResponse:
    """Profil du répétiteur acteur."""
    access_policy.require(actor, access_policy.VIEW_OWN_PROFILE, owner_id=actor.id)
    return get_tutor_profile(db, actor.id)


def update_own_profile(db: Session, actor: Actor, data: TutorProfileUpdate) -> TutorProfileResponse:
    """
    Met à jour les champs fournis du profil de l'acteur (répétiteur).
    documents_validated n'est jamais modifiable ici.
    """
    access_policy.require(actor, access_policy.EDIT_TUTOR_PROFILE, owner_id=actor.id)
    validate_profile_update(data)

    profile = db.get(TutorProfile, actor.id)
    if profile is None:
        profile = new_profile(actor.id)
        db.add(profile)

    for field, value in data.model_dump(exclude_unset=True).items():
        if field in LIST_FIELDS and value is None:
            value = []
        setattr(profile, field, value)

    db.commit()
    db.refresh(profile)

    logger.info("Profil répétiteur %s mis à jour (complet : %s)", actor.id, is_profile_complete(profile))
    return _to_response(profile, db.get(Account, actor.id))


def list_tutors(db: Session, actor: Actor) -> list[TutorProfileResponse]:
    """Liste des répétiteurs avec profil et statut de validation (écran admin)."""
    access_policy.require(actor, access_policy.LIST_ACCOUNTS)

    rows = db.execute(
        select(Account, TutorProfile)
        .join(TutorProfile, TutorProfile.account_id == Account.id)
        .order_by(Account.created_at.desc())
    ).all()

    return [_to_response(profile, account) for account, profile in rows]


def set_documents_validated(
    db: Session, actor: Actor, tutor_id: uuid.UUID, validated: bool
) -> TutorProfileResponse:
    """
    Positionne l'indicateur documents_validated d'un répétiteur (admin uniquement).
    C'est cet indicateur qui autorise le répétiteur à candidater.
    """
    access_policy.require(actor, access_policy.VALIDATE_DOCUMENTS)

    profile = db.get(TutorProfile, tutor_id)
    if profile is None:
        raise NotFound("Profil répétiteur introuvable.")

    profile.documents_validated = validated
    profile.documents_validated_at = datetime.now(timezone.utc) if validated else None
    profile.documents_validated_by = actor.id if validated else None
    db.commit()
    db.refresh(profile)

    logger.info(
        "Documents du répétiteur %s %s par %s",
        tutor_id, "validés" if validated else "invalidés", actor.id,
    )
    return _to_response(profile, db.get(Account, tutor_id))


def _to_response(profile: TutorProfile, account: Optional[Account] = None) -> TutorProfileResponse:
    """Construit la réponse avec l'indicateur « complet » recalculé."""
    return TutorProfileResponse(
        account_id=profile.account_id,
        full_name=account.full_name if account else None,
        phone=account.phone if account else None,
        is_active=account.is_active if account else None,
        bio=profile.bio,
        subjects=list(profile.subjects or []),
        levels=list(profile.levels or []),
        availability=list(profile.availability or []),
        location=profile.location,
        hourly_rate=profile.hourly_rate,
        years_experience=profile.years_experience,
        documents_validated=bool(profile.documents_validated),
        documents_validated_at=profile.documents_validated_at,
        complete=is_profile_complete(profile),
    )
