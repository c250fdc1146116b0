"""
Router pour les profils répétiteurs : libre-service et validation des documents.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor
from app.schemas.profile import DocumentsValidationUpdate, TutorProfileResponse, TutorProfileUpdate
from app.services import profile_service
from app.services.access_policy import Actor

router = APIRouter(prefix="/api/v1/tutors", tags=["Répétiteurs"])


@router.get("/me/profile", response_model=TutorProfileResponse, summary="Mon profil répétiteur")
def get_my_profile(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return profile_service.get_own_profile(db, actor)


@router.put("/me/profile", response_model=TutorProfileResponse, summary="Modifier mon profil répétiteur")
def update_my_profile(
    data: TutorProfileUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Seuls les champs fournis sont modifiés. L'indicateur « complet » est recalculé."""
    return profile_service.update_own_profile(db, actor, data)


@router.get("", response_model=List[TutorProfileResponse], summary="Lister les répétiteurs (admin)")
def list_tutors(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return profile_service.list_tutors(db, actor)


@router.get("/{tutor_id}/profile", response_model=TutorProfileResponse, summary="Profil d'un répétiteur")
def get_profile(
    tutor_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return profile_service.get_tutor_profile(db, tutor_id)


@router.put(
    "/{tutor_id}/documents-validation",
    response_model=TutorProfileResponse,
    summary="Valider ou invalider les documents d'un répétiteur",
)
def set_documents_validation(
    tutor_id: uuid.UUID,
    data: DocumentsValidationUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Un répétiteur ne peut candidater qu'une fois ses documents validés."""
    return profile_service.set_documents_validated(db, actor, tutor_id, data.documents_validated)
