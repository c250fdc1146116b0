"""
Router pour les candidatures : suivi côté répétiteur et décision du parent.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor
from app.schemas.application import ApplicationDecision, DecisionResult, TutorApplication
from app.services import application_service
from app.services.access_policy import Actor

router = APIRouter(prefix="/api/v1/applications", tags=["Candidatures"])


@router.get("/mine", response_model=List[TutorApplication], summary="Mes candidatures (répétiteur)")
def list_my_applications(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return application_service.list_tutor_applications(db, actor)


@router.post("/{application_id}/decision", response_model=DecisionResult, summary="Accepter ou refuser")
def decide(
    application_id: uuid.UUID,
    data: ApplicationDecision,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """
    Décision du parent propriétaire de l'offre.
    accept → la candidature passe à accepted et un contrat actif est créé.
    reject → la candidature passe à rejected, aucun contrat.
    """
    return application_service.decide_application(db, actor, application_id, data)
