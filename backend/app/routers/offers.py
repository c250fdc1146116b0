"""
Router pour les offres de cours et les candidatures reçues.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor
from app.schemas.application import ApplicationCreate, ApplicationResponse, ReceivedApplication
from app.schemas.offer import OfferCreate, OfferDeletionReport, OfferResponse, OfferStatusUpdate
from app.services import application_service, offer_service
from app.services.access_policy import Actor

router = APIRouter(prefix="/api/v1/offers", tags=["Offres"])


@router.post("", response_model=OfferResponse, status_code=201, summary="Publier une offre")
def create_offer(
    data: OfferCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """
    Publie une offre au nom du parent connecté.
    L'offre est créée au statut open ; le budget maximum doit être ≥ au minimum.
    """
    return offer_service.create_offer(db, actor, data)


@router.get("", response_model=List[OfferResponse], summary="Offres ouvertes")
def list_open_offers(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Offres au statut open, de la plus récente à la plus ancienne (répétiteurs et admins)."""
    return offer_service.list_open_offers(db, actor)


@router.get("/mine", response_model=List[OfferResponse], summary="Mes offres (parent)")
def list_my_offers(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return offer_service.list_parent_offers(db, actor)


@router.get("/all", response_model=List[OfferResponse], summary="Toutes les offres (admin)")
def list_all_offers(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return offer_service.list_all_offers(db, actor)


@router.get("/{offer_id}", response_model=OfferResponse, summary="Détail d'une offre")
def get_offer(
    offer_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return offer_service.get_offer(db, actor, offer_id)


@router.patch("/{offer_id}/status", response_model=OfferResponse, summary="Changer le statut d'une offre")
def set_offer_status(
    offer_id: uuid.UUID,
    data: OfferStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Clôture, reprise ou réouverture manuelle. Sans effet sur les candidatures et contrats."""
    return offer_service.set_offer_status(db, actor, offer_id, data.status)


@router.delete("/{offer_id}", response_model=OfferDeletionReport, summary="Supprimer une offre (admin)")
def delete_offer(
    offer_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """
    Suppression définitive en cascade : contrats, puis candidatures, puis l'offre.
    Tout ou rien : en cas d'échec aucune donnée n'est supprimée (503).
    """
    return offer_service.delete_offer(db, actor, offer_id)


@router.get(
    "/{offer_id}/applications",
    response_model=List[ReceivedApplication],
    summary="Candidatures reçues sur une offre",
)
def list_offer_applications(
    offer_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return application_service.list_offer_applications(db, actor, offer_id)


@router.post(
    "/{offer_id}/applications",
    response_model=ApplicationResponse,
    status_code=201,
    summary="Candidater à une offre",
)
def submit_application(
    offer_id: uuid.UUID,
    data: ApplicationCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """
    Réservé aux répétiteurs dont les documents ont été validés.
    Une seule candidature par offre et par répétiteur.
    """
    return application_service.submit_application(db, actor, offer_id, data)
