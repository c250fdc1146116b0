"""
Service métier pour les offres.
Gère la publication, la lecture, le changement de statut et la suppression
en cascade (modération admin).
"""

import uuid
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import BackendUnavailable, NotFound
from app.models.application import Application
from app.models.contract import Contract
from app.models.offer import Offer
from app.schemas.offer import OfferCreate, OfferDeletionReport, OfferResponse
from app.services import access_policy, lifecycle
from app.services.access_policy import PARENT, Actor
from app.services.stats_service import count_applications_for_offer

logger = logging.getLogger(__name__)


def create_offer(db: Session, actor: Actor, data: OfferCreate) -> OfferResponse:
    """Publie une offre au nom du parent acteur. Elle démarre toujours au statut open."""
    lifecycle.check_create_offer(actor, data)

    offer = Offer(
        parent_id=actor.id,
        subject=data.subject,
        level=data.level,
        description=data.description,
        address=data.address,
        frequency=data.frequency,
        budget_min=data.budget_min,
        budget_max=data.budget_max,
        status=lifecycle.OFFER_OPEN,
    )
    db.add(offer)
    db.commit()
    db.refresh(offer)

    logger.info("Offre créée : %s (%s - %s) par %s", offer.id, offer.subject, offer.level, actor.id)
    return _to_response(db, offer)


def list_open_offers(db: Session, actor: Actor) -> list[OfferResponse]:
    """Offres ouvertes, consultables par les répétiteurs, de la plus récente à la plus ancienne."""
    access_policy.require(actor, access_policy.VIEW_OPEN_OFFERS)
    offers = db.execute(
        select(Offer)
        .where(Offer.status == lifecycle.OFFER_OPEN)
        .order_by(Offer.created_at.desc())
    ).scalars().all()
    return [_to_response(db, o) for o in offers]


def list_parent_offers(db: Session, actor: Actor) -> list[OfferResponse]:
    """Offres publiées par le parent acteur."""
    offers = db.execute(
        select(Offer)
        .where(Offer.parent_id == actor.id)
        .order_by(Offer.created_at.desc())
    ).scalars().all()
    return [_to_response(db, o) for o in offers]


def list_all_offers(db: Session, actor: Actor) -> list[OfferResponse]:
    """Toutes les offres, quel que soit leur statut (modération admin)."""
    access_policy.require(actor, access_policy.VIEW_ALL_OFFERS)
    offers = db.execute(select(Offer).order_by(Offer.created_at.desc())).scalars().all()
    return [_to_response(db, o) for o in offers]


def get_offer(db: Session, actor: Actor, offer_id: uuid.UUID) -> OfferResponse:
    """
    Détail d'une offre.
    Un parent ne voit que ses propres offres ; répétiteurs et admins voient toutes les offres.
    """
    offer = get_visible_offer(db, actor, offer_id)
    return _to_response(db, offer)


def get_visible_offer(db: Session, actor: Actor, offer_id: uuid.UUID) -> Offer:
    """Charge une offre visible par l'acteur, ou lève NotFound."""
    offer = db.get(Offer, offer_id)
    if offer is None or not _is_visible(actor, offer):
        raise NotFound("Offre introuvable.")
    return offer


def set_offer_status(db: Session, actor: Actor, offer_id: uuid.UUID, new_status: str) -> OfferResponse:
    """
    Change manuellement le statut d'une offre (parent propriétaire ou admin).
    N'affecte ni les candidatures ni les contrats existants.
    """
    offer = db.get(Offer, offer_id)
    if offer is None:
        raise NotFound("Offre introuvable.")

    old_status = offer.status
    changes = lifecycle.offer_status_changes(actor, offer, new_status)
    if not changes:
        return _to_response(db, offer)

    for field, value in changes.items():
        setattr(offer, field, value)
    db.commit()
    db.refresh(offer)

    logger.info("Offre %s : %s → %s (par %s)", offer_id, old_status, offer.status, actor.id)
    return _to_response(db, offer)


def delete_offer(db: Session, actor: Actor, offer_id: uuid.UUID) -> OfferDeletionReport:
    """
    Supprime définitivement une offre et, en cascade, ses contrats puis ses candidatures.

    Les trois suppressions sont faites dans une seule transaction : en cas d'échec,
    tout est annulé et BackendUnavailable indique les étapes exécutées avant l'erreur.
    """
    lifecycle.check_delete_offer(actor)
    offer = db.get(Offer, offer_id)
    if offer is None:
        raise NotFound("Offre introuvable.")

    steps_done: list[str] = []
    try:
        contracts_deleted = db.execute(
            delete(Contract).where(Contract.offer_id == offer_id)
        ).rowcount
        steps_done.append("contracts")

        applications_deleted = db.execute(
            delete(Application).where(Application.offer_id == offer_id)
        ).rowcount
        steps_done.append("applications")

        db.execute(delete(Offer).where(Offer.id == offer_id))
        steps_done.append("offer")

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "Suppression de l'offre %s annulée après les étapes %s : %s", offer_id, steps_done, exc
        )
        raise BackendUnavailable(
            "La suppression de l'offre a échoué. Aucune donnée n'a été supprimée, réessayez plus tard.",
            details={"offer_id": str(offer_id), "steps_before_failure": steps_done, "applied": []},
        )

    logger.info(
        "Offre %s supprimée par %s : %d contrat(s), %d candidature(s)",
        offer_id, actor.id, contracts_deleted, applications_deleted,
    )
    return OfferDeletionReport(
        offer_id=offer_id,
        contracts_deleted=contracts_deleted,
        applications_deleted=applications_deleted,
    )


def _is_visible(actor: Actor, offer: Offer) -> bool:
    if offer.parent_id == actor.id or actor.is_admin:
        return True
    # Un parent (non répétiteur) ne consulte que ses propres offres
    return not (actor.has_role(PARENT) and not actor.has_role(access_policy.TUTOR))


def _to_response(db: Session, offer: Offer) -> OfferResponse:
    """Construit le schéma de réponse avec le nombre de candidatures reçues."""
    return OfferResponse(
        id=offer.id,
        parent_id=offer.parent_id,
        subject=offer.subject,
        level=offer.level,
        description=offer.description,
        address=offer.address,
        frequency=offer.frequency,
        budget_min=offer.budget_min,
        budget_max=offer.budget_max,
        status=offer.status,
        applications_count=count_applications_for_offer(db, offer.id),
        created_at=offer.created_at,
        updated_at=offer.updated_at,
    )
