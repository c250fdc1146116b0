"""
Service métier pour les candidatures : dépôt par un répétiteur, décision du parent.

Unicité (offre, répétiteur) :
- contrôle préalable pour un message clair
- contrainte uq_applications_offer_tutor en base : en cas de course entre deux
  requêtes simultanées, la seconde reçoit Conflict (IntegrityError au commit)

Décision : UPDATE conditionnel sur status = 'pending' ; si une autre requête a
déjà tranché, aucune ligne n'est modifiée et InvalidState est levée.
"""

import uuid
import logging
from dataclasses import asdict
from datetime import date, datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import Conflict, InvalidState, NotFound
from app.models.account import Account
from app.models.application import Application
from app.models.contract import Contract
from app.models.offer import Offer
from app.schemas.application import (
    ApplicationCreate,
    ApplicationDecision,
    ApplicationResponse,
    DecisionResult,
    ReceivedApplication,
    TutorApplication,
)
from app.schemas.contract import ContractResponse
from app.services import access_policy, lifecycle
from app.services.access_policy import Actor
from app.services.offer_service import get_visible_offer

logger = logging.getLogger(__name__)


def submit_application(
    db: Session, actor: Actor, offer_id: uuid.UUID, data: ApplicationCreate
) -> ApplicationResponse:
    """
    Dépose la candidature du répétiteur acteur sur une offre ouverte.
    Voir lifecycle.check_submit_application pour l'ordre des contrôles.
    """
    offer = db.get(Offer, offer_id)
    if offer is None:
        raise NotFound("Offre introuvable.")

    already_applied = db.execute(
        select(Application.id)
        .where(
            Application.offer_id == offer_id,
            Application.tutor_id == actor.id,
        )
    ).scalar() is not None

    lifecycle.check_submit_application(actor, offer, data.message, already_applied)

    application = Application(
        offer_id=offer_id,
        tutor_id=actor.id,
        message=data.message.strip(),
        status=lifecycle.APPLICATION_PENDING,
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Vous avez déjà postulé à cette offre.")
    db.refresh(application)

    logger.info("Candidature %s déposée par %s sur l'offre %s", application.id, actor.id, offer_id)
    return ApplicationResponse.model_validate(application)


def decide_application(
    db: Session, actor: Actor, application_id: uuid.UUID, data: ApplicationDecision
) -> DecisionResult:
    """
    Accepte ou refuse une candidature (parent propriétaire de l'offre).
    L'acceptation crée exactement un contrat actif ; le refus n'en crée aucun.
    Les autres candidatures de l'offre restent inchangées.
    """
    application = db.get(Application, application_id)
    if application is None:
        raise NotFound("Candidature introuvable.")
    offer = db.get(Offer, application.offer_id)
    if offer is None:
        raise NotFound("Offre introuvable.")

    outcome = lifecycle.decide_application(
        actor, offer, application, data.decision, today=date.today(), agreed_rate=data.agreed_rate
    )

    result = db.execute(
        update(Application)
        .where(
            Application.id == application_id,
            Application.status == lifecycle.APPLICATION_PENDING,
        )
        .values(status=outcome.application_status, decided_at=datetime.now(timezone.utc))
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidState("Cette candidature a déjà été traitée.")

    contract = None
    if outcome.contract is not None:
        contract = Contract(**asdict(outcome.contract))
        db.add(contract)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Un contrat existe déjà pour cette candidature.")
    db.refresh(application)

    contract_response = None
    if contract is not None:
        db.refresh(contract)
        contract_response = ContractResponse.model_validate(contract)
        logger.info(
            "Candidature %s acceptée : contrat %s (parent %s, répétiteur %s)",
            application_id, contract.id, contract.parent_id, contract.tutor_id,
        )
    else:
        logger.info("Candidature %s refusée par %s", application_id, actor.id)

    return DecisionResult(
        application=ApplicationResponse.model_validate(application),
        contract=contract_response,
    )


def list_offer_applications(db: Session, actor: Actor, offer_id: uuid.UUID) -> list[ReceivedApplication]:
    """
    Candidatures reçues sur une offre, avec l'identité du répétiteur.
    Réservé au parent propriétaire et aux admins.
    """
    offer = get_visible_offer(db, actor, offer_id)
    access_policy.require(actor, access_policy.LIST_OFFER_APPLICATIONS, owner_id=offer.parent_id)

    rows = db.execute(
        select(Application, Account)
        .join(Account, Account.id == Application.tutor_id)
        .where(Application.offer_id == offer_id)
        .order_by(Application.created_at.desc())
    ).all()

    return [
        ReceivedApplication(
            **ApplicationResponse.model_validate(application).model_dump(),
            tutor_full_name=tutor.full_name,
            tutor_phone=tutor.phone,
            tutor_avatar_url=tutor.avatar_url,
        )
        for application, tutor in rows
    ]


def list_tutor_applications(db: Session, actor: Actor) -> list[TutorApplication]:
    """Candidatures du répétiteur acteur, avec le résumé de chaque offre."""
    rows = db.execute(
        select(Application, Offer)
        .join(Offer, Offer.id == Application.offer_id)
        .where(Application.tutor_id == actor.id)
        .order_by(Application.created_at.desc())
    ).all()

    return [
        TutorApplication(
            **ApplicationResponse.model_validate(application).model_dump(),
            offer_subject=offer.subject,
            offer_level=offer.level,
            offer_status=offer.status,
        )
        for application, offer in rows
    ]
