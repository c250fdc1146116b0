"""
Moteur de cycle de vie des offres, candidatures et contrats.

Fonctions pures : aucune requête BDD. Chaque fonction reçoit l'acteur et l'état
courant des entités, lève une erreur métier si l'action est illégale, et sinon
retourne les changements à persister. Les services (offer_service,
application_service, contract_service) se chargent du chargement et de l'écriture.

Ordre des contrôles : permission → validation → état → unicité.
Aucune erreur n'est levée après qu'un changement a été calculé.
"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from app.errors import Conflict, InvalidState, PermissionDenied, ValidationError
from app.services import access_policy
from app.services.access_policy import Actor

# Statuts des offres
OFFER_OPEN = "open"
OFFER_IN_PROGRESS = "in_progress"
OFFER_CLOSED = "closed"
OFFER_STATUSES = {OFFER_OPEN, OFFER_IN_PROGRESS, OFFER_CLOSED}

# Réouverture manuelle permise ; closed → in_progress doit repasser par open
OFFER_TRANSITIONS = {
    OFFER_OPEN: {OFFER_IN_PROGRESS, OFFER_CLOSED},
    OFFER_IN_PROGRESS: {OFFER_CLOSED, OFFER_OPEN},
    OFFER_CLOSED: {OFFER_OPEN},
}

# Statuts des candidatures
APPLICATION_PENDING = "pending"
APPLICATION_ACCEPTED = "accepted"
APPLICATION_REJECTED = "rejected"
APPLICATION_STATUSES = {APPLICATION_PENDING, APPLICATION_ACCEPTED, APPLICATION_REJECTED}

ACCEPT = "accept"
REJECT = "reject"
DECISIONS = {ACCEPT: APPLICATION_ACCEPTED, REJECT: APPLICATION_REJECTED}

MIN_APPLICATION_MESSAGE_LENGTH = 20

# Statuts des contrats
CONTRACT_ACTIVE = "active"
CONTRACT_COMPLETED = "completed"
CONTRACT_CANCELLED = "cancelled"
CONTRACT_STATUSES = {CONTRACT_ACTIVE, CONTRACT_COMPLETED, CONTRACT_CANCELLED}

OFFER_REQUIRED_FIELDS = ("subject", "level", "description", "address", "frequency")


@dataclass(frozen=True)
class ContractDraft:
    """Contrat à créer suite à l'acceptation d'une candidature."""
    offer_id: uuid.UUID
    application_id: uuid.UUID
    parent_id: uuid.UUID
    tutor_id: uuid.UUID
    subject: str
    level: str
    frequency: str
    address: str
    start_date: date
    agreed_rate: Optional[int] = None
    status: str = CONTRACT_ACTIVE


@dataclass(frozen=True)
class DecisionOutcome:
    application_status: str
    contract: Optional[ContractDraft] = None


# ----------------------------------------------------------------
# Offres
# ----------------------------------------------------------------

def check_create_offer(actor: Actor, data: Any) -> None:
    """
    Vérifie qu'un parent peut publier cette offre.
    Lève PermissionDenied (pas parent) ou ValidationError (champ manquant, budget incohérent).
    """
    access_policy.require(actor, access_policy.CREATE_OFFER, owner_id=actor.id)

    missing = [name for name in OFFER_REQUIRED_FIELDS if not (getattr(data, name, None) or "").strip()]
    if missing:
        raise ValidationError(
            f"Champs obligatoires manquants : {', '.join(missing)}.",
            details={"missing": missing},
        )
    validate_budget(data.budget_min, data.budget_max)


def validate_budget(budget_min: Optional[int], budget_max: Optional[int]) -> None:
    if budget_min is None or budget_max is None:
        raise ValidationError("Le budget minimum et le budget maximum sont obligatoires.")
    if budget_min <= 0 or budget_max <= 0:
        raise ValidationError("Le budget doit être strictement positif.")
    if budget_max < budget_min:
        raise ValidationError("Le budget maximum doit être supérieur ou égal au budget minimum.")


def offer_status_changes(actor: Actor, offer: Any, new_status: str) -> dict:
    """
    Calcule le changement de statut d'une offre (manuel, par son parent ou un admin).
    Retourne {} si le statut est inchangé. Ne touche ni au budget ni aux candidatures.
    """
    access_policy.require(actor, access_policy.CHANGE_OFFER_STATUS, owner_id=offer.parent_id)

    if new_status not in OFFER_STATUSES:
        raise ValidationError(f"Statut d'offre invalide. Valeurs acceptées : {sorted(OFFER_STATUSES)}")
    if new_status == offer.status:
        return {}
    if new_status not in OFFER_TRANSITIONS.get(offer.status, set()):
        raise InvalidState(
            f"Transition impossible : une offre « {offer.status} » ne peut pas passer à « {new_status} »."
        )
    return {"status": new_status}


def check_delete_offer(actor: Actor) -> None:
    """Vérifiée avant tout chargement : un non-admin ne distingue pas une offre existante d'une offre absente."""
    access_policy.require(actor, access_policy.DELETE_OFFER)


# ----------------------------------------------------------------
# Candidatures
# ----------------------------------------------------------------

def check_submit_application(actor: Actor, offer: Any, message: str, already_applied: bool) -> None:
    """
    Vérifie qu'un répétiteur peut candidater à une offre.

    - PermissionDenied : pas répétiteur, ou documents non validés (quel que soit le statut de l'offre)
    - ValidationError  : message de présentation trop court
    - InvalidState     : offre non ouverte
    - Conflict         : candidature déjà envoyée pour cette offre
    """
    access_policy.require(actor, access_policy.SUBMIT_APPLICATION, owner_id=actor.id)
    if not actor.documents_validated:
        raise PermissionDenied(
            "Vos documents doivent être validés par un administrateur avant de pouvoir candidater."
        )

    if len((message or "").strip()) < MIN_APPLICATION_MESSAGE_LENGTH:
        raise ValidationError(
            f"Le message doit contenir au moins {MIN_APPLICATION_MESSAGE_LENGTH} caractères."
        )

    if offer.status != OFFER_OPEN:
        raise InvalidState("Cette offre n'accepte plus de candidatures.")

    if already_applied:
        raise Conflict("Vous avez déjà postulé à cette offre.")


def decide_application(
    actor: Actor,
    offer: Any,
    application: Any,
    decision: str,
    today: date,
    agreed_rate: Optional[int] = None,
) -> DecisionOutcome:
    """
    Accepte ou refuse une candidature en attente.

    Acceptation → un contrat actif démarrant `today` reprenant les conditions de l'offre.
    Les autres candidatures de l'offre et le statut de l'offre ne sont pas modifiés :
    une offre peut rester ouverte pour plusieurs répétiteurs en parallèle.
    """
    access_policy.require(actor, access_policy.DECIDE_APPLICATION, owner_id=offer.parent_id)

    if decision not in DECISIONS:
        raise ValidationError(f"Décision invalide. Valeurs acceptées : {sorted(DECISIONS)}")
    if agreed_rate is not None and agreed_rate <= 0:
        raise ValidationError("Le tarif convenu doit être strictement positif.")

    if application.status != APPLICATION_PENDING:
        raise InvalidState("Cette candidature a déjà été traitée.")

    new_status = DECISIONS[decision]
    if decision == REJECT:
        return DecisionOutcome(application_status=new_status)

    contract = ContractDraft(
        offer_id=offer.id,
        application_id=application.id,
        parent_id=offer.parent_id,
        tutor_id=application.tutor_id,
        subject=offer.subject,
        level=offer.level,
        frequency=offer.frequency,
        address=offer.address,
        agreed_rate=agreed_rate,
        start_date=today,
    )
    return DecisionOutcome(application_status=new_status, contract=contract)


# ----------------------------------------------------------------
# Contrats
# ----------------------------------------------------------------

def contract_status_changes(actor: Actor, contract: Any, new_status: str, today: date) -> dict:
    """
    Calcule le changement de statut d'un contrat (parent signataire uniquement).
    active → active est un no-op ; terminé ou annulé renseigne la date de fin.
    """
    access_policy.require(actor, access_policy.CHANGE_CONTRACT_STATUS, owner_id=contract.parent_id)

    if new_status not in CONTRACT_STATUSES:
        raise ValidationError(f"Statut de contrat invalide. Valeurs acceptées : {sorted(CONTRACT_STATUSES)}")
    if contract.status != CONTRACT_ACTIVE:
        raise InvalidState("Seul un contrat actif peut changer de statut.")
    if new_status == CONTRACT_ACTIVE:
        return {}
    return {"status": new_status, "end_date": today}
