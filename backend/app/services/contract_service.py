"""
Service métier pour les contrats.
Un contrat naît uniquement de l'acceptation d'une candidature (voir application_service).
"""

import uuid
import logging
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.errors import NotFound
from app.models.contract import Contract
from app.schemas.contract import ContractResponse
from app.services import lifecycle
from app.services.access_policy import Actor

logger = logging.getLogger(__name__)


def list_contracts(db: Session, actor: Actor) -> list[ContractResponse]:
    """Contrats dont l'acteur est le parent ou le répétiteur."""
    contracts = db.execute(
        select(Contract)
        .where(or_(Contract.parent_id == actor.id, Contract.tutor_id == actor.id))
        .order_by(Contract.created_at.desc())
    ).scalars().all()
    return [ContractResponse.model_validate(c) for c in contracts]


def set_contract_status(db: Session, actor: Actor, contract_id: uuid.UUID, new_status: str) -> ContractResponse:
    """Termine ou annule un contrat actif (parent signataire)."""
    contract = db.get(Contract, contract_id)
    if contract is None:
        raise NotFound("Contrat introuvable.")

    changes = lifecycle.contract_status_changes(actor, contract, new_status, today=date.today())
    if not changes:
        return ContractResponse.model_validate(contract)

    for field, value in changes.items():
        setattr(contract, field, value)
    db.commit()
    db.refresh(contract)

    logger.info("Contrat %s : %s (par %s)", contract_id, contract.status, actor.id)
    return ContractResponse.model_validate(contract)
