"""
Router pour les contrats parent ↔ répétiteur.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor
from app.schemas.contract import ContractResponse, ContractStatusUpdate
from app.services import contract_service
from app.services.access_policy import Actor

router = APIRouter(prefix="/api/v1/contracts", tags=["Contrats"])


@router.get("/mine", response_model=List[ContractResponse], summary="Mes contrats")
def list_my_contracts(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Contrats où l'utilisateur connecté est le parent ou le répétiteur."""
    return contract_service.list_contracts(db, actor)


@router.patch("/{contract_id}/status", response_model=ContractResponse, summary="Terminer ou annuler un contrat")
def set_contract_status(
    contract_id: uuid.UUID,
    data: ContractStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return contract_service.set_contract_status(db, actor, contract_id, data.status)
