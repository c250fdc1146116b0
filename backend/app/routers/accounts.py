"""
Router pour les comptes : inscription, compte courant, administration.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor, get_identity
from app.schemas.account import (
    AccountActiveUpdate,
    AccountRegister,
    AccountResponse,
    AccountRoleUpdate,
    AccountUpdate,
)
from app.services import account_service
from app.services.access_policy import Actor

router = APIRouter(prefix="/api/v1/accounts", tags=["Comptes"])


@router.post("/register", response_model=AccountResponse, status_code=201, summary="Terminer l'inscription")
def register(
    data: AccountRegister,
    identity: uuid.UUID = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """
    Crée le compte associé à l'identité du jeton, avec le rôle tutor ou parent.
    Un répétiteur reçoit un profil vide à compléter.
    """
    return account_service.register_account(db, identity, data)


@router.get("/me", response_model=AccountResponse, summary="Mon compte")
def get_me(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return account_service.get_account(db, actor.id)


@router.patch("/me", response_model=AccountResponse, summary="Modifier mon compte")
def update_me(
    data: AccountUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Seuls le nom et le téléphone sont modifiables. Le téléphone est normalisé en +225."""
    return account_service.update_own_account(db, actor, data)


@router.get("", response_model=List[AccountResponse], summary="Lister les comptes (admin)")
def list_accounts(
    role: Optional[str] = Query(None, description="Filtrer par rôle"),
    search: Optional[str] = Query(None, description="Recherche sur le nom ou le téléphone"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return account_service.list_accounts(db, actor, role=role, search=search)


@router.patch("/{account_id}/active", response_model=AccountResponse, summary="Activer / désactiver un compte")
def set_active(
    account_id: uuid.UUID,
    data: AccountActiveUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Désactivation logique : le compte est conservé mais ne peut plus agir."""
    return account_service.set_account_active(db, actor, account_id, data.is_active)


@router.put("/{account_id}/role", response_model=AccountResponse, summary="Changer le rôle d'un compte")
def change_role(
    account_id: uuid.UUID,
    data: AccountRoleUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Réservé au super administrateur. Le rôle d'un super administrateur est immuable."""
    return account_service.change_account_role(db, actor, account_id, data.role)
