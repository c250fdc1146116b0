"""
Service métier pour les comptes : inscription, chargement de l'acteur,
administration (activation, changement de rôle).
"""

import uuid
import logging
from collections import defaultdict
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import Conflict, NotFound, PermissionDenied, ValidationError
from app.models.account import Account, AccountRole
from app.models.tutor_profile import TutorProfile
from app.schemas.account import AccountRegister, AccountResponse, AccountUpdate
from app.services import access_policy
from app.services.access_policy import TUTOR, VALID_ROLES, Actor
from app.services.profile_service import new_profile

logger = logging.getLogger(__name__)


def get_roles(db: Session, account_id: uuid.UUID) -> list[str]:
    """Retourne les rôles d'un compte, triés."""
    return list(db.execute(
        select(AccountRole.role)
        .where(AccountRole.account_id == account_id)
        .order_by(AccountRole.role)
    ).scalars().all())


def load_actor(db: Session, account_id: uuid.UUID) -> Actor:
    """
    Construit l'acteur explicite à partir de l'identité authentifiée.
    Lève NotFound si l'inscription n'est pas terminée, PermissionDenied si le compte est désactivé.
    """
    account = db.get(Account, account_id)
    if account is None:
        raise NotFound("Aucun compte n'est associé à cette identité. Terminez votre inscription.")
    if not account.is_active:
        raise PermissionDenied("Votre compte a été désactivé. Contactez un administrateur.")

    roles = frozenset(get_roles(db, account_id))
    documents_validated = False
    if TUTOR in roles:
        profile = db.get(TutorProfile, account_id)
        documents_validated = bool(profile is not None and profile.documents_validated)

    return Actor(id=account.id, roles=roles, documents_validated=documents_validated)


def register_account(db: Session, account_id: uuid.UUID, data: AccountRegister) -> AccountResponse:
    """
    Crée le compte de l'identité authentifiée avec le rôle choisi (tutor ou parent).
    Un répétiteur reçoit un profil vide. Lève Conflict si l'identité ou le téléphone existe déjà.
    """
    if db.get(Account, account_id) is not None:
        raise Conflict("Un compte existe déjà pour cette identité.")

    account = Account(id=account_id, full_name=data.full_name, phone=data.phone, is_active=True)
    db.add(account)
    try:
        db.flush()  # le compte doit exister avant ses rôles et son profil
        db.add(AccountRole(account_id=account_id, role=data.role))
        if data.role == TUTOR:
            db.add(new_profile(account_id))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"Le numéro {data.phone} est déjà utilisé par un autre compte.")
    db.refresh(account)

    logger.info("Compte créé : %s (%s)", account_id, data.role)
    return _to_response(account, [data.role])


def get_account(db: Session, account_id: uuid.UUID) -> AccountResponse:
    account = _get_account(db, account_id)
    return _to_response(account, get_roles(db, account_id))


def update_own_account(db: Session, actor: Actor, data: AccountUpdate) -> AccountResponse:
    """Modifie le nom et/ou le téléphone de l'acteur. Lève Conflict si le numéro est déjà pris."""
    access_policy.require(actor, access_policy.UPDATE_OWN_ACCOUNT, owner_id=actor.id)
    account = _get_account(db, actor.id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(account, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"Le numéro {data.phone} est déjà utilisé par un autre compte.")
    db.refresh(account)

    logger.info("Compte %s mis à jour par son titulaire", actor.id)
    return _to_response(account, get_roles(db, actor.id))


def list_accounts(
    db: Session,
    actor: Actor,
    role: Optional[str] = None,
    search: Optional[str] = None,
) -> list[AccountResponse]:
    """Liste des comptes (admin), filtrable par rôle et par nom/téléphone."""
    access_policy.require(actor, access_policy.LIST_ACCOUNTS)

    query = select(Account).order_by(Account.created_at.desc())
    if role:
        query = query.join(AccountRole, AccountRole.account_id == Account.id).where(AccountRole.role == role)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Account.full_name.ilike(pattern), Account.phone.like(pattern)))

    accounts = db.execute(query).scalars().all()
    roles_map = _roles_by_account(db, [a.id for a in accounts])
    return [_to_response(a, roles_map.get(a.id, [])) for a in accounts]


def list_recent_accounts(db: Session, limit: int = 5) -> list[AccountResponse]:
    """Derniers comptes inscrits (tableau de bord admin)."""
    accounts = db.execute(
        select(Account).order_by(Account.created_at.desc()).limit(limit)
    ).scalars().all()
    roles_map = _roles_by_account(db, [a.id for a in accounts])
    return [_to_response(a, roles_map.get(a.id, [])) for a in accounts]


def set_account_active(db: Session, actor: Actor, account_id: uuid.UUID, is_active: bool) -> AccountResponse:
    """
    Active ou désactive un compte (désactivation logique, jamais de suppression).
    Un admin ne peut pas agir sur un super_admin.
    """
    account = _get_account(db, account_id)
    roles = get_roles(db, account_id)
    access_policy.require_account_action(actor, access_policy.TOGGLE_ACCOUNT_ACTIVE, roles)

    account.is_active = is_active
    db.commit()
    db.refresh(account)

    logger.info("Compte %s %s par %s", account_id, "activé" if is_active else "désactivé", actor.id)
    return _to_response(account, roles)


def change_account_role(db: Session, actor: Actor, account_id: uuid.UUID, new_role: str) -> AccountResponse:
    """
    Remplace le rôle d'un compte (super_admin uniquement).
    Passer un compte en tutor lui crée un profil répétiteur vide s'il n'en a pas.
    """
    account = _get_account(db, account_id)
    roles = get_roles(db, account_id)
    access_policy.require_account_action(actor, access_policy.CHANGE_ACCOUNT_ROLE, roles)
    if new_role not in VALID_ROLES:
        raise ValidationError(f"Rôle invalide. Valeurs acceptées : {sorted(VALID_ROLES)}")

    db.execute(delete(AccountRole).where(AccountRole.account_id == account_id))
    db.add(AccountRole(account_id=account_id, role=new_role))
    if new_role == TUTOR and db.get(TutorProfile, account_id) is None:
        db.add(new_profile(account_id))
    db.commit()
    db.refresh(account)

    logger.info("Rôle du compte %s : %s → %s (par %s)", account_id, roles, new_role, actor.id)
    return _to_response(account, [new_role])


def _get_account(db: Session, account_id: uuid.UUID) -> Account:
    account = db.get(Account, account_id)
    if account is None:
        raise NotFound("Compte introuvable.")
    return account


def _roles_by_account(db: Session, account_ids: list[uuid.UUID]) -> dict[uuid.UUID, list[str]]:
    """Récupère en une requête les rôles d'un ensemble de comptes."""
    if not account_ids:
        return {}
    rows = db.execute(
        select(AccountRole.account_id, AccountRole.role)
        .where(AccountRole.account_id.in_(account_ids))
        .order_by(AccountRole.role)
    ).all()
    roles_map: dict[uuid.UUID, list[str]] = defaultdict(list)
    for account_id, role in rows:
        roles_map[account_id].append(role)
    return roles_map


def _to_response(account: Account, roles: list[str]) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        full_name=account.full_name,
        phone=account.phone,
        avatar_url=account.avatar_url,
        is_active=bool(account.is_active),
        roles=list(roles),
        created_at=account.created_at,
    )
