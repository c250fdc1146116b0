"""
Requêtes d'agrégation (tableaux de bord et compteurs).

Tous les compteurs sont recalculés depuis les tables à chaque appel
(COUNT ... GROUP BY) : aucun compteur stocké, aucun cache. Une lecture qui suit
une écriture reflète donc toujours le nouvel état.
"""

import uuid
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.account import Account, AccountRole
from app.models.application import Application
from app.models.contract import Contract
from app.models.offer import Offer
from app.models.tutor_profile import TutorProfile
from app.schemas.stats import AdminStats, ApplicationCounts, ParentStats, TutorStats
from app.services import access_policy
from app.services.access_policy import ADMIN, PARENT, SUPER_ADMIN, TUTOR, VALID_ROLES, Actor
from app.services.account_service import list_recent_accounts
from app.services.lifecycle import (
    APPLICATION_ACCEPTED,
    APPLICATION_PENDING,
    APPLICATION_REJECTED,
    CONTRACT_ACTIVE,
    OFFER_OPEN,
    OFFER_STATUSES,
)
from app.services.profile_service import is_profile_complete


def tally(counts: dict, keys: Iterable[str]) -> dict[str, int]:
    """Complète un résultat GROUP BY avec des zéros pour les clés absentes."""
    return {key: int(counts.get(key, 0)) for key in sorted(keys)}


def count_applications_for_offer(db: Session, offer_id: uuid.UUID) -> int:
    return db.execute(
        select(func.count())
        .select_from(Application)
        .where(Application.offer_id == offer_id)
    ).scalar() or 0


def count_open_offers(db: Session) -> int:
    return db.execute(
        select(func.count())
        .select_from(Offer)
        .where(Offer.status == OFFER_OPEN)
    ).scalar() or 0


def offers_by_status(db: Session, parent_id: Optional[uuid.UUID] = None) -> dict[str, int]:
    """Nombre d'offres par statut, toutes offres ou celles d'un parent."""
    query = select(Offer.status, func.count()).group_by(Offer.status)
    if parent_id is not None:
        query = query.where(Offer.parent_id == parent_id)
    return tally(dict(db.execute(query).all()), OFFER_STATUSES)


def application_counts(db: Session) -> ApplicationCounts:
    rows = db.execute(
        select(Application.status, func.count()).group_by(Application.status)
    ).all()
    return _to_counts(rows)


def application_counts_for_tutor(db: Session, tutor_id: uuid.UUID) -> ApplicationCounts:
    rows = db.execute(
        select(Application.status, func.count())
        .where(Application.tutor_id == tutor_id)
        .group_by(Application.status)
    ).all()
    return _to_counts(rows)


def application_counts_for_parent(db: Session, parent_id: uuid.UUID) -> ApplicationCounts:
    """Candidatures reçues sur l'ensemble des offres d'un parent."""
    rows = db.execute(
        select(Application.status, func.count())
        .join(Offer, Offer.id == Application.offer_id)
        .where(Offer.parent_id == parent_id)
        .group_by(Application.status)
    ).all()
    return _to_counts(rows)


def role_counts(db: Session) -> dict[str, int]:
    rows = db.execute(
        select(AccountRole.role, func.count()).group_by(AccountRole.role)
    ).all()
    return tally(dict(rows), VALID_ROLES)


def count_active_contracts(
    db: Session,
    parent_id: Optional[uuid.UUID] = None,
    tutor_id: Optional[uuid.UUID] = None,
) -> int:
    query = select(func.count()).select_from(Contract).where(Contract.status == CONTRACT_ACTIVE)
    if parent_id is not None:
        query = query.where(Contract.parent_id == parent_id)
    if tutor_id is not None:
        query = query.where(Contract.tutor_id == tutor_id)
    return db.execute(query).scalar() or 0


def admin_dashboard(db: Session, actor: Actor) -> AdminStats:
    """Statistiques globales de la plateforme (admin)."""
    access_policy.require(actor, access_policy.VIEW_ADMIN_STATS)

    total_accounts = db.execute(select(func.count()).select_from(Account)).scalar() or 0
    roles = role_counts(db)
    offers = offers_by_status(db)
    applications = application_counts(db)

    return AdminStats(
        total_accounts=total_accounts,
        tutors=roles[TUTOR],
        parents=roles[PARENT],
        admins=roles[ADMIN] + roles[SUPER_ADMIN],
        total_offers=sum(offers.values()),
        open_offers=offers[OFFER_OPEN],
        offers_by_status=offers,
        total_applications=applications.total,
        pending_applications=applications.pending,
        recent_accounts=list_recent_accounts(db),
    )


def parent_dashboard(db: Session, actor: Actor) -> ParentStats:
    access_policy.require(actor, access_policy.VIEW_PARENT_STATS, owner_id=actor.id)

    offers = offers_by_status(db, parent_id=actor.id)
    return ParentStats(
        total_offers=sum(offers.values()),
        open_offers=offers[OFFER_OPEN],
        applications=application_counts_for_parent(db, actor.id),
        active_contracts=count_active_contracts(db, parent_id=actor.id),
    )


def tutor_dashboard(db: Session, actor: Actor) -> TutorStats:
    access_policy.require(actor, access_policy.VIEW_TUTOR_STATS, owner_id=actor.id)

    profile = db.get(TutorProfile, actor.id)
    return TutorStats(
        open_offers=count_open_offers(db),
        applications=application_counts_for_tutor(db, actor.id),
        active_contracts=count_active_contracts(db, tutor_id=actor.id),
        profile_complete=is_profile_complete(profile),
        documents_validated=bool(profile is not None and profile.documents_validated),
    )


def _to_counts(rows) -> ApplicationCounts:
    counts = tally(dict(rows), (APPLICATION_PENDING, APPLICATION_ACCEPTED, APPLICATION_REJECTED))
    return ApplicationCounts(
        pending=counts[APPLICATION_PENDING],
        accepted=counts[APPLICATION_ACCEPTED],
        rejected=counts[APPLICATION_REJECTED],
        total=sum(counts.values()),
    )
