"""
Tests unitaires pour les agrégations des tableaux de bord (BDD mockée).
Chaque appel à db.execute() reçoit un résultat préparé, dans l'ordre des requêtes.
"""

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.errors import PermissionDenied
from app.services.access_policy import ADMIN, PARENT, TUTOR, Actor
from app.services.stats_service import admin_dashboard, parent_dashboard, tally, tutor_dashboard


def make_actor(*roles) -> Actor:
    return Actor(id=uuid.uuid4(), roles=frozenset(roles))


def scalar_result(value):
    result = MagicMock()
    result.scalar.return_value = value
    return result


def rows_result(rows):
    result = MagicMock()
    result.all.return_value = rows
    result.scalars.return_value.all.return_value = rows
    return result


def test_tally_complete_les_cles_absentes():
    assert tally({"open": 2}, {"open", "closed", "in_progress"}) == {"closed": 0, "in_progress": 0, "open": 2}


def test_admin_dashboard():
    db = MagicMock()
    db.execute.side_effect = [
        scalar_result(10),                                           # comptes
        rows_result([("tutor", 4), ("parent", 5), ("admin", 1)]),    # rôles
        rows_result([("open", 3), ("closed", 1)]),                   # offres par statut
        rows_result([("pending", 2), ("accepted", 1)]),              # candidatures
        rows_result([]),                                             # derniers inscrits
    ]

    stats = admin_dashboard(db, make_actor(ADMIN))

    assert stats.total_accounts == 10
    assert stats.tutors == 4
    assert stats.parents == 5
    assert stats.admins == 1
    assert stats.total_offers == 4
    assert stats.open_offers == 3
    assert stats.offers_by_status == {"closed": 1, "in_progress": 0, "open": 3}
    assert stats.total_applications == 3
    assert stats.pending_applications == 2
    assert stats.recent_accounts == []


def test_admin_dashboard_reserve_admin():
    db = MagicMock()
    with pytest.raises(PermissionDenied):
        admin_dashboard(db, make_actor(PARENT))
    db.execute.assert_not_called()


def test_parent_dashboard():
    db = MagicMock()
    db.execute.side_effect = [
        rows_result([("open", 2), ("in_progress", 1)]),
        rows_result([("pending", 4), ("rejected", 1)]),
        scalar_result(1),
    ]

    stats = parent_dashboard(db, make_actor(PARENT))

    assert stats.total_offers == 3
    assert stats.open_offers == 2
    assert stats.applications.pending == 4
    assert stats.applications.accepted == 0
    assert stats.applications.total == 5
    assert stats.active_contracts == 1


def test_parent_dashboard_sans_donnees():
    db = MagicMock()
    db.execute.side_effect = [rows_result([]), rows_result([]), scalar_result(None)]

    stats = parent_dashboard(db, make_actor(PARENT))

    assert stats.total_offers == 0
    assert stats.applications.total == 0
    assert stats.active_contracts == 0


def test_parent_dashboard_reserve_parent():
    db = MagicMock()
    with pytest.raises(PermissionDenied):
        parent_dashboard(db, make_actor(TUTOR))
    db.execute.assert_not_called()


def test_tutor_dashboard():
    profile = SimpleNamespace(
        bio="x" * 60, subjects=["Chimie"], levels=["2nde"], availability=["Jeudi"],
        location="Adjamé", documents_validated=True,
    )
    db = MagicMock()
    db.get.return_value = profile
    db.execute.side_effect = [
        scalar_result(7),
        rows_result([("accepted", 1), ("pending", 2)]),
        scalar_result(1),
    ]

    stats = tutor_dashboard(db, make_actor(TUTOR))

    assert stats.open_offers == 7
    assert stats.applications.accepted == 1
    assert stats.active_contracts == 1
    assert stats.profile_complete is True
    assert stats.documents_validated is True


def test_tutor_dashboard_reserve_repetiteur():
    with pytest.raises(PermissionDenied):
        tutor_dashboard(MagicMock(), make_actor(PARENT))
