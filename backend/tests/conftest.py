"""
Configuration partagée pour tous les tests.
Override la dépendance get_db pour éviter toute connexion réelle à PostgreSQL,
et get_current_actor pour simuler un utilisateur connecté sans jeton.
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from app.database import get_db
from app.dependencies import get_current_actor
from app.main import app
from app.services.access_policy import Actor


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def client(mock_db):
    """Client HTTP de test avec la BDD mockée."""
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login():
    """
    Connecte un acteur pour les tests API.
    Usage : actor = login("parent") ou login("tutor", documents_validated=True)
    """
    def _login(*roles, documents_validated=False, actor_id=None) -> Actor:
        actor = Actor(
            id=actor_id or uuid.uuid4(),
            roles=frozenset(roles),
            documents_validated=documents_validated,
        )
        app.dependency_overrides[get_current_actor] = lambda: actor
        return actor

    yield _login
    app.dependency_overrides.pop(get_current_actor, None)
