"""
Tests d'intégration API pour les offres.
Testent les URLs, les codes HTTP, la conversion des erreurs métier et le format des réponses.
"""

import uuid
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.errors import BackendUnavailable, NotFound, PermissionDenied
from app.schemas.offer import OfferDeletionReport, OfferResponse


# --- Helpers ---

def make_offer_response(**kwargs) -> OfferResponse:
    return OfferResponse(
        id=kwargs.get("id", uuid.uuid4()),
        parent_id=kwargs.get("parent_id", uuid.uuid4()),
        subject=kwargs.get("subject", "Mathématiques"),
        level=kwargs.get("level", "3ème"),
        description="Préparation au BEPC",
        address="Cocody",
        frequency="2 fois par semaine",
        budget_min=15000,
        budget_max=25000,
        status=kwargs.get("status", "open"),
        applications_count=kwargs.get("applications_count", 0),
        created_at=datetime.now(),
        updated_at=datetime.now(),
    )


OFFER_PAYLOAD = {
    "subject": "Mathématiques",
    "level": "3ème",
    "description": "Préparation au BEPC",
    "address": "Cocody",
    "frequency": "2 fois par semaine",
    "budget_min": 15000,
    "budget_max": 25000,
}


# ============================================================
# Authentification
# ============================================================

def test_offres_sans_jeton_401(client):
    response = client.get("/api/v1/offers")
    assert response.status_code == 401


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# ============================================================
# POST /api/v1/offers
# ============================================================

def test_create_offer_succes(client, login):
    parent = login("parent")
    with patch("app.routers.offers.offer_service.create_offer") as mock:
        mock.return_value = make_offer_response(parent_id=parent.id)
        response = client.post("/api/v1/offers", json=OFFER_PAYLOAD)

    assert response.status_code == 201
    assert response.json()["status"] == "open"
    assert response.json()["parent_id"] == str(parent.id)
    assert mock.call_args[0][1] == parent


def test_create_offer_budget_incoherent_422(client, login, mock_db):
    login("parent")
    response = client.post("/api/v1/offers", json={**OFFER_PAYLOAD, "budget_min": 30000, "budget_max": 10000})

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
    assert "budget maximum" in response.json()["detail"]
    mock_db.add.assert_not_called()


def test_create_offer_repetiteur_budget_incoherent_403(client, login):
    """La permission est vérifiée avant la validation du contenu."""
    login("tutor")
    response = client.post("/api/v1/offers", json={**OFFER_PAYLOAD, "budget_min": 30000, "budget_max": 10000})
    assert response.status_code == 403
    assert response.json()["code"] == "permission_denied"


def test_create_offer_champ_manquant_422(client, login):
    login("parent")
    payload = {k: v for k, v in OFFER_PAYLOAD.items() if k != "address"}
    response = client.post("/api/v1/offers", json=payload)
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["details"]["errors"][0]["loc"] == ["body", "address"]


def test_create_offer_permission_refusee_403(client, login):
    login("tutor")
    with patch("app.routers.offers.offer_service.create_offer") as mock:
        mock.side_effect = PermissionDenied("Seul un parent peut publier une offre.")
        response = client.post("/api/v1/offers", json=OFFER_PAYLOAD)

    assert response.status_code == 403
    assert response.json()["code"] == "permission_denied"
    assert response.json()["detail"] == "Seul un parent peut publier une offre."


# ============================================================
# GET /api/v1/offers
# ============================================================

def test_list_open_offers(client, login):
    login("tutor")
    with patch("app.routers.offers.offer_service.list_open_offers") as mock:
        mock.return_value = [make_offer_response(), make_offer_response()]
        response = client.get("/api/v1/offers")

    assert response.status_code == 200
    assert len(response.json()) == 2


def test_list_open_offers_parent_refuse_403(client, login, mock_db):
    login("parent")
    response = client.get("/api/v1/offers")

    assert response.status_code == 403
    assert response.json()["code"] == "permission_denied"
    mock_db.execute.assert_not_called()


def test_list_my_offers_route_avant_detail(client, login):
    """/mine ne doit pas être interprété comme un identifiant d'offre."""
    login("parent")
    with patch("app.routers.offers.offer_service.list_parent_offers") as mock:
        mock.return_value = []
        response = client.get("/api/v1/offers/mine")
    assert response.status_code == 200
    assert response.json() == []


def test_get_offer_introuvable_404(client, login):
    login("parent")
    with patch("app.routers.offers.offer_service.get_offer") as mock:
        mock.side_effect = NotFound("Offre introuvable.")
        response = client.get(f"/api/v1/offers/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_get_offer_id_invalide_422(client, login):
    login("parent")
    response = client.get("/api/v1/offers/pas-un-uuid")
    assert response.status_code == 422


# ============================================================
# PATCH /api/v1/offers/{id}/status
# ============================================================

def test_set_offer_status(client, login):
    login("parent")
    with patch("app.routers.offers.offer_service.set_offer_status") as mock:
        mock.return_value = make_offer_response(status="closed")
        response = client.patch(f"/api/v1/offers/{uuid.uuid4()}/status", json={"status": "closed"})

    assert response.status_code == 200
    assert response.json()["status"] == "closed"


def test_set_offer_status_inconnu_422(client, login, mock_db):
    parent = login("parent")
    mock_db.get.return_value = SimpleNamespace(id=uuid.uuid4(), parent_id=parent.id, status="open")
    response = client.patch(f"/api/v1/offers/{uuid.uuid4()}/status", json={"status": "archived"})

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
    mock_db.commit.assert_not_called()


def test_set_offer_status_inconnu_autre_parent_403(client, login, mock_db):
    login("parent")
    mock_db.get.return_value = SimpleNamespace(id=uuid.uuid4(), parent_id=uuid.uuid4(), status="open")
    response = client.patch(f"/api/v1/offers/{uuid.uuid4()}/status", json={"status": "archived"})
    assert response.status_code == 403


# ============================================================
# DELETE /api/v1/offers/{id}
# ============================================================

def test_delete_offer_rapport(client, login):
    login("admin")
    offer_id = uuid.uuid4()
    with patch("app.routers.offers.offer_service.delete_offer") as mock:
        mock.return_value = OfferDeletionReport(offer_id=offer_id, contracts_deleted=1, applications_deleted=4)
        response = client.delete(f"/api/v1/offers/{offer_id}")

    assert response.status_code == 200
    assert response.json() == {"offer_id": str(offer_id), "contracts_deleted": 1, "applications_deleted": 4}


def test_delete_offer_parent_id_inexistant_403(client, login, mock_db):
    login("parent")
    mock_db.get.return_value = None
    response = client.delete(f"/api/v1/offers/{uuid.uuid4()}")

    assert response.status_code == 403
    mock_db.get.assert_not_called()


def test_delete_offer_echec_503(client, login):
    login("admin")
    with patch("app.routers.offers.offer_service.delete_offer") as mock:
        mock.side_effect = BackendUnavailable(
            "La suppression de l'offre a échoué.",
            details={"steps_before_failure": ["contracts"], "applied": []},
        )
        response = client.delete(f"/api/v1/offers/{uuid.uuid4()}")

    assert response.status_code == 503
    assert response.json()["code"] == "backend_unavailable"
    assert response.json()["details"]["applied"] == []


def test_base_indisponible_503(client, login):
    login("tutor")
    with patch("app.routers.offers.offer_service.list_open_offers") as mock:
        mock.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        response = client.get("/api/v1/offers")

    assert response.status_code == 503
    assert response.json()["code"] == "backend_unavailable"
