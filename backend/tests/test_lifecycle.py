"""
Tests unitaires du moteur de cycle de vie (fonctions pures, aucune BDD).
Offre → candidature → décision → contrat.
"""

import uuid
from datetime import date
from types import SimpleNamespace

import pytest

from app.errors import Conflict, InvalidState, PermissionDenied, ValidationError
from app.services import lifecycle
from app.services.access_policy import ADMIN, PARENT, SUPER_ADMIN, TUTOR, Actor

TODAY = date(2026, 3, 2)


# --- Helpers ---

def make_parent(**kwargs) -> Actor:
    return Actor(id=kwargs.get("id", uuid.uuid4()), roles=frozenset({PARENT}))


def make_tutor(validated=True) -> Actor:
    return Actor(id=uuid.uuid4(), roles=frozenset({TUTOR}), documents_validated=validated)


def make_offer_data(**kwargs):
    values = {
        "subject": "Mathématiques",
        "level": "3ème",
        "description": "Préparation au BEPC",
        "address": "Cocody, Abidjan",
        "frequency": "2 fois par semaine",
        "budget_min": 15000,
        "budget_max": 25000,
    }
    values.update(kwargs)
    return SimpleNamespace(**values)


def make_offer(parent_id, status="open"):
    return SimpleNamespace(
        id=uuid.uuid4(),
        parent_id=parent_id,
        subject="Mathématiques",
        level="3ème",
        frequency="2 fois par semaine",
        address="Cocody, Abidjan",
        status=status,
    )


def make_application(offer, tutor_id, status="pending"):
    return SimpleNamespace(id=uuid.uuid4(), offer_id=offer.id, tutor_id=tutor_id, status=status)


def make_contract(parent_id, status="active"):
    return SimpleNamespace(id=uuid.uuid4(), parent_id=parent_id, status=status, end_date=None)


MESSAGE = "Professeur certifié, 5 ans d'expérience en collège."


# ============================================================
# Création d'offre
# ============================================================

def test_creer_offre_parent_valide():
    lifecycle.check_create_offer(make_parent(), make_offer_data())


def test_creer_offre_budget_egal_accepte():
    lifecycle.check_create_offer(make_parent(), make_offer_data(budget_min=20000, budget_max=20000))


def test_creer_offre_budget_max_inferieur():
    with pytest.raises(ValidationError) as exc:
        lifecycle.check_create_offer(make_parent(), make_offer_data(budget_min=30000, budget_max=20000))
    assert "budget maximum" in exc.value.message


def test_creer_offre_budget_nul_rejete():
    with pytest.raises(ValidationError):
        lifecycle.check_create_offer(make_parent(), make_offer_data(budget_min=0))


def test_creer_offre_champs_manquants_listes():
    with pytest.raises(ValidationError) as exc:
        lifecycle.check_create_offer(make_parent(), make_offer_data(subject="  ", address=""))
    assert exc.value.details["missing"] == ["subject", "address"]


def test_creer_offre_par_repetiteur_refuse():
    """La permission est vérifiée avant la validation."""
    with pytest.raises(PermissionDenied):
        lifecycle.check_create_offer(make_tutor(), make_offer_data(budget_min=30000, budget_max=1))


# ============================================================
# Statut d'offre
# ============================================================

@pytest.mark.parametrize("old, new", [
    ("open", "in_progress"),
    ("open", "closed"),
    ("in_progress", "closed"),
    ("in_progress", "open"),
    ("closed", "open"),
])
def test_transitions_offre_permises(old, new):
    parent = make_parent()
    offer = make_offer(parent.id, status=old)
    assert lifecycle.offer_status_changes(parent, offer, new) == {"status": new}


def test_transition_closed_vers_in_progress_refusee():
    parent = make_parent()
    with pytest.raises(InvalidState):
        lifecycle.offer_status_changes(parent, make_offer(parent.id, status="closed"), "in_progress")


def test_meme_statut_offre_sans_effet():
    parent = make_parent()
    assert lifecycle.offer_status_changes(parent, make_offer(parent.id), "open") == {}


def test_statut_offre_inconnu():
    parent = make_parent()
    with pytest.raises(ValidationError):
        lifecycle.offer_status_changes(parent, make_offer(parent.id), "archived")


def test_statut_offre_autre_parent_refuse():
    with pytest.raises(PermissionDenied):
        lifecycle.offer_status_changes(make_parent(), make_offer(uuid.uuid4()), "closed")


def test_statut_offre_par_admin():
    admin = Actor(id=uuid.uuid4(), roles=frozenset({ADMIN}))
    assert lifecycle.offer_status_changes(admin, make_offer(uuid.uuid4()), "closed") == {"status": "closed"}


def test_suppression_offre_reservee_admins():
    lifecycle.check_delete_offer(Actor(id=uuid.uuid4(), roles=frozenset({SUPER_ADMIN})))
    with pytest.raises(PermissionDenied):
        lifecycle.check_delete_offer(make_parent())


# ============================================================
# Candidature
# ============================================================

def test_candidature_valide():
    lifecycle.check_submit_application(make_tutor(), make_offer(uuid.uuid4()), MESSAGE, already_applied=False)


def test_candidature_documents_non_valides_avant_statut():
    """Documents non validés → PermissionDenied, même si l'offre est fermée."""
    offer = make_offer(uuid.uuid4(), status="closed")
    with pytest.raises(PermissionDenied) as exc:
        lifecycle.check_submit_application(make_tutor(validated=False), offer, MESSAGE, already_applied=True)
    assert "documents" in exc.value.message


def test_candidature_par_parent_refusee():
    with pytest.raises(PermissionDenied):
        lifecycle.check_submit_application(make_parent(), make_offer(uuid.uuid4()), MESSAGE, False)


def test_candidature_message_trop_court():
    with pytest.raises(ValidationError):
        lifecycle.check_submit_application(make_tutor(), make_offer(uuid.uuid4()), "  trop court   ", False)


def test_candidature_message_19_caracteres_rejete_20_accepte():
    offer = make_offer(uuid.uuid4())
    with pytest.raises(ValidationError):
        lifecycle.check_submit_application(make_tutor(), offer, "x" * 19, False)
    lifecycle.check_submit_application(make_tutor(), offer, "x" * 20, False)


@pytest.mark.parametrize("status", ["in_progress", "closed"])
def test_candidature_offre_non_ouverte(status):
    with pytest.raises(InvalidState):
        lifecycle.check_submit_application(make_tutor(), make_offer(uuid.uuid4(), status=status), MESSAGE, False)


def test_candidature_en_double():
    with pytest.raises(Conflict):
        lifecycle.check_submit_application(make_tutor(), make_offer(uuid.uuid4()), MESSAGE, already_applied=True)


# ============================================================
# Décision
# ============================================================

def test_acceptation_cree_un_contrat():
    parent = make_parent()
    tutor = make_tutor()
    offer = make_offer(parent.id)
    application = make_application(offer, tutor.id)

    outcome = lifecycle.decide_application(parent, offer, application, "accept", TODAY, agreed_rate=20000)

    assert outcome.application_status == "accepted"
    contract = outcome.contract
    assert contract.offer_id == offer.id
    assert contract.application_id == application.id
    assert contract.parent_id == parent.id
    assert contract.tutor_id == tutor.id
    assert contract.subject == offer.subject
    assert contract.address == offer.address
    assert contract.agreed_rate == 20000
    assert contract.start_date == TODAY
    assert contract.status == "active"


def test_refus_sans_contrat():
    parent = make_parent()
    offer = make_offer(parent.id)
    outcome = lifecycle.decide_application(parent, offer, make_application(offer, uuid.uuid4()), "reject", TODAY)
    assert outcome.application_status == "rejected"
    assert outcome.contract is None


def test_decision_par_autre_parent_refusee():
    offer = make_offer(uuid.uuid4())
    with pytest.raises(PermissionDenied):
        lifecycle.decide_application(make_parent(), offer, make_application(offer, uuid.uuid4()), "accept", TODAY)


def test_decision_par_admin_refusee():
    offer = make_offer(uuid.uuid4())
    admin = Actor(id=uuid.uuid4(), roles=frozenset({ADMIN}))
    with pytest.raises(PermissionDenied):
        lifecycle.decide_application(admin, offer, make_application(offer, uuid.uuid4()), "accept", TODAY)


def test_decision_invalide():
    parent = make_parent()
    offer = make_offer(parent.id)
    with pytest.raises(ValidationError):
        lifecycle.decide_application(parent, offer, make_application(offer, uuid.uuid4()), "maybe", TODAY)


def test_decision_tarif_negatif():
    parent = make_parent()
    offer = make_offer(parent.id)
    with pytest.raises(ValidationError):
        lifecycle.decide_application(
            parent, offer, make_application(offer, uuid.uuid4()), "accept", TODAY, agreed_rate=-5
        )


@pytest.mark.parametrize("status", ["accepted", "rejected"])
@pytest.mark.parametrize("decision", ["accept", "reject"])
def test_decision_sur_candidature_deja_traitee(status, decision):
    parent = make_parent()
    offer = make_offer(parent.id)
    with pytest.raises(InvalidState):
        lifecycle.decide_application(
            parent, offer, make_application(offer, uuid.uuid4(), status=status), decision, TODAY
        )


def test_decision_offre_fermee_acceptee():
    """Le statut de l'offre n'empêche pas de traiter une candidature en attente."""
    parent = make_parent()
    offer = make_offer(parent.id, status="closed")
    outcome = lifecycle.decide_application(parent, offer, make_application(offer, uuid.uuid4()), "accept", TODAY)
    assert outcome.contract is not None


# ============================================================
# Contrat
# ============================================================

@pytest.mark.parametrize("new_status", ["completed", "cancelled"])
def test_cloture_contrat_renseigne_date_fin(new_status):
    parent = make_parent()
    changes = lifecycle.contract_status_changes(parent, make_contract(parent.id), new_status, TODAY)
    assert changes == {"status": new_status, "end_date": TODAY}


def test_contrat_actif_vers_actif_sans_effet():
    parent = make_parent()
    assert lifecycle.contract_status_changes(parent, make_contract(parent.id), "active", TODAY) == {}


@pytest.mark.parametrize("old", ["completed", "cancelled"])
@pytest.mark.parametrize("new", ["active", "completed", "cancelled"])
def test_contrat_termine_est_definitif(old, new):
    parent = make_parent()
    with pytest.raises(InvalidState):
        lifecycle.contract_status_changes(parent, make_contract(parent.id, status=old), new, TODAY)


def test_contrat_par_repetiteur_refuse():
    tutor = make_tutor()
    with pytest.raises(PermissionDenied):
        lifecycle.contract_status_changes(tutor, make_contract(uuid.uuid4()), "cancelled", TODAY)


def test_contrat_statut_inconnu():
    parent = make_parent()
    with pytest.raises(ValidationError):
        lifecycle.contract_status_changes(parent, make_contract(parent.id), "paused", TODAY)


# ============================================================
# Scénario complet
# ============================================================

def test_scenario_offre_candidature_contrat():
    parent = make_parent()
    offer_data = make_offer_data(subject="Physique", budget_min=10000, budget_max=20000)
    lifecycle.check_create_offer(parent, offer_data)
    offer = make_offer(parent.id)

    # Documents non validés : refus
    pending_tutor = make_tutor(validated=False)
    with pytest.raises(PermissionDenied):
        lifecycle.check_submit_application(pending_tutor, offer, MESSAGE, False)

    # Après validation : candidature acceptée
    tutor = make_tutor(validated=True)
    lifecycle.check_submit_application(tutor, offer, MESSAGE, False)
    application = make_application(offer, tutor.id)

    # Deuxième candidature du même répétiteur
    with pytest.raises(Conflict):
        lifecycle.check_submit_application(tutor, offer, MESSAGE, already_applied=True)

    outcome = lifecycle.decide_application(parent, offer, application, "accept", TODAY, agreed_rate=15000)
    application.status = outcome.application_status
    assert outcome.contract.tutor_id == tutor.id

    # Rejouer la décision échoue
    with pytest.raises(InvalidState):
        lifecycle.decide_application(parent, offer, application, "reject", TODAY)

    # L'offre reste ouverte : un second répétiteur peut encore candidater
    assert offer.status == "open"
    lifecycle.check_submit_application(make_tutor(), offer, MESSAGE, already_applied=False)

    contract = make_contract(parent.id)
    changes = lifecycle.contract_status_changes(parent, contract, "completed", TODAY)
    for field, value in changes.items():
        setattr(contract, field, value)
    assert contract.status == "completed"
    assert contract.end_date == TODAY

    with pytest.raises(InvalidState):
        lifecycle.contract_status_changes(parent, contract, "cancelled", TODAY)
