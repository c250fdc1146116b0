"""
Politique d'accès : matrice unique des capacités (action × rôle).

Chaque opération métier consulte cette matrice avant toute écriture.
L'acteur est toujours passé explicitement (jamais d'utilisateur « courant » global).

Portées :
- ANY   : l'action est permise sur n'importe quelle entité
- OWNER : l'action n'est permise que si l'acteur est le propriétaire (owner_id)
"""

import uuid
from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.errors import PermissionDenied

# Rôles
SUPER_ADMIN = "super_admin"
ADMIN = "admin"
TUTOR = "tutor"
PARENT = "parent"
VALID_ROLES = {SUPER_ADMIN, ADMIN, TUTOR, PARENT}
SELF_REGISTRATION_ROLES = {TUTOR, PARENT}

ANY = "any"
OWNER = "owner"

# Actions
CREATE_OFFER = "create_offer"
CHANGE_OFFER_STATUS = "change_offer_status"
DELETE_OFFER = "delete_offer"
VIEW_ALL_OFFERS = "view_all_offers"
VIEW_OPEN_OFFERS = "view_open_offers"
SUBMIT_APPLICATION = "submit_application"
DECIDE_APPLICATION = "decide_application"
LIST_OFFER_APPLICATIONS = "list_offer_applications"
CHANGE_CONTRACT_STATUS = "change_contract_status"
LIST_ACCOUNTS = "list_accounts"
TOGGLE_ACCOUNT_ACTIVE = "toggle_account_active"
CHANGE_ACCOUNT_ROLE = "change_account_role"
UPDATE_OWN_ACCOUNT = "update_own_account"
VALIDATE_DOCUMENTS = "validate_documents"
VIEW_OWN_PROFILE = "view_own_profile"
EDIT_TUTOR_PROFILE = "edit_tutor_profile"
VIEW_ADMIN_STATS = "view_admin_stats"
VIEW_PARENT_STATS = "view_parent_stats"
VIEW_TUTOR_STATS = "view_tutor_stats"

CAPABILITIES: dict[str, dict[str, str]] = {
    CREATE_OFFER: {PARENT: OWNER},
    CHANGE_OFFER_STATUS: {ADMIN: ANY, PARENT: OWNER},
    DELETE_OFFER: {SUPER_ADMIN: ANY, ADMIN: ANY},
    VIEW_ALL_OFFERS: {SUPER_ADMIN: ANY, ADMIN: ANY},
    VIEW_OPEN_OFFERS: {SUPER_ADMIN: ANY, ADMIN: ANY, TUTOR: ANY},
    SUBMIT_APPLICATION: {TUTOR: OWNER},
    DECIDE_APPLICATION: {PARENT: OWNER},
    LIST_OFFER_APPLICATIONS: {SUPER_ADMIN: ANY, ADMIN: ANY, PARENT: OWNER},
    CHANGE_CONTRACT_STATUS: {PARENT: OWNER},
    LIST_ACCOUNTS: {SUPER_ADMIN: ANY, ADMIN: ANY},
    TOGGLE_ACCOUNT_ACTIVE: {SUPER_ADMIN: ANY, ADMIN: ANY},
    CHANGE_ACCOUNT_ROLE: {SUPER_ADMIN: ANY},
    UPDATE_OWN_ACCOUNT: {SUPER_ADMIN: OWNER, ADMIN: OWNER, TUTOR: OWNER, PARENT: OWNER},
    VALIDATE_DOCUMENTS: {SUPER_ADMIN: ANY, ADMIN: ANY},
    VIEW_OWN_PROFILE: {TUTOR: OWNER},
    EDIT_TUTOR_PROFILE: {TUTOR: OWNER},
    VIEW_ADMIN_STATS: {SUPER_ADMIN: ANY, ADMIN: ANY},
    VIEW_PARENT_STATS: {PARENT: OWNER},
    VIEW_TUTOR_STATS: {TUTOR: OWNER},
}

DENIAL_MESSAGES = {
    CREATE_OFFER: "Seul un parent peut publier une offre.",
    CHANGE_OFFER_STATUS: "Seul le parent propriétaire de l'offre ou un administrateur peut en changer le statut.",
    DELETE_OFFER: "Seul un administrateur peut supprimer une offre.",
    VIEW_ALL_OFFERS: "Seul un administrateur peut consulter toutes les offres.",
    VIEW_OPEN_OFFERS: "Seuls les répétiteurs peuvent consulter les offres disponibles.",
    SUBMIT_APPLICATION: "Seul un répétiteur peut candidater à une offre.",
    DECIDE_APPLICATION: "Seul le parent propriétaire de l'offre peut accepter ou refuser cette candidature.",
    LIST_OFFER_APPLICATIONS: "Seul le parent propriétaire de l'offre peut consulter ses candidatures.",
    CHANGE_CONTRACT_STATUS: "Seul le parent signataire du contrat peut en changer le statut.",
    LIST_ACCOUNTS: "Seul un administrateur peut consulter la liste des comptes.",
    TOGGLE_ACCOUNT_ACTIVE: "Seul un administrateur peut activer ou désactiver un compte.",
    CHANGE_ACCOUNT_ROLE: "Seul un super administrateur peut modifier le rôle d'un compte.",
    UPDATE_OWN_ACCOUNT: "Vous ne pouvez modifier que votre propre compte.",
    VALIDATE_DOCUMENTS: "Seul un administrateur peut valider les documents d'un répétiteur.",
    VIEW_OWN_PROFILE: "Seuls les répétiteurs disposent d'un profil.",
    EDIT_TUTOR_PROFILE: "Seul le répétiteur lui-même peut modifier son profil.",
    VIEW_ADMIN_STATS: "Seul un administrateur peut consulter les statistiques globales.",
    VIEW_PARENT_STATS: "Ce tableau de bord est réservé aux parents.",
    VIEW_TUTOR_STATS: "Ce tableau de bord est réservé aux répétiteurs.",
}


@dataclass(frozen=True)
class Actor:
    """Compte authentifié à l'origine d'une opération."""
    id: uuid.UUID
    roles: frozenset = field(default_factory=frozenset)
    documents_validated: bool = False

    def has_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)

    @property
    def is_admin(self) -> bool:
        return self.has_role(ADMIN, SUPER_ADMIN)


def is_allowed(actor: Actor, action: str, owner_id: Optional[uuid.UUID] = None) -> bool:
    """Vrai si au moins un rôle de l'acteur autorise l'action (portée comprise)."""
    scopes = CAPABILITIES.get(action, {})
    for role in actor.roles:
        scope = scopes.get(role)
        if scope == ANY:
            return True
        if scope == OWNER and owner_id is not None and owner_id == actor.id:
            return True
    return False


def require(actor: Actor, action: str, owner_id: Optional[uuid.UUID] = None) -> None:
    """Lève PermissionDenied si l'action n'est pas autorisée pour cet acteur."""
    if not is_allowed(actor, action, owner_id):
        raise PermissionDenied(DENIAL_MESSAGES.get(action, "Action non autorisée."))


def require_account_action(actor: Actor, action: str, target_roles: Iterable[str]) -> None:
    """
    Vérifie une action d'administration sur un compte cible.

    Règles :
    - l'action doit figurer dans la matrice pour un rôle de l'acteur
    - seul un super_admin agit sur un compte super_admin
    - les rôles d'un compte super_admin ne sont jamais modifiés via l'API
    """
    require(actor, action)
    target_roles = set(target_roles)
    if SUPER_ADMIN in target_roles:
        if not actor.has_role(SUPER_ADMIN):
            raise PermissionDenied("Seul un super administrateur peut agir sur un compte super administrateur.")
        if action == CHANGE_ACCOUNT_ROLE:
            raise PermissionDenied("Le rôle d'un super administrateur ne peut pas être modifié.")
