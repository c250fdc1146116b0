"""
Taxonomie des erreurs métier.

Chaque erreur porte un message actionnable (affiché tel quel par le client),
un code machine et le statut HTTP associé. La conversion en réponse JSON
est faite par les handlers enregistrés dans app.main.
"""

from typing import Any, Optional


class DomainError(Exception):
    """Erreur métier de base."""
    status_code = 400
    code = "domain_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Entrée malformée (budget incohérent, message trop court...)."""
    status_code = 422
    code = "validation_error"


class PermissionDenied(DomainError):
    """L'acteur n'a pas le rôle, la propriété ou la validation requise."""
    status_code = 403
    code = "permission_denied"


class InvalidState(DomainError):
    """Action interdite depuis l'état courant de l'entité."""
    status_code = 409
    code = "invalid_state"


class Conflict(DomainError):
    """Violation d'unicité (candidature en double, téléphone déjà utilisé...)."""
    status_code = 409
    code = "conflict"


class NotFound(DomainError):
    status_code = 404
    code = "not_found"


class BackendUnavailable(DomainError):
    """Échec de la base de données ou d'un service externe."""
    status_code = 503
    code = "backend_unavailable"
