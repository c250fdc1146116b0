"""
Dépendances FastAPI partagées par les routers : identité authentifiée et acteur.
"""

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.security import decode_access_token
from app.services import account_service
from app.services.access_policy import Actor

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> uuid.UUID:
    """Identité (UUID) extraite du jeton Bearer. 401 si absent ou invalide."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentification requise.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decode_access_token(credentials.credentials)


def get_current_actor(
    identity: uuid.UUID = Depends(get_identity),
    db: Session = Depends(get_db),
) -> Actor:
    """Acteur explicite (rôles, validation des documents) transmis aux services."""
    return account_service.load_actor(db, identity)
