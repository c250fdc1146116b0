"""
Vérification des jetons d'accès JWT émis par le fournisseur d'identité.

L'API ne gère pas les mots de passe : elle vérifie la signature du jeton
(secret partagé) et en extrait l'identité (claim « sub », un UUID).
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, status
from jose import JWTError, jwt

from app.config import settings


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> uuid.UUID:
    """
    Vérifie le jeton et retourne l'identifiant du compte (claim « sub »).
    Lève une HTTPException 401 si le jeton est invalide, expiré ou sans identité.
    """
    options = {} if settings.JWT_AUDIENCE else {"verify_aud": False}
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        raise _credentials_exception("Jeton d'authentification invalide ou expiré.")

    subject = payload.get("sub")
    if not subject:
        raise _credentials_exception("Jeton d'authentification sans identité.")
    try:
        return uuid.UUID(str(subject))
    except ValueError:
        raise _credentials_exception("Identité du jeton invalide.")


def create_access_token(subject: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Émet un jeton signé pour une identité (développement et tests)."""
    to_encode = {
        "sub": str(subject),
        "exp": datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1)),
    }
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
