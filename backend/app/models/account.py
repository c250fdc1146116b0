"""
Modèles SQLAlchemy pour les comptes utilisateurs et leurs rôles.

L'identifiant du compte est celui fourni par le fournisseur d'identité
(claim `sub` du JWT) : aucune donnée d'authentification n'est stockée ici.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(UUID(as_uuid=True), primary_key=True)
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20), unique=True, nullable=False)  # Identifiant de connexion, ex. "+2250701020304"
    avatar_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True)  # Désactivation logique par un admin
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class AccountRole(Base):
    """Association compte ↔ rôle (un compte peut cumuler plusieurs rôles)."""
    __tablename__ = "account_roles"

    account_id = Column(UUID(as_uuid=True), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True)
    role = Column(String(20), primary_key=True)  # super_admin, admin, tutor, parent
    granted_at = Column(DateTime, server_default=func.now())
