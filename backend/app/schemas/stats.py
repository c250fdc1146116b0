"""
Schémas Pydantic pour les tableaux de bord (compteurs recalculés à chaque appel).
"""

from typing import Dict, List

from pydantic import BaseModel

from app.schemas.account import AccountResponse


class ApplicationCounts(BaseModel):
    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    total: int = 0


class AdminStats(BaseModel):
    total_accounts: int
    tutors: int
    parents: int
    admins: int  # admin + super_admin
    total_offers: int
    open_offers: int
    offers_by_status: Dict[str, int]
    total_applications: int
    pending_applications: int
    recent_accounts: List[AccountResponse]


class ParentStats(BaseModel):
    total_offers: int
    open_offers: int
    applications: ApplicationCounts
    active_contracts: int


class TutorStats(BaseModel):
    open_offers: int
    applications: ApplicationCounts
    active_contracts: int
    profile_complete: bool
    documents_validated: bool
