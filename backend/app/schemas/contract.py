"""
Schémas Pydantic pour les contrats.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class ContractStatusUpdate(BaseModel):
    status: str  # active, completed, cancelled


class ContractResponse(BaseModel):
    id: uuid.UUID
    offer_id: uuid.UUID
    application_id: Optional[uuid.UUID]
    parent_id: uuid.UUID
    tutor_id: uuid.UUID
    subject: str
    level: str
    frequency: str
    address: str
    agreed_rate: Optional[int]
    start_date: date
    end_date: Optional[date]
    status: str
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}
