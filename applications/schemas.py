"""
Input shapes for application endpoints.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CreateApplicationPayload(BaseModel):
    solicitud_id: UUID
    mensaje: Optional[str] = None
    tarifa_propuesta: Optional[float] = Field(None, ge=0, le=1000)


class AcceptApplicationPayload(BaseModel):
    tarifa_acordada: float
