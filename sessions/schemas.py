"""
Input shapes for care session endpoints.
"""

from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CreateFromMatchPayload(BaseModel):
    asignacion_id: UUID


class CheckInProposal(BaseModel):
    notas: Optional[str] = None


class CheckOutPayload(BaseModel):
    resumen: Optional[str] = None


class ReviewPayload(BaseModel):
    para: Literal["CUIDADOR", "USUARIO"]
    rating: int = Field(..., ge=1, le=5)
    comentario: Optional[str] = None


class SessionListQuery(BaseModel):
    rol: Literal["CUIDADOR", "SOLICITANTE"] = "CUIDADOR"
