"""
Input shapes for account endpoints.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class RegisterPayload(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=64)
    name: str = Field(..., min_length=1)
    telefono_e164: Optional[str] = Field(None, max_length=32)
    pais_iso2: Optional[str] = Field(None, max_length=2)
    genero: Optional[str] = None
    foto_url: Optional[str] = None
    dni: Optional[str] = Field(None, max_length=32)


class LoginPayload(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateAccountPayload(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    name: Optional[str] = Field(None, min_length=1)
    telefono_e164: Optional[str] = None
    pais_iso2: Optional[str] = Field(None, min_length=2, max_length=2)
    genero: Optional[str] = None
    foto_url: Optional[str] = None

    @field_validator("email", "password", "name")
    @classmethod
    def not_null(cls, value):
        """These may be left out but not cleared."""
        if value is None:
            raise ValueError("May not be null")
        return value


class DeactivatePayload(BaseModel):
    reason: Optional[str] = None


# Input field -> usuarios column, for partial profile updates
PROFILE_COLUMNS = {
    "email": "correo",
    "name": "nombre_completo",
    "telefono_e164": "telefono_e164",
    "pais_iso2": "pais_iso2",
    "genero": "genero",
    "foto_url": "foto_url",
}
