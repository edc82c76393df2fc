"""
Input shapes for profile endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class UpdateProfilePayload(BaseModel):
    nombre_completo: Optional[str] = Field(None, min_length=1, max_length=200)
    telefono_e164: Optional[str] = None
    pais_iso2: Optional[str] = None
    genero: Optional[str] = None
    foto_url: Optional[str] = None

    @field_validator("nombre_completo")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("May not be null")
        return value


PROFILE_COLUMNS = {
    "nombre_completo": "nombre_completo",
    "telefono_e164": "telefono_e164",
    "pais_iso2": "pais_iso2",
    "genero": "genero",
    "foto_url": "foto_url",
}

# Columns anyone signed in may see on another user's profile
PUBLIC_COLUMNS = ("id", "nombre_completo", "foto_url", "genero")
