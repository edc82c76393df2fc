"""
Input shapes for caregiver profile endpoints.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UpdateCaregiverPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    bio: Optional[str] = Field(None, max_length=600)
    anios_experiencia: Optional[float] = Field(None, ge=0, le=60)
    tarifa_hora: Optional[float] = Field(None, ge=0)


CAREGIVER_COLUMNS = {
    "bio": "bio",
    "anios_experiencia": "anios_experiencia",
    "tarifa_hora": "tarifa_hora",
}

OWN_SELECT = "*, usuario:usuarios!cuidadores_usuario_id_fkey(*)"

PUBLIC_SELECT = (
    "usuario_id, bio, anios_experiencia, horas_acumuladas, rating_promedio, "
    "tipos_servicio, tarifa_hora, "
    "usuario:usuarios!cuidadores_usuario_id_fkey!inner(nombre_completo, foto_url)"
)
