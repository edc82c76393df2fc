"""
Input shapes for service request endpoints.

Create bodies are `{"base": {...}, "payload": {...}}`: the base fields are shared by
every category, the payload carries the category-specific people or animals.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


Gender = Literal["MASCULINO", "FEMENINO", "NO_BINARIO", "PREFIERO_NO_DECIR", "DESCONOCIDO"]
RequestType = Literal["ABUELOS", "NINIOS", "MASCOTAS"]
RequestStatus = Literal["ABIERTA", "EN_REVISION", "ASIGNADA", "ACTIVA", "COMPLETADA", "CANCELADA"]

STATUSES = ("ABIERTA", "EN_REVISION", "ASIGNADA", "ACTIVA", "COMPLETADA", "CANCELADA")
MAX_DEPENDENTS = 3
MAX_RESTRICTED_FOODS = 3


class DateRange(BaseModel):
    fecha: date
    hora_inicio: str
    hora_fin: str


class Location(BaseModel):
    direccion_linea: str
    lat: float
    lng: float


class RequestBase(BaseModel):
    titulo: str
    descripcion: str
    ubicacion: Location
    fechas: List[DateRange]
    precio_sugerido: Optional[float] = Field(None, ge=0)


class Contact(BaseModel):
    nombre: str = Field(..., max_length=120)
    relacion: str = Field(..., max_length=80)
    telefono_e164: str = Field(..., min_length=6, max_length=32)


class Medication(BaseModel):
    nombre: str
    frecuencia: str
    dosis: str


class ElderPerson(BaseModel):
    nombre_completo: str
    fecha_nacimiento: date
    genero: Gender
    fumador: Literal["ACTUAL", "EX", "NUNCA"]
    limitacion_movimiento: bool
    tipo_limitacion: Optional[str] = None
    alimentos_restringidos: List[str] = Field(default_factory=list)
    medicamentos: List[Medication] = Field(default_factory=list)


class ChildPerson(BaseModel):
    nombre_completo: str
    fecha_nacimiento: date
    genero: Gender
    camina_solo: bool
    dificultad_movimiento: bool
    tipo_limitacion: Optional[str] = None
    condicion_medica: bool
    tipo_condicion: Optional[str] = None
    alergias: bool
    detalle_alergias: Optional[str] = None
    alimentacion: Literal["LECHE_MATERNA", "FORMULA", "MIXTO", "SOLIDOS"]
    dieta_especial: bool
    tipo_dieta_especial: Optional[str] = None
    problemas_suenio: bool
    objeto_apego: bool
    panales: Literal["SI", "NO", "EN_TRANSICION"]
    medicamentos: List[Medication] = Field(default_factory=list)


class Animal(BaseModel):
    nombre: str
    especie: str
    raza: Optional[str] = None
    tamanio: Literal["PEQUENIO", "MEDIANO", "GRANDE"]
    personalidad: Literal["AGRESIVO", "TRANQUILO", "INQUIETO"]
    foto_url: Optional[str] = None
    problemas_salud: bool
    descripcion_salud: Optional[str] = None
    alimentos_preferidos: Optional[str] = None
    clinica_veterinaria: Optional[str] = None


class GrandparentsPayload(BaseModel):
    servicio: Literal["COMPANIA", "ASISTENCIA"]
    contacto_cercano: Contact
    personas: List[ElderPerson] = Field(..., min_length=1, max_length=MAX_DEPENDENTS)


class ChildrenPayload(BaseModel):
    servicio: Literal["INFANTES", "BEBES", "ESPECIALES"]
    contacto_tutor: Contact
    personas: List[ChildPerson] = Field(..., min_length=1, max_length=MAX_DEPENDENTS)


class PetsPayload(BaseModel):
    servicio: Literal["PASEO_DIARIO", "HOUSING"]
    modalidad: Literal["EN_HOGAR_MASCOTA", "EN_HOGAR_CUIDADOR"]
    contacto: Contact
    animales: List[Animal] = Field(..., min_length=1, max_length=MAX_DEPENDENTS)


class CreateGrandparentsRequest(BaseModel):
    base: RequestBase
    payload: GrandparentsPayload


class CreateChildrenRequest(BaseModel):
    base: RequestBase
    payload: ChildrenPayload


class CreatePetsRequest(BaseModel):
    base: RequestBase
    payload: PetsPayload


class ListMineQuery(BaseModel):
    type: Optional[RequestType] = None


class OpenRequestsQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)
    fecha: Optional[date] = None


class MyRequestsQuery(BaseModel):
    estado: Optional[RequestStatus] = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)
