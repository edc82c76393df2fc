"""
Business logic for caregiver applications (`postulaciones`).
"""

import logging
from typing import Dict

from shared.errors import ConflictError, RemoteOperationFailed
from shared.gateway import DataGateway, eq
from .schemas import AcceptApplicationPayload, CreateApplicationPayload

logger = logging.getLogger(__name__)

# Error text the data API returns when an active application already exists
DUPLICATE_MARKERS = ("duplicate key", "postulaciones_unicas_activas")

APPLICATION_SELECT = """
    id,
    mensaje,
    tarifa_propuesta,
    precio_solicitante,
    estado,
    creado_en,
    cuidador:cuidadores!postulaciones_cuidador_id_fkey(
        usuario_id,
        bio,
        anios_experiencia,
        rating_promedio,
        tipos_servicio,
        usuario:usuarios!cuidadores_usuario_id_fkey(nombre_completo, correo, foto_url)
    )
"""


def is_duplicate_application(error: RemoteOperationFailed) -> bool:
    return any(marker in error.raw_message for marker in DUPLICATE_MARKERS)


class ApplicationService:
    """Service class for application operations."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def create(self, caregiver_id: str, dto: CreateApplicationPayload) -> Dict:
        """
        Apply to a service request as the calling caregiver.

        Raises:
            ConflictError: If the caller already has an active application for the request
        """
        try:
            postulacion = await self.gateway.insert_one(
                "postulaciones",
                {
                    "solicitud_id": str(dto.solicitud_id),
                    "cuidador_id": caregiver_id,
                    "mensaje": dto.mensaje,
                    "tarifa_propuesta": dto.tarifa_propuesta,
                    "estado": "POSTULADO",
                },
                credentials=self.gateway.as_service(),
            )
        except RemoteOperationFailed as e:
            if is_duplicate_application(e):
                raise ConflictError(
                    "You already applied to this request (or were already selected)"
                ) from e
            raise

        logger.info(f"Caregiver {caregiver_id} applied to request {dto.solicitud_id}")
        return {"message": "Application created", "postulacion": postulacion}

    async def list_for_request(self, solicitud_id: str) -> Dict:
        """
        List the applications of a request, newest first.

        The caller's ownership of the request is checked before this runs.
        """
        rows = await self.gateway.select(
            "postulaciones",
            credentials=self.gateway.as_service(),
            select=" ".join(APPLICATION_SELECT.split()),
            filters={"solicitud_id": eq(solicitud_id)},
            order="creado_en.desc",
        )

        postulaciones = []
        for row in rows:
            cuidador = row.get("cuidador") or {}
            postulaciones.append({
                "id": row.get("id"),
                "mensaje": row.get("mensaje"),
                "tarifa_propuesta": row.get("tarifa_propuesta"),
                "precio_solicitante": row.get("precio_solicitante"),
                "estado": row.get("estado"),
                "creado_en": row.get("creado_en"),
                "cuidador": {
                    "bio": cuidador.get("bio"),
                    "rating_promedio": cuidador.get("rating_promedio"),
                    "tipos_servicio": cuidador.get("tipos_servicio"),
                    "usuario": cuidador.get("usuario"),
                },
            })

        return {
            "solicitud_id": solicitud_id,
            "total": len(postulaciones),
            "postulaciones": postulaciones,
        }

    async def accept(self, actor_id: str, postulacion_id: str, dto: AcceptApplicationPayload) -> Dict:
        """
        Select an application for its request.

        The match is made atomically by a stored procedure, which also checks
        that the actor owns the request.
        """
        result = await self.gateway.rpc(
            "rpc_seleccionar_postulacion",
            {
                "p_postulacion_id": postulacion_id,
                "p_actor_id": actor_id,
                "p_tarifa_acordada": dto.tarifa_acordada,
            },
            credentials=self.gateway.as_service(),
        )
        logger.info(f"Application {postulacion_id} accepted by {actor_id}")
        return {"message": "Application accepted", "result": result}
