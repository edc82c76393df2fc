"""
Business logic for service requests (`solicitudes`) and their sub-resources.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from shared.errors import InvalidInputError, NotFoundError, RemoteOperationFailed
from shared.gateway import DataGateway, eq, in_, neq, not_in
from .schemas import (
    ChildrenPayload, GrandparentsPayload, MyRequestsQuery, OpenRequestsQuery, PetsPayload,
    RequestBase, Contact, MAX_RESTRICTED_FOODS, STATUSES
)

logger = logging.getLogger(__name__)

SUMMARY_SELECT = (
    "id, tipo, titulo, descripcion, estado, precio_sugerido, creado_en, "
    "solicitud_fechas (fecha, hora_inicio, hora_fin), "
    "postulaciones:postulaciones ( count )"
)

DETAIL_SELECT = (
    "*, "
    "solicitud_fechas (*), "
    "solicitud_contacto_cercano (*), "
    "solicitud_abuelos_detalle (*), "
    "solicitud_abuelos_personas (*, solicitud_abuelos_medicamentos (*)), "
    "solicitud_ninios_detalle (*), "
    "solicitud_ninios_personas (*, solicitud_ninios_medicamentos (*)), "
    "solicitud_mascotas_detalle (*), "
    "solicitud_mascotas_animales (*), "
    "solicitud_imagenes (*)"
)

CATEGORY_KEYS = {
    "ABUELOS": ("solicitud_abuelos_detalle", "solicitud_abuelos_personas"),
    "NINIOS": ("solicitud_ninios_detalle", "solicitud_ninios_personas"),
    "MASCOTAS": ("solicitud_mascotas_detalle", "solicitud_mascotas_animales"),
}

# (row, medications) for each person or animal
Dependent = Tuple[Dict[str, Any], List[Dict[str, Any]]]


def strip_other_categories(solicitud: Dict) -> Dict:
    """Drop sub-resources that belong to categories other than the request's own."""
    shaped = dict(solicitud)
    for tipo, keys in CATEGORY_KEYS.items():
        if tipo == shaped.get("tipo"):
            continue
        for key in keys:
            shaped.pop(key, None)
    return shaped


def _summary(row: Dict) -> Dict:
    postulaciones = row.get("postulaciones")
    count = 0
    if isinstance(postulaciones, list) and postulaciones and postulaciones[0].get("count") is not None:
        count = int(postulaciones[0]["count"])

    return {
        "id": row.get("id"),
        "tipo": row.get("tipo"),
        "titulo": row.get("titulo"),
        "descripcion": row.get("descripcion"),
        "estado": row.get("estado"),
        "precio_sugerido": row.get("precio_sugerido"),
        "creado_en": row.get("creado_en"),
        "fechas": row.get("solicitud_fechas") or [],
        "postulaciones_count": count,
    }


class ServiceRequestService:
    """Service class for service request operations."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def create_grandparents(self, user_id: str, base: RequestBase, payload: GrandparentsPayload) -> Dict:
        dependents: List[Dependent] = []
        for person in payload.personas:
            row = person.model_dump(mode="json", exclude={"medicamentos"})
            row["alimentos_restringidos"] = row["alimentos_restringidos"][:MAX_RESTRICTED_FOODS]
            meds = [m.model_dump(mode="json") for m in person.medicamentos]
            dependents.append((row, meds))

        solicitud_id = await self._create(
            user_id,
            "ABUELOS",
            base,
            detail=("solicitud_abuelos_detalle", {"servicio": payload.servicio}),
            contact=payload.contacto_cercano,
            dependents=dependents,
            dependent_table="solicitud_abuelos_personas",
            medication_table="solicitud_abuelos_medicamentos",
        )
        return {"message": "Service request created", "solicitud_id": solicitud_id}

    async def create_children(self, user_id: str, base: RequestBase, payload: ChildrenPayload) -> Dict:
        dependents: List[Dependent] = [
            (
                person.model_dump(mode="json", exclude={"medicamentos"}),
                [m.model_dump(mode="json") for m in person.medicamentos],
            )
            for person in payload.personas
        ]

        solicitud_id = await self._create(
            user_id,
            "NINIOS",
            base,
            detail=("solicitud_ninios_detalle", {"servicio": payload.servicio}),
            contact=payload.contacto_tutor,
            dependents=dependents,
            dependent_table="solicitud_ninios_personas",
            medication_table="solicitud_ninios_medicamentos",
        )
        return {"message": "Service request (children) created", "solicitud_id": solicitud_id}

    async def create_pets(self, user_id: str, base: RequestBase, payload: PetsPayload) -> Dict:
        dependents: List[Dependent] = [
            (animal.model_dump(mode="json"), []) for animal in payload.animales
        ]

        solicitud_id = await self._create(
            user_id,
            "MASCOTAS",
            base,
            detail=(
                "solicitud_mascotas_detalle",
                {"servicio": payload.servicio, "modalidad": payload.modalidad},
            ),
            contact=payload.contacto,
            dependents=dependents,
            dependent_table="solicitud_mascotas_animales",
        )
        return {"message": "Service request (pets) created", "solicitud_id": solicitud_id}

    async def _create(
        self,
        user_id: str,
        tipo: str,
        base: RequestBase,
        *,
        detail: Tuple[str, Dict],
        contact: Contact,
        dependents: Sequence[Dependent],
        dependent_table: str,
        medication_table: Optional[str] = None,
    ) -> str:
        """
        Write a service request and its sub-resources in order.

        Each step depends on the id produced by an earlier one. There is no
        compensation: when a step fails the rows written before it remain, the
        failure is logged with the parent id and re-raised.

        Returns:
            The id of the new `solicitudes` row
        """
        credentials = self.gateway.as_service()

        solicitud = await self.gateway.insert_one(
            "solicitudes",
            {
                "usuario_id": user_id,
                "tipo": tipo,
                "titulo": base.titulo,
                "descripcion": base.descripcion,
                "direccion_linea": base.ubicacion.direccion_linea,
                "lat": base.ubicacion.lat,
                "lng": base.ubicacion.lng,
                "estado": "ABIERTA",
                "precio_sugerido": base.precio_sugerido,
            },
            credentials=credentials,
        )
        solicitud_id = solicitud["id"]

        step = "solicitud_fechas"
        try:
            if base.fechas:
                await self.gateway.insert(
                    "solicitud_fechas",
                    [
                        {"solicitud_id": solicitud_id, **fecha.model_dump(mode="json")}
                        for fecha in base.fechas
                    ],
                    credentials=credentials,
                    returning=False,
                )

            detail_table, detail_row = detail
            step = detail_table
            await self.gateway.insert_one(
                detail_table, {"solicitud_id": solicitud_id, **detail_row}, credentials=credentials
            )

            step = "solicitud_contacto_cercano"
            await self.gateway.insert_one(
                "solicitud_contacto_cercano",
                {"solicitud_id": solicitud_id, **contact.model_dump()},
                credentials=credentials,
            )

            for row, medications in dependents:
                step = dependent_table
                person = await self.gateway.insert_one(
                    dependent_table, {"solicitud_id": solicitud_id, **row}, credentials=credentials
                )
                if medications and medication_table:
                    step = medication_table
                    await self.gateway.insert(
                        medication_table,
                        [{"persona_id": person["id"], **m} for m in medications],
                        credentials=credentials,
                        returning=False,
                    )
        except RemoteOperationFailed:
            logger.error(
                f"Service request {solicitud_id} left incomplete: writing {step} failed"
            )
            raise

        logger.info(f"Created {tipo} service request {solicitud_id} for {user_id}")
        return solicitud_id

    async def list_mine(self, user_id: str, tipo: Optional[str] = None) -> List[Dict]:
        """Caller's requests with their dates, newest first."""
        filters = {"usuario_id": eq(user_id)}
        if tipo:
            filters["tipo"] = eq(tipo)

        return await self.gateway.select(
            "solicitudes",
            credentials=self.gateway.as_service(),
            select="*, solicitud_fechas(*)",
            filters=filters,
            order="creado_en.desc",
        )

    async def list_open_for_caregiver(self, user_id: str, query: OpenRequestsQuery) -> Dict:
        """
        Open requests a caregiver can still apply to.

        Only requests of the caregiver's service types are listed, excluding the
        caller's own requests and those already applied to.

        Raises:
            NotFoundError: If the caller has no caregiver profile
            InvalidInputError: If the caregiver profile has no service types
        """
        credentials = self.gateway.as_service()

        caregiver = await self.gateway.select_one(
            "cuidadores",
            credentials=credentials,
            select="tipos_servicio",
            filters={"usuario_id": eq(user_id)},
        )
        if not caregiver:
            raise NotFoundError("You don't have a caregiver profile yet")

        tipos = caregiver.get("tipos_servicio")
        if not isinstance(tipos, list) or not tipos:
            raise InvalidInputError("Invalid caregiver profile (tipos_servicio)")

        applied = await self.gateway.select(
            "postulaciones",
            credentials=credentials,
            select="solicitud_id",
            filters={"cuidador_id": eq(user_id)},
        )
        excluded = [row["solicitud_id"] for row in applied if row.get("solicitud_id")]

        # An inner join lets the date filter remove requests without a matching date
        fechas = "solicitud_fechas!inner" if query.fecha else "solicitud_fechas"
        filters = {
            "estado": eq("ABIERTA"),
            "tipo": in_(tipos),
            "usuario_id": neq(user_id),
        }
        if excluded:
            filters["id"] = not_in(excluded)
        if query.fecha:
            filters["solicitud_fechas.fecha"] = eq(query.fecha.isoformat())

        rows = await self.gateway.select(
            "solicitudes",
            credentials=credentials,
            select=(
                "id, tipo, titulo, precio_sugerido, descripcion, creado_en, "
                f"{fechas} (fecha, hora_inicio, hora_fin)"
            ),
            filters=filters,
            order="creado_en.desc",
            limit=query.limit,
            offset=(query.page - 1) * query.limit,
        )

        items = [
            {
                "id": row.get("id"),
                "tipo": row.get("tipo"),
                "titulo": row.get("titulo"),
                "precio_sugerido": row.get("precio_sugerido"),
                "descripcion": row.get("descripcion"),
                "creado_en": row.get("creado_en"),
                "fechas": row.get("solicitud_fechas") or [],
            }
            for row in rows
        ]
        return {"page": query.page, "limit": query.limit, "count": len(items), "items": items}

    async def list_mine_paged(self, user_id: str, query: MyRequestsQuery) -> Dict:
        filters = {"usuario_id": eq(user_id)}
        if query.estado:
            filters["estado"] = eq(query.estado)

        rows = await self.gateway.select(
            "solicitudes",
            credentials=self.gateway.as_service(),
            select=SUMMARY_SELECT,
            filters=filters,
            order="creado_en.desc",
            limit=query.limit,
            offset=(query.page - 1) * query.limit,
        )
        items = [_summary(row) for row in rows]
        return {"page": query.page, "limit": query.limit, "count": len(items), "items": items}

    async def list_mine_by_status(self, user_id: str) -> Dict[str, List[Dict]]:
        """Caller's requests grouped by status; unknown statuses are left out."""
        rows = await self.gateway.select(
            "solicitudes",
            credentials=self.gateway.as_service(),
            select=SUMMARY_SELECT,
            filters={"usuario_id": eq(user_id)},
            order="creado_en.desc",
        )

        groups: Dict[str, List[Dict]] = {status: [] for status in STATUSES}
        for row in rows:
            if row.get("estado") in groups:
                groups[row["estado"]].append(_summary(row))
        return groups

    async def get_by_id(self, solicitud_id: str) -> Dict:
        """Full request with every sub-resource embedded."""
        solicitud = await self.gateway.select_one(
            "solicitudes",
            credentials=self.gateway.as_service(),
            select=DETAIL_SELECT,
            filters={"id": eq(solicitud_id)},
        )
        if not solicitud:
            raise NotFoundError("Service request not found")
        return solicitud

    async def cancel(self, solicitud_id: str) -> Dict:
        """Soft-cancel a request. Ownership is checked before this runs."""
        rows = await self.gateway.update(
            "solicitudes",
            {"estado": "CANCELADA"},
            filters={"id": eq(solicitud_id)},
            credentials=self.gateway.as_service(),
        )
        logger.info(f"Cancelled service request {solicitud_id}")
        return {"ok": True, "solicitud": rows[0] if rows else None}
