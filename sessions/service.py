"""
Business logic for care sessions (`sesiones`).

Every lifecycle transition is a single stored-procedure call; the procedure
checks the actor's role and the session state atomically.
"""

import logging
from typing import Any, Dict, List, Optional

from shared.errors import ForbiddenError
from shared.gateway import DataGateway, eq
from shared.permissions import OwnershipCheck
from .schemas import ReviewPayload

logger = logging.getLogger(__name__)

PARTICIPANT_SELECT = "id,cuidador_id,solicitud:solicitudes!sesiones_solicitud_id_fkey(usuario_id)"


def session_participant(session_id: str) -> OwnershipCheck:
    """Caregiver or requester of the session's service request."""
    return OwnershipCheck(
        table="sesiones",
        row_id=session_id,
        owner_columns=("cuidador_id", "solicitud.usuario_id"),
        select=PARTICIPANT_SELECT,
        resource="Session",
        forbidden_message="You are not a participant of this session",
    )


class SessionService:
    """Service class for care session operations."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def _transition(self, procedure: str, args: Dict) -> Any:
        result = await self.gateway.rpc(procedure, args, credentials=self.gateway.as_service())
        logger.info(f"{procedure} succeeded for actor {args.get('p_actor_id')}")
        return result

    async def create_from_match(self, actor_id: str, asignacion_id: str) -> Any:
        return await self._transition(
            "rpc_sesion_crear_desde_asignacion",
            {"p_asignacion_id": asignacion_id, "p_actor_id": actor_id},
        )

    async def propose_check_in(self, actor_id: str, session_id: str, notas: Optional[str]) -> Any:
        return await self._transition(
            "rpc_sesion_check_in_proponer_simple",
            {"p_sesion_id": session_id, "p_actor_id": actor_id, "p_notas": notas},
        )

    async def confirm_check_in(self, actor_id: str, session_id: str) -> Any:
        return await self._transition(
            "rpc_sesion_check_in_confirmar_simple",
            {"p_sesion_id": session_id, "p_actor_id": actor_id},
        )

    async def propose_check_out(self, actor_id: str, session_id: str, resumen: Optional[str]) -> Any:
        return await self._transition(
            "rpc_sesion_check_out_proponer_simple",
            {"p_sesion_id": session_id, "p_actor_id": actor_id, "p_resumen": resumen},
        )

    async def confirm_check_out(self, actor_id: str, session_id: str, resumen: Optional[str]) -> Any:
        return await self._transition(
            "rpc_sesion_check_out_confirmar_simple",
            {"p_sesion_id": session_id, "p_actor_id": actor_id, "p_resumen": resumen},
        )

    async def create_review(self, actor_id: str, session: Dict, dto: ReviewPayload) -> Dict:
        """
        Review the other participant of a session.

        Args:
            actor_id: The reviewing user
            session: Participant row read by the ownership check
            dto: Review input

        Raises:
            ForbiddenError: If the caller is on the wrong side of the session
        """
        caregiver_id = session.get("cuidador_id")
        requester_id = (session.get("solicitud") or {}).get("usuario_id")

        if dto.para == "CUIDADOR":
            if requester_id != actor_id:
                raise ForbiddenError("Only the requester can review the caregiver")
            to_user, rol_from = caregiver_id, "SOLICITANTE"
        else:
            if caregiver_id != actor_id:
                raise ForbiddenError("Only the caregiver can review the user")
            to_user, rol_from = requester_id, "CUIDADOR"

        resena = await self.gateway.insert_one(
            "sesiones_resenas",
            {
                "sesion_id": session["id"],
                "from_user_id": actor_id,
                "to_user_id": to_user,
                "rol_from": rol_from,
                "rating": dto.rating,
                "comentario": dto.comentario,
            },
            credentials=self.gateway.as_service(),
        )
        return {"message": "Review submitted", "resena": resena}

    async def get(self, session_id: str) -> Optional[Dict]:
        return await self.gateway.select_one(
            "sesiones",
            credentials=self.gateway.as_service(),
            filters={"id": eq(session_id)},
        )

    async def list_mine(self, user_id: str, rol: str) -> List[Dict]:
        """Sessions where the caller is the caregiver, or the requester of the parent request."""
        if rol == "CUIDADOR":
            return await self.gateway.select(
                "sesiones",
                credentials=self.gateway.as_service(),
                filters={"cuidador_id": eq(user_id)},
                order="creado_en.desc",
            )

        return await self.gateway.select(
            "sesiones",
            credentials=self.gateway.as_service(),
            select="*,solicitud:solicitudes!sesiones_solicitud_id_fkey!inner(usuario_id)",
            filters={"solicitud.usuario_id": eq(user_id)},
            order="creado_en.desc",
        )
