"""
Business logic for caregiver profiles (`cuidadores`).
"""

import logging
from typing import Dict

from shared.errors import NotFoundError
from shared.gateway import DataGateway, eq
from shared.validation import build_update, require_uuid
from .schemas import UpdateCaregiverPayload, CAREGIVER_COLUMNS, OWN_SELECT, PUBLIC_SELECT

logger = logging.getLogger(__name__)


class CaregiverService:
    """Service class for caregiver profile operations."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def get_my_profile(self, user_id: str) -> Dict:
        """Get the caller's caregiver row joined with its user row."""
        caregiver = await self.gateway.select_one(
            "cuidadores",
            credentials=self.gateway.as_service(),
            select=OWN_SELECT,
            filters={"usuario_id": eq(user_id)},
        )
        if not caregiver:
            raise NotFoundError("You don't have a caregiver profile yet")
        return caregiver

    async def get_public_profile(self, caregiver_id: str) -> Dict:
        """Public view of a caregiver whose user account is active."""
        caregiver = await self.gateway.select_one(
            "cuidadores",
            credentials=self.gateway.as_service(),
            select=PUBLIC_SELECT,
            filters={
                "usuario_id": eq(require_uuid(caregiver_id)),
                "usuario.activo": eq(True),
            },
        )
        if not caregiver:
            raise NotFoundError("Caregiver not found")
        return caregiver

    async def update_my_profile(self, user_id: str, dto: UpdateCaregiverPayload) -> Dict:
        """
        Update the caller's caregiver row with the provided fields.

        Raises:
            NotFoundError: If the caller has no caregiver row
        """
        updates = build_update(dto, CAREGIVER_COLUMNS)
        if not updates:
            caregiver = await self.gateway.select_one(
                "cuidadores",
                credentials=self.gateway.as_service(),
                filters={"usuario_id": eq(user_id)},
            )
            if not caregiver:
                raise NotFoundError("You don't have a caregiver profile yet")
            return {"message": "Profile updated", "cuidador": caregiver}

        rows = await self.gateway.update(
            "cuidadores",
            updates,
            filters={"usuario_id": eq(user_id)},
            credentials=self.gateway.as_service(),
        )
        if not rows:
            raise NotFoundError("You don't have a caregiver profile yet")

        logger.info(f"Updated caregiver profile {user_id}: {', '.join(updates)}")
        return {"message": "Profile updated", "cuidador": rows[0]}
