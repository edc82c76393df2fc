"""
Business logic for user profile operations.
"""

import logging
from typing import Dict

from shared.auth import CallerIdentity
from shared.errors import NotFoundError
from shared.gateway import DataGateway, eq
from shared.validation import build_update, require_uuid
from .schemas import UpdateProfilePayload, PROFILE_COLUMNS, PUBLIC_COLUMNS

logger = logging.getLogger(__name__)


class ProfileService:
    """Service class for the `usuarios` table."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    async def get_profile(self, identity: CallerIdentity) -> Dict:
        """
        Get the caller's own profile row.

        Read with the caller's token, so row-level security applies too.

        Raises:
            NotFoundError: If the caller has no profile row
        """
        profile = await self.gateway.select_one(
            "usuarios",
            credentials=self.gateway.as_caller(identity.token),
            filters={"id": eq(identity.subject_id)},
        )
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    async def update_profile(self, identity: CallerIdentity, dto: UpdateProfilePayload) -> Dict:
        """Update only the profile fields present in the request."""
        updates = build_update(dto, PROFILE_COLUMNS)
        if not updates:
            return await self.get_profile(identity)

        rows = await self.gateway.update(
            "usuarios",
            updates,
            filters={"id": eq(identity.subject_id)},
            credentials=self.gateway.as_caller(identity.token),
        )
        if not rows:
            raise NotFoundError("Profile not found")
        logger.info(f"Updated profile fields {sorted(updates)} for user: {identity.subject_id}")
        return rows[0]

    async def get_public_profile(self, user_id: str) -> Dict:
        """
        Get the public columns of an active user's profile.

        Raises:
            InvalidInputError: If the id is not a UUID
            NotFoundError: If the user doesn't exist or is inactive
        """
        profile = await self.gateway.select_one(
            "usuarios",
            credentials=self.gateway.as_service(),
            select=",".join(PUBLIC_COLUMNS),
            filters={"id": eq(require_uuid(user_id)), "activo": eq(True)},
        )
        if not profile:
            raise NotFoundError("User not found or inactive")
        return {"profile": profile}
