"""
Business logic for account operations: registration, login and account state.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from shared.auth import CallerIdentity
from shared.errors import InternalError, NotFoundError, RemoteOperationFailed, UnauthorizedError
from shared.gateway import DataGateway, eq
from shared.identity import IdentityProvider
from shared.validation import build_update
from .schemas import (
    DeactivatePayload, LoginPayload, RegisterPayload, UpdateAccountPayload, PROFILE_COLUMNS
)

logger = logging.getLogger(__name__)


class AccountService:
    """Service class for account lifecycle operations."""

    def __init__(self, gateway: DataGateway, identity: IdentityProvider):
        self.gateway = gateway
        self.identity = identity

    async def register(self, dto: RegisterPayload) -> Dict:
        """
        Create the auth user, then its `usuarios` profile, then sign in.

        If the profile cannot be written the auth user is deleted again so the
        email can be reused.

        Returns:
            dict with message, user, profile and session
        """
        user = await self.identity.create_user({
            "email": dto.email,
            "password": dto.password,
            "email_confirm": True,
            "user_metadata": {"name": dto.name},
            "app_metadata": {"role": "user"},
        })
        if not user or not user.get("id"):
            raise InternalError("No user created")

        user_id = user["id"]
        logger.info(f"Created auth user {user_id}")

        try:
            rows = await self.gateway.upsert(
                "usuarios",
                {
                    "id": user_id,
                    "correo": dto.email,
                    "nombre_completo": dto.name,
                    "telefono_e164": dto.telefono_e164,
                    "pais_iso2": dto.pais_iso2,
                    "genero": dto.genero,
                    "foto_url": dto.foto_url,
                    "dni": dto.dni,
                },
                on_conflict="id",
                credentials=self.gateway.as_service(),
            )
        except RemoteOperationFailed as e:
            logger.error(f"Profile creation failed for {user_id}, removing auth user")
            await self._rollback_user(user_id)
            raise RemoteOperationFailed(
                e.status_code, f"Error creating profile: {e.raw_message}"
            ) from e

        login = await self.login(LoginPayload(email=dto.email, password=dto.password))

        return {
            "message": "User registered successfully",
            "user": {"id": user_id, "email": dto.email},
            "profile": rows[0] if rows else None,
            "session": login["session"],
        }

    async def _rollback_user(self, user_id: str) -> None:
        try:
            await self.identity.delete_user(user_id)
        except RemoteOperationFailed as e:
            logger.error(f"Could not remove auth user {user_id}: {e.raw_message}")

    async def login(self, dto: LoginPayload) -> Dict:
        """
        Sign in with email and password and attach the profile.

        A missing profile does not fail the login.
        """
        result = await self.identity.sign_in(dto.email, dto.password)
        if not result.get("session"):
            raise UnauthorizedError("Could not sign in")

        profile: Optional[Dict] = None
        try:
            profile = await self.gateway.select_one(
                "usuarios",
                credentials=self.gateway.as_service(),
                filters={"correo": eq(dto.email)},
            )
        except RemoteOperationFailed as e:
            logger.warning(f"Login succeeded without profile for {dto.email}: {e.raw_message}")

        if profile is None:
            logger.warning(f"Login succeeded without profile for {dto.email}")

        return {
            "message": "Signed in successfully",
            "user": result["user"],
            "profile": profile,
            "session": result["session"],
        }

    async def update_account(self, identity: CallerIdentity, dto: UpdateAccountPayload) -> Dict:
        """
        Update auth credentials (email, password, name) and the profile row.

        Only fields present in the request are written.
        """
        user_id = identity.subject_id
        provided = dto.model_fields_set

        if provided & {"email", "password", "name"}:
            attributes: Dict = {}
            if "email" in provided and dto.email:
                attributes["email"] = dto.email
                attributes["email_confirm"] = True
            if "password" in provided and dto.password:
                attributes["password"] = dto.password
            if "name" in provided and dto.name:
                attributes["user_metadata"] = {"name": dto.name}
            if attributes:
                await self.identity.update_user(user_id, attributes)

        updates = build_update(dto, PROFILE_COLUMNS)
        if updates:
            rows = await self.gateway.update(
                "usuarios",
                updates,
                filters={"id": eq(user_id)},
                credentials=self.gateway.as_service(),
            )
            profile = rows[0] if rows else None
        else:
            profile = await self.gateway.select_one(
                "usuarios",
                credentials=self.gateway.as_service(),
                filters={"id": eq(user_id)},
            )

        return {
            "message": "Account updated successfully",
            "user": {"id": user_id, "email": dto.email or identity.email},
            "profile": profile,
        }

    async def deactivate(self, identity: CallerIdentity, dto: DeactivatePayload) -> Dict:
        """Mark the caller's profile inactive, recording when and why."""
        profile = await self._set_state(identity.subject_id, {
            "activo": False,
            "desactivado_en": datetime.now(timezone.utc).isoformat(),
            "desactivado_motivo": dto.reason,
        })
        logger.info(f"Deactivated account {identity.subject_id}")
        return {"ok": True, "profile": profile}

    async def reactivate(self, identity: CallerIdentity) -> Dict:
        """Mark the caller's profile active again. Safe to repeat."""
        profile = await self._set_state(identity.subject_id, {
            "activo": True,
            "desactivado_en": None,
            "desactivado_motivo": None,
        })
        return {"ok": True, "profile": profile}

    async def _set_state(self, user_id: str, values: Dict) -> Dict:
        rows = await self.gateway.update(
            "usuarios",
            values,
            filters={"id": eq(user_id)},
            credentials=self.gateway.as_service(),
        )
        if not rows:
            raise NotFoundError("Profile not found")
        return rows[0]
