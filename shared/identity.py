"""
Identity provider (Supabase Auth) operations.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional
from supabase import Client

from .supabase_client import remote_failure

logger = logging.getLogger(__name__)


def _as_dict(model: Any) -> Optional[Dict]:
    """SDK responses are pydantic models; hand plain dicts to the services."""
    if model is None:
        return None
    if isinstance(model, dict):
        return model
    return model.model_dump(mode="json")


class IdentityProvider:
    """
    Wraps the anon-key client (token lookup), a factory of short-lived anon-key
    clients (password sign-in) and the service-role client (admin user management).

    SDK calls are blocking, so each one runs in a worker thread.
    """

    def __init__(
        self,
        identity_client: Client,
        admin_client: Client,
        sign_in_client_factory: Callable[[], Client],
    ):
        self.identity_client = identity_client
        self.admin_client = admin_client
        self.sign_in_client_factory = sign_in_client_factory

    async def get_user(self, token: str) -> Optional[Dict]:
        """Resolve a bearer token to the provider's user record."""
        try:
            response = await asyncio.to_thread(self.identity_client.auth.get_user, token)
        except Exception as e:
            raise remote_failure(e) from e

        if response is None:
            return None
        return _as_dict(response.user)

    async def sign_in(self, email: str, password: str) -> Dict:
        """
        Exchange email and password for a session.

        The session is kept only by a client created for this call.

        Returns:
            dict with "user" and "session"
        """
        def sign_in_once():
            client = self.sign_in_client_factory()
            return client.auth.sign_in_with_password({"email": email, "password": password})

        try:
            response = await asyncio.to_thread(sign_in_once)
        except Exception as e:
            logger.warning(f"Sign-in refused for {email}: {str(e)}")
            raise remote_failure(e) from e

        return {
            "user": _as_dict(response.user),
            "session": _as_dict(response.session),
        }

    async def create_user(self, attributes: Dict) -> Dict:
        """Create a user through the admin API."""
        try:
            response = await asyncio.to_thread(self.admin_client.auth.admin.create_user, attributes)
        except Exception as e:
            raise remote_failure(e) from e

        return _as_dict(response.user)

    async def update_user(self, user_id: str, attributes: Dict) -> Dict:
        """Update a user's email, password or metadata through the admin API."""
        try:
            response = await asyncio.to_thread(
                self.admin_client.auth.admin.update_user_by_id, user_id, attributes
            )
        except Exception as e:
            raise remote_failure(e) from e

        return _as_dict(response.user)

    async def delete_user(self, user_id: str) -> None:
        """Delete a user through the admin API."""
        try:
            await asyncio.to_thread(self.admin_client.auth.admin.delete_user, user_id)
        except Exception as e:
            raise remote_failure(e) from e
