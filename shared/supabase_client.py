"""
Supabase SDK clients for the identity provider and object storage.

Both clients are created once at startup from validated settings and handed to
the services that need them; nothing here reads the environment.
"""

import asyncio
import logging
from typing import Optional
from supabase import create_client, Client, ClientOptions

from .config import Settings
from .errors import RemoteOperationFailed

logger = logging.getLogger(__name__)


def _client_options(settings: Settings) -> ClientOptions:
    # Server-side clients never keep or refresh a user session
    return ClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        storage_client_timeout=int(settings.http_timeout),
    )


def create_identity_client(settings: Settings) -> Client:
    """
    Create the anon-key client used for token lookups and password sign-in.

    Returns:
        Supabase Client instance
    """
    client = create_client(settings.supabase_url, settings.anon_key, options=_client_options(settings))
    logger.info("Supabase identity client initialized")
    return client


def create_sign_in_client(settings: Settings) -> Client:
    """
    Create a short-lived anon-key client for one password sign-in.

    The SDK stores the signed-in session on the client and switches its
    Authorization header to the user's token, so the shared identity client is
    never used for sign-in.
    """
    return create_client(settings.supabase_url, settings.anon_key, options=_client_options(settings))


def create_admin_client(settings: Settings) -> Client:
    """
    Create the service-role client used for admin user management and storage.

    Returns:
        Supabase Client instance with admin privileges
    """
    client = create_client(
        settings.supabase_url, settings.service_role_key, options=_client_options(settings)
    )
    logger.info("Supabase admin client initialized")
    return client


def remote_failure(error: Exception) -> RemoteOperationFailed:
    """
    Convert an SDK exception into RemoteOperationFailed.

    Auth errors carry `status`/`message` attributes; storage errors carry a dict
    with `statusCode`/`message` as their first argument.
    """
    status = getattr(error, "status", None)
    message = getattr(error, "message", None) or str(error)

    detail = error.args[0] if error.args else None
    if isinstance(detail, dict):
        status = status or detail.get("statusCode")
        message = detail.get("message") or detail.get("error") or message

    try:
        status_code: Optional[int] = int(status) if status is not None else None
    except (TypeError, ValueError):
        status_code = None

    return RemoteOperationFailed(status_code, message)


class ObjectStorage:
    """
    Object storage operations on the service-role client.
    """

    def __init__(self, client: Client):
        self.client = client

    @property
    def storage(self):
        """Get the storage client."""
        return self.client.storage

    async def upload(self, bucket: str, path: str, file_data: bytes, content_type: str) -> str:
        """
        Upload a file without overwriting an existing object.

        Args:
            bucket: Storage bucket name
            path: Object path inside the bucket
            file_data: File content as bytes
            content_type: MIME type of the file

        Returns:
            Public URL of the uploaded object

        Raises:
            RemoteOperationFailed: If the storage service rejects the upload
        """
        try:
            await asyncio.to_thread(
                self.storage.from_(bucket).upload,
                path,
                file_data,
                {"content-type": content_type, "upsert": "false"},
            )
            return await asyncio.to_thread(self.storage.from_(bucket).get_public_url, path)
        except Exception as e:
            logger.error(f"Error uploading {bucket}/{path}: {str(e)}")
            raise remote_failure(e) from e

    async def signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        """
        Get a signed URL for an object.

        Args:
            bucket: Storage bucket name
            path: Object path inside the bucket
            expires_in: URL validity in seconds

        Returns:
            Signed URL for the object
        """
        try:
            result = await asyncio.to_thread(
                self.storage.from_(bucket).create_signed_url, path, expires_in
            )
        except Exception as e:
            logger.error(f"Error signing {bucket}/{path}: {str(e)}")
            raise remote_failure(e) from e

        return result.get("signedURL") or result.get("signedUrl") or ""
