"""
Process-wide collaborators, built once at startup and passed to every route.
"""

import functools
import logging
from dataclasses import dataclass
from jwt import PyJWKClient

from .auth import IdentityVerifier
from .config import Settings
from .gateway import DataGateway
from .identity import IdentityProvider
from .pipeline import RequestPipeline
from .supabase_client import (
    ObjectStorage, create_admin_client, create_identity_client, create_sign_in_client
)

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    gateway: DataGateway
    identity: IdentityProvider
    storage: ObjectStorage
    pipeline: RequestPipeline


def build_container(settings: Settings) -> ServiceContainer:
    """Create the SDK clients, the data gateway and the request pipeline."""
    identity_client = create_identity_client(settings)
    admin_client = create_admin_client(settings)

    gateway = DataGateway(
        settings.rest_url,
        settings.anon_key,
        settings.service_role_key,
        timeout=settings.http_timeout,
    )
    identity = IdentityProvider(
        identity_client,
        admin_client,
        functools.partial(create_sign_in_client, settings),
    )

    logger.info(f"Initializing JWKS client with URL: {settings.jwks_url}")
    verifier = IdentityVerifier(identity, PyJWKClient(settings.jwks_url, cache_keys=True))

    return ServiceContainer(
        settings=settings,
        gateway=gateway,
        identity=identity,
        storage=ObjectStorage(admin_client),
        pipeline=RequestPipeline(verifier, gateway),
    )
