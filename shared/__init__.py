# Shared utilities for the care-marketplace BFF
from .auth import CallerIdentity, IdentityVerifier, extract_bearer_token
from .config import ConfigError, Settings, load_settings
from .errors import (
    ServiceError, UnauthorizedError, ForbiddenError, NotFoundError, InvalidInputError,
    ConflictError, RemoteOperationFailed, InternalError
)
from .gateway import DataGateway, ProxyRequest
from .permissions import OwnershipCheck, owned_by
from .pipeline import RequestContext, RequestPipeline

__all__ = [
    "CallerIdentity",
    "IdentityVerifier",
    "extract_bearer_token",
    "ConfigError",
    "Settings",
    "load_settings",
    "ServiceError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "InvalidInputError",
    "ConflictError",
    "RemoteOperationFailed",
    "InternalError",
    "DataGateway",
    "ProxyRequest",
    "OwnershipCheck",
    "owned_by",
    "RequestContext",
    "RequestPipeline",
]
