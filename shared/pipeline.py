"""
The authenticated-proxy request pipeline.

Every guarded route runs the same steps:

    Start -> Authenticated -> Authorized -> Executed -> Shaped -> Responded | Failed

Authentication and ownership checks happen before the route's operation runs;
any step may short-circuit with a ServiceError, which is mapped to a JSON error
response. The operation itself is one gateway call or a short ordered sequence
of calls supplied by the route.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Type
import azure.functions as func
from pydantic import BaseModel

from .auth import CallerIdentity, IdentityVerifier, extract_bearer_token
from .errors import InternalError, ServiceError
from .gateway import DataGateway
from .permissions import OwnershipCheck, check_ownership
from .responses import (
    success_response, no_content_response, service_error_response, internal_error_response
)
from .validation import parse_body, parse_query

logger = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    START = "start"
    AUTHENTICATED = "authenticated"
    AUTHORIZED = "authorized"
    EXECUTED = "executed"
    SHAPED = "shaped"
    RESPONDED = "responded"


@dataclass
class RequestContext:
    """Request-scoped state handed to the route's operation."""

    request: func.HttpRequest
    identity: Optional[CallerIdentity] = None
    body: Any = None
    query: Any = None
    owned: List[Dict] = field(default_factory=list)

    @property
    def subject_id(self) -> str:
        if self.identity is None:
            raise InternalError("Route requires an authenticated caller")
        return self.identity.subject_id

    def route_param(self, name: str) -> str:
        return self.request.route_params.get(name, "")


Operation = Callable[[RequestContext], Awaitable[Any]]
ChecksFactory = Callable[[RequestContext], Sequence[OwnershipCheck]]


class RequestPipeline:
    """Runs authenticate -> authorize -> execute -> shape for one request."""

    def __init__(self, verifier: IdentityVerifier, gateway: DataGateway):
        self.verifier = verifier
        self.gateway = gateway

    async def authenticate(self, req: func.HttpRequest) -> CallerIdentity:
        token = extract_bearer_token(req)
        return await self.verifier.verify(token)

    async def authorize(
        self,
        identity: CallerIdentity,
        checks: Sequence[OwnershipCheck]
    ) -> List[Dict]:
        """Run every ownership check in order; the first failure stops."""
        rows = []
        for check in checks:
            rows.append(await check_ownership(self.gateway, identity, check))
        return rows

    async def handle(
        self,
        req: func.HttpRequest,
        operation: Operation,
        *,
        checks: Optional[ChecksFactory] = None,
        body: Optional[Type[BaseModel]] = None,
        query: Optional[Type[BaseModel]] = None,
        shape: Optional[Callable[[Any], Any]] = None,
        public: bool = False,
        status_code: int = 200,
        action: str = "process request",
    ) -> func.HttpResponse:
        """
        Handle one HTTP request.

        Args:
            req: The inbound request
            operation: Primary operation, called with the RequestContext
            checks: Builds the ownership checks for this request
            body: Model the JSON body must satisfy
            query: Model the query string must satisfy
            shape: Reshapes the operation result before serialization
            public: Skip authentication (register, login, health)
            status_code: Status of a successful response
            action: Used in log lines and the generic 500 message

        Returns:
            The HTTP response; errors never propagate out of this method
        """
        state = PipelineState.START
        ctx = RequestContext(request=req)
        try:
            if not public:
                ctx.identity = await self.authenticate(req)
                state = PipelineState.AUTHENTICATED

            if body is not None:
                ctx.body = parse_body(req, body)
            if query is not None:
                ctx.query = parse_query(req, query)

            if checks is not None:
                if ctx.identity is None:
                    raise InternalError("Ownership checks require an authenticated caller")
                ctx.owned = await self.authorize(ctx.identity, checks(ctx))
            state = PipelineState.AUTHORIZED

            result = await operation(ctx)
            state = PipelineState.EXECUTED

            if shape is not None:
                result = shape(result)
            state = PipelineState.SHAPED

            if status_code == 204:
                response = no_content_response()
            else:
                response = success_response(result, status_code=status_code)
            state = PipelineState.RESPONDED
            return response

        except ServiceError as e:
            logger.warning(
                f"Failed to {action} after state {state.value}: "
                f"{e.kind} ({e.http_status}) {e.message}"
            )
            return service_error_response(e)
        except Exception as e:
            logger.exception(f"Unexpected error while trying to {action}: {str(e)}")
            return internal_error_response(f"Failed to {action}")
