"""Shared fixtures: a fake data API, fake identity provider and fake object storage."""

import json
from typing import Any, Callable, Dict, List, Optional

import azure.functions as func
import httpx
import jwt
import pytest

from app_factory import create_function_app
from shared.auth import IdentityVerifier
from shared.config import Settings
from shared.container import ServiceContainer
from shared.errors import RemoteOperationFailed
from shared.gateway import DataGateway
from shared.pipeline import RequestPipeline

REST_URL = "https://project.supabase.co/rest/v1"

OWNER_ID = "11111111-1111-4111-8111-111111111111"
CAREGIVER_ID = "22222222-2222-4222-8222-222222222222"
STRANGER_ID = "33333333-3333-4333-8333-333333333333"

Handler = Callable[[httpx.Request], httpx.Response]


def make_token(subject: str, email: Optional[str] = None) -> str:
    """HS256 token as issued by the identity provider."""
    claims = {"sub": subject, "aud": "authenticated", "role": "authenticated"}
    if email:
        claims["email"] = email
    return jwt.encode(claims, "test-jwt-secret-with-enough-length", algorithm="HS256")


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content) if request.content else None


class FakeDataAPI:
    """
    Stands in for PostgREST behind httpx.MockTransport.

    Routes match on method and the path relative to the REST base URL. A route
    answers with a fixed status/body or delegates to a handler. Unmatched
    requests get a 404 so a missing stub fails loudly.
    """

    def __init__(self):
        self.calls: List[httpx.Request] = []
        self._routes: List[Dict[str, Any]] = []

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: Optional[str] = None,
        handler: Optional[Handler] = None,
    ) -> None:
        self._routes.append({
            "method": method,
            "path": path,
            "status": status,
            "json": json,
            "text": text,
            "handler": handler,
        })

    def calls_to(self, path: str, method: Optional[str] = None) -> List[httpx.Request]:
        return [
            request for request in self.calls
            if _relative_path(request) == path and (method is None or request.method == method)
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = _relative_path(request)

        for route in self._routes:
            if route["method"] == request.method and route["path"] == path:
                if route["handler"] is not None:
                    return route["handler"](request)
                if route["text"] is not None:
                    return httpx.Response(route["status"], text=route["text"])
                if route["json"] is None:
                    return httpx.Response(route["status"])
                return httpx.Response(route["status"], json=route["json"])

        return httpx.Response(404, json={"message": f"No stub for {request.method} {path}"})


def _relative_path(request: httpx.Request) -> str:
    prefix = "/rest/v1/"
    path = request.url.path
    return path[len(prefix):] if path.startswith(prefix) else path.lstrip("/")


class FakeIdentityProvider:
    """In-memory identity provider keyed by bearer token."""

    def __init__(self):
        self.users_by_token: Dict[str, Dict] = {}
        self.created: List[Dict] = []
        self.updated: List[Dict] = []
        self.deleted: List[str] = []
        self.get_user_calls = 0
        self.sign_in_result: Optional[Dict] = None
        self.sign_in_error: Optional[RemoteOperationFailed] = None
        self.next_user_id = OWNER_ID

    def add_user(self, user_id: str, email: str = "user@example.com") -> str:
        token = make_token(user_id, email)
        self.users_by_token[token] = {"id": user_id, "email": email}
        return token

    async def get_user(self, token: str) -> Optional[Dict]:
        self.get_user_calls += 1
        user = self.users_by_token.get(token)
        if user is None:
            raise RemoteOperationFailed(401, "invalid JWT: unable to parse or verify signature")
        return user

    async def sign_in(self, email: str, password: str) -> Dict:
        if self.sign_in_error is not None:
            raise self.sign_in_error
        if self.sign_in_result is not None:
            return self.sign_in_result
        return {
            "user": {"id": self.next_user_id, "email": email},
            "session": {"access_token": "access-token", "refresh_token": "refresh-token"},
        }

    async def create_user(self, attributes: Dict) -> Dict:
        self.created.append(attributes)
        return {"id": self.next_user_id, "email": attributes["email"]}

    async def update_user(self, user_id: str, attributes: Dict) -> Dict:
        self.updated.append({"id": user_id, **attributes})
        return {"id": user_id}

    async def delete_user(self, user_id: str) -> None:
        self.deleted.append(user_id)


class FakeStorage:
    """Records uploads and returns predictable URLs."""

    def __init__(self):
        self.uploads: List[Dict] = []

    async def upload(self, bucket: str, path: str, file_data: bytes, content_type: str) -> str:
        self.uploads.append({
            "bucket": bucket,
            "path": path,
            "size": len(file_data),
            "content_type": content_type,
        })
        return f"https://cdn.example.com/{bucket}/{path}"

    async def signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        return f"https://cdn.example.com/sign/{bucket}/{path}?expires={expires_in}"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://project.supabase.co",
        rest_url=REST_URL,
        jwks_url="https://project.supabase.co/auth/v1/.well-known/jwks.json",
        anon_key="anon-key",
        service_role_key="service-role-key",
        environment="test",
    )


@pytest.fixture
def data_api() -> FakeDataAPI:
    return FakeDataAPI()


@pytest.fixture
async def gateway(data_api):
    gateway = DataGateway(
        REST_URL,
        "anon-key",
        "service-role-key",
        transport=httpx.MockTransport(data_api),
    )
    yield gateway
    await gateway.aclose()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def container(settings, gateway, identity, storage) -> ServiceContainer:
    return ServiceContainer(
        settings=settings,
        gateway=gateway,
        identity=identity,
        storage=storage,
        pipeline=RequestPipeline(IdentityVerifier(identity), gateway),
    )


@pytest.fixture
def app(container) -> func.FunctionApp:
    return create_function_app(container)


@pytest.fixture
def call(app):
    """Invoke a registered function by name."""
    handlers = {fn.get_function_name(): fn.get_user_function() for fn in app.get_functions()}

    async def invoke(name: str, request: func.HttpRequest) -> func.HttpResponse:
        result = handlers[name](request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    invoke.handlers = handlers
    return invoke


@pytest.fixture
def owner_token(identity) -> str:
    return identity.add_user(OWNER_ID, "owner@example.com")


@pytest.fixture
def caregiver_token(identity) -> str:
    return identity.add_user(CAREGIVER_ID, "carer@example.com")


@pytest.fixture
def stranger_token(identity) -> str:
    return identity.add_user(STRANGER_ID, "stranger@example.com")


def make_request(
    method: str,
    route: str,
    *,
    token: Optional[str] = None,
    body: Any = None,
    params: Optional[Dict[str, str]] = None,
    route_params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> func.HttpRequest:
    """Build an HttpRequest the way the Functions host hands it to a route."""
    request_headers = dict(headers or {})
    if token:
        request_headers["Authorization"] = f"Bearer {token}"

    if body is None:
        data = b""
    elif isinstance(body, bytes):
        data = body
    else:
        data = json.dumps(body).encode("utf-8")
        request_headers.setdefault("Content-Type", "application/json")

    return func.HttpRequest(
        method=method,
        url=f"http://localhost:7071/api/{route}",
        headers=request_headers,
        params=params or {},
        route_params=route_params or {},
        body=data,
    )


def response_json(response: func.HttpResponse) -> Any:
    return json.loads(response.get_body())
