"""
HTTP gateway to the Supabase relational data API (PostgREST).

One long-lived AsyncClient is created at startup and shared by every request.
The gateway attaches credentials and normalizes responses; it never decides
whether the caller is allowed to touch a row. Ownership is checked by the
Request Pipeline before service credentials are used.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .errors import RemoteOperationFailed

logger = logging.getLogger(__name__)

RETURN_REPRESENTATION = "return=representation"
RETURN_MINIMAL = "return=minimal"
MERGE_DUPLICATES = "resolution=merge-duplicates"


def eq(value: Any) -> str:
    """PostgREST equality filter."""
    return f"eq.{_literal(value)}"


def neq(value: Any) -> str:
    """PostgREST inequality filter."""
    return f"neq.{_literal(value)}"


def in_(values: Iterable[Any]) -> str:
    """PostgREST membership filter."""
    return f"in.({','.join(_literal(v) for v in values)})"


def not_in(values: Iterable[Any]) -> str:
    """PostgREST negated membership filter."""
    return f"not.in.({','.join(_literal(v) for v in values)})"


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


@dataclass(frozen=True)
class Credentials:
    """Headers identifying who an outbound call runs as."""

    mode: str
    api_key: str = field(repr=False)
    bearer: str = field(repr=False)

    def headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.bearer}",
        }


@dataclass
class ProxyRequest:
    """A single outbound call against the data API."""

    method: str
    resource: str
    params: Dict[str, Any] = field(default_factory=dict)
    body: Any = None
    prefer: Optional[str] = None


class DataGateway:
    """
    Thin client for table CRUD and stored-procedure calls.

    Every primitive makes exactly one outbound request: no retries, no backoff.
    """

    def __init__(
        self,
        rest_url: str,
        anon_key: str,
        service_role_key: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rest_url = rest_url.rstrip("/")
        self._anon_key = anon_key
        self._service = Credentials("service", service_role_key, service_role_key)
        self._client = httpx.AsyncClient(
            base_url=self.rest_url,
            timeout=timeout,
            transport=transport,
        )

    def as_service(self) -> Credentials:
        """Elevated credentials. Only use after the caller has been authorized."""
        return self._service

    def as_caller(self, token: str) -> Credentials:
        """Run the call as the authenticated caller (row-level security applies)."""
        return Credentials("caller", self._anon_key, token)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def execute(self, request: ProxyRequest, credentials: Credentials) -> Any:
        """
        Send one request and return the parsed JSON body.

        Returns:
            Parsed JSON, or None when the response body is empty

        Raises:
            RemoteOperationFailed: On any non-2xx status, timeout or transport error
        """
        headers = {**credentials.headers(), "Content-Type": "application/json"}
        if request.prefer:
            headers["Prefer"] = request.prefer

        content = None
        if request.body is not None:
            content = json.dumps(request.body)

        try:
            response = await self._client.request(
                request.method,
                f"/{request.resource}",
                params=request.params or None,
                content=content,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{request.method} {request.resource} timed out ({credentials.mode})")
            raise RemoteOperationFailed(None, f"Timed out calling {request.resource}") from e
        except httpx.HTTPError as e:
            logger.warning(f"{request.method} {request.resource} transport error: {str(e)}")
            raise RemoteOperationFailed(None, f"Could not reach data API: {str(e)}") from e

        text = response.text
        if not response.is_success:
            logger.warning(
                f"{request.method} {request.resource} failed with "
                f"{response.status_code}: {text}"
            )
            raise RemoteOperationFailed(response.status_code, text)

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except ValueError as e:
            raise RemoteOperationFailed(
                response.status_code,
                f"Invalid JSON returned by {request.resource}"
            ) from e

    async def select(
        self,
        table: str,
        *,
        credentials: Credentials,
        select: str = "*",
        filters: Optional[Dict[str, str]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Dict]:
        """Filtered read. An empty body means no rows."""
        params: Dict[str, Any] = {"select": select, **(filters or {})}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset

        data = await self.execute(ProxyRequest("GET", table, params), credentials)
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    async def select_one(
        self,
        table: str,
        *,
        credentials: Credentials,
        select: str = "*",
        filters: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict]:
        """Read the first matching row, or None."""
        rows = await self.select(
            table, credentials=credentials, select=select, filters=filters, limit=1
        )
        return rows[0] if rows else None

    async def insert(
        self,
        table: str,
        rows: Any,
        *,
        credentials: Credentials,
        returning: bool = True,
    ) -> List[Dict]:
        """Insert one row (dict) or many (list of dicts)."""
        prefer = RETURN_REPRESENTATION if returning else RETURN_MINIMAL
        data = await self.execute(
            ProxyRequest("POST", table, body=rows, prefer=prefer), credentials
        )
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    async def insert_one(self, table: str, row: Dict, *, credentials: Credentials) -> Dict:
        """Insert a single row and return its representation."""
        rows = await self.insert(table, row, credentials=credentials)
        if not rows:
            raise RemoteOperationFailed(None, f"Insert into {table} returned no rows")
        return rows[0]

    async def upsert(
        self,
        table: str,
        row: Dict,
        *,
        on_conflict: str,
        credentials: Credentials,
    ) -> List[Dict]:
        """Insert or merge a row on the given conflict column."""
        data = await self.execute(
            ProxyRequest(
                "POST",
                table,
                params={"on_conflict": on_conflict},
                body=row,
                prefer=f"{MERGE_DUPLICATES},{RETURN_REPRESENTATION}",
            ),
            credentials,
        )
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    async def update(
        self,
        table: str,
        values: Dict,
        *,
        filters: Dict[str, str],
        credentials: Credentials,
        returning: bool = True,
    ) -> List[Dict]:
        """Patch every row matching the filters."""
        prefer = RETURN_REPRESENTATION if returning else RETURN_MINIMAL
        data = await self.execute(
            ProxyRequest("PATCH", table, params=dict(filters), body=values, prefer=prefer),
            credentials,
        )
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    async def delete(
        self,
        table: str,
        *,
        filters: Dict[str, str],
        credentials: Credentials,
    ) -> None:
        """Delete every row matching the filters."""
        await self.execute(
            ProxyRequest("DELETE", table, params=dict(filters), prefer=RETURN_MINIMAL),
            credentials,
        )

    async def rpc(self, name: str, args: Dict, *, credentials: Credentials) -> Any:
        """Invoke a stored procedure and return its result verbatim."""
        return await self.execute(ProxyRequest("POST", f"rpc/{name}", body=args), credentials)
