"""
Hosted Database REST Client

PostgREST client for the storefront's hosted relational backend. Reads raise
FetchError and inserts raise OrderWriteError; HTTP and transport errors are
never retried here.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ...domain.cache.repository_interfaces import StorefrontBackend
from ..storage.exceptions import (
    BackendConfigurationError,
    FetchError,
    OrderWriteError,
)

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)

_SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class RestBackend(StorefrontBackend):
    """
    Async PostgREST backend.

    Args:
        base_url: Project URL; requests go to ``{base_url}/rest/v1/{table}``
        api_key: Public API key sent as ``apikey`` and bearer token
        timeout: Request timeout in seconds
        client: Optional preconfigured httpx.AsyncClient
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not base_url:
            raise BackendConfigurationError(
                "Backend URL is required", config_key="BACKEND_URL"
            )
        if not api_key:
            raise BackendConfigurationError(
                "Backend API key is required", config_key="BACKEND_API_KEY"
            )

        self._client = client or httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            timeout=timeout,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
        )

    async def select(
        self,
        table: str,
        columns: str = "*",
        order: Optional[str] = None,
        filters: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {"select": columns}
        if order:
            params["order"] = order
        if filters:
            params.update(filters)

        with tracer.start_as_current_span("backend.select") as span:
            span.set_attribute("backend.table", table)
            payload = await self._read(table, params, span)

            if not isinstance(payload, list):
                span.set_status(Status(StatusCode.ERROR, "unexpected payload"))
                raise FetchError(table)

            span.set_attribute("backend.row_count", len(payload))
            return payload

    async def select_single(
        self, table: str, columns: str = "*"
    ) -> Optional[Dict[str, Any]]:
        with tracer.start_as_current_span("backend.select_single") as span:
            span.set_attribute("backend.table", table)
            payload = await self._read(
                table, {"select": columns}, span, headers={"Accept": _SINGLE_OBJECT}
            )

            if payload is not None and not isinstance(payload, dict):
                span.set_status(Status(StatusCode.ERROR, "unexpected payload"))
                raise FetchError(table)
            return payload

    async def insert(
        self, table: str, rows: Sequence[Mapping[str, Any]]
    ) -> List[Dict[str, Any]]:
        with tracer.start_as_current_span("backend.insert") as span:
            span.set_attribute("backend.table", table)
            span.set_attribute("backend.row_count", len(rows))

            try:
                response = await self._client.post(
                    f"/{table}",
                    json=list(rows),
                    headers={"Prefer": "return=representation"},
                )
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise OrderWriteError(
                    message=f"Insert into {table} was rejected",
                    details={
                        "table": table,
                        "status_code": e.response.status_code,
                        "body": e.response.text[:500],
                    },
                    original_error=e,
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise OrderWriteError(
                    message=f"Insert into {table} failed",
                    details={"table": table},
                    original_error=e,
                ) from e

    async def _read(
        self,
        table: str,
        params: Mapping[str, str],
        span: trace.Span,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        try:
            response = await self._client.get(f"/{table}", params=params, headers=headers)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise FetchError(
                table, status_code=e.response.status_code, original_error=e
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise FetchError(table, original_error=e) from e

    async def close(self) -> None:
        await self._client.aclose()
