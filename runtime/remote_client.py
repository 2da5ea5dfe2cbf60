# ============================================================================
# REMOTE DATABASE CLIENT
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Runtime - Hosted database over HTTP
# PURPOSE: Token-authenticated run/batch against the remote query endpoint
# CREATED: 19 OCT 2026
# ============================================================================
"""
Remote Database Client

Talks to the hosted database's query endpoint:

    POST {remote_db_url}/db/query
    Authorization: Bearer <app token>

    body: {"sql": "...", "args": [...]}            -> one result
    body: [{"sql": "...", "args": [...]}, ...]     -> list of results, atomic

Each result is {"columns": [...], "rows": [[...]], "rowsAffected": n,
"lastInsertRowid": n}.
"""

import logging
from typing import Any, List, Optional, Sequence

import httpx

from core.config.defaults import RemoteDefaults
from core.contracts import ENV_APP_TOKEN
from core.errors import MissingAppTokenError, RemoteDatabaseError
from runtime.statement import (
    QueryResult,
    StatementLike,
    as_statement,
    batch_payload,
    to_payload,
)

logger = logging.getLogger(__name__)


class RemoteDatabaseClient:
    """httpx-backed implementation of DatabaseClient."""

    def __init__(
        self,
        app_token: Optional[str],
        remote_db_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not app_token:
            raise MissingAppTokenError(ENV_APP_TOKEN)
        self._app_token = app_token
        self.remote_db_url = remote_db_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def query_url(self) -> str:
        return f"{self.remote_db_url}/db/query"

    async def _post(self, payload: Any) -> Any:
        headers = {"Authorization": f"Bearer {self._app_token}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.query_url, json=payload, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteDatabaseError(
                f"Remote database returned {status}: {e.response.text}",
                status_code=status,
            ) from e
        except httpx.TimeoutException as e:
            raise RemoteDatabaseError(f"Remote database timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RemoteDatabaseError(f"Remote database unreachable at {self.remote_db_url}: {e}") from e

    async def run(self, statement: StatementLike) -> QueryResult:
        data = await self._post(to_payload(as_statement(statement)))
        return QueryResult.from_payload(data)

    async def batch(self, statements: Sequence[StatementLike]) -> List[QueryResult]:
        prepared = [as_statement(s) for s in statements]
        data = await self._post(batch_payload(prepared))
        if not isinstance(data, list) or len(data) != len(prepared):
            raise RemoteDatabaseError(
                f"Remote database returned a malformed batch response for {len(prepared)} statements"
            )
        return [QueryResult.from_payload(item) for item in data]

    def close(self) -> None:
        """Connections are per request; nothing to release."""

    def __repr__(self) -> str:
        return f"RemoteDatabaseClient(remote_db_url={self.remote_db_url!r})"


def create_remote_database_client(
    app_token: Optional[str],
    remote_db_url: str,
    timeout: Optional[float] = None,
) -> RemoteDatabaseClient:
    """
    Factory used by generated module source.

    The request timeout defaults to QUARRY_REMOTE_TIMEOUT_SECONDS (30s).
    """
    if timeout is None:
        timeout = RemoteDefaults.from_env().request_timeout_seconds
    logger.debug(f"Connecting to remote database at {remote_db_url} (timeout {timeout}s)")
    return RemoteDatabaseClient(app_token, remote_db_url, timeout=timeout)


__all__ = ["RemoteDatabaseClient", "create_remote_database_client"]
