"""Registry client: pushes local records to the remote registry.

The sync coordinator only depends on the :class:`RegistryClient` protocol
(``push`` + ``ping``), so tests and alternative transports can stand in for
the HTTP implementation.
"""

from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import BaseModel

from bluecarbon.utils import log

from .exceptions import (
    RegistryConnectionError,
    RegistryPushError,
    RegistryTimeoutError,
)

logger = log.get_logger(__name__)


class PushResult(BaseModel):
    success: bool
    remote_id: Optional[str] = None
    detail: Optional[str] = None


class RegistryClient(Protocol):
    async def push(self, kind: str, record: Dict[str, Any]) -> PushResult:
        ...

    async def ping(self) -> bool:
        ...


class HttpRegistryClient:
    """Registry client over ``httpx.AsyncClient``.

    Usage::

        client = HttpRegistryClient("http://localhost:8000/fake-registry")
        result = await client.push("project", project.model_dump(mode="json"))
        await client.aclose()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    async def push(self, kind: str, record: Dict[str, Any]) -> PushResult:
        """Send one record. The idempotency key makes repeated pushes safe."""
        headers = {"Idempotency-Key": f"{kind}-{record.get('id')}"}
        try:
            resp = await self._client.post(f"/records/{kind}", json=record, headers=headers)
        except httpx.TimeoutException as e:
            raise RegistryTimeoutError(f"Registry timed out pushing {kind}: {e}") from e
        except httpx.HTTPError as e:
            raise RegistryConnectionError(f"Registry unreachable pushing {kind}: {e}") from e

        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            raise RegistryPushError(
                f"HTTP Error {resp.status_code}: {detail}",
                status_code=resp.status_code,
            )

        body = resp.json() if resp.content else {}
        return PushResult(
            success=bool(body.get("accepted", True)),
            remote_id=body.get("remote_id"),
            detail=body.get("detail"),
        )

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def ping(self) -> bool:
        try:
            resp = await self._client.get("/health")
        except httpx.HTTPError as e:
            logger.debug(f"Registry health check failed: {e}")
            return False
        return resp.status_code < 400

    async def aclose(self) -> None:
        await self._client.aclose()
