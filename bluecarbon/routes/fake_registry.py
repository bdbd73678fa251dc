"""
Stand-in for the remote carbon registry, used in development.

Accepts pushed records, answers health checks, and fails or lags on a
deterministic schedule driven by the ``FAKE_REGISTRY_*`` settings. A
repeated ``Idempotency-Key`` gets the remote id issued the first time.
"""

import asyncio
import hashlib
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException, status
from pydantic import BaseModel

from bluecarbon import conf
from bluecarbon.utils import log

logger = log.get_logger(__name__)

router = APIRouter(prefix="/fake-registry", tags=["fake-registry"])

KIND_PREFIXES = {
    "project": "PRJ",
    "mrv": "MRV",
    "credit": "CRD",
}


class PushResponse(BaseModel):
    accepted: bool
    remote_id: str
    detail: Optional[str] = None


_ACCEPTED: Dict[str, str] = {}
_ATTEMPTS: Dict[str, int] = {}


def _stable_hash_int(value: str) -> int:
    return int(hashlib.sha256(value.encode("utf-8")).hexdigest(), 16)


def _should_fail(seed: str, failure_rate: float) -> bool:
    if failure_rate <= 0:
        return False
    if failure_rate >= 1:
        return True
    value = _stable_hash_int(seed) % 10_000
    return value < int(failure_rate * 10_000)


async def _simulate_latency(seed: str) -> None:
    cfg = conf.get_fake_registry_conf()
    min_ms = cfg.min_latency_ms
    max_ms = cfg.max_latency_ms
    spread = max_ms - min_ms
    latency_ms = min_ms if spread <= 0 else min_ms + (_stable_hash_int(seed) % (spread + 1))
    await asyncio.sleep(latency_ms / 1000)


def reset() -> None:
    _ACCEPTED.clear()
    _ATTEMPTS.clear()


@router.get("/health")
async def health_get() -> Dict[str, str]:
    return {"status": "ok"}


@router.post("/records/{kind}", response_model=PushResponse)
async def record_push(
    kind: str,
    record: Dict[str, Any],
    idempotency_key: Optional[str] = Header(default=None),
) -> PushResponse:
    prefix = KIND_PREFIXES.get(kind)
    if prefix is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown record kind: {kind}",
        )

    key = idempotency_key or f"{kind}-{record.get('id')}"
    if key in _ACCEPTED:
        return PushResponse(accepted=True, remote_id=_ACCEPTED[key], detail="duplicate")

    # The failure roll is per attempt.
    attempt = _ATTEMPTS.get(key, 0) + 1
    _ATTEMPTS[key] = attempt
    await _simulate_latency(f"push:{key}:{attempt}")

    cfg = conf.get_fake_registry_conf()
    if _should_fail(f"push:failure:{key}:{attempt}", cfg.failure_rate):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Fake registry temporary failure. Please retry.",
        )

    remote_id = f"{prefix}-{hashlib.sha256(key.encode('utf-8')).hexdigest()[:10].upper()}"
    _ACCEPTED[key] = remote_id
    logger.info(f"Accepted {kind} record {record.get('id')} as {remote_id}")
    return PushResponse(accepted=True, remote_id=remote_id)
