import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class EnvVarSpec:
    """Declaration of a single environment variable.

    ``parse`` turns the raw string into the typed value, ``type`` is the
    pydantic-style ``(type, default)`` tuple used when the value is fed into
    a conf model.
    """
    id: str
    default: Optional[str] = None
    parse: Callable[[str], Any] = field(default=lambda x: x)
    type: Tuple[Any, Any] = (str, ...)
    is_optional: bool = False
    is_secret: bool = False


def get_raw(spec: EnvVarSpec) -> Optional[str]:
    value = os.environ.get(spec.id)
    if value is None or value == "":
        return spec.default
    return value


def parse(spec: EnvVarSpec) -> Any:
    raw = get_raw(spec)
    if raw is None:
        return None
    return spec.parse(raw)


def validate(specs: List[EnvVarSpec]) -> bool:
    """Check that every required variable is present and parses."""
    ok = True
    for spec in specs:
        raw = get_raw(spec)
        if raw is None:
            if not spec.is_optional:
                logger.error(f"Missing required environment variable {spec.id}")
                ok = False
            continue
        try:
            spec.parse(raw)
        except (ValueError, TypeError) as e:
            shown = "***" if spec.is_secret else raw
            logger.error(f"Invalid value for {spec.id}={shown!r}: {e}")
            ok = False
    return ok
