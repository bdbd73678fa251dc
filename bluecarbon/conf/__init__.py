from pathlib import Path
from typing import List

from pydantic import BaseModel

from bluecarbon.utils import env, log
from bluecarbon.utils.env import EnvVarSpec

logger = log.get_logger(__name__)

#### Types ####

class HttpServerConf(BaseModel):
    host: str
    port: int
    autoreload: bool

class StoreConf(BaseModel):
    data_dir: Path
    seed_sample_data: bool

class RegistryConf(BaseModel):
    url: str
    push_timeout_seconds: float

class ConnectivityConf(BaseModel):
    assume_online: bool
    probe_interval_seconds: int

class SyncConf(BaseModel):
    sync_on_reconnect: bool

class FakeRegistryConf(BaseModel):
    failure_rate: float
    min_latency_ms: int
    max_latency_ms: int

#### Constants ####

KNOWN_METHODOLOGIES = ["VM0033", "AR-ACM0003", "AMS-III.BF"]

#### Env Vars ####

def _parse_bool(x: str) -> bool:
    return x.strip().lower() == "true"

## Logging ##

LOG_LEVEL = EnvVarSpec(id="LOG_LEVEL", default="INFO")

ENVIRONMENT = EnvVarSpec(id="ENVIRONMENT", default="development")

## Local store ##

DATA_DIR = EnvVarSpec(
    id="DATA_DIR",
    default=str(Path.home() / ".bluecarbon"),
    parse=Path,
    type=(Path, ...),
)

SEED_SAMPLE_DATA = EnvVarSpec(
    id="SEED_SAMPLE_DATA",
    default="false",
    parse=_parse_bool,
    type=(bool, ...),
)

EXTRA_METHODOLOGIES = EnvVarSpec(id="EXTRA_METHODOLOGIES", is_optional=True)

## Remote registry ##

REGISTRY_URL = EnvVarSpec(id="REGISTRY_URL", default="http://localhost:8000/fake-registry")

REGISTRY_PUSH_TIMEOUT_SECONDS = EnvVarSpec(
    id="REGISTRY_PUSH_TIMEOUT_SECONDS",
    default="15",
    parse=float,
    type=(float, ...),
)

## Connectivity ##

CONNECTIVITY_ASSUME_ONLINE = EnvVarSpec(
    id="CONNECTIVITY_ASSUME_ONLINE",
    default="true",
    parse=_parse_bool,
    type=(bool, ...),
)

CONNECTIVITY_PROBE_INTERVAL_SECONDS = EnvVarSpec(
    id="CONNECTIVITY_PROBE_INTERVAL_SECONDS",
    default="30",
    parse=int,
    type=(int, ...),
)

## Sync ##

SYNC_ON_RECONNECT = EnvVarSpec(
    id="SYNC_ON_RECONNECT",
    default="false",
    parse=_parse_bool,
    type=(bool, ...),
)

## HTTP ##

HTTP_HOST = EnvVarSpec(id="HTTP_HOST", default="0.0.0.0")

HTTP_PORT = EnvVarSpec(id="HTTP_PORT", default="8000", parse=int, type=(int, ...))

HTTP_AUTORELOAD = EnvVarSpec(
    id="HTTP_AUTORELOAD",
    parse=_parse_bool,
    default="false",
    type=(bool, ...),
)

HTTP_EXPOSE_ERRORS = EnvVarSpec(
    id="HTTP_EXPOSE_ERRORS",
    default="false",
    parse=_parse_bool,
    type=(bool, ...),
)

## Fake Registry ##

FAKE_REGISTRY_FAILURE_RATE = EnvVarSpec(
    id="FAKE_REGISTRY_FAILURE_RATE",
    default="0.1",
    parse=float,
    type=(float, ...),
)

FAKE_REGISTRY_MIN_LATENCY_MS = EnvVarSpec(
    id="FAKE_REGISTRY_MIN_LATENCY_MS",
    default="200",
    parse=int,
    type=(int, ...),
)

FAKE_REGISTRY_MAX_LATENCY_MS = EnvVarSpec(
    id="FAKE_REGISTRY_MAX_LATENCY_MS",
    default="1000",
    parse=int,
    type=(int, ...),
)

#### Validation ####
VALIDATED_ENV_VARS = [
    LOG_LEVEL,
    ENVIRONMENT,
    DATA_DIR,
    SEED_SAMPLE_DATA,
    EXTRA_METHODOLOGIES,
    REGISTRY_URL,
    REGISTRY_PUSH_TIMEOUT_SECONDS,
    CONNECTIVITY_ASSUME_ONLINE,
    CONNECTIVITY_PROBE_INTERVAL_SECONDS,
    SYNC_ON_RECONNECT,
    HTTP_AUTORELOAD,
    HTTP_EXPOSE_ERRORS,
    HTTP_PORT,
    FAKE_REGISTRY_FAILURE_RATE,
    FAKE_REGISTRY_MIN_LATENCY_MS,
    FAKE_REGISTRY_MAX_LATENCY_MS,
]

def validate() -> bool:
    return env.validate(VALIDATED_ENV_VARS)

#### Getters ####

def get_log_level() -> str:
    return env.parse(LOG_LEVEL)

def get_environment() -> str:
    return env.parse(ENVIRONMENT).lower()

def get_http_expose_errors() -> bool:
    return env.parse(HTTP_EXPOSE_ERRORS)

def get_http_conf() -> HttpServerConf:
    return HttpServerConf(
        host=env.parse(HTTP_HOST),
        port=env.parse(HTTP_PORT),
        autoreload=env.parse(HTTP_AUTORELOAD),
    )

def get_store_conf() -> StoreConf:
    return StoreConf(
        data_dir=env.parse(DATA_DIR),
        seed_sample_data=env.parse(SEED_SAMPLE_DATA),
    )

def get_registry_conf() -> RegistryConf:
    timeout = env.parse(REGISTRY_PUSH_TIMEOUT_SECONDS)
    if timeout <= 0:
        logger.warning(f"REGISTRY_PUSH_TIMEOUT_SECONDS={timeout} is not positive, using 15s")
        timeout = 15.0
    return RegistryConf(
        url=env.parse(REGISTRY_URL).rstrip("/"),
        push_timeout_seconds=timeout,
    )

def get_connectivity_conf() -> ConnectivityConf:
    return ConnectivityConf(
        assume_online=env.parse(CONNECTIVITY_ASSUME_ONLINE),
        probe_interval_seconds=max(0, env.parse(CONNECTIVITY_PROBE_INTERVAL_SECONDS)),
    )

def get_sync_conf() -> SyncConf:
    return SyncConf(sync_on_reconnect=env.parse(SYNC_ON_RECONNECT))

def get_methodologies() -> List[str]:
    """Known methodology codes plus any configured extras, in order."""
    methodologies = list(KNOWN_METHODOLOGIES)
    extra = env.parse(EXTRA_METHODOLOGIES)
    if extra:
        for code in extra.split(","):
            code = code.strip()
            if code and code not in methodologies:
                methodologies.append(code)
    return methodologies

def get_fake_registry_conf() -> FakeRegistryConf:
    failure_rate = env.parse(FAKE_REGISTRY_FAILURE_RATE)
    min_latency_ms = env.parse(FAKE_REGISTRY_MIN_LATENCY_MS)
    max_latency_ms = env.parse(FAKE_REGISTRY_MAX_LATENCY_MS)

    failure_rate = max(0.0, min(1.0, failure_rate))
    min_latency_ms = max(0, min_latency_ms)
    max_latency_ms = max(min_latency_ms, max_latency_ms)

    return FakeRegistryConf(
        failure_rate=failure_rate,
        min_latency_ms=min_latency_ms,
        max_latency_ms=max_latency_ms,
    )
