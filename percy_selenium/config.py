from __future__ import annotations
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

DEFAULT_CLI_API = "http://localhost:5338"

def _getenv_float(name: str, default: float) -> float:
    v = os.getenv(name, "").strip()
    if not v:
        return default
    try:
        return float(v)
    except ValueError:
        return default

def _getenv_optional_float(name: str) -> Optional[float]:
    """
    Devuelve None si la variable no existe, está vacía o no es numérica.
    Un valor <= 0 también cuenta como "sin espera".
    """
    v = os.getenv(name, "").strip()
    if not v:
        return None
    try:
        f = float(v)
    except ValueError:
        return None
    return f if f > 0 else None

@dataclass(frozen=True)
class Settings:
    # servidor local
    CLI_API: str

    # logs
    DEBUG: bool

    # captura responsive
    RESPONSIVE_CAPTURE_SLEEP_TIME: Optional[float]
    RESIZE_TIMEOUT: float

    # timeouts HTTP (segundos)
    HEALTHCHECK_TIMEOUT: float
    DOM_TIMEOUT: float
    POST_TIMEOUT: float
    LOG_TIMEOUT: float

def load_settings() -> Settings:
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
    else:
        load_dotenv()

    CLI_API = (os.getenv("PERCY_CLI_API", "").strip() or DEFAULT_CLI_API).rstrip("/")
    DEBUG = os.getenv("PERCY_LOGLEVEL", "info").strip().lower() == "debug"

    RESPONSIVE_CAPTURE_SLEEP_TIME = _getenv_optional_float("RESPONSIVE_CAPTURE_SLEEP_TIME")
    RESIZE_TIMEOUT = _getenv_float("PERCY_RESIZE_TIMEOUT", 1.0)

    HEALTHCHECK_TIMEOUT = _getenv_float("PERCY_HEALTHCHECK_TIMEOUT", 30.0)
    DOM_TIMEOUT = _getenv_float("PERCY_DOM_TIMEOUT", 30.0)
    POST_TIMEOUT = _getenv_float("PERCY_POST_TIMEOUT", 600.0)
    LOG_TIMEOUT = _getenv_float("PERCY_LOG_TIMEOUT", 5.0)

    return Settings(
        CLI_API=CLI_API,
        DEBUG=DEBUG,
        RESPONSIVE_CAPTURE_SLEEP_TIME=RESPONSIVE_CAPTURE_SLEEP_TIME,
        RESIZE_TIMEOUT=RESIZE_TIMEOUT,
        HEALTHCHECK_TIMEOUT=HEALTHCHECK_TIMEOUT,
        DOM_TIMEOUT=DOM_TIMEOUT,
        POST_TIMEOUT=POST_TIMEOUT,
        LOG_TIMEOUT=LOG_TIMEOUT,
    )
