# metadatos de la sesión de Selenium (id, capabilities, executor url)

from __future__ import annotations
import json
from typing import Dict, Optional

from percy_selenium.common.cache import SessionCache, shared_cache
from percy_selenium.errors import DriverMetadataError

CAPS_NEEDED = (
    "browserName",
    "platform",
    "platformName",
    "version",
    "browserVersion",
    "osVersion",
    "proxy",
    "deviceName",
)

MAX_UNWRAP_DEPTH = 10


def _cap_value(value) -> str:
    # proxy y similares llegan como dict: JSON, no repr de Python
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


def unwrap_executor(executor):
    """
    Un executor decorado (tracing, proxies...) puede exponer unwrap() para
    devolver el executor al que delega. Sin unwrap() se considera no envuelto.
    """
    for _ in range(MAX_UNWRAP_DEPTH):
        unwrap = getattr(executor, "unwrap", None)
        if not callable(unwrap):
            return executor
        inner = unwrap()
        if inner is None or inner is executor:
            return executor
        executor = inner
    return executor


def executor_address(executor) -> str:
    """Dirección del servidor remoto que hay detrás del executor."""
    if isinstance(executor, str):
        return executor
    # selenium >= 4.26 guarda la dirección en ClientConfig
    client_config = getattr(executor, "_client_config", None)
    addr = getattr(client_config, "remote_server_addr", None)
    if not addr:
        addr = getattr(executor, "_url", None)
    if not addr:
        raise DriverMetadataError(
            f"No se encontró la dirección del servidor remoto en {type(executor).__name__}"
        )
    return str(addr)


class DriverMetadata:
    def __init__(self, driver, cache: Optional[SessionCache] = None):
        self.driver = driver
        self.cache = cache if cache is not None else shared_cache
        self._session_id: Optional[str] = None

    @property
    def session_id(self) -> str:
        if self._session_id is None:
            sid = getattr(self.driver, "session_id", None)
            if not sid:
                raise DriverMetadataError("El driver no tiene session_id (¿sesión cerrada?)")
            self._session_id = str(sid)
        return self._session_id

    @property
    def capabilities(self) -> Dict[str, str]:
        key = f"capabilities_{self.session_id}"
        return self.cache.get_or_compute(key, self._query_capabilities)

    @property
    def command_executor_url(self) -> str:
        key = f"commandExecutorUrl_{self.session_id}"
        return self.cache.get_or_compute(key, self._resolve_executor_url)

    def _query_capabilities(self) -> Dict[str, str]:
        caps = self.driver.capabilities or {}
        return {name: _cap_value(caps[name]) for name in CAPS_NEEDED if caps.get(name) is not None}

    def _resolve_executor_url(self) -> str:
        executor = unwrap_executor(self.driver.command_executor)
        return executor_address(executor)
