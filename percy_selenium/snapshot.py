# puntos de entrada: snapshot (DOM) y screenshot (automate)

from __future__ import annotations
from typing import Any, Dict, Optional, Union

from percy_selenium.common.cache import SessionCache
from percy_selenium.common.state import NegotiationState
from percy_selenium.capture.dom import get_cookies, inject_dom_script, serialize_dom
from percy_selenium.capture.options import SnapshotOptions, normalize_screenshot_options
from percy_selenium.capture.responsive import capture_responsive_dom, is_responsive_snapshot_capture
from percy_selenium.driver.environment import client_info, environment_info
from percy_selenium.driver.metadata import DriverMetadata
from percy_selenium.errors import PercyError, PercyUsageError
from percy_selenium.net.cli import PercyCLIClient

SNAPSHOT_PATH = "/percy/snapshot"
SCREENSHOT_PATH = "/percy/automateScreenshot"

SNAPSHOT_IN_AUTOMATE = (
    "Llamada no válida - snapshot(). Con Percy en Automate usa screenshot(). "
    "Más información: https://www.browserstack.com/docs/percy/integrate/functional-and-visual"
)
SCREENSHOT_OUTSIDE_AUTOMATE = (
    "Llamada no válida - screenshot(). Para capturas de DOM usa snapshot(); "
    "screenshot() solo sirve con Percy en Automate. "
    "Más información: https://www.browserstack.com/docs/percy/integrate/overview"
)


class Percy:
    """
    Cliente de testing visual para un WebDriver.

    El healthcheck contra el CLI se hace en la primera llamada y decide:
    - si el SDK está activo (si no, todo devuelve None sin tocar el navegador)
    - qué entrada es válida: snapshot() en sesiones web, screenshot() en automate
    """

    def __init__(self, driver, client: Optional[PercyCLIClient] = None,
                 cache: Optional[SessionCache] = None):
        self.driver = driver
        self.client = client or PercyCLIClient()
        self.cache = cache
        self.client_info = client_info()
        self.environment_info = environment_info(driver)

    @property
    def state(self) -> NegotiationState:
        return self.client.state

    def is_enabled(self) -> bool:
        return self.state.enabled

    # --- DOM snapshot ---

    def snapshot(self, name: str, options: Union[SnapshotOptions, Dict[str, Any], None] = None,
                 **kwargs) -> Optional[Dict[str, Any]]:
        state = self.state
        if not state.enabled:
            return None
        if state.is_automate:
            raise PercyUsageError(SNAPSHOT_IN_AUTOMATE)

        opts = _snapshot_options(options, kwargs)

        script = self.client.fetch_dom_script()
        if not script:
            return None

        log = self.client.log
        try:
            injected = inject_dom_script(self.driver, script, log)
            cookies = get_cookies(self.driver, log)
            serialize_options = opts.to_payload()

            if not injected:
                # sin PercyDOM en la página no hay nada que serializar; se envía igual
                dom_snapshots = [{}]
            elif is_responsive_snapshot_capture(state.cli_config, opts.responsive_snapshot_capture):
                settings = self.client.settings
                dom_snapshots = capture_responsive_dom(
                    self.driver, state.eligible_widths, cookies,
                    options=serialize_options,
                    user_widths=opts.widths,
                    resize_timeout=settings.RESIZE_TIMEOUT,
                    sleep_time=settings.RESPONSIVE_CAPTURE_SLEEP_TIME,
                    log=log,
                )
            else:
                dom_snapshots = [serialize_dom(self.driver, serialize_options, cookies, log)]

            body = {
                **serialize_options,
                "url": self.driver.current_url,
                "name": name,
                "domSnapshot": dom_snapshots,
                "clientInfo": self.client_info,
                "environmentInfo": self.environment_info,
            }
            return self._post(SNAPSHOT_PATH, body)
        except Exception as e:
            log(f'No se pudo tomar el snapshot DOM "{name}"')
            log(f"{e}")
            return None

    # --- screenshot (automate) ---

    def screenshot(self, name: str, options: Optional[Dict[str, Any]] = None,
                   **kwargs) -> Optional[Dict[str, Any]]:
        state = self.state
        if not state.enabled:
            return None
        if not state.is_automate:
            raise PercyUsageError(SCREENSHOT_OUTSIDE_AUTOMATE)

        opts = normalize_screenshot_options(options)
        metadata = DriverMetadata(self.driver, self.cache)
        # sin session_id no hay nada que hacer: se propaga
        session_id = metadata.session_id

        log = self.client.log
        try:
            body = {
                **kwargs,
                "sessionId": session_id,
                "commandExecutorUrl": metadata.command_executor_url,
                "capabilities": metadata.capabilities,
                "snapshotName": name,
                "clientInfo": self.client_info,
                "environmentInfo": self.environment_info,
                "options": opts,
            }
            return self._post(SCREENSHOT_PATH, body)
        except Exception as e:
            log(f'No se pudo tomar el screenshot "{name}"')
            log(f"{e}")
            return None

    def _post(self, path: str, body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        r = self.client.post_payload(path, body)
        if r is None:
            return None
        try:
            data = r.json()
        except ValueError:
            r.raise_for_status()
            raise PercyError(f"Respuesta no JSON de {path}")
        if not isinstance(data, dict) or not data.get("success", r.ok):
            error = data.get("error") if isinstance(data, dict) else None
            raise PercyError(error or f"{path} devolvió {r.status_code}")
        return data.get("data")


def _snapshot_options(options, kwargs: Dict[str, Any]) -> SnapshotOptions:
    if isinstance(options, SnapshotOptions):
        if not kwargs:
            return options
        options = options.to_payload()
    return SnapshotOptions.from_kwargs(**{**(options or {}), **kwargs})


# --- API a nivel de módulo (un cliente compartido por proceso) ---

_default_client: Optional[PercyCLIClient] = None


def default_client() -> PercyCLIClient:
    global _default_client
    if _default_client is None:
        _default_client = PercyCLIClient()
    return _default_client


def is_percy_enabled() -> bool:
    return default_client().enabled


def percy_snapshot(driver, name: str, **kwargs) -> Optional[Dict[str, Any]]:
    return Percy(driver, client=default_client()).snapshot(name, **kwargs)


def percy_screenshot(driver, name: str, options: Optional[Dict[str, Any]] = None,
                     **kwargs) -> Optional[Dict[str, Any]]:
    return Percy(driver, client=default_client()).screenshot(name, options, **kwargs)
