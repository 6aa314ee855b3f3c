# cliente HTTP del CLI local: healthcheck, dom.js, envío de snapshots y logs

from __future__ import annotations
import sys
from typing import Any, Dict, Optional

import requests

from percy_selenium.config import Settings, load_settings
from percy_selenium.common.state import EligibleWidths, NegotiationState

VERSION_HEADER = "x-percy-core-version"
SUPPORTED_MAJOR = "1"
MIGRATION_URL = "https://www.browserstack.com/docs/percy/migration/migrate-to-cli"


class PercyCLIClient:
    """
    Habla con el servidor local del CLI. El healthcheck se hace una sola vez
    (en el primer uso) y su resultado no cambia salvo reprobe() explícito.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or load_settings()
        self.http = session or requests.Session()
        self._state: Optional[NegotiationState] = None
        self._dom_script: Optional[str] = None

    @property
    def label(self) -> str:
        return "[percy:python]" if self.settings.DEBUG else "[percy]"

    def url(self, path: str) -> str:
        return f"{self.settings.CLI_API}{path}"

    # --- negociación ---

    @property
    def state(self) -> NegotiationState:
        if self._state is None:
            self._state = self.healthcheck()
        return self._state

    @property
    def enabled(self) -> bool:
        return self.state.enabled

    def reprobe(self) -> NegotiationState:
        self._state = None
        self._dom_script = None
        return self.state

    def healthcheck(self) -> NegotiationState:
        try:
            with self.http.get(self.url("/percy/healthcheck"),
                               timeout=self.settings.HEALTHCHECK_TIMEOUT) as r:
                if r.status_code != 200:
                    raise RuntimeError(f"healthcheck devolvió {r.status_code}")
                version = r.headers.get(VERSION_HEADER)
                data = r.json()
        except Exception as e:
            self._print("Percy no está en marcha, snapshots desactivados")
            if self.settings.DEBUG:
                self._print(f"{e}")
            return NegotiationState.disabled()

        if isinstance(data, dict) and data.get("success") is False:
            self._print("Percy no está en marcha, snapshots desactivados")
            if self.settings.DEBUG:
                self._print(f"{data.get('error')}")
            return NegotiationState.disabled()

        if not version:
            self._print(
                "Puede que estés usando @percy/agent, que este SDK ya no soporta. "
                f"Desinstala @percy/agent e instala @percy/cli. {MIGRATION_URL}"
            )
            return NegotiationState.disabled()

        if version.split(".")[0] != SUPPORTED_MAJOR:
            self._print(f"Versión de Percy CLI no soportada, {version}")
            return NegotiationState.disabled()

        data = data if isinstance(data, dict) else {}
        try:
            eligible_widths = EligibleWidths.from_payload(data.get("widths"))
            cli_config = data.get("config") or {}
            if not isinstance(cli_config, dict):
                raise ValueError(f"config debe ser un objeto, llegó {type(cli_config).__name__}")
        except ValueError as e:
            self._print(f"Respuesta de healthcheck no válida, snapshots desactivados: {e}")
            return NegotiationState.disabled()

        return NegotiationState(
            enabled=True,
            session_type=data.get("type"),
            eligible_widths=eligible_widths,
            cli_config=cli_config,
        )

    # --- dom.js ---

    def fetch_dom_script(self) -> str:
        """
        Descarga el script de serialización (una vez). Si falla, desactiva el
        cliente y devuelve "" para que quien llama degrade sin romper.
        """
        if self._dom_script is not None:
            return self._dom_script
        try:
            with self.http.get(self.url("/percy/dom.js"), timeout=self.settings.DOM_TIMEOUT) as r:
                if r.status_code != 200:
                    raise RuntimeError(f"dom.js devolvió {r.status_code}")
                self._dom_script = r.text
        except Exception as e:
            self._print("No se pudo descargar dom.js, snapshots desactivados")
            if self.settings.DEBUG:
                self._print(f"{e}")
            self._state = NegotiationState.disabled()
            return ""
        return self._dom_script

    # --- envío ---

    def post_payload(self, path: str, body: Dict[str, Any]) -> Optional[requests.Response]:
        """
        POST con timeout largo (captura + subida). Un fallo de red se registra
        y devuelve None: nunca debe romper el test que llama.
        """
        try:
            with self.http.post(self.url(path), json=body, timeout=self.settings.POST_TIMEOUT) as r:
                # fuerza la lectura antes de soltar la conexión
                _ = r.content
                return r
        except requests.RequestException as e:
            self.log(f"Error enviando a {path}: {e}")
            return None

    def log(self, message: str, level: str = "info") -> None:
        message = f"{self.label} {message}"
        try:
            with self.http.post(self.url("/percy/log"),
                                json={"message": message, "level": level},
                                timeout=self.settings.LOG_TIMEOUT):
                pass
        except Exception as e:
            if self.settings.DEBUG:
                print(f"Fallo al enviar log al CLI: {e}", file=sys.stderr)
        finally:
            if level != "debug" or self.settings.DEBUG:
                print(message)

    def _print(self, message: str) -> None:
        print(f"{self.label} {message}")
