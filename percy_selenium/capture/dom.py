# serialización del DOM dentro del navegador

from __future__ import annotations
import json
from typing import Any, Callable, Dict, List, Optional

from selenium.common.exceptions import WebDriverException

LogFn = Callable[..., None]


def noop_log(message: str, level: str = "info") -> None:
    pass


def inject_dom_script(driver, script: str, log: LogFn = noop_log) -> bool:
    """Carga PercyDOM en la página. Devuelve False si el navegador lo rechaza."""
    try:
        driver.execute_script(script)
        return True
    except WebDriverException as e:
        log(f"No se pudo inyectar dom.js: {e}")
        return False


def get_cookies(driver, log: LogFn = noop_log) -> List[Dict[str, Any]]:
    try:
        return driver.get_cookies() or []
    except Exception as e:
        log(f"No se pudieron leer las cookies: {e}", "debug")
        return []


def serialize_dom(driver, options: Optional[Dict[str, Any]], cookies: List[Dict[str, Any]],
                  log: LogFn = noop_log) -> Dict[str, Any]:
    """
    Ejecuta PercyDOM.serialize(options) y añade las cookies.
    Si el navegador falla (navegación a mitad, elementos stale...) devuelve {}.
    """
    try:
        dom_snapshot = driver.execute_script(f"return PercyDOM.serialize({json.dumps(options or {})})")
    except WebDriverException as e:
        log(f"Fallo serializando el DOM: {e}")
        return {}
    if not isinstance(dom_snapshot, dict):
        log(f"PercyDOM.serialize devolvió {type(dom_snapshot).__name__}, se ignora", "debug")
        return {}
    dom_snapshot["cookies"] = cookies
    return dom_snapshot
