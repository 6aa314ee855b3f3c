# captura responsive: un DOM por ancho, con resize confirmado por el navegador

from __future__ import annotations
import time
from typing import Any, Dict, List, Optional

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.support.ui import WebDriverWait

from percy_selenium.common.state import EligibleWidths
from percy_selenium.capture.dom import LogFn, noop_log, serialize_dom

CDP_BROWSERS = ("chrome", "chromium", "msedge", "microsoftedge")
RESIZE_POLL_SEC = 0.1


def get_widths_for_multi_dom(eligible_widths: EligibleWidths, user_widths: Optional[List[int]] = None) -> List[int]:
    """
    mobile siempre; después los anchos del usuario o, si no hay, los de config.
    Sin duplicados y en orden ascendente.
    """
    widths = set(eligible_widths.mobile)
    if user_widths:
        widths.update(user_widths)
    else:
        widths.update(eligible_widths.config)
    return sorted(widths)


def is_responsive_snapshot_capture(cli_config: Dict[str, Any], requested: bool = False) -> bool:
    cli_config = cli_config or {}
    percy_cfg = cli_config.get("percy") or {}
    # deferUploads no es compatible con el resize síncrono
    if percy_cfg.get("deferUploads") or cli_config.get("deferUploads"):
        return False
    if requested:
        return True
    snapshot_cfg = cli_config.get("snapshot") or {}
    return bool(snapshot_cfg.get("responsiveSnapshotCapture") or cli_config.get("responsiveSnapshotCapture"))


def _supports_cdp(driver) -> bool:
    if not callable(getattr(driver, "execute_cdp_cmd", None)):
        return False
    try:
        name = str((driver.capabilities or {}).get("browserName", "")).lower()
    except Exception:
        return False
    return name in CDP_BROWSERS


def resize_window(driver, width: int, height: int, log: LogFn = noop_log) -> None:
    """Emulation.setDeviceMetricsOverride si hay CDP; si falla, set_window_size."""
    if _supports_cdp(driver):
        try:
            driver.execute_cdp_cmd("Emulation.setDeviceMetricsOverride", {
                "width": width,
                "height": height,
                "deviceScaleFactor": 1,
                "mobile": False,
            })
            return
        except Exception as e:
            log(f"Resize por CDP falló para el ancho {width}, se usa el driver: {e}", "debug")
    driver.set_window_size(width, height)


def wait_for_resize(driver, resize_count: int, timeout: float, width: int, log: LogFn = noop_log) -> bool:
    """
    Espera (bloqueante, acotada) a que window.resizeCount llegue al valor
    esperado. Un timeout solo se registra: la captura sigue igualmente.
    """
    try:
        WebDriverWait(driver, timeout, poll_frequency=RESIZE_POLL_SEC).until(
            lambda d: d.execute_script("return window.resizeCount") == resize_count
        )
        return True
    except TimeoutException:
        log(f"Timeout esperando el evento resize para el ancho {width}", "debug")
    except WebDriverException as e:
        log(f"Error esperando el evento resize para el ancho {width}: {e}", "debug")
    return False


def change_window_dimension_and_wait(driver, width: int, height: int, resize_count: int,
                                     timeout: float = 1.0, log: LogFn = noop_log) -> int:
    """
    Redimensiona y espera la confirmación. Devuelve el nuevo valor esperado del
    contador: solo sube si el resize se aplicó, para no quedar desfasado con
    window.resizeCount.
    """
    try:
        resize_window(driver, width, height, log)
    except WebDriverException as e:
        log(f"No se pudo redimensionar a {width}x{height}: {e}", "debug")
        return resize_count
    resize_count += 1
    wait_for_resize(driver, resize_count, timeout, width, log)
    return resize_count


def capture_responsive_dom(driver, eligible_widths: EligibleWidths, cookies: List[Dict[str, Any]],
                           options: Optional[Dict[str, Any]] = None, user_widths: Optional[List[int]] = None,
                           resize_timeout: float = 1.0, sleep_time: Optional[float] = None,
                           log: LogFn = noop_log) -> List[Dict[str, Any]]:
    """
    Captura el DOM en cada ancho y restaura la ventana al final, pase lo que
    pase en cada ancho. Devuelve lo que se haya podido capturar.
    """
    widths = get_widths_for_multi_dom(eligible_widths, user_widths)
    dom_snapshots: List[Dict[str, Any]] = []

    try:
        window_size = driver.get_window_size()
        current_width, current_height = window_size["width"], window_size["height"]
    except WebDriverException as e:
        # sin tamaño original no se puede restaurar: una sola captura al ancho actual
        log(f"No se pudo leer el tamaño de la ventana, captura sin resize: {e}")
        return [serialize_dom(driver, options, cookies, log)]

    last_window_width = current_width
    resize_count = 0

    try:
        # contador de resizes en la página (lo expone dom.js)
        driver.execute_script("PercyDOM.waitForResize()")
    except WebDriverException as e:
        log(f"No se pudo instalar el contador de resize: {e}", "debug")

    try:
        for width in widths:
            if last_window_width != width:
                applied = change_window_dimension_and_wait(driver, width, current_height, resize_count,
                                                           resize_timeout, log)
                if applied != resize_count:
                    last_window_width = width
                resize_count = applied

            if sleep_time:
                time.sleep(sleep_time)

            dom_snapshot = serialize_dom(driver, options, cookies, log)
            dom_snapshot["width"] = width
            dom_snapshots.append(dom_snapshot)
    finally:
        # si el último ancho aplicado ya es el original no hay nada que restaurar
        if last_window_width != current_width:
            change_window_dimension_and_wait(driver, current_width, current_height, resize_count,
                                             resize_timeout, log)

    return dom_snapshots
