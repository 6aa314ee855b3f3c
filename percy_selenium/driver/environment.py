# clientInfo / environmentInfo que acompañan a cada petición

from __future__ import annotations
import platform
from typing import List

import selenium

from percy_selenium.version import __version__

SDK_NAME = "percy-selenium-python"


def client_info() -> str:
    return f"{SDK_NAME}/{__version__}"


def _inner_driver(driver):
    """
    Si el driver envuelve a otro (p.ej. EventFiringWebDriver), devuelve el real.
    """
    seen = 0
    while seen < 10:
        wrapped = getattr(driver, "wrapped_driver", None)
        if wrapped is None or wrapped is driver:
            break
        driver = wrapped
        seen += 1
    return driver


def environment_info(driver) -> List[str]:
    driver_name = type(_inner_driver(driver)).__name__
    return [
        f"selenium/{selenium.__version__}",
        f"python/{platform.python_version()}",
        f"driver/{driver_name}",
    ]
