# opciones de snapshot / screenshot

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from percy_selenium.errors import PercyUsageError

# nombre aceptado (snake o camel) → campo
_ALIASES = {
    "widths": "widths",
    "min_height": "min_height",
    "minHeight": "min_height",
    "enable_javascript": "enable_javascript",
    "enableJavaScript": "enable_javascript",
    "percy_css": "percy_css",
    "percyCSS": "percy_css",
    "scope": "scope",
    "sync": "sync",
    "responsive_snapshot_capture": "responsive_snapshot_capture",
    "responsiveSnapshotCapture": "responsive_snapshot_capture",
}

# campo → clave en el JSON que espera el CLI
_WIRE_KEYS = {
    "widths": "widths",
    "min_height": "minHeight",
    "enable_javascript": "enableJavaScript",
    "percy_css": "percyCSS",
    "scope": "scope",
    "sync": "sync",
    "responsive_snapshot_capture": "responsiveSnapshotCapture",
}


def _parse_widths(raw) -> List[int]:
    if raw is None:
        return []
    if isinstance(raw, (int, str)):
        raw = [raw]
    widths: List[int] = []
    for w in raw:
        try:
            v = int(w)
        except (TypeError, ValueError):
            raise PercyUsageError(f"Ancho no válido: {w!r}")
        if v <= 0:
            raise PercyUsageError(f"Los anchos deben ser enteros positivos, recibido {w!r}")
        widths.append(v)
    return widths


@dataclass
class SnapshotOptions:
    """
    Opciones reconocidas de un snapshot. Las claves desconocidas van en
    `extra` y se envían tal cual.
    """
    widths: List[int] = field(default_factory=list)
    min_height: Optional[int] = None
    enable_javascript: Optional[bool] = None
    percy_css: Optional[str] = None
    scope: Optional[str] = None
    sync: Optional[bool] = None
    responsive_snapshot_capture: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.widths = _parse_widths(self.widths)

    @classmethod
    def from_kwargs(cls, **kwargs) -> "SnapshotOptions":
        known: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in kwargs.items():
            name = _ALIASES.get(key)
            if name is None:
                extra[key] = value
            else:
                known[name] = value
        if known.get("responsive_snapshot_capture") is None:
            known.pop("responsive_snapshot_capture", None)
        else:
            known["responsive_snapshot_capture"] = bool(known["responsive_snapshot_capture"])
        return cls(extra=extra, **known)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extra)
        for name, wire in _WIRE_KEYS.items():
            value = getattr(self, name)
            if value is None or value == []:
                continue
            if name == "responsive_snapshot_capture" and not value:
                continue
            payload[wire] = value
        return payload


# --- screenshot (automate) ---

_REGION_KEYS = (
    # (legacy, canónica, clave enviada)
    ("ignoreRegionSeleniumElements", "ignore_region_selenium_elements", "ignore_region_elements"),
    ("considerRegionSeleniumElements", "consider_region_selenium_elements", "consider_region_elements"),
)


def element_id(element) -> str:
    """WebElement → id interno; un str se toma como id ya resuelto."""
    if isinstance(element, str):
        return element
    eid = getattr(element, "id", None)
    if eid is None:
        raise PercyUsageError(f"No es un WebElement: {element!r}")
    return str(eid)


def normalize_screenshot_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Unifica las variantes de ignore/consider: la legacy (camelCase) gana a la
    canónica si vienen las dos, y los elementos se convierten a sus ids bajo
    ignore_region_elements / consider_region_elements. No modifica el dict
    original.
    """
    out = dict(options or {})
    for legacy, canonical, wire in _REGION_KEYS:
        if legacy in out:
            out[canonical] = out.pop(legacy)
        elements = out.pop(canonical, None) or []
        out[wire] = [element_id(el) for el in elements]
    return out
