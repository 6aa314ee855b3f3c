# estado de la negociación con el CLI (resultado del healthcheck)

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SESSION_WEB = "web"
SESSION_AUTOMATE = "automate"


def _int_list(raw) -> List[int]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"se esperaba una lista de anchos, llegó {type(raw).__name__}")
    out: List[int] = []
    for v in raw:
        try:
            out.append(int(v))
        except (TypeError, ValueError):
            continue
    return out


@dataclass(frozen=True)
class EligibleWidths:
    """Anchos que declara el servidor: mobile (siempre) y config (por defecto)."""
    mobile: List[int] = field(default_factory=list)
    config: List[int] = field(default_factory=list)

    @classmethod
    def from_payload(cls, raw: Optional[Dict[str, Any]]) -> "EligibleWidths":
        raw = raw or {}
        if not isinstance(raw, dict):
            raise ValueError(f"widths debe ser un objeto, llegó {type(raw).__name__}")
        return cls(mobile=_int_list(raw.get("mobile")), config=_int_list(raw.get("config")))


@dataclass(frozen=True)
class NegotiationState:
    """
    Estado inmutable tras el healthcheck:
    - enabled: False desactiva toda captura para este cliente
    - session_type: "web", "automate" o None (desconocido)
    - eligible_widths: anchos para la captura responsive
    - cli_config: config opaca del CLI (deferUploads, responsiveSnapshotCapture...)
    """
    enabled: bool
    session_type: Optional[str] = None
    eligible_widths: EligibleWidths = field(default_factory=EligibleWidths)
    cli_config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def disabled(cls) -> "NegotiationState":
        return cls(enabled=False)

    @property
    def is_automate(self) -> bool:
        return self.session_type == SESSION_AUTOMATE
