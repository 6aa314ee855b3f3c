# caché por sesión (capabilities, executor url)

from __future__ import annotations
from typing import Any, Callable, Dict


class SessionCache:
    """
    Almacén clave → valor para metadatos de sesión.
    Las claves llevan el id de sesión ("capabilities_<id>", ...), así que
    sesiones distintas nunca se pisan. No se invalida nunca: un id de sesión
    es único e inmutable mientras dura la sesión.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        value = self._data.get(key)
        if value is None:
            # sin lock: dos accesos simultáneos pueden calcular dos veces (último gana)
            value = compute()
            self._data[key] = value
        return value

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


# instancia compartida por defecto (todo el proceso)
shared_cache = SessionCache()
