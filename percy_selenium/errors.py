# errores del SDK

from __future__ import annotations


class PercyError(Exception):
    """Base de los errores propios del SDK."""


class PercyUsageError(PercyError):
    """
    Llamada incorrecta para el tipo de sesión (snapshot en automate o
    screenshot en web). Es un error de integración: nunca se captura dentro
    del SDK.
    """


class DriverMetadataError(PercyError):
    """No se pudo resolver un dato de la sesión (id, executor...)."""
