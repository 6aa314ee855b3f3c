from percy_selenium.version import __version__
from percy_selenium.errors import PercyError, PercyUsageError, DriverMetadataError
from percy_selenium.capture.options import SnapshotOptions
from percy_selenium.snapshot import (
    Percy,
    is_percy_enabled,
    percy_snapshot,
    percy_screenshot,
)

__all__ = [
    "__version__",
    "Percy",
    "SnapshotOptions",
    "PercyError",
    "PercyUsageError",
    "DriverMetadataError",
    "is_percy_enabled",
    "percy_snapshot",
    "percy_screenshot",
]
