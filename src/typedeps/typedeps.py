"""Application directories for typedeps."""

from platformdirs import PlatformDirs

__all__ = ["APP_DIRS"]

APP_DIRS = PlatformDirs("typedeps", "typedeps")
