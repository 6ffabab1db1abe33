"""YouTube Music remote control client"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ytm-remote")
except PackageNotFoundError:
    __version__ = "dev"
