"""AI-assisted infrastructure repair report generator."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("infrareport")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
