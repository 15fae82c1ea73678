"""keyshift — versioned state migrations for client key-value stores."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("keyshift")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
