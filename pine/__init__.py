"""Pine — local credential manager."""
from .version import __version__

__all__ = ["__version__"]
