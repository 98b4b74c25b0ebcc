"""Open selected paths in the editor or reveal them in the native file manager."""

from open_in_explorer.__version__ import __version__

__all__ = ["__version__"]
