"""Version information for open-in-explorer"""

__version__ = "0.2.0"
