"""spores: a command-line Spotify playlist manager that prints JSON."""

__version__ = "0.1.0"
