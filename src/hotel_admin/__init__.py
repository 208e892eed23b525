"""Hotel back-office API: menu definitions and per-role menu visibility."""

__version__ = "0.1.0"
