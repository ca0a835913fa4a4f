"""BackpackBuddy destinations media, geo and weather services."""

__version__ = "0.1.0"
