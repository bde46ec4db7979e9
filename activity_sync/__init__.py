"""Forward activity history from external sources into a calendar."""

__version__ = "0.1.0"
