"""Schema registry service: named, versioned, typed schema documents."""

__version__ = "1.0.0"
