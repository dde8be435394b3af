"""Top-level package for the macro economic indicators analysis service."""

__all__ = [
    "core",
    "data",
    "indicators",
    "ai",
    "storage",
    "scheduler",
    "monitoring",
]
