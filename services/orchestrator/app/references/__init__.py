from .engine import consolidate_references, dedupe_sources

__all__ = ["consolidate_references", "dedupe_sources"]
