"""S3-compatible object-storage backend."""

from .backend import S3PolicyBackend

__all__ = ["S3PolicyBackend"]
