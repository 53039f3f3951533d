"""Bucket and access provisioning service for S3-compatible object stores."""

__version__ = "0.1.0"
