"""Thumbnail and medium variants for images announced by S3 event batches."""

__version__ = "0.1.0"
