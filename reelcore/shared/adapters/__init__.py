"""
Adapters Package

External service integrations.

Contents:
=========
- blob_store: S3-compatible media storage (upload, existence check, delete)

Note: Database access is handled by shared/db/session.py using async SQLAlchemy.

Usage:
======
    from reelcore.shared.adapters.blob_store import S3BlobStore

    store = S3BlobStore()
    ref = await store.upload(data, kind="video", content_type="video/mp4")
"""

from reelcore.shared.adapters.blob_store import BlobStore, S3BlobStore, generate_key

__all__ = [
    "BlobStore",
    "S3BlobStore",
    "generate_key",
]
