"""
Storage — blob storage backing uploaded documents.
"""

from docsearch.storage.blob import BlobStore, LocalBlobStore, StoredBlob

__all__ = ["BlobStore", "LocalBlobStore", "StoredBlob"]
