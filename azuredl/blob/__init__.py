"""
azuredl blob module.

Downloads blobs using SharedKey-signed requests.
"""

from azuredl.blob.exceptions import (
    BlobError,
    DownloadError,
    TransportError,
)
from azuredl.blob.downloader import (
    DEFAULT_ENDPOINT,
    BlobDownloader,
    DownloadResult,
)

__all__ = [
    # Exceptions
    "BlobError",
    "DownloadError",
    "TransportError",
    # Downloader
    "DEFAULT_ENDPOINT",
    "BlobDownloader",
    "DownloadResult",
]
