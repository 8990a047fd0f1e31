"""
azuredl: Azure Blob Storage downloader

Signs requests with the SharedKey scheme and downloads blobs over HTTP.
"""

__version__ = "0.1.0"

from .auth.sharedkey import PendingRequest, RequestSigner, SharedKeyAuth
from .blob.downloader import BlobDownloader

__all__ = ["PendingRequest", "RequestSigner", "SharedKeyAuth", "BlobDownloader", "__version__"]
