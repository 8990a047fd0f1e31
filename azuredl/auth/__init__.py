"""
azuredl authentication module.

Provides SharedKey request signing for Azure Blob Storage.
"""

from azuredl.auth.exceptions import (
    SigningError,
    InvalidKeyError,
    CryptoUnavailableError,
)
from azuredl.auth.sharedkey import (
    AUTH_SCHEME,
    SIGNING_VERSION,
    HttpMethod,
    PendingRequest,
    RequestSigner,
    SharedKeyAuth,
    build_string_to_sign,
    build_canonicalized_headers,
    build_canonicalized_resource,
    compute_signature,
    decode_key,
)

__all__ = [
    # Exceptions
    "SigningError",
    "InvalidKeyError",
    "CryptoUnavailableError",
    # SharedKey signing
    "AUTH_SCHEME",
    "SIGNING_VERSION",
    "HttpMethod",
    "PendingRequest",
    "RequestSigner",
    "SharedKeyAuth",
    "build_string_to_sign",
    "build_canonicalized_headers",
    "build_canonicalized_resource",
    "compute_signature",
    "decode_key",
]
