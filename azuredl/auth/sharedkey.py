"""
SharedKey request signing for Azure Blob Storage.

Implements the 2009-09-19 SharedKey scheme:

    Authorization: SharedKey <account>:<signature>
    Signature = Base64(HMAC-SHA256(UTF8(StringToSign), Base64Decode(AccountKey)))

Reference: https://docs.microsoft.com/en-us/rest/api/storageservices/authorize-with-shared-key
"""

import base64
import binascii
import hmac
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Generator, Iterable, Mapping, Optional, Tuple, Union

import httpx

from azuredl.auth.exceptions import CryptoUnavailableError, InvalidKeyError
from azuredl.core.rfc1123 import format_now, format_rfc1123

logger = logging.getLogger(__name__)

SIGNING_VERSION = "2009-09-19"
AUTH_SCHEME = "SharedKey"
CANONICAL_HEADER_PREFIX = "x-ms-"
HEADER_ENCODING = "utf-8"

# RFC 7230 token
_METHOD_PATTERN = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+")

HeadersLike = Union[httpx.Headers, Mapping[str, str]]


class HttpMethod(str, Enum):
    """HTTP verbs defined by the storage service."""
    GET = "GET"
    HEAD = "HEAD"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    MERGE = "MERGE"
    OPTIONS = "OPTIONS"


@dataclass
class PendingRequest:
    """
    An HTTP request that has not been signed yet.

    Known verbs are stored as HttpMethod; any other valid method token is
    kept verbatim and signed as sent.
    """

    method: Union[HttpMethod, str]
    resource_path: str
    account: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    def __post_init__(self):
        if not isinstance(self.method, HttpMethod):
            try:
                self.method = HttpMethod(self.method.upper())
            except ValueError:
                if not _METHOD_PATTERN.fullmatch(self.method):
                    raise ValueError(f"Invalid HTTP method: '{self.method}'") from None
        if not isinstance(self.headers, httpx.Headers):
            self.headers = _to_headers(self.headers)

    @property
    def verb(self) -> str:
        """The method as it goes on the wire."""
        return _verb(self.method)

    def with_headers(self, extra: HeadersLike) -> "PendingRequest":
        """Return a copy of this request with ``extra`` merged into its headers."""
        headers = _to_headers(self.headers)
        headers.update(_to_headers(extra))
        return PendingRequest(
            method=self.method,
            resource_path=self.resource_path,
            account=self.account,
            headers=headers,
        )


class RequestSigner:
    """
    Computes SharedKey authorization headers for pending requests.

    The signer keeps the base64 account key text only; the decoded key bytes
    exist for the duration of a single ``sign`` call.

    Example:
        signer = RequestSigner(account_key)
        request = PendingRequest(HttpMethod.GET, "/container/blob.txt", "myaccount")
        signed = request.with_headers(signer.sign(request))
    """

    def __init__(
        self,
        account_key: str,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the signer.

        Args:
            account_key: Base64-encoded storage account key
            clock: Optional replacement for the current UTC time
        """
        self._account_key = account_key
        self._clock = clock

    def __repr__(self) -> str:
        return f"{type(self).__name__}(account_key='***REDACTED***')"

    def sign(
        self,
        request: PendingRequest,
        now: Optional[datetime] = None
    ) -> Dict[str, str]:
        """
        Sign a request.

        The request itself is left untouched; the returned headers are meant
        to be merged into it by the caller.

        Args:
            request: Request to sign
            now: Timestamp to embed instead of the current time

        Returns:
            Ordered mapping with ``x-ms-date``, ``x-ms-version`` and ``Authorization``

        Raises:
            InvalidKeyError: If the account key is not valid base64, checked
                before anything else about the request
            ValueError: If the account, resource path or x-ms- headers are malformed
            CryptoUnavailableError: If HMAC-SHA256 is not available
        """
        key_bytes = decode_key(self._account_key)
        timestamp = format_rfc1123(now) if now is not None else format_now(self._clock)

        headers = _to_headers(request.headers)
        headers["x-ms-date"] = timestamp
        headers["x-ms-version"] = SIGNING_VERSION

        string_to_sign = build_string_to_sign(
            method=request.method,
            headers=headers,
            account=request.account,
            resource_path=request.resource_path,
        )
        signature = _hmac_sha256(key_bytes, string_to_sign)

        logger.debug(
            f"Signed {request.verb} request for account {request.account}: "
            f"{request.resource_path}"
        )

        return {
            "x-ms-date": timestamp,
            "x-ms-version": SIGNING_VERSION,
            "Authorization": f"{AUTH_SCHEME} {request.account}:{signature}",
        }


class SharedKeyAuth(httpx.Auth):
    """httpx authentication flow that signs every request with SharedKey."""

    def __init__(
        self,
        account: str,
        account_key: str,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.account = account
        self._signer = RequestSigner(account_key, clock=clock)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        pending = PendingRequest(
            method=request.method,
            resource_path=request.url.raw_path.split(b"?", 1)[0].decode("ascii"),
            account=self.account,
            headers=request.headers,
        )
        request.headers.update(self._signer.sign(pending))

        if logger.isEnabledFor(logging.DEBUG):
            for name, value in request.headers.items():
                if name.lower() != "authorization":
                    logger.debug(f"{name}: {value}")

        yield request


def build_string_to_sign(
    method: Union[HttpMethod, str],
    headers: HeadersLike,
    account: str,
    resource_path: str
) -> str:
    """
    Build the 2009-09-19 string-to-sign.

    Format (every line terminated by a newline):
        VERB
        Content-Type
        Content-Language
        (empty, Content-Length)
        Content-MD5
        Content-Type
        (empty, Date is carried by x-ms-date)
        If-Modified-Since
        If-Match
        If-None-Match
        If-Modified-Since
        Range
    followed by CanonicalizedHeaders and CanonicalizedResource.

    Content-Type and If-Modified-Since appear twice; the service computes
    its signature over the same layout.

    Args:
        method: HTTP method as sent
        headers: Request headers including x-ms-date and x-ms-version
        account: Storage account name
        resource_path: Resource path beginning with "/"

    Returns:
        String to sign
    """
    if not isinstance(headers, httpx.Headers):
        headers = _to_headers(headers)

    verb = _verb(method)
    content_type = _header_value(headers, "Content-Type")
    if_modified_since = _header_value(headers, "If-Modified-Since")

    fields = [
        verb,
        content_type,
        _header_value(headers, "Content-Language"),
        "",
        _header_value(headers, "Content-MD5"),
        content_type,
        "",
        if_modified_since,
        _header_value(headers, "If-Match"),
        _header_value(headers, "If-None-Match"),
        if_modified_since,
        _header_value(headers, "Range"),
    ]

    return (
        "".join(f"{value}\n" for value in fields)
        + build_canonicalized_headers(headers)
        + build_canonicalized_resource(account, resource_path)
    )


def build_canonicalized_headers(headers: HeadersLike) -> str:
    """
    Build the CanonicalizedHeaders block.

    Every ``x-ms-`` header, names lowercased and sorted ordinally, rendered
    as ``name:value\\n``. Values are taken verbatim.

    Raises:
        ValueError: If two headers share a name after case-folding
    """
    entries = []
    seen = set()

    for name, value in _iter_headers(headers):
        name = name.lower()
        if not name.startswith(CANONICAL_HEADER_PREFIX):
            continue
        if name in seen:
            raise ValueError(f"Duplicate header in canonicalized set: {name}")
        seen.add(name)
        entries.append((name, value))

    return "".join(f"{name}:{value}\n" for name, value in sorted(entries))


def build_canonicalized_resource(account: str, resource_path: str) -> str:
    """
    Build the CanonicalizedResource, ``/<account><resource_path>``.

    Raises:
        ValueError: If the account contains "/" or the path does not start with "/"
    """
    if not account or "/" in account:
        raise ValueError(f"Invalid account name: '{account}'")
    if not resource_path.startswith("/"):
        raise ValueError(f"Resource path must begin with '/': '{resource_path}'")

    return f"/{account}{resource_path}"


def decode_key(account_key: str) -> bytes:
    """
    Decode a base64 account key.

    Raises:
        InvalidKeyError: If the key is empty or not valid base64
    """
    try:
        key_bytes = base64.b64decode(account_key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidKeyError(f"Account key is not valid base64: {e}") from e

    if not key_bytes:
        raise InvalidKeyError("Account key is empty")

    return key_bytes


def compute_signature(string_to_sign: str, account_key: str) -> str:
    """
    Compute the base64 HMAC-SHA256 signature of a string-to-sign.

    Args:
        string_to_sign: Canonical string
        account_key: Base64-encoded account key

    Returns:
        Base64-encoded signature

    Raises:
        InvalidKeyError: If the key cannot be decoded
        CryptoUnavailableError: If HMAC-SHA256 is not available
    """
    return _hmac_sha256(decode_key(account_key), string_to_sign)


def _hmac_sha256(key_bytes: bytes, string_to_sign: str) -> str:
    try:
        digest = hmac.new(key_bytes, string_to_sign.encode("utf-8"), "sha256").digest()
    except ValueError as e:
        raise CryptoUnavailableError(f"HMAC-SHA256 is not available: {e}") from e

    return base64.b64encode(digest).decode("utf-8")


def _header_value(headers: httpx.Headers, name: str) -> str:
    return headers.get(name) or ""


def _iter_headers(headers: HeadersLike) -> Iterable[Tuple[str, str]]:
    if isinstance(headers, httpx.Headers):
        return headers.multi_items()
    return headers.items()


def _to_headers(headers: HeadersLike) -> httpx.Headers:
    # httpx defaults to ascii for str values and caches whatever it detects
    return httpx.Headers(headers, encoding=HEADER_ENCODING)


def _verb(method: Union[HttpMethod, str]) -> str:
    return method.value if isinstance(method, HttpMethod) else method
