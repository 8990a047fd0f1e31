"""
Blob downloader using SharedKey-signed requests.

Sends a signed GET for a blob and streams a successful response body to a
local file. Any other response is surfaced as a DownloadError carrying the
service's diagnostic body.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

import httpx

from azuredl.auth.sharedkey import SharedKeyAuth
from azuredl.blob.exceptions import DownloadError, TransportError
from azuredl.core.logging_config import (
    clear_correlation_id,
    log_with_context,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://{account}.blob.core.windows.net"
DEFAULT_TIMEOUT = 30.0


@dataclass
class DownloadResult:
    """Outcome of a successful download."""

    path: Path
    status_code: int
    reason: str
    bytes_written: int
    request_id: str


class BlobDownloader:
    """
    Downloads blobs from an Azure storage account.

    Example:
        with BlobDownloader("myaccount", account_key) as downloader:
            result = downloader.download("/container/blob.txt")
            print(result.path)
    """

    def __init__(
        self,
        account: str,
        account_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the downloader.

        Args:
            account: Storage account name
            account_key: Base64-encoded account key
            endpoint: Blob endpoint; "{account}" is replaced by the account name
            timeout: Transport timeout in seconds
            transport: Optional httpx transport (used by tests)
            clock: Optional replacement for the current UTC time used in signing
        """
        self.account = account
        self.endpoint = endpoint.format(account=account).rstrip("/")
        self._auth = SharedKeyAuth(account, account_key, clock=clock)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def __enter__(self) -> "BlobDownloader":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def blob_url(self, resource_path: str) -> str:
        """Build the full URL for a resource path."""
        if not resource_path.startswith("/"):
            raise ValueError(f"Resource path must begin with '/': '{resource_path}'")
        return f"{self.endpoint}{resource_path}"

    def download(
        self,
        resource_path: str,
        output_dir: Union[str, Path] = "."
    ) -> DownloadResult:
        """
        Download a blob into ``output_dir``.

        The file is named after the last segment of the resource path.

        Args:
            resource_path: Blob path, e.g. "/container/dir/blob.txt"
            output_dir: Directory to write into

        Returns:
            DownloadResult describing the written file

        Raises:
            ValueError: If the resource path does not name a file
            DownloadError: If the service answers with a status other than 200
            TransportError: If the request could not be sent
        """
        url = self.blob_url(resource_path)
        file_name = resource_path.rsplit("/", 1)[-1]
        if not file_name:
            raise ValueError(f"Resource path does not name a blob: '{resource_path}'")

        target = (Path(output_dir) / file_name).resolve()
        request_id = str(uuid.uuid4())
        set_correlation_id(request_id)

        try:
            logger.info(f"Downloading {url}")
            with self._client.stream(
                "GET",
                url,
                headers={"x-ms-client-request-id": request_id},
                auth=self._auth,
            ) as response:
                logger.info(
                    f"{response.http_version} {response.status_code} {response.reason_phrase}"
                )

                if response.status_code != 200:
                    response.read()
                    raise DownloadError(
                        status_code=response.status_code,
                        reason=response.reason_phrase,
                        body=response.text,
                    )

                target.parent.mkdir(parents=True, exist_ok=True)
                bytes_written = 0
                with open(target, "wb") as out:
                    for chunk in response.iter_bytes():
                        out.write(chunk)
                        bytes_written += len(chunk)

            log_with_context(
                logger,
                logging.INFO,
                f"Wrote {bytes_written} bytes to {target}",
                url=url,
                bytes_written=bytes_written,
            )
            return DownloadResult(
                path=target,
                status_code=response.status_code,
                reason=response.reason_phrase,
                bytes_written=bytes_written,
                request_id=request_id,
            )
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(f"Request to {url} failed: {e}") from e
        finally:
            clear_correlation_id()
