"""
azuredl Command-Line Interface

Downloads blobs from Azure Blob Storage using SharedKey authorization.
"""

import sys
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from pydantic import ValidationError

from azuredl import __version__
from azuredl.auth.exceptions import SigningError
from azuredl.auth.sharedkey import HttpMethod, PendingRequest, RequestSigner
from azuredl.blob.downloader import BlobDownloader
from azuredl.blob.exceptions import DownloadError, TransportError
from azuredl.core.config_manager import AzureDLConfig, ConfigManager
from azuredl.core.logging_config import get_logger, setup_logging


config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (YAML or JSON)",
)


@click.group()
@click.version_option(version=__version__, prog_name="azuredl")
@click.pass_context
def cli(ctx):
    """
    azuredl - Azure Blob Storage downloader

    Download blobs using SharedKey authorization.
    """
    ctx.ensure_object(dict)


@cli.command()
@click.argument("resource_path")
@click.argument("account", required=False)
@click.argument("key", required=False)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write the blob into",
)
@config_option
@click.option(
    "--endpoint",
    help="Blob endpoint, '{account}' is replaced by the account name",
)
@click.option(
    "--timeout",
    type=float,
    help="HTTP timeout in seconds",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    help="Logging format",
)
def download(
    resource_path: str,
    account: Optional[str],
    key: Optional[str],
    output: Optional[Path],
    config: Optional[Path],
    endpoint: Optional[str],
    timeout: Optional[float],
    log_level: Optional[str],
    log_format: Optional[str],
):
    """
    Download a blob.

    RESOURCE_PATH is the blob path including the container, ACCOUNT the
    storage account name and KEY one of its base64 account keys. ACCOUNT
    and KEY may also come from the configuration file or from the
    AZUREDL_ACCOUNT / AZUREDL_ACCOUNT_KEY environment variables.

    Examples:
        azuredl download /container/blob.txt myaccount <key>
        azuredl download /container/blob.txt -o downloads --log-level DEBUG
    """
    storage: Dict[str, Any] = {}
    if account:
        storage["account"] = account
    if key:
        storage["account_key"] = key
    if output:
        storage["output_dir"] = str(output)
    if endpoint:
        storage["endpoint"] = endpoint
    if timeout is not None:
        storage["timeout"] = timeout

    logging_overrides: Dict[str, Any] = {}
    if log_level:
        logging_overrides["level"] = log_level.upper()
    if log_format:
        logging_overrides["format"] = log_format.lower()

    overrides: Dict[str, Any] = {}
    if storage:
        overrides["storage"] = storage
    if logging_overrides:
        overrides["logging"] = logging_overrides

    settings = _load_config(config, overrides)
    _setup_logging(settings)
    logger = get_logger("azuredl.cli")

    account, key = _require_credentials(settings)

    try:
        with BlobDownloader(
            account,
            key,
            endpoint=settings.storage.endpoint,
            timeout=settings.storage.timeout,
        ) as downloader:
            result = downloader.download(resource_path, settings.storage.output_dir)
    except DownloadError as e:
        click.echo(f"{e.status_code} {e.reason}")
        click.echo(e.body)
        sys.exit(1)
    except (SigningError, TransportError, ValueError) as e:
        logger.debug(f"Download of {resource_path} failed", exc_info=True)
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    click.echo(f"{result.status_code} {result.reason}")
    click.echo(f"Wrote {result.path}")


@cli.command()
@click.argument("resource_path")
@click.argument("account", required=False)
@click.argument("key", required=False)
@click.option(
    "--method",
    "-m",
    type=click.Choice([m.value for m in HttpMethod], case_sensitive=False),
    default="GET",
    help="HTTP method of the request",
    show_default=True,
)
@click.option(
    "--header",
    "-H",
    "headers",
    multiple=True,
    help="Additional request header as 'Name: value' (repeatable)",
)
@config_option
def sign(
    resource_path: str,
    account: Optional[str],
    key: Optional[str],
    method: str,
    headers: Tuple[str, ...],
    config: Optional[Path],
):
    """
    Print SharedKey headers for a request without sending it.

    Examples:
        azuredl sign /container/blob.txt myaccount <key>
        azuredl sign /container/blob.txt -m HEAD -H "Range: bytes=0-99"
    """
    storage: Dict[str, Any] = {}
    if account:
        storage["account"] = account
    if key:
        storage["account_key"] = key

    settings = _load_config(config, {"storage": storage} if storage else None)
    account, key = _require_credentials(settings)

    try:
        request = PendingRequest(
            method=method,
            resource_path=resource_path,
            account=account,
            headers=[_parse_header(h) for h in headers],
        )
        signed = RequestSigner(key).sign(request)
    except (SigningError, ValueError) as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    for name, value in signed.items():
        click.echo(f"{name}: {value}")


@cli.command("config")
@config_option
def show_config(config: Optional[Path]):
    """
    Show the effective configuration.

    The account key is redacted.
    """
    settings = _load_config(config, None)
    config_dict = settings.model_dump()
    if config_dict["storage"].get("account_key"):
        config_dict["storage"]["account_key"] = "***REDACTED***"
    click.echo(json.dumps(config_dict, indent=2))


def _load_config(config: Optional[Path], overrides: Optional[Dict[str, Any]]) -> AzureDLConfig:
    try:
        return ConfigManager().load(
            config_file=str(config) if config else None,
            cli_overrides=overrides,
        )
    except (ValidationError, ValueError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(1)


def _setup_logging(settings: AzureDLConfig) -> None:
    setup_logging(
        level=settings.logging.level,
        format_type=settings.logging.format,
        log_file=settings.logging.file,
        rotation_size=settings.logging.rotation_size,
        rotation_count=settings.logging.rotation_count,
        module_levels=settings.logging.module_levels,
    )


def _require_credentials(settings: AzureDLConfig) -> Tuple[str, str]:
    account = settings.storage.account
    key = settings.storage.account_key
    if not account or not key:
        raise click.UsageError(
            "ACCOUNT and KEY are required (arguments, config file or "
            "AZUREDL_ACCOUNT / AZUREDL_ACCOUNT_KEY)"
        )
    return account, key


def _parse_header(raw: str) -> Tuple[str, str]:
    if ":" not in raw:
        raise click.BadParameter(f"Header must be 'Name: value', got '{raw}'", param_hint="--header")
    name, value = raw.split(":", 1)
    return name.strip(), value.strip()


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
