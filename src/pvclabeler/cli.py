"""PVC disk labeler CLI (pvclabeler).

Applies Kubernetes PVC labels to the GCE persistent disks backing them.

Usage:
    pvclabeler add VOLUME_ID -l app=web -l team=storage --storage-class standard-rwo
    pvclabeler delete VOLUME_ID -k team
    pvclabeler apply -f requests.yaml
    pvclabeler sanitize kubernetes.io/app
"""

from __future__ import annotations

import dataclasses
from pathlib import Path

import click
from prometheus_client import start_http_server

from .config import LOG_FORMATS, Config, ConfigurationError
from .main import create_reconciler, setup_logging
from .reconciler import DiskLabelReconciler
from .request_loader import RequestLoadError, load_requests
from .sanitize import sanitize_key, sanitize_value

VERSION = "0.1.0"


def parse_label_options(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated KEY=VALUE options into a label map.

    Raises:
        click.BadParameter: If an option has no "=" or an empty key.
    """
    labels: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--label")
        labels[key] = value
    return labels


def _reconciler(ctx: click.Context) -> DiskLabelReconciler:
    config: Config = ctx.obj
    return create_reconciler(config)


# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=VERSION, prog_name="pvclabeler")
@click.option("--log-level", default=None, help="Logging level (overrides LOG_LEVEL)")
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMATS),
    default=None,
    help="Log output format (overrides LOG_FORMAT)",
)
@click.option("--dry-run", is_flag=True, help="Compute label changes without writing them")
@click.option("--metrics-port", type=int, default=None, help="Serve Prometheus metrics on PORT")
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    log_format: str | None,
    dry_run: bool,
    metrics_port: int | None,
) -> None:
    """Apply Kubernetes PVC labels to GCE persistent disks.

    \b
    Label keys and values are sanitized to the GCE label format, e.g.
    "kubernetes.io/app" becomes "kubernetes-io_app".
    """
    overrides: dict[str, object] = {}
    if log_level:
        overrides["log_level"] = log_level
    if log_format:
        overrides["log_format"] = log_format
    if dry_run:
        overrides["dry_run"] = True

    try:
        config = dataclasses.replace(Config.from_env(), **overrides)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(config.log_level, config.log_format)

    if metrics_port is not None:
        start_http_server(metrics_port)

    ctx.obj = config


# =============================================================================
# Label Commands
# =============================================================================


@cli.command()
@click.argument("volume_id")
@click.option("--label", "-l", "label_options", multiple=True, help="Label as KEY=VALUE")
@click.option("--storage-class", default="", help="Storage class of the claim")
@click.pass_context
def add(
    ctx: click.Context, volume_id: str, label_options: tuple[str, ...], storage_class: str
) -> None:
    """Add labels to the disk behind VOLUME_ID."""
    labels = parse_label_options(label_options)
    if not labels:
        raise click.UsageError("at least one --label is required")
    _reconciler(ctx).add_labels(volume_id, labels, storage_class)


@cli.command()
@click.argument("volume_id")
@click.option("--key", "-k", "keys", multiple=True, help="Label key to remove")
@click.option("--storage-class", default="", help="Storage class of the claim")
@click.pass_context
def delete(ctx: click.Context, volume_id: str, keys: tuple[str, ...], storage_class: str) -> None:
    """Remove label keys from the disk behind VOLUME_ID."""
    if not keys:
        raise click.UsageError("at least one --key is required")
    _reconciler(ctx).delete_labels(volume_id, keys, storage_class)


@cli.command()
@click.option(
    "--file",
    "-f",
    "request_file",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML label request file",
)
@click.pass_context
def apply(ctx: click.Context, request_file: Path) -> None:
    """Apply every label request in a request file."""
    try:
        requests = load_requests(request_file)
    except RequestLoadError as e:
        raise click.ClickException(str(e)) from e

    reconciler = _reconciler(ctx)
    for request in requests:
        reconciler.apply_request(request)

    click.echo(f"Processed {len(requests)} label request(s)")


@cli.command()
@click.option("--value", "as_value", is_flag=True, help="Sanitize as label values")
@click.argument("texts", nargs=-1, required=True)
def sanitize(as_value: bool, texts: tuple[str, ...]) -> None:
    """Print the GCE form of label keys (or values)."""
    convert = sanitize_value if as_value else sanitize_key
    for text in texts:
        click.echo(convert(text))
