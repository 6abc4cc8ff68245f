"""Command-line interface for interacting with ScaleIO gateways."""
from __future__ import annotations

import json
import os
from collections.abc import Mapping, Sequence
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install scaleio-client[cli]' to enable this command."
    ) from exc

from . import ScaleIOClient
from .auth.token import TokenAuth
from .cli_schema import CLI_TABLE_VIEWS, TableView
from .config import DEFAULT_API_VERSION
from .exceptions import DeviceQueryError, OperationNotImplementedError, ScaleIOError
from .sdc import (
    DISK_BY_ID_PATH,
    DRV_CFG_PATH,
    DRV_CFG_TIMEOUT,
    get_local_volume_map,
    query_sdc_guid,
)

app = typer.Typer(help="ScaleIO storage management CLI.", no_args_is_help=True)

pools_app = typer.Typer(help="Storage pool operations.")
volumes_app = typer.Typer(help="Volume operations.")
sdc_app = typer.Typer(help="Local SDC inspection.")
app.add_typer(pools_app, name="pools")
app.add_typer(volumes_app, name="volumes")
app.add_typer(sdc_app, name="sdc")

KB_PER_GB = 1024 * 1024


def _build_client(
    base_url: str,
    username: str,
    token: str | None,
    verify_ssl: bool,
    cert_path: Path | None,
    timeout: float,
    api_version: str,
) -> ScaleIOClient:
    if not token:
        raise typer.BadParameter("--token is required to call the gateway.")

    verify_target: bool | str
    if cert_path:
        expanded_cert = cert_path.expanduser()
        if not expanded_cert.exists():
            raise typer.BadParameter("Certificate file not found for --cert option.")
        if not verify_ssl:
            raise typer.BadParameter("Cannot combine --cert with --no-verify.")
        verify_target = str(expanded_cert)
    else:
        verify_target = verify_ssl

    return ScaleIOClient(
        base_url=base_url,
        auth_strategy=TokenAuth(token=token, username=username),
        verify_ssl=verify_target,
        timeout=timeout,
        api_version=api_version,
    )


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


console = Console(force_terminal=False, color_system=None)


def _render_rich_table(view: TableView, rows: Sequence[Mapping[str, Any]]) -> None:
    table = Table(
        title=view.title,
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    for column in view.columns:
        table.add_column(column.header, justify=column.justify)
    ordered_rows = list(rows)
    if view.sort_key:
        ordered_rows.sort(key=view.sort_key)
    for row in ordered_rows:
        table.add_row(*(column.render(row) for column in view.columns))
    console.print(table)


def _present_output(payload: Any, *, view_id: str, json_output: bool) -> None:
    if json_output:
        _echo_json(payload)
        return
    view = CLI_TABLE_VIEWS[view_id]
    rows = [item for item in payload if isinstance(item, Mapping)]
    if not rows:
        _echo_json(payload)
        return
    _render_rich_table(view, rows)


def _handle_error(exc: ScaleIOError, *, label: str = "Request failed") -> None:
    if exc.status_code is not None:
        message = f"{label} (status {exc.status_code}): {exc}"
    else:
        message = f"{label}: {exc}"
    if exc.details and exc.status_code is not None:
        message += f"\nDetails: {exc.details}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _default_verify() -> bool:
    # Accept common falsey representations (0/false/no/off) for SCALEIO_VERIFY_SSL.
    env_verify = os.getenv("SCALEIO_VERIFY_SSL")
    if env_verify is None:
        return True
    return env_verify.strip().lower() not in {"0", "false", "no", "off"}


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    return {
        "base_url": typer.Option(
            ..., "--base-url", envvar="SCALEIO_BASE_URL", help="ScaleIO gateway base URL."
        ),
        "username": typer.Option(
            "",
            "--username",
            "-u",
            envvar="SCALEIO_USERNAME",
            help="User name sent alongside the token (usually empty).",
        ),
        "token": typer.Option(
            None,
            "--token",
            "-t",
            envvar="SCALEIO_TOKEN",
            help="Gateway token returned by /api/login.",
            hide_input=True,
        ),
        "verify_ssl": typer.Option(
            _default_verify(),
            "--verify/--no-verify",
            help="Enable or disable TLS certificate verification.",
            show_default=True,
        ),
        "cert_path": typer.Option(
            None,
            "--cert",
            envvar="SCALEIO_CA_CERT",
            help="Path to a custom CA bundle for TLS verification.",
        ),
        "timeout": typer.Option(30.0, help="Request timeout (seconds).", show_default=True),
        "api_version": typer.Option(
            DEFAULT_API_VERSION,
            "--api-version",
            envvar="SCALEIO_API_VERSION",
            help="Gateway API version advertised in the media type.",
            show_default=True,
        ),
        "output_json": typer.Option(
            False,
            "--json",
            "-j",
            help="Return raw JSON instead of rendering a table.",
        ),
    }


_SHARED_OPTIONS = _shared_options()


def _drv_cfg_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    return {
        "drv_cfg": typer.Option(
            DRV_CFG_PATH,
            "--drv-cfg",
            envvar="SCALEIO_DRV_CFG",
            help="Path to the SDC drv_cfg utility.",
            show_default=True,
        ),
        "timeout": typer.Option(
            DRV_CFG_TIMEOUT, "--timeout", help="drv_cfg timeout (seconds).", show_default=True
        ),
    }


_DRV_CFG_OPTIONS = _drv_cfg_options()

_POOL_ID_OPTION = typer.Option(..., "--pool-id", help="Owning storage pool identifier.")


def _build_volume_payload(
    name: str | None,
    size_gb: int | None,
    thin: bool,
    payload_file: Path | None,
) -> dict[str, Any]:
    if payload_file:
        try:
            loaded = json.loads(payload_file.read_text(encoding="utf-8"))
        except OSError as exc:  # pragma: no cover - filesystem errors
            raise typer.BadParameter(f"Unable to read payload file: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Payload file is not valid JSON: {exc}") from exc
        if not isinstance(loaded, dict):
            raise typer.BadParameter("Payload file must contain a JSON object.")
        return loaded

    if not name or size_gb is None:
        raise typer.BadParameter("--name and --size-gb are required without --payload.")
    if size_gb <= 0:
        raise typer.BadParameter("--size-gb must be positive.")
    return {
        "name": name,
        "volumeSizeInKb": str(size_gb * KB_PER_GB),
        "volumeType": "ThinProvisioned" if thin else "ThickProvisioned",
    }


@pools_app.command("list")
def pools_list(
    base_url: str = _SHARED_OPTIONS["base_url"],
    username: str = _SHARED_OPTIONS["username"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """List storage pools."""

    with _build_client(
        base_url=base_url,
        username=username,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        api_version=api_version,
    ) as client:
        try:
            pools = client.pools.list()
        except ScaleIOError as exc:
            _handle_error(exc)
            return
    _present_output(pools, view_id="pools.list", json_output=output_json)


@volumes_app.command("list")
def volumes_list(
    base_url: str = _SHARED_OPTIONS["base_url"],
    username: str = _SHARED_OPTIONS["username"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
    pool_id: str = _POOL_ID_OPTION,
    volume_id: str | None = typer.Option(None, "--volume-id", help="Fetch a single volume."),
    href: str | None = typer.Option(None, "--href", help="Fetch the volume at this href."),
) -> None:
    """List the volumes of a storage pool."""

    with _build_client(
        base_url=base_url,
        username=username,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        api_version=api_version,
    ) as client:
        try:
            pool = client.pools.get(pool_id)
            volumes = client.volumes.get(pool, volume_id=volume_id, volume_href=href)
        except ScaleIOError as exc:
            _handle_error(exc)
            return
    _present_output(volumes, view_id="volumes.list", json_output=output_json)


@volumes_app.command("find")
def volumes_find(
    base_url: str = _SHARED_OPTIONS["base_url"],
    username: str = _SHARED_OPTIONS["username"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    pool_id: str = _POOL_ID_OPTION,
    volume_id: str | None = typer.Option(None, "--volume-id"),
    name: str | None = typer.Option(None, "--name"),
    href: str | None = typer.Option(None, "--href"),
) -> None:
    """Look up a volume by id, name or href (not supported by the gateway client)."""

    with _build_client(
        base_url=base_url,
        username=username,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        api_version=api_version,
    ) as client:
        try:
            pool = client.pools.get(pool_id)
            volume = client.volumes.find(pool, volume_id=volume_id, name=name, href=href)
        except OperationNotImplementedError as exc:
            typer.secho(str(exc), err=True, fg=typer.colors.YELLOW)
            raise typer.Exit(code=2) from exc
        except ScaleIOError as exc:
            _handle_error(exc)
            return
    _echo_json(volume)


@volumes_app.command("create")
def volumes_create(
    base_url: str = _SHARED_OPTIONS["base_url"],
    username: str = _SHARED_OPTIONS["username"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    pool_id: str = _POOL_ID_OPTION,
    name: str | None = typer.Option(None, "--name", help="Volume name."),
    size_gb: int | None = typer.Option(None, "--size-gb", help="Volume size in GiB."),
    thin: bool = typer.Option(
        True,
        "--thin/--thick",
        help="Provision the volume thin or thick.",
        show_default=True,
    ),
    payload_file: Path | None = typer.Option(
        None,
        "--payload",
        help="Path to JSON payload template (overrides other volume options).",
    ),
) -> None:
    """Create a new volume within a storage pool."""

    payload = _build_volume_payload(name=name, size_gb=size_gb, thin=thin, payload_file=payload_file)

    with _build_client(
        base_url=base_url,
        username=username,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        api_version=api_version,
    ) as client:
        try:
            pool = client.pools.get(pool_id)
            result = client.volumes.create(pool, payload)
        except ScaleIOError as exc:
            _handle_error(exc)
            return
    _echo_json(result)


@sdc_app.command("volumes")
def sdc_volumes(
    drv_cfg: str = _DRV_CFG_OPTIONS["drv_cfg"],
    timeout: float = _DRV_CFG_OPTIONS["timeout"],
    disk_by_id: Path = typer.Option(
        Path(DISK_BY_ID_PATH),
        "--disk-by-id",
        help="Directory holding emc-vol-* device links.",
        show_default=True,
    ),
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """List volumes mapped to this host and their device paths."""

    try:
        mapped = get_local_volume_map(drv_cfg=drv_cfg, disk_by_id=disk_by_id, timeout=timeout)
    except DeviceQueryError as exc:
        _handle_error(exc, label="drv_cfg query failed")
        return
    _present_output([asdict(volume) for volume in mapped], view_id="sdc.volumes", json_output=output_json)


@sdc_app.command("guid")
def sdc_guid(
    drv_cfg: str = _DRV_CFG_OPTIONS["drv_cfg"],
    timeout: float = _DRV_CFG_OPTIONS["timeout"],
) -> None:
    """Print the SDC GUID of this host."""

    try:
        guid = query_sdc_guid(drv_cfg=drv_cfg, timeout=timeout)
    except DeviceQueryError as exc:
        _handle_error(exc, label="drv_cfg query failed")
        return
    typer.echo(guid)
