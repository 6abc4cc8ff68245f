"""Discover ScaleIO volumes mapped to this host through the SDC driver.

The SDC kernel driver is queried with its ``drv_cfg`` utility, and device
nodes are located through the ``emc-vol-<mdm>-<volume>`` symlinks udev
creates under ``/dev/disk/by-id``.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import DeviceQueryError

logger = logging.getLogger(__name__)

DRV_CFG_PATH = "/bin/emc/scaleio/drv_cfg"
DISK_BY_ID_PATH = "/dev/disk/by-id"
DRV_CFG_TIMEOUT = 30.0

VOLUME_MARKER = "VOL-ID"
DEVICE_PREFIX = "emc-vol-"
_DEVICE_NAME = re.compile(rf"{DEVICE_PREFIX}\w*-\w*", re.ASCII)


@dataclass(slots=True)
class MappedVolume:
    """A volume the local SDC reports as mapped."""

    mdm_id: str
    volume_id: str
    sdc_device: str = ""

    @property
    def key(self) -> str:
        return f"{self.mdm_id}-{self.volume_id}"


def parse_query_vols(output: str) -> dict[str, MappedVolume]:
    """Parse ``drv_cfg --query_vols`` output into mapped volumes keyed by ``<mdm>-<volume>``.

    Only lines starting with ``VOL-ID`` are considered; the volume id is the
    second token and the MDM id the fourth. A later line for the same key
    replaces an earlier one.
    """
    volumes: dict[str, MappedVolume] = {}
    for line in output.splitlines():
        tokens = line.split()
        if not tokens or tokens[0] != VOLUME_MARKER:
            continue
        if len(tokens) < 4:
            logger.debug("Skipping truncated volume line from drv_cfg: %r", line)
            continue
        volume = MappedVolume(mdm_id=tokens[3], volume_id=tokens[1])
        volumes[volume.key] = volume
    return volumes


def scan_device_links(directory: str | Path = DISK_BY_ID_PATH) -> dict[str, str]:
    """Map ``<mdm>-<volume>`` keys to resolved device paths found in `directory`.

    A missing or unreadable directory yields an empty mapping.
    """
    root = Path(directory)
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        logger.debug("Device directory %s is not readable: %s", root, exc)
        return {}

    devices: dict[str, str] = {}
    for entry in entries:
        if not _DEVICE_NAME.fullmatch(entry.name):
            continue
        try:
            target = entry.resolve(strict=True)
        except OSError as exc:
            logger.debug("Unable to resolve device link %s: %s", entry, exc)
            continue
        devices[entry.name[len(DEVICE_PREFIX):]] = str(target)
    return devices


def _run_drv_cfg(drv_cfg: str, argument: str, timeout: float | None) -> str:
    command = [drv_cfg, argument]
    logger.debug("Running %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            check=True,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise DeviceQueryError(
            f"{drv_cfg} {argument} exited with status {exc.returncode}: {stderr}",
            details=stderr,
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise DeviceQueryError(f"{drv_cfg} {argument} timed out after {timeout}s") from exc
    except OSError as exc:
        raise DeviceQueryError(f"Error querying {drv_cfg} {argument}: {exc}") from exc
    return completed.stdout


def get_local_volume_map(
    *,
    drv_cfg: str = DRV_CFG_PATH,
    disk_by_id: str | Path = DISK_BY_ID_PATH,
    timeout: float | None = DRV_CFG_TIMEOUT,
) -> list[MappedVolume]:
    """Return the volumes mapped to this host, sorted by ``<mdm>-<volume>`` key.

    Each volume carries the device path it is exposed as, or an empty string
    when no matching device link exists.
    """
    volumes = parse_query_vols(_run_drv_cfg(drv_cfg, "--query_vols", timeout))

    for key, device in scan_device_links(disk_by_id).items():
        volume = volumes.get(key)
        if volume is None:
            logger.debug("Device link for %s has no mapped volume, ignoring", key)
            continue
        volume.sdc_device = device

    return [volumes[key] for key in sorted(volumes)]


def query_sdc_guid(*, drv_cfg: str = DRV_CFG_PATH, timeout: float | None = DRV_CFG_TIMEOUT) -> str:
    """Return the GUID the SDC kernel driver registered with the MDM."""

    guid = _run_drv_cfg(drv_cfg, "--query_guid", timeout).strip().lower()
    if not guid:
        raise DeviceQueryError(f"{drv_cfg} --query_guid returned no GUID")
    return guid
