"""Schema describing important fields for CLI table rendering."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

Row = Mapping[str, Any]
ValueExtractor = Callable[[Row], Any]
ValueFormatter = Callable[[Any], str]
SortKey = Callable[[Row], Any]


@dataclass(frozen=True)
class Column:
    """Describe how to pull and format a column for Rich tables."""

    header: str
    keys: tuple[str, ...] = ()
    extractor: ValueExtractor | None = None
    formatter: ValueFormatter | None = None
    justify: str = "left"

    def render(self, row: Row) -> str:
        value: Any | None = None
        for key in self.keys:
            if row.get(key) is not None:
                value = row[key]
                break
        if value is None and self.extractor:
            value = self.extractor(row)
        if self.formatter:
            return self.formatter(value)
        return "" if value is None else str(value)


@dataclass(frozen=True)
class TableView:
    """Describe a Rich table for a CLI command."""

    title: str
    columns: tuple[Column, ...]
    sort_key: SortKey | None = None


def _coerce_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _kb_formatter(*, precision: int = 2) -> ValueFormatter:
    """Render a KiB count (the gateway's native unit) as GiB."""

    def _formatter(value: Any) -> str:
        number = _coerce_number(value)
        if number is None:
            return ""
        return f"{number / (1024**2):.{precision}f}"

    return _formatter


def _placeholder(text: str) -> ValueFormatter:
    def _formatter(value: Any) -> str:
        if value is None or value == "":
            return text
        return str(value)

    return _formatter


def _sort_name(row: Row) -> str:
    return str(row.get("name") or "").lower()


CLI_TABLE_VIEWS: dict[str, TableView] = {
    "pools.list": TableView(
        title="Storage Pools",
        columns=(
            Column("Name", keys=("name",)),
            Column("Pool ID", keys=("id",)),
            Column("Protection Domain", keys=("protectionDomainId",)),
            Column(
                "Available (GiB)",
                keys=("capacityAvailableForVolumeAllocationInKb",),
                formatter=_kb_formatter(precision=1),
                justify="right",
            ),
            Column("Zero Padding", keys=("zeroPaddingEnabled",), justify="center"),
        ),
        sort_key=_sort_name,
    ),
    "volumes.list": TableView(
        title="Volumes",
        columns=(
            Column("Name", keys=("name",)),
            Column("Volume ID", keys=("id",)),
            Column("Type", keys=("volumeType",)),
            Column(
                "Size (GiB)",
                keys=("sizeInKb",),
                formatter=_kb_formatter(precision=2),
                justify="right",
            ),
            Column(
                "Mapped SDCs",
                extractor=lambda r: len(r.get("mappedSdcInfo") or []),
                justify="right",
            ),
        ),
        sort_key=_sort_name,
    ),
    "sdc.volumes": TableView(
        title="Locally Mapped Volumes",
        columns=(
            Column("MDM ID", keys=("mdm_id",)),
            Column("Volume ID", keys=("volume_id",)),
            Column("Device", keys=("sdc_device",), formatter=_placeholder("-")),
        ),
    ),
}
