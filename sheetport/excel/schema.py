"""Field schema: the ordered column layout shared by import and export.

A schema is parsed from a configuration mapping keyed by field name::

    {
        "id": {"index": 0, "title": "ID", "width": 8},
        "status": {
            "index": 1,
            "title": "Status",
            "dictData": {0: "inactive", 1: "active"},
        },
        "created_at": {"index": 2, "only_export": True},
    }

Columns are laid out in ascending ``index`` order. Both the camelCase keys
(``headColor``, ``headBgColor``, ``bgColor``, ``dictData``, ``onlyExport``)
and their snake_case forms are accepted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, Iterator, Mapping

from sheetport.excel.columns import column_label
from sheetport.excel.values import format_value
from sheetport.exceptions import ExcelConfigError

# Horizontal alignments understood by openpyxl and xlwt
ALIGNMENTS: Final[frozenset[str]] = frozenset({
    "general",
    "left",
    "center",
    "right",
    "fill",
    "justify",
    "centerContinuous",
    "distributed",
})

_HEX_COLOR: Final = re.compile(r"^(?:[0-9A-F]{6}|[0-9A-F]{8})$")

# config key -> accepted spellings
_ALIASES: Final[dict[str, tuple[str, ...]]] = {
    "head_color": ("head_color", "headColor"),
    "head_bg_color": ("head_bg_color", "headBgColor"),
    "color": ("color",),
    "bg_color": ("bg_color", "bgColor"),
    "only_export": ("only_export", "onlyExport"),
    "dict_data": ("dict_data", "dictData"),
}


def _dict_key(value: Any) -> str:
    return format_value(value)


def normalize_color(name: str, value: str | None) -> str | None:
    """Strip a leading ``#`` and upper-case a hex colour."""
    if value is None or value == "":
        return None
    color = str(value).lstrip("#").upper()
    if not _HEX_COLOR.match(color):
        raise ExcelConfigError(f"Field '{name}': invalid colour {value!r}")
    return color


@dataclass(frozen=True)
class FieldDescriptor:
    """One importable/exportable column."""

    name: str
    index: int
    title: str = ""
    width: float | None = None
    align: str | None = None
    head_color: str | None = None
    head_bg_color: str | None = None
    color: str | None = None
    bg_color: str | None = None
    only_export: bool = False
    dict_data: Mapping[Any, Any] = field(default_factory=dict)
    _by_raw: Mapping[str, Any] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )
    _by_display: Mapping[str, Any] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        if not self.title:
            object.__setattr__(self, "title", self.name)
        if self.align is not None and self.align not in ALIGNMENTS:
            raise ExcelConfigError(
                f"Field '{self.name}': unknown alignment {self.align!r}"
            )
        for attr in ("head_color", "head_bg_color", "color", "bg_color"):
            object.__setattr__(
                self, attr, normalize_color(self.name, getattr(self, attr))
            )
        dict_data = MappingProxyType(dict(self.dict_data))
        object.__setattr__(self, "dict_data", dict_data)
        # Both directions are built once; later duplicates win on reversal
        object.__setattr__(
            self,
            "_by_raw",
            MappingProxyType({_dict_key(k): v for k, v in dict_data.items()}),
        )
        object.__setattr__(
            self,
            "_by_display",
            MappingProxyType({_dict_key(v): k for k, v in dict_data.items()}),
        )

    @property
    def has_dictionary(self) -> bool:
        return bool(self.dict_data)

    def has_display_for(self, raw: Any) -> bool:
        return _dict_key(raw) in self._by_raw

    def to_display(self, raw: Any) -> Any:
        """Display value for ``raw``, or ``raw`` itself when unmapped."""
        return self._by_raw.get(_dict_key(raw), raw)

    def to_raw(self, text: str) -> Any:
        """Resolve imported cell text back to a stored value.

        Text that is already a dictionary key is kept as-is, so a sheet may
        hold either the raw key or its display value.
        """
        if not self.dict_data or text in self._by_raw:
            return text
        return self._by_display.get(text, text)


@dataclass(frozen=True)
class ExcelSchema:
    """Ordered, immutable collection of field descriptors."""

    fields: tuple[FieldDescriptor, ...]

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def last_column(self) -> str:
        """Label of the rightmost column the schema occupies."""
        return column_label(len(self.fields) - 1)

    def at(self, offset: int) -> FieldDescriptor | None:
        """Descriptor laid out at a zero-based column offset, if any."""
        if 0 <= offset < len(self.fields):
            return self.fields[offset]
        return None


def _option(name: str, meta: Mapping[str, Any], key: str, default: Any = None) -> Any:
    present = [alias for alias in _ALIASES[key] if alias in meta]
    if len(present) > 1:
        raise ExcelConfigError(
            f"Field '{name}': both {present[0]!r} and {present[1]!r} given"
        )
    return meta[present[0]] if present else default


def _build_field(position: int, name: str, meta: Mapping[str, Any] | None) -> FieldDescriptor:
    meta = meta or {}
    if not isinstance(meta, Mapping):
        raise ExcelConfigError(f"Field '{name}': options must be a mapping")
    try:
        index = int(meta.get("index", position))
        width = meta.get("width")
        width = float(width) if width not in (None, "") else None
    except (TypeError, ValueError) as e:
        raise ExcelConfigError(f"Field '{name}': {e}") from e
    dict_data = _option(name, meta, "dict_data", {}) or {}
    if not isinstance(dict_data, Mapping):
        raise ExcelConfigError(f"Field '{name}': dictData must be a mapping")
    return FieldDescriptor(
        name=name,
        index=index,
        title=str(meta.get("title") or name),
        width=width,
        align=meta.get("align") or None,
        head_color=_option(name, meta, "head_color"),
        head_bg_color=_option(name, meta, "head_bg_color"),
        color=_option(name, meta, "color"),
        bg_color=_option(name, meta, "bg_color"),
        only_export=bool(_option(name, meta, "only_export", False)),
        dict_data=dict_data,
    )


def parse_schema(config: Mapping[str, Mapping[str, Any]] | ExcelSchema) -> ExcelSchema:
    """Build an :class:`ExcelSchema` from a field configuration mapping.

    Fields are sorted by ``index``; a field without one takes its position in
    the mapping. An already-parsed schema is returned unchanged.

    Raises:
        ExcelConfigError: If ``config`` is empty, a field is malformed or two
            fields share an index.
    """
    if isinstance(config, ExcelSchema):
        if not config.fields:
            raise ExcelConfigError("Field properties cannot be empty")
        return config
    if not config:
        raise ExcelConfigError("Field properties cannot be empty")

    by_index: dict[int, FieldDescriptor] = {}
    for position, (name, meta) in enumerate(config.items()):
        descriptor = _build_field(position, str(name), meta)
        if descriptor.index in by_index:
            raise ExcelConfigError(
                f"Fields '{by_index[descriptor.index].name}' and '{name}' "
                f"share index {descriptor.index}"
            )
        by_index[descriptor.index] = descriptor
    return ExcelSchema(fields=tuple(by_index[i] for i in sorted(by_index)))
