"""Reshape outgoing records into schema order."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Mapping, Union

from pydantic import BaseModel

from sheetport.excel.schema import ExcelSchema

RecordLike = Union[Mapping[str, Any], BaseModel]
DataSource = Union[Iterable[RecordLike], Callable[[], Iterable[RecordLike]]]


def resolve_data(data: DataSource) -> Iterable[RecordLike]:
    """Invoke a lazy data source once; iterables pass through untouched."""
    if callable(data) and not isinstance(data, Iterable):
        return data()
    return data


def _as_mapping(item: RecordLike) -> Mapping[str, Any]:
    if isinstance(item, BaseModel):
        return item.model_dump()
    return item


def produce_rows(data: Iterable[RecordLike], schema: ExcelSchema) -> Iterator[dict[str, Any]]:
    """Yield one record per input item holding exactly the schema's fields.

    Extra keys are dropped and missing keys become ``""``. The generator is
    single use.
    """
    names = schema.names
    for item in data:
        source = _as_mapping(item)
        yield {name: source.get(name, "") for name in names}
