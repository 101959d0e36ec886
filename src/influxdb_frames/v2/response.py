"""Parse Flux annotated CSV responses into tagged dataframes.

A response holds one block per result, blocks being separated by an empty
line. Every block starts with three annotation rows and a header row::

    #datatype,string,long,dateTime:RFC3339,double,string,string,string
    #group,false,false,false,false,true,true,true
    #default,_result,,,,,,
    ,result,table,_time,_value,_field,_measurement,room
    ,,0,2021-03-04T17:00:00Z,28.4,temperature,environment,bedroom
    ,,1,2021-03-04T17:00:00Z,21.3,temperature,environment,kitchen

The first column only carries the annotation names and is skipped. Rows
are split into one dataframe per group key combination, ignoring
``_field``, ``_start`` and ``_stop``: the group key columns not starting
with an underscore become the tags and ``_measurement`` names the
dataframe. Every ``_field`` of a dataframe becomes one column holding its
``_value``, so all fields must share the same time index. Columns outside
the group key and not starting with an underscore (as produced by
``pivot()``) are stored as they are.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union
import csv
import io
import logging

import pandas as pd

from ..dataframe import DataFrame
from ..exceptions import InvalidCsvError, ResponseError, StatementError, ValueDecodeError
from ..models import DataFrameFactory, StatementResult, TaggedDataFrame, build_dataframe
from ..types import Value, parse_instant

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\r\n\r\n"
ANNOTATIONS = ("#datatype", "#group", "#default")
RESERVED_COLUMNS = ("result", "table")
SERIES_COLUMNS = ("_field", "_start", "_stop")


@dataclass(frozen=True)
class ColumnMeta:
    name: str
    datatype: str
    group: bool
    default: str


@dataclass
class _FieldSeries:
    index: List[pd.Timestamp] = field(default_factory=list)
    data: Dict[str, List[Value]] = field(default_factory=dict)


@dataclass
class _TableBuilder:
    name: str
    tags: Optional[Dict[str, str]]
    series: Dict[str, _FieldSeries] = field(default_factory=dict)


def parse_annotated_csv(
    payload: Union[str, bytes],
    factory: DataFrameFactory = DataFrame.from_columns,
) -> List[StatementResult]:
    """Parse an annotated CSV response to a list of statement results.

    Every block of the response is one statement result. Annotation rows
    are checked for all blocks before any data is decoded, and a block
    missing one raises :class:`InvalidCsvError`. Errors while decoding the
    data rows of a block are returned in that block's result.
    """
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    blocks = [block for block in payload.split(BLOCK_SEPARATOR) if block.strip()]
    decoded = [_read_block(block) for block in blocks]
    results = [
        _parse_block(position, columns, rows, factory)
        for position, (columns, rows) in enumerate(decoded)
    ]
    logger.debug("Parsed %d statement results", len(results))
    return results


def _read_block(block: str) -> Tuple[List[ColumnMeta], List[List[str]]]:
    try:
        rows = [row for row in csv.reader(io.StringIO(block)) if row]
    except csv.Error as exc:
        raise InvalidCsvError(f"CSV parse error: {exc}") from exc

    for position, annotation in enumerate(ANNOTATIONS):
        if len(rows) <= position or rows[position][0] != annotation:
            row = annotation.lstrip("#")
            raise InvalidCsvError(f"Error while parsing {row} row", row=row)
    if len(rows) < 4:
        raise InvalidCsvError("Error while parsing columns row", row="columns")

    data_types, grouping, defaults, names = rows[:4]
    width = len(names)
    for annotation, row in zip(("datatype", "group", "default"), (data_types, grouping, defaults)):
        if len(row) != width:
            raise InvalidCsvError(f"Error while parsing {annotation} row", row=annotation)
    if any(flag not in ("true", "false") for flag in grouping[1:]):
        raise InvalidCsvError("Error while parsing group row", row="group")

    columns = [
        ColumnMeta(name=name, datatype=datatype, group=flag == "true", default=default)
        for name, datatype, flag, default in zip(names, data_types, grouping, defaults)
    ][1:]
    return columns, rows[4:]


def _parse_block(
    position: int,
    columns: List[ColumnMeta],
    rows: List[List[str]],
    factory: DataFrameFactory,
) -> StatementResult:
    if [column.name for column in columns] == ["error", "reference"]:
        message = _error_message(rows)
        return StatementResult(error=StatementError(message), statement_id=position)
    try:
        dataframes = _assemble_tables(columns, rows, factory)
    except ResponseError as exc:
        logger.debug("Block %d failed to parse: %s", position, exc)
        return StatementResult(error=exc, statement_id=position)
    return StatementResult(dataframes=dataframes, statement_id=position)


def _error_message(rows: List[List[str]]) -> str:
    if rows and len(rows[0]) > 1 and rows[0][1]:
        return rows[0][1]
    return "unknown error"


def _assemble_tables(
    columns: List[ColumnMeta],
    rows: List[List[str]],
    factory: DataFrameFactory,
) -> List[TaggedDataFrame]:
    positions = {column.name: i for i, column in enumerate(columns)}
    if "_time" not in positions:
        raise ValueDecodeError("block has no _time column")
    time_position = positions["_time"]
    field_position = positions.get("_field")

    key_positions = [
        i for i, column in enumerate(columns)
        if column.group and column.name not in RESERVED_COLUMNS + SERIES_COLUMNS
    ]
    tag_positions = [i for i in key_positions if not columns[i].name.startswith("_")]
    data_positions = [
        i for i, column in enumerate(columns)
        if not column.group
        and column.name not in RESERVED_COLUMNS
        and (column.name == "_value" or not column.name.startswith("_"))
    ]

    builders: Dict[Tuple[str, ...], _TableBuilder] = {}
    for row in rows:
        cells = row[1:]
        if len(cells) != len(columns):
            raise ValueDecodeError(f"row has {len(cells)} cells, expected {len(columns)}")
        texts = [_raw(column, cell) for column, cell in zip(columns, cells)]

        key = tuple(texts[i] for i in key_positions)
        builder = builders.get(key)
        if builder is None:
            builder = _new_builder(columns, positions, texts, tag_positions)
            builders[key] = builder

        field_name = texts[field_position] if field_position is not None else ""
        series = builder.series.setdefault(field_name, _FieldSeries())
        series.index.append(parse_instant(_required(columns[time_position], texts[time_position])))
        for i in data_positions:
            name = field_name if columns[i].name == "_value" and field_name else columns[i].name
            series.data.setdefault(name, []).append(_decode_cell(columns[i], texts[i]))

    tables = []
    for builder in builders.values():
        index, data = _merge_fields(builder)
        tables.append((build_dataframe(factory, builder.name, index, data), builder.tags))
    return tables


def _merge_fields(builder: _TableBuilder) -> Tuple[List[pd.Timestamp], Dict[str, List[Value]]]:
    """Join the per-field series of a table on their shared time index."""
    index: Optional[List[pd.Timestamp]] = None
    data: Dict[str, List[Value]] = {}
    for field_name, series in builder.series.items():
        if index is None:
            index = series.index
        elif series.index != index:
            raise ValueDecodeError(
                f"time index of field {field_name!r} does not line up with the other fields "
                f"of table {builder.name!r}"
            )
        for column_name, values in series.data.items():
            if column_name in data and data[column_name] != values:
                raise ValueDecodeError(
                    f"column {column_name!r} differs between the fields of table {builder.name!r}"
                )
            data[column_name] = values
    return index or [], data


def _new_builder(
    columns: Sequence[ColumnMeta],
    positions: Dict[str, int],
    texts: Sequence[str],
    tag_positions: Sequence[int],
) -> _TableBuilder:
    if "_measurement" in positions:
        name = texts[positions["_measurement"]]
    elif "result" in positions:
        name = texts[positions["result"]]
    else:
        name = ""
    tags = {columns[i].name: texts[i] for i in tag_positions} or None
    return _TableBuilder(name=name, tags=tags)


def _raw(column: ColumnMeta, text: str) -> str:
    return text if text != "" else column.default


def _required(column: ColumnMeta, text: str) -> str:
    if text == "":
        raise ValueDecodeError(f"value is null in column {column.name!r}")
    return text


def _decode_cell(column: ColumnMeta, text: str) -> Value:
    text = _required(column, text)
    datatype = column.datatype
    if datatype == "double":
        try:
            return Value.from_float(float(text))
        except ValueError as exc:
            raise ValueDecodeError(f"could not parse float {text!r} in column {column.name!r}") from exc
    if datatype in ("long", "unsignedLong"):
        try:
            number = int(text)
        except ValueError as exc:
            raise ValueDecodeError(f"could not parse integer {text!r} in column {column.name!r}") from exc
        return Value.from_int(number) if datatype == "long" else Value.from_uint(number)
    if datatype == "boolean":
        if text not in ("true", "false"):
            raise ValueDecodeError(f"could not parse boolean {text!r} in column {column.name!r}")
        return Value.from_bool(text == "true")
    if datatype.startswith("dateTime"):
        return Value.from_timestamp(parse_instant(text))
    return Value.from_str(text)
