"""Helpers to pick dataframes out of parsed statement results."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .exceptions import EmptyResultError, MissingTagError, MissingTagsError
from .models import StatementResult, TaggedDataFrame


def first_statement(results: List[StatementResult]) -> List[TaggedDataFrame]:
    """Return the tagged dataframes of the first statement.

    Raises :class:`EmptyResultError` when there is no statement, and the
    statement's own error when it failed.
    """
    if not results:
        raise EmptyResultError("Empty statement")
    return results[0].unwrap()


def first_dataframe(results: List[StatementResult]) -> Any:
    """Return the first dataframe of the first statement, ignoring its tags."""
    dataframes = first_statement(results)
    if not dataframes:
        raise EmptyResultError("Empty statement")
    dataframe, _tags = dataframes[0]
    return dataframe


def group_by_tag(dataframes: Iterable[TaggedDataFrame], tag: str) -> Dict[str, Any]:
    """Key tagged dataframes by the value of ``tag``.

    Raises :class:`MissingTagsError` if a dataframe has no tags at all and
    :class:`MissingTagError` if ``tag`` is not among its tags.
    """
    grouped: Dict[str, Any] = {}
    for dataframe, tags in dataframes:
        if tags is None:
            raise MissingTagsError()
        if tag not in tags:
            raise MissingTagError(tag)
        grouped[tags[tag]] = dataframe
    return grouped


def dataframes_by_tag(results: List[StatementResult], tag: str) -> Dict[str, Any]:
    """Key the dataframes of the first statement by the value of ``tag``."""
    return group_by_tag(first_statement(results), tag)
