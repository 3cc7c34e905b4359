"""
Stop collection operations for multi-stop drafts.

Every function takes a Draft and returns a new Draft; the stops that are not
touched are carried over as the same objects. Positional operations fail fast
on an out-of-range index. Identity-based variants look stops up by their
durable ``stop_id`` instead, so they survive removals and reordering.
"""
from typing import Mapping

from ..errors import StopIndexError
from .models import Draft, Stop


def _check_index(draft: Draft, index: int):
    if not isinstance(index, int) or isinstance(index, bool):
        raise TypeError(f"Stop index must be an int, got {type(index).__name__}")
    if index < 0 or index >= len(draft.stops):
        raise StopIndexError(index, len(draft.stops))


def add_stop(draft: Draft) -> Draft:
    """Append a stop with default package attributes."""
    return draft.with_changes(stops=draft.stops + (Stop(),))


def remove_stop(draft: Draft, index: int) -> Draft:
    """Remove the stop at index; later stops shift down by one."""
    _check_index(draft, index)
    return draft.with_changes(stops=draft.stops[:index] + draft.stops[index + 1:])


def update_stop(draft: Draft, index: int, changes: Mapping) -> Draft:
    """Shallow-merge changes over the stop at index."""
    _check_index(draft, index)
    updated = draft.stops[index].with_changes(**dict(changes))
    stops = draft.stops[:index] + (updated,) + draft.stops[index + 1:]
    return draft.with_changes(stops=stops)


def stop_index(draft: Draft, stop_id: str) -> int:
    """Current position of a stop. Raises KeyError for an unknown id."""
    for i, stop in enumerate(draft.stops):
        if stop.stop_id == stop_id:
            return i
    raise KeyError(f"No stop with id '{stop_id}'")


def update_stop_by_id(draft: Draft, stop_id: str, changes: Mapping) -> Draft:
    return update_stop(draft, stop_index(draft, stop_id), changes)


def remove_stop_by_id(draft: Draft, stop_id: str) -> Draft:
    return remove_stop(draft, stop_index(draft, stop_id))
