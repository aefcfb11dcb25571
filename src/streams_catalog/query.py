"""Typed namespace filters and query-parameter parsing."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .errors import BadRequest, InvalidFilter
from .model import Namespace, as_int

# wire name -> attribute name
FILTER_ALIASES = {
    "id": "id",
    "name": "name",
    "streamingEngine": "streaming_engine",
    "streaming_engine": "streaming_engine",
    "timeSeriesDB": "time_series_db",
    "time_series_db": "time_series_db",
    "description": "description",
}

DETAIL_PARAM = "detail"

_TRUE_WORDS = {"true", "yes", "on", "y", "t"}
_FALSE_WORDS = {"false", "no", "off", "n", "f"}


@dataclass(frozen=True)
class NamespaceQuery:
    """Conjunctive filter over the filterable namespace fields.

    Unset fields (``None``) do not constrain the result.
    """

    id: Optional[int] = None
    name: Optional[str] = None
    streaming_engine: Optional[str] = None
    time_series_db: Optional[str] = None
    description: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.criteria()

    def criteria(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def matches(self, namespace: Namespace) -> bool:
        return all(
            getattr(namespace, attr) == expected
            for attr, expected in self.criteria().items()
        )

    def describe(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in sorted(self.criteria().items()))

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "NamespaceQuery":
        """Build a query from ``field -> value`` pairs.

        Values may be single strings or sequences as produced by query-string
        parsers; for sequences only the first entry is used.  Unknown field
        names raise :class:`~streams_catalog.errors.InvalidFilter`.
        """

        criteria: Dict[str, Any] = {}
        for key, raw in params.items():
            attr = FILTER_ALIASES.get(key)
            if attr is None:
                raise InvalidFilter(key, "not a filterable namespace field")
            value = _first(raw)
            if value is None:
                continue
            if attr == "id":
                try:
                    value = as_int(value, key)
                except BadRequest:
                    raise InvalidFilter(key, f"expected an integer, got {value!r}") from None
            else:
                value = str(value)
            criteria[attr] = value
        return cls(**criteria)


def _first(raw: Any) -> Any:
    if isinstance(raw, (list, tuple)):
        return raw[0] if raw else None
    return raw


def parse_bool(value: Any) -> Optional[bool]:
    """Lenient boolean parsing; ``None`` for anything unrecognised."""

    if isinstance(value, bool) or value is None:
        return value
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def split_query_params(
    params: Optional[Mapping[str, Any]],
) -> Tuple[Optional[NamespaceQuery], bool]:
    """Separate the ``detail`` flag from the filter fields of ``params``.

    Returns ``(None, detail)`` when no filter field was supplied.
    """

    if not params:
        return None, False
    remaining = dict(params)
    detail = parse_bool(_first(remaining.pop(DETAIL_PARAM, None))) is True
    if not remaining:
        return None, detail
    return NamespaceQuery.from_params(remaining), detail


def parse_filter_args(pairs: Iterable[str]) -> Dict[str, str]:
    """Turn CLI ``key=value`` strings into a parameter mapping."""

    params: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidFilter(pair, "expected key=value")
        params[key] = value
    return params
