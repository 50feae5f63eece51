"""
Extra header handling.

Headers are kept as an immutable mapping from header name to a tuple of
values. Names are case-sensitive as given.
"""

from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple


def _freeze_values(name: str, values: Sequence[str]) -> Tuple[str, ...]:
    if isinstance(values, (str, bytes)):
        raise TypeError(
            f"Header {name!r} values must be a sequence of strings, not a single string"
        )
    return tuple(values)


class HeaderMap(Mapping[str, Tuple[str, ...]]):
    """Read-only, hashable mapping of header name to values."""

    __slots__ = ("_headers", "_hash")

    def __init__(self, headers: Optional[Mapping[str, Sequence[str]]] = None):
        self._headers: Dict[str, Tuple[str, ...]] = {
            name: _freeze_values(name, values) for name, values in (headers or {}).items()
        }
        self._hash: Optional[int] = None

    @classmethod
    def _wrap(cls, headers: Dict[str, Tuple[str, ...]]) -> "HeaderMap":
        instance = cls.__new__(cls)
        instance._headers = headers
        instance._hash = None
        return instance

    def __getitem__(self, name: str) -> Tuple[str, ...]:
        return self._headers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._headers.items()))
        return self._hash

    def __repr__(self) -> str:
        return f"HeaderMap({self._headers!r})"


EMPTY_HEADERS = HeaderMap()


def freeze_headers(headers: Mapping[str, Sequence[str]]) -> HeaderMap:
    """
    Make an immutable copy of a header mapping.

    Args:
        headers: Header name to values mapping

    Returns:
        The mapping itself if it already is a HeaderMap, otherwise a copy
    """
    if isinstance(headers, HeaderMap):
        return headers
    if not headers:
        return EMPTY_HEADERS
    return HeaderMap(headers)


def merge_headers(
    current: HeaderMap,
    extra: Mapping[str, Sequence[str]],
) -> HeaderMap:
    """
    Combine two header mappings key by key.

    For a key present in both, the values of ``current`` come first,
    followed by the values of ``extra``. Keys present in only one mapping
    pass through unchanged.

    Args:
        current: Headers already in place
        extra: Headers to add

    Returns:
        Merged mapping; ``current`` itself when ``extra`` is empty
    """
    if not extra:
        return current
    if not current:
        return freeze_headers(extra)

    merged: Dict[str, Tuple[str, ...]] = {}
    for name, values in current.items():
        if name in extra:
            merged[name] = values + _freeze_values(name, extra[name])
        else:
            merged[name] = values

    for name, values in extra.items():
        if name not in merged:
            merged[name] = _freeze_values(name, values)

    return HeaderMap._wrap(merged)
