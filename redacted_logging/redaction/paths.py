"""Field-path redaction over decoded JSON structures.

Paths are dot separated (``req.headers.authorization``). ``*`` matches every
key or index at its depth, and bracket segments address keys that are not
plain identifiers: ``req.headers["x-api-key"]``, ``items[0]``, ``items[*]``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, MutableMapping, MutableSequence, Tuple, Union

from ..config import DEFAULT_CENSOR
from ..exceptions import RedactionConfigError


class _Wildcard:
    __slots__ = ()

    def __repr__(self) -> str:
        return "*"


WILDCARD = _Wildcard()

Segment = Union[str, int, _Wildcard]
Path = Tuple[Segment, ...]


@dataclass(frozen=True)
class FixedCensor:
    """Replace every match with the same value."""

    value: Any

    def apply(self, _matched: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class ComputedCensor:
    """Replace every match with ``fn(matched_value)``."""

    fn: Callable[[Any], Any]

    def apply(self, matched: Any) -> Any:
        return self.fn(matched)


Censor = Union[FixedCensor, ComputedCensor]


def resolve_censor(censor: Any = None) -> Censor:
    """Wrap a literal or callable censor into its tagged form."""

    if isinstance(censor, (FixedCensor, ComputedCensor)):
        return censor
    if censor is None:
        return FixedCensor(DEFAULT_CENSOR)
    if callable(censor):
        return ComputedCensor(censor)
    return FixedCensor(censor)


def parse_path(path: str) -> Path:
    """Parse a path pattern into segments, raising on malformed input."""

    if not isinstance(path, str) or not path:
        raise RedactionConfigError(f"Invalid redaction path: {path!r}")

    segments: List[Segment] = []
    position = 0
    length = len(path)

    while position < length:
        char = path[position]

        if char == "[":
            segment, position = _parse_bracket(path, position)
            segments.append(segment)
        elif char == "]":
            raise RedactionConfigError(f"Unexpected ']' in redaction path {path!r}")
        else:
            end = position
            while end < length and path[end] not in ".[]":
                end += 1
            token = path[position:end]
            if not token:
                raise RedactionConfigError(f"Empty segment in redaction path {path!r}")
            segments.append(WILDCARD if token == "*" else token)
            position = end

        if position >= length:
            break

        separator = path[position]
        if separator == ".":
            position += 1
            if position == length or path[position] == ".":
                raise RedactionConfigError(f"Empty segment in redaction path {path!r}")
        elif separator != "[":
            raise RedactionConfigError(
                f"Unexpected {separator!r} at offset {position} in redaction path {path!r}"
            )

    return tuple(segments)


def _parse_bracket(path: str, start: int) -> Tuple[Segment, int]:
    inner = start + 1

    if inner < len(path) and path[inner] in "\"'":
        quote = path[inner]
        closing = path.find(quote, inner + 1)
        if closing == -1:
            raise RedactionConfigError(f"Unterminated quote in redaction path {path!r}")
        if closing + 1 >= len(path) or path[closing + 1] != "]":
            raise RedactionConfigError(f"Expected ']' after quoted key in redaction path {path!r}")
        return path[inner + 1 : closing], closing + 2

    closing = path.find("]", inner)
    if closing == -1:
        raise RedactionConfigError(f"Unterminated '[' in redaction path {path!r}")

    token = path[inner:closing].strip()
    if token == "*":
        return WILDCARD, closing + 1
    if token.isdigit():
        return int(token), closing + 1

    raise RedactionConfigError(
        f"Bracket segment {token!r} must be quoted, numeric or '*' in redaction path {path!r}"
    )


class PathRedactor:
    """Censor (or remove) every value addressed by a set of path patterns."""

    def __init__(
        self,
        paths: Iterable[str],
        *,
        censor: Any = None,
        remove: bool = False,
    ) -> None:
        self._patterns = tuple(paths)
        self._paths: Tuple[Path, ...] = tuple(parse_path(path) for path in self._patterns)
        self._censor = resolve_censor(censor)
        self._remove = remove

    @property
    def paths(self) -> Tuple[str, ...]:
        return self._patterns

    @property
    def censor(self) -> Censor:
        return self._censor

    def redact(self, value: Any) -> int:
        """Redact ``value`` in place and return the number of locations hit."""

        if not self._paths:
            return 0

        locations: Dict[Tuple[int, Any], Tuple[Any, Any, int]] = {}
        for segments in self._paths:
            _collect(value, segments, 0, locations)

        # Descendants first, so an ancestor's censor never sees raw children.
        ordered = sorted(locations.values(), key=lambda location: location[2], reverse=True)

        for container, key, _depth in ordered:
            if self._remove:
                if isinstance(container, MutableMapping):
                    container.pop(key, None)
                else:
                    container[key] = None
            else:
                container[key] = self._censor.apply(container[key])

        return len(ordered)


def _collect(
    node: Any,
    segments: Path,
    depth: int,
    locations: Dict[Tuple[int, Any], Tuple[Any, Any, int]],
) -> None:
    segment = segments[depth]
    last = depth == len(segments) - 1

    for key in _matching_keys(node, segment):
        if last:
            locations.setdefault((id(node), key), (node, key, depth))
        else:
            _collect(node[key], segments, depth + 1, locations)


def _matching_keys(node: Any, segment: Segment) -> List[Any]:
    if isinstance(node, MutableMapping):
        if segment is WILDCARD:
            return list(node.keys())
        key = segment if isinstance(segment, str) else str(segment)
        return [key] if key in node else []

    if isinstance(node, MutableSequence):
        if segment is WILDCARD:
            return list(range(len(node)))
        if isinstance(segment, int):
            index = segment
        elif segment.isdigit():
            index = int(segment)
        else:
            return []
        return [index] if index < len(node) else []

    return []
