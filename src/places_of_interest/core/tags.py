"""
Tag primitives: names, wildcard/regex patterns and time-bounded tags.

Tag names compare case-insensitively. Patterns come in two flavours:
``~wild*card?`` expressions and ``/regular expression/`` bodies.
"""

import functools
import re
from enum import Enum, auto

from pydantic import BaseModel, ConfigDict, field_validator

WILDCARD_MARKER = "~"
REGEX_MARKER = "/"

# Names that would re-parse as something other than a plain tag name.
_NEEDS_QUOTES = re.compile(r'^(?:[~/+\-"]|\d+[yqmwd]$)', re.IGNORECASE)

_RESERVED_VALUES = ("excluded", "hidden", "ignored")
_RESERVED_KEY = "excluded"


class TagName(BaseModel):
    """A non-empty, trimmed tag identifier compared without regard to case."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: str

    def __init__(self, value: str) -> None:
        super().__init__(value=value)

    @field_validator("value")
    @classmethod
    def _strip_value(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Tag name must not be empty")
        return value

    @property
    def key(self) -> str:
        """Lower-cased form used for comparison and hashing.

        The reserved names all share one key, so a query for ``hidden`` also
        sees places tagged ``excluded`` or ``ignored``.
        """
        lowered = self.value.lower()
        if lowered in _RESERVED_VALUES:
            return _RESERVED_KEY
        return lowered

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagName):
            return self.key == other.key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.value

    def is_reserved(self) -> bool:
        return self.key == _RESERVED_KEY

    def to_query_text(self) -> str:
        """Render the name so that parsing it again yields this same name."""
        if _NEEDS_QUOTES.match(self.value):
            return f'"{self.value}"'
        return self.value


# One member: the reserved names compare equal to each other.
RESERVED_TAG_NAMES: frozenset[TagName] = frozenset(TagName(value) for value in _RESERVED_VALUES)


class TagPatternType(Enum):
    """How a pattern body is interpreted."""

    WILDCARD = auto()  # * and ? with backslash escapes
    REGEX = auto()  # Python regular expression, searched anywhere


def has_unescaped_wildcard(text: str) -> bool:
    """Return True if ``text`` contains a ``*`` or ``?`` not preceded by a backslash."""
    escaped = False
    for char in text:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in "*?":
            return True
    return False


def wildcard_to_regex(pattern: str) -> str:
    """Translate a wildcard body into an anchored regular expression."""
    parts: list[str] = []
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "\\" and index + 1 < len(pattern) and pattern[index + 1] in "*?\\":
            parts.append(re.escape(pattern[index + 1]))
            index += 2
            continue
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        index += 1
    return "^" + "".join(parts) + "$"


@functools.lru_cache(maxsize=512)
def _compile(kind: TagPatternType, value: str) -> re.Pattern[str] | None:
    source = wildcard_to_regex(value) if kind is TagPatternType.WILDCARD else value
    try:
        return re.compile(source, re.IGNORECASE | re.DOTALL)
    except re.error:
        return None


class TagPattern(BaseModel):
    """A case-insensitive matcher over tag names."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: TagPatternType = TagPatternType.WILDCARD
    value: str

    @classmethod
    def wildcard(cls, value: str) -> "TagPattern":
        return cls(kind=TagPatternType.WILDCARD, value=value)

    @classmethod
    def regex(cls, value: str) -> "TagPattern":
        return cls(kind=TagPatternType.REGEX, value=value)

    def test(self, tag_name: TagName) -> bool:
        """Return True if ``tag_name`` matches. Invalid regular expressions match nothing."""
        compiled = _compile(self.kind, self.value)
        if compiled is None:
            return False
        if self.kind is TagPatternType.WILDCARD:
            return compiled.match(tag_name.value) is not None
        return compiled.search(tag_name.value) is not None

    def test_any(self, tag_names: "set[TagName] | frozenset[TagName]") -> bool:
        return any(self.test(name) for name in tag_names)

    def to_query_text(self) -> str:
        if self.kind is TagPatternType.REGEX:
            return f"{REGEX_MARKER}{self.value}{REGEX_MARKER}"
        return f"{WILDCARD_MARKER}{self.value}"

    def __str__(self) -> str:
        return self.to_query_text()


class Tag(BaseModel):
    """A tag name with an activity window measured in calendar days.

    ``start_day <= 0`` means the tag has always been active and
    ``end_day <= 0`` means it never expires.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: TagName
    start_day: int = 0
    end_day: int = 0

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: object) -> object:
        if isinstance(value, str):
            return TagName(value)
        return value

    @property
    def window(self) -> tuple[int, int]:
        return self.start_day, self.end_day

    def is_active(self, day: int) -> bool:
        if self.start_day > 0 and day < self.start_day:
            return False
        if self.end_day > 0 and day > self.end_day:
            return False
        return True

    def is_expired(self, day: int) -> bool:
        return self.end_day > 0 and self.end_day < day

    def with_window(self, start_day: int, end_day: int) -> "Tag":
        return self.model_copy(update={"start_day": start_day, "end_day": end_day})
