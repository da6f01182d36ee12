"""
Tag query parser.

Query text is a whitespace-separated list of tokens. Each token is read with
one grammar (case-insensitive)::

    token  := sign? ( digits unit | tag )
    sign   := "+" | "-"
    unit   := "y" | "q" | "m" | "w" | "d"

Offset tokens
    A signed offset (``+3d`` or ``-3d``) sets the start offset: the tag only
    shows up after that many days. An unsigned offset (``2w``) sets the end
    offset: the tag expires after that time. ``0d`` clears expiry; a signed
    zero is meaningless and ignored. Later offsets replace earlier ones.

Tag tokens
    ``"quoted"`` is always a literal name (quotes stripped), ``~wild*card`` is a
    wildcard pattern when it contains an unescaped ``*`` or ``?``,
    ``/regex/`` is a regular expression pattern, anything else is a name.
    A ``-`` sign excludes, no sign or ``+`` includes.

Parsing never fails; tokens that cannot be used are dropped.
"""

import re
from dataclasses import dataclass, field

import structlog

from places_of_interest.core.calendar import PeriodUnit
from places_of_interest.core.tags import (
    REGEX_MARKER,
    WILDCARD_MARKER,
    TagName,
    TagPattern,
    has_unescaped_wildcard,
)
from places_of_interest.query.model import ParsedQuery, QueryOffset

logger = structlog.get_logger()

SEARCH_UPDATE_SEPARATOR = " -> "

_TOKEN = re.compile(
    r"^(?P<sign>[+\-])?(?:(?P<number>\d+)(?P<unit>[yqmwd])|(?P<tag>.*))$",
    re.IGNORECASE | re.DOTALL,
)


def parse_tag_term(text: str) -> TagName | TagPattern | None:
    """Classify the tag part of a token, or return None if nothing usable is left."""
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        inner = text[1:-1]
        return TagName(inner) if inner.strip() else None

    if text.startswith(WILDCARD_MARKER) and has_unescaped_wildcard(text[1:]):
        return TagPattern.wildcard(text[1:])

    if len(text) > 2 and text.startswith(REGEX_MARKER) and text.endswith(REGEX_MARKER):
        return TagPattern.regex(text[1:-1])

    if not text.strip():
        return None
    return TagName(text)


@dataclass
class _QueryBuilder:
    included_tag_names: set[TagName] = field(default_factory=set)
    included_tag_patterns: set[TagPattern] = field(default_factory=set)
    excluded_tag_names: set[TagName] = field(default_factory=set)
    excluded_tag_patterns: set[TagPattern] = field(default_factory=set)
    start_offset: QueryOffset | None = None
    end_offset: QueryOffset | None = None

    def add_token(self, token: str) -> None:
        match = _TOKEN.match(token)
        if match is None:
            logger.debug("query_token_skipped", token=token)
            return

        sign = match.group("sign") or ""

        if match.group("number") is not None:
            self._add_offset(token, sign, int(match.group("number")), match.group("unit"))
            return

        term = parse_tag_term(match.group("tag"))
        if term is None:
            logger.debug("query_token_skipped", token=token)
            return

        if sign == "-":
            if isinstance(term, TagPattern):
                self.excluded_tag_patterns.add(term)
            else:
                self.excluded_tag_names.add(term)
        elif isinstance(term, TagPattern):
            self.included_tag_patterns.add(term)
        else:
            self.included_tag_names.add(term)

    def _add_offset(self, token: str, sign: str, amount: int, unit_letter: str) -> None:
        unit = PeriodUnit(unit_letter.lower())
        if sign:
            if amount == 0:
                logger.debug("query_offset_ignored", token=token)
                return
            self.start_offset = QueryOffset(amount=amount, unit=unit, sign=sign)
        else:
            self.end_offset = QueryOffset(amount=amount, unit=unit)

    def build(self) -> ParsedQuery:
        return ParsedQuery(
            included_tag_names=frozenset(self.included_tag_names),
            included_tag_patterns=frozenset(self.included_tag_patterns),
            excluded_tag_names=frozenset(self.excluded_tag_names),
            excluded_tag_patterns=frozenset(self.excluded_tag_patterns),
            start_offset=self.start_offset,
            end_offset=self.end_offset,
        )


def parse(text: str | None) -> ParsedQuery:
    """Parse query text into a ParsedQuery. Never raises on any input."""
    builder = _QueryBuilder()
    for token in (text or "").split():
        builder.add_token(token)
    return builder.build()


def _split_halves(text: str | None) -> tuple[str, str] | None:
    padded = f" {(text or '').strip()} "
    if SEARCH_UPDATE_SEPARATOR not in padded:
        return None
    parts = padded.split(SEARCH_UPDATE_SEPARATOR)
    return parts[0], parts[1]


def parse_search_and_update(text: str | None) -> tuple[ParsedQuery, ParsedQuery]:
    """Split ``search -> update`` text. Without an arrow the whole text is the update."""
    halves = _split_halves(text)
    if halves is None:
        return parse(""), parse(text)
    return parse(halves[0]), parse(halves[1])


def parse_search_and_filter(text: str | None) -> tuple[ParsedQuery, ParsedQuery]:
    """Split ``search -> filter`` text. Without an arrow the text is used for both."""
    halves = _split_halves(text)
    if halves is None:
        query = parse(text)
        return query, query
    return parse(halves[0]), parse(halves[1])
