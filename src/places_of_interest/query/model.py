"""
Query value types.

A ``ParsedQuery`` is what the parser produces from query text: tag names and
patterns to include or exclude plus optional start/end offsets. Resolving it
against a calendar fixes the offsets to absolute days and yields a
``ResolvedQuery``, which is all the evaluator ever sees.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from places_of_interest.core.calendar import PeriodUnit
from places_of_interest.core.tags import RESERVED_TAG_NAMES, TagName, TagPattern


class QueryOffset(BaseModel):
    """A ``<amount><unit>`` offset from today, e.g. ``3w`` or ``+2m``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    amount: int = Field(ge=0)
    unit: PeriodUnit
    sign: str = ""  # "", "+" or "-"

    def to_query_text(self) -> str:
        return f"{self.sign}{self.amount}{self.unit.value}"


class ParsedQuery(BaseModel):
    """Structured filter produced from query text."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    included_tag_names: frozenset[TagName] = Field(default_factory=frozenset)
    included_tag_patterns: frozenset[TagPattern] = Field(default_factory=frozenset)
    excluded_tag_names: frozenset[TagName] = Field(default_factory=frozenset)
    excluded_tag_patterns: frozenset[TagPattern] = Field(default_factory=frozenset)

    start_offset: QueryOffset | None = None  # Signed offset token
    end_offset: QueryOffset | None = None  # Unsigned offset token

    # Hide excluded/hidden/ignored places unless one of them is asked for
    default_exclusions: bool = True

    @property
    def additional_excluded_tag_names(self) -> frozenset[TagName]:
        if not self.default_exclusions:
            return frozenset()
        if self.included_tag_names & RESERVED_TAG_NAMES:
            return frozenset()
        return RESERVED_TAG_NAMES

    def has_included(self) -> bool:
        return bool(self.included_tag_names or self.included_tag_patterns)

    def has_excluded(self) -> bool:
        return bool(self.excluded_tag_names or self.excluded_tag_patterns)

    def is_empty(self) -> bool:
        return not (
            self.has_included()
            or self.has_excluded()
            or self.start_offset
            or self.end_offset
        )

    def to_query_text(self) -> str:
        """Render the filter back into query text (sorted, so output is stable)."""
        tokens: list[str] = []
        tokens.extend(sorted(name.to_query_text() for name in self.included_tag_names))
        tokens.extend(sorted(p.to_query_text() for p in self.included_tag_patterns))
        tokens.extend(sorted("-" + name.to_query_text() for name in self.excluded_tag_names))
        tokens.extend(sorted("-" + p.to_query_text() for p in self.excluded_tag_patterns))
        if self.start_offset is not None:
            tokens.append(self.start_offset.to_query_text())
        if self.end_offset is not None:
            tokens.append(self.end_offset.to_query_text())
        return " ".join(tokens)


class ResolvedQuery(BaseModel):
    """A parsed query pinned to absolute days."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    query: ParsedQuery = Field(default_factory=ParsedQuery)
    day: int = 0
    start_day: int = 0
    end_day: int = 0

    @classmethod
    def for_update(
        cls,
        included_tag_names: Iterable[TagName],
        excluded_tag_names: Iterable[TagName],
        day: int,
        start_day: int = 0,
        end_day: int = 0,
    ) -> "ResolvedQuery":
        """Build an update-only query from tag names, without implicit exclusions."""
        return cls(
            query=ParsedQuery(
                included_tag_names=frozenset(included_tag_names),
                excluded_tag_names=frozenset(excluded_tag_names),
                default_exclusions=False,
            ),
            day=day,
            start_day=start_day,
            end_day=end_day,
        )

    @property
    def included_tag_names(self) -> frozenset[TagName]:
        return self.query.included_tag_names

    @property
    def included_tag_patterns(self) -> frozenset[TagPattern]:
        return self.query.included_tag_patterns

    @property
    def excluded_tag_names(self) -> frozenset[TagName]:
        return self.query.excluded_tag_names

    @property
    def excluded_tag_patterns(self) -> frozenset[TagPattern]:
        return self.query.excluded_tag_patterns

    @property
    def additional_excluded_tag_names(self) -> frozenset[TagName]:
        return self.query.additional_excluded_tag_names
