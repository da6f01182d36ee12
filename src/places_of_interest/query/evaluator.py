"""
Query evaluation: resolving offsets, matching places and tags, rewriting tags.

All functions here are pure with respect to the calendar: they take a
``ResolvedQuery`` whose day numbers were fixed once by ``resolve``.
"""

from collections.abc import Iterable, Mapping

from places_of_interest.core.calendar import DEFAULT_DAY_LENGTHS, Calendar, PeriodUnit, day_lengths
from places_of_interest.core.place import Place
from places_of_interest.core.tags import Tag, TagName
from places_of_interest.query.model import ParsedQuery, QueryOffset, ResolvedQuery


def _offset_days(offset: QueryOffset, lengths: Mapping[PeriodUnit, int]) -> int:
    unit_length = lengths.get(offset.unit, DEFAULT_DAY_LENGTHS[offset.unit])
    return offset.amount * unit_length


def resolve(
    parsed: ParsedQuery,
    today: int,
    lengths: Mapping[PeriodUnit, int] = DEFAULT_DAY_LENGTHS,
) -> ResolvedQuery:
    """Pin ``parsed`` to absolute days.

    The start day is ``today`` plus the start offset, or 0 (always started)
    without a positive offset. The end day is ``today`` plus the end offset,
    or 0 (never expires) without a positive offset.
    """
    start_day = 0
    if parsed.start_offset is not None:
        days = _offset_days(parsed.start_offset, lengths)
        if days > 0:
            start_day = today + days

    end_day = 0
    if parsed.end_offset is not None:
        days = _offset_days(parsed.end_offset, lengths)
        if days > 0:
            end_day = today + days

    return ResolvedQuery(query=parsed, day=today, start_day=start_day, end_day=end_day)


def resolve_with_calendar(parsed: ParsedQuery, calendar: Calendar) -> ResolvedQuery:
    return resolve(parsed, calendar.today(), day_lengths(calendar))


def is_included(resolved: ResolvedQuery, tag_name: TagName) -> bool:
    """True if the name is listed or matched by an included pattern."""
    if tag_name in resolved.included_tag_names:
        return True
    return any(pattern.test(tag_name) for pattern in resolved.included_tag_patterns)


def is_excluded(resolved: ResolvedQuery, tag_name: TagName) -> bool:
    """True if the name is listed or matched by an excluded pattern."""
    if tag_name in resolved.excluded_tag_names:
        return True
    return any(pattern.test(tag_name) for pattern in resolved.excluded_tag_patterns)


def test_tag_names(resolved: ResolvedQuery, tag_names: Iterable[TagName]) -> bool:
    """Match a set of active tag names against every condition of the query."""
    names = set(tag_names)
    return (
        all(name in names for name in resolved.included_tag_names)
        and all(pattern.test_any(names) for pattern in resolved.included_tag_patterns)
        and not any(name in names for name in resolved.excluded_tag_names)
        and not any(pattern.test_any(names) for pattern in resolved.excluded_tag_patterns)
        and not any(name in names for name in resolved.additional_excluded_tag_names)
    )


def test_place(resolved: ResolvedQuery, place: Place) -> bool:
    """True if the tags active on ``resolved.day`` satisfy the query."""
    return test_tag_names(resolved, place.active_tag_names(resolved.day))


def test_tag(resolved: ResolvedQuery, tag_name: TagName) -> bool:
    """Filter a single tag name.

    With included names or patterns present the name must be one of them;
    it must never be excluded, explicitly or implicitly.
    """
    query = resolved.query
    if query.has_included() and not is_included(resolved, tag_name):
        return False
    if is_excluded(resolved, tag_name):
        return False
    return tag_name not in resolved.additional_excluded_tag_names


def update_place(resolved: ResolvedQuery, place: Place, allow_remove: bool = True) -> bool:
    """Rewrite the tags of ``place`` according to ``resolved``.

    Included tags get the query's window, excluded tags are dropped when
    ``allow_remove`` is set and missing included names are appended.
    Returns True if the tag list changed; it is left untouched otherwise.
    """
    changed = False
    window = (resolved.start_day, resolved.end_day)
    new_tags: list[Tag] = []

    for tag in place.tags:
        if is_included(resolved, tag.name):
            if tag.window != window:
                changed = True
                new_tags.append(tag.with_window(*window))
            else:
                new_tags.append(tag)
            continue

        if allow_remove and is_excluded(resolved, tag.name):
            changed = True
            continue

        new_tags.append(tag)

    present = {tag.name for tag in new_tags}
    for name in sorted(resolved.included_tag_names, key=lambda n: n.key):
        if name in present:
            continue
        changed = True
        present.add(name)
        new_tags.append(Tag(name=name, start_day=resolved.start_day, end_day=resolved.end_day))

    if changed:
        place.replace_tags(new_tags)
    return changed
