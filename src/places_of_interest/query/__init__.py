"""Tag query language: parsing, resolving and evaluation."""

from places_of_interest.query import evaluator
from places_of_interest.query.evaluator import resolve, resolve_with_calendar, update_place
from places_of_interest.query.model import ParsedQuery, QueryOffset, ResolvedQuery
from places_of_interest.query.parser import (
    parse,
    parse_search_and_filter,
    parse_search_and_update,
)

__all__ = [
    "ParsedQuery",
    "QueryOffset",
    "ResolvedQuery",
    "evaluator",
    "parse",
    "parse_search_and_filter",
    "parse_search_and_update",
    "resolve",
    "resolve_with_calendar",
    "update_place",
]
