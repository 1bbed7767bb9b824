# coronanet/filters.py
"""
Compile user filter arguments into PostgREST query strings.

Every filter reduces to one of three variants:

    NoFilter               -> clause omitted
    Equals(field, value)   -> field=eq.value
    AnyOf(field, values)   -> field=in.(v1,v2,...)

Values are embedded verbatim; percent-encoding happens once, on the full
URL, in http_utils.build_url.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from .config import (
    ALL,
    DEFAULT_EVENT_COLUMNS,
    EVENT_END,
    EVENT_START,
    NO_SUBTYPE_TYPES,
    SCORES_END,
    SCORES_START,
)

Values = Union[str, Iterable[str], None]


class InvalidFilterError(ValueError):
    pass


# ---------- filter variants ----------

@dataclass(frozen=True)
class NoFilter:
    field: str

    def to_clause(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class Equals:
    field: str
    value: str

    def to_clause(self) -> Optional[str]:
        return f"{self.field}=eq.{self.value}"


@dataclass(frozen=True)
class AnyOf:
    field: str
    values: Tuple[str, ...]

    def to_clause(self) -> Optional[str]:
        return f"{self.field}=in.({','.join(self.values)})"


Filter = Union[NoFilter, Equals, AnyOf]


@dataclass(frozen=True)
class DateRange:
    """
    Date window on the policy event table.

    start               lower bound on date_start.
    end                 upper bound on date_end.
    include_open_ended  also keep records started by `end` whose
                        date_end is still null.
    """
    start: str
    end: str
    include_open_ended: bool = True

    def to_clause(self) -> str:
        if self.include_open_ended:
            return (
                f"or=(and(date_start.gte.{self.start},date_end.lte.{self.end}),"
                f"and(date_start.lte.{self.end},date_end.is.null))"
            )
        return f"date_start=gte.{self.start}&date_end=lte.{self.end}"


# ---------- helpers ----------

def as_values(values: Values) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


def is_all(values: Values) -> bool:
    vals = as_values(values)
    return not vals or ALL in vals


def make_filter(field: str, values: Values) -> Filter:
    """
    Reduce user input for one column to a filter variant.

    None, an empty list, or any element equal to "All" (not only the
    first one) means no constraint.
    """
    vals = as_values(values)
    if is_all(vals):
        return NoFilter(field)
    if len(vals) == 1:
        return Equals(field, vals[0])
    return AnyOf(field, vals)


def select_clause(
    columns: Iterable[str] = DEFAULT_EVENT_COLUMNS,
    additional_columns: Values = None,
) -> str:
    cols = list(as_values(columns)) + list(as_values(additional_columns))
    # first occurrence wins
    cols = list(dict.fromkeys(cols))
    return "select=" + ",".join(cols)


def join_clauses(*clauses: Optional[str]) -> str:
    return "&".join(c for c in clauses if c)


def check_subtype_filter(policy_type: Values, type_sub_cat: Values) -> None:
    types = as_values(policy_type)
    subtypes = as_values(type_sub_cat)
    if len(types) == 1 and types[0] in NO_SUBTYPE_TYPES and not is_all(subtypes):
        raise InvalidFilterError(
            f"Policy type '{types[0]}' has no subtypes; "
            f"`type_sub_cat` should be '{ALL}' with this policy type."
        )


# ---------- queries ----------

def compile_event_query(
    countries: Values = ALL,
    policy_type: Values = ALL,
    type_sub_cat: Values = ALL,
    columns: Iterable[str] = DEFAULT_EVENT_COLUMNS,
    additional_columns: Values = None,
    start_date: str = EVENT_START,
    end_date: str = EVENT_END,
    include_no_end_date: bool = True,
) -> str:
    """
    Query string for the public_release table.

    Clause order: select, dates, type, type_sub_cat, country.
    Raises InvalidFilterError for a subtype filter on a type without subtypes.
    """
    # iterators are consumed once, here
    countries = as_values(countries)
    policy_type = as_values(policy_type)
    type_sub_cat = as_values(type_sub_cat)
    check_subtype_filter(policy_type, type_sub_cat)

    dates = DateRange(start_date, end_date, include_no_end_date)
    type_filter = make_filter("type", policy_type)
    subtype_filter = make_filter("type_sub_cat", type_sub_cat)
    country_filter = make_filter("country", countries)

    return join_clauses(
        select_clause(columns, additional_columns),
        dates.to_clause(),
        type_filter.to_clause(),
        subtype_filter.to_clause(),
        country_filter.to_clause(),
    )


def compile_scores_query(
    countries: Values = ALL,
    index_type: Values = ALL,
    start_date: str = SCORES_START,
    end_date: str = SCORES_END,
) -> str:
    """
    Query string for the policy_intensity table.

    Clause order: dates, modtype, country. All columns are returned.
    """
    date_filter = f"date_policy=gte.{start_date}&date_policy=lte.{end_date}"
    return join_clauses(
        date_filter,
        make_filter("modtype", index_type).to_clause(),
        make_filter("country", countries).to_clause(),
    )
