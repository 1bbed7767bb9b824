# coronanet/event_loader.py
from typing import Iterable

import pandas as pd

from .config import ALL, DEFAULT_EVENT_COLUMNS, EVENT_END, EVENT_RESOURCE, EVENT_START
from .filters import Values, compile_event_query
from .http_utils import get_table

EVENT_DATE_COLUMNS = ("date_announced", "date_start", "date_end")


def parse_dates(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    present = [c for c in columns if c in df.columns]
    if not present:
        return df
    return df.assign(
        **{c: pd.to_datetime(df[c], errors="coerce") for c in present}
    )


def get_event(
    countries: Values = ALL,
    policy_type: Values = ALL,
    type_sub_cat: Values = ALL,
    default_columns: Iterable[str] = DEFAULT_EVENT_COLUMNS,
    additional_columns: Values = None,
    start_date: str = EVENT_START,
    end_date: str = EVENT_END,
    include_no_end_date: bool = True,
    time_out: bool = False,
) -> pd.DataFrame:
    """
    Fetch CoronaNet policy event records, one row per policy record.

    Parameters
    ----------
    countries : "All", a country name, or a list of names, e.g. ["Yemen", "Saudi Arabia"].
    policy_type : "All", a policy type, or a list, e.g. ["Lockdown", "Curfew"].
    type_sub_cat : "All", a policy subtype, or a list, e.g. ["Self-testing"].
        Must stay "All" when a single policy type without subtypes
        (e.g. "Lockdown") is requested.
    default_columns : minimum set of columns to select.
    additional_columns : extra column name(s) appended after the defaults,
        e.g. "link" for the URLs of the underlying sources.
    start_date, end_date : YYYY-MM-DD window; start bounds date_start and
        end bounds date_end.
    include_no_end_date : also keep records started by `end_date` that have
        no end date yet.
    time_out : bound the call at config.API_TIMEOUT seconds; on expiry an
        empty DataFrame is returned.

    Raises
    ------
    InvalidFilterError before any request for an impossible subtype filter.
    CoronaNetAPIError for transport failures and non-2xx responses.
    """
    query = compile_event_query(
        countries=countries,
        policy_type=policy_type,
        type_sub_cat=type_sub_cat,
        columns=default_columns,
        additional_columns=additional_columns,
        start_date=start_date,
        end_date=end_date,
        include_no_end_date=include_no_end_date,
    )
    df = get_table(EVENT_RESOURCE, query, time_out=time_out)
    return parse_dates(df, EVENT_DATE_COLUMNS)
