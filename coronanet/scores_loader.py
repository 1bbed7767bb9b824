# coronanet/scores_loader.py
import pandas as pd

from .config import ALL, SCORES_END, SCORES_RESOURCE, SCORES_START
from .event_loader import parse_dates
from .filters import Values, compile_scores_query
from .http_utils import get_table


def get_policy_scores(
    countries: Values = ALL,
    index_type: Values = ALL,
    start_date: str = SCORES_START,
    end_date: str = SCORES_END,
    time_out: bool = False,
) -> pd.DataFrame:
    """
    Fetch policy intensity scores, one row per country, index and day.

    index_type selects among the modtype indices (Business, Health
    Monitoring, Health Resources, Masks, Schools, Social Distancing).
    The most likely estimate is `med_estimate`; `low_estimate`,
    `high_estimate` and `SD_estimate` carry the measurement error.
    """
    query = compile_scores_query(
        countries=countries,
        index_type=index_type,
        start_date=start_date,
        end_date=end_date,
    )
    df = get_table(SCORES_RESOURCE, query, time_out=time_out)
    return parse_dates(df, ("date_policy",))
