# coronanet/features/transforms.py

from typing import Optional, Sequence

import numpy as np
import pandas as pd


def scores_to_timeseries(df: pd.DataFrame,
                         value_col: str = "med_estimate",
                         time_col: str = "date_policy",
                         series_id_cols: Optional[Sequence[str]] = ("country", "modtype"),
                         ) -> pd.DataFrame:
    """
    Convert the long policy intensity table into a date-indexed DataFrame
    with one column per series (e.g. "Japan|Masks").
    """
    if df.empty:
        return pd.DataFrame()
    if time_col not in df.columns or value_col not in df.columns:
        raise ValueError(
            f"DataFrame must contain '{time_col}' and '{value_col}' columns."
        )

    id_cols = [c for c in (series_id_cols or ()) if c in df.columns]
    out = df.assign(**{time_col: pd.to_datetime(df[time_col])})
    out[value_col] = pd.to_numeric(out[value_col], errors="coerce")
    out[value_col] = out[value_col].replace([np.inf, -np.inf], np.nan)
    if id_cols:
        out["_series_id"] = out[id_cols].astype(str).agg("|".join, axis=1)
    else:
        out["_series_id"] = value_col

    wide = (
        out.pivot_table(index=time_col, columns="_series_id", values=value_col)
        .sort_index()
    )
    wide.columns.name = None
    return wide


def count_policies(df: pd.DataFrame,
                   freq: str = "M",
                   by: str = "country",
                   date_col: str = "date_start") -> pd.DataFrame:
    """
    Number of policy records starting in each period, one column per `by` group.
    """
    if df.empty:
        return pd.DataFrame()
    for col in (date_col, by):
        if col not in df.columns:
            raise KeyError(f"{col} not in DataFrame columns")

    dates = pd.to_datetime(df[date_col], errors="coerce")
    period = dates.dt.to_period(freq).dt.to_timestamp()
    counts = (
        df.assign(_period=period)
        .dropna(subset=["_period"])
        .groupby(["_period", by])
        .size()
        .unstack(by, fill_value=0)
        .sort_index()
    )
    counts.index.name = date_col
    counts.columns.name = None
    return counts


def open_ended(df: pd.DataFrame, end_col: str = "date_end") -> pd.DataFrame:
    """
    Records with no end date yet.
    """
    if end_col not in df.columns:
        return df.iloc[0:0]
    return df[df[end_col].isna()]
