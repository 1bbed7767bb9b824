# coronanet/http_utils.py
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from io import StringIO
from typing import Optional, Union
from urllib.parse import quote

import pandas as pd
import requests

from . import config

log = logging.getLogger("coronanet/http")

CSV_HEADERS = {"Accept": "text/csv"}
CHUNK_SIZE = 64 * 1024

# Reserved characters left literal so PostgREST operators survive encoding
URL_SAFE = "][!$&'()*+,;=:/?@#"


class CoronaNetAPIError(Exception):
    pass


# ---------- fetch outcome ----------

@dataclass
class Ok:
    table: pd.DataFrame


@dataclass
class TimedOut:
    url: str


@dataclass
class Failed:
    error: CoronaNetAPIError


FetchResult = Union[Ok, TimedOut, Failed]


def build_url(resource: str, query: str, base_url: Optional[str] = None) -> str:
    base = (base_url or config.API_URL).rstrip("/")
    return quote(f"{base}/{resource}?{query}", safe=URL_SAFE)


def read_csv_text(text: str) -> pd.DataFrame:
    """
    Decode a CSV body into a DataFrame.

    A body with no header at all is an empty table.
    """
    try:
        return pd.read_csv(StringIO(text))
    except pd.errors.EmptyDataError:
        return pd.DataFrame()


def read_body(resp, deadline: Optional[float]) -> Optional[bytes]:
    """
    Read a streamed response body, or None once `deadline` has passed.
    """
    chunks = []
    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
        if deadline is not None and time.monotonic() > deadline:
            resp.close()
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def _get_csv(url: str, timeout: Optional[float], deadline: Optional[float]) -> FetchResult:
    try:
        resp = requests.get(url, headers=CSV_HEADERS, timeout=timeout, stream=True)
        if not resp.ok:
            return Failed(
                CoronaNetAPIError(f"GET {resp.url} -> {resp.status_code}: {resp.text[:200]}")
            )
        body = read_body(resp, deadline)
    except (requests.Timeout, requests.ConnectionError) as exc:
        if timeout is not None:
            return TimedOut(url)
        return Failed(CoronaNetAPIError(f"GET {url} failed: {exc}"))
    except requests.RequestException as exc:
        return Failed(CoronaNetAPIError(f"GET {url} failed: {exc}"))

    if body is None:
        return TimedOut(url)

    try:
        table = read_csv_text(body.decode("utf-8"))
    except (UnicodeDecodeError, pd.errors.ParserError) as exc:
        return Failed(CoronaNetAPIError(f"GET {resp.url} -> malformed CSV: {exc}"))
    return Ok(table)


def fetch_csv(url: str, timeout: Optional[float] = None) -> FetchResult:
    """
    GET `url` as CSV.

    With a timeout, the whole call (connect and body) is bounded at
    `timeout` seconds; an expired or unreachable request is TimedOut.
    Without one, the call is unbounded and every transport failure is Failed.
    """
    log.debug("GET %s (timeout=%s)", url, timeout)
    if timeout is None:
        return _get_csv(url, None, None)

    # total elapsed time, not each socket read, is bounded
    deadline = time.monotonic() + timeout
    pool = ThreadPoolExecutor(max_workers=1)
    try:
        future = pool.submit(_get_csv, url, timeout, deadline)
        return future.result(timeout=timeout)
    except FuturesTimeoutError:
        return TimedOut(url)
    finally:
        pool.shutdown(wait=False)


def resolve(result: FetchResult) -> pd.DataFrame:
    if isinstance(result, Ok):
        return result.table
    if isinstance(result, TimedOut):
        log.warning("API time-out reached for %s; returning an empty table.", result.url)
        return pd.DataFrame()
    raise result.error


def get_table(resource: str, query: str, time_out: bool = False) -> pd.DataFrame:
    """
    Fetch `resource` filtered by `query` from the configured service.

    time_out=True bounds the call at config.API_TIMEOUT seconds and turns
    an expired call into an empty DataFrame.
    """
    url = build_url(resource, query)
    timeout = config.API_TIMEOUT if time_out else None
    return resolve(fetch_csv(url, timeout=timeout))
