"""Tests for the coronanet.http_utils module."""

import logging
import time
from unittest.mock import Mock, patch

import pandas as pd
import pytest
import requests

from coronanet.http_utils import (
    CSV_HEADERS,
    CoronaNetAPIError,
    Failed,
    Ok,
    TimedOut,
    build_url,
    fetch_csv,
    get_table,
    read_body,
    read_csv_text,
    resolve,
)


class TestBuildURL:
    """Tests for URL construction and percent-encoding."""

    def test_operators_survive(self):
        url = build_url("public_release", "select=a,b&country=in.(Japan,China)", "http://api.test/")
        assert url == "http://api.test/public_release?select=a,b&country=in.(Japan,China)"

    def test_spaces_and_unicode_encoded(self):
        url = build_url("public_release", "country=eq.Côte d'Ivoire", "http://api.test")
        assert url == "http://api.test/public_release?country=eq.C%C3%B4te%20d'Ivoire"

    def test_uses_configured_root(self, api_url):
        assert build_url("policy_intensity", "x=eq.1") == f"{api_url}/policy_intensity?x=eq.1"


class TestReadCSVText:
    def test_rows(self):
        df = read_csv_text("country,med_estimate\nJapan,0.5\nChina,\n")
        assert list(df.columns) == ["country", "med_estimate"]
        assert len(df) == 2
        assert pd.isna(df.loc[1, "med_estimate"])

    def test_header_only(self):
        df = read_csv_text("record_id,country\n")
        assert df.empty
        assert list(df.columns) == ["record_id", "country"]

    def test_empty_body(self):
        df = read_csv_text("")
        assert df.empty
        assert len(df.columns) == 0


class TestFetchCSV:
    """Tests for classifying the outcome of a GET."""

    def test_ok(self, csv_response):
        with patch("requests.get", return_value=csv_response("a,b\n1,2\n")) as get:
            result = fetch_csv("http://api.test/x?y", timeout=9)
        get.assert_called_once_with("http://api.test/x?y", headers=CSV_HEADERS, timeout=9, stream=True)
        assert isinstance(result, Ok)
        assert result.table["b"].tolist() == [2]

    def test_unbounded_by_default(self, csv_response):
        with patch("requests.get", return_value=csv_response("a\n1\n")) as get:
            fetch_csv("http://api.test/x")
        assert get.call_args.kwargs["timeout"] is None

    @pytest.mark.parametrize(
        "exc", [requests.ReadTimeout("slow"), requests.ConnectTimeout("slow"), requests.ConnectionError("down")]
    )
    def test_timed_out(self, exc):
        with patch("requests.get", side_effect=exc):
            result = fetch_csv("http://api.test/x", timeout=9)
        assert result == TimedOut("http://api.test/x")

    def test_connection_error_without_timeout(self):
        with patch("requests.get", side_effect=requests.ConnectionError("refused")):
            result = fetch_csv("http://api.test/x")
        assert isinstance(result, Failed)
        assert "refused" in str(result.error)

    def test_http_error_status(self, csv_response):
        resp = csv_response('{"message":"column does not exist"}', status_code=400)
        with patch("requests.get", return_value=resp):
            result = fetch_csv("http://api.test/x", timeout=9)
        assert isinstance(result, Failed)
        assert "-> 400" in str(result.error)
        assert "column does not exist" in str(result.error)

    def test_malformed_csv(self, csv_response):
        with patch("requests.get", return_value=csv_response('a,b\n"1,2\n')):
            result = fetch_csv("http://api.test/x")
        assert isinstance(result, Failed)
        assert "malformed CSV" in str(result.error)


class TestReadBody:
    """Tests for reading a streamed body against a deadline."""

    def test_whole_body(self):
        resp = Mock()
        resp.iter_content = lambda chunk_size=None: iter([b"a\n", b"1\n"])
        assert read_body(resp, None) == b"a\n1\n"

    def test_past_deadline(self):
        resp = Mock()
        resp.iter_content = lambda chunk_size=None: iter([b"a\n", b"1\n"])
        with patch("coronanet.http_utils.time.monotonic", return_value=10.0):
            assert read_body(resp, deadline=5.0) is None
        resp.close.assert_called_once()


class TestSlowBody:
    """Tests for bounding the total call time when the body trickles in."""

    @staticmethod
    def _trickle(chunk_size=None):
        yield b"a,b\n"
        for i in range(10):
            time.sleep(0.3)
            yield f"{i},{i}\n".encode()

    def test_fetch_is_cut_off(self, csv_response):
        resp = csv_response()
        resp.iter_content = self._trickle
        t0 = time.monotonic()
        with patch("requests.get", return_value=resp):
            result = fetch_csv("http://api.test/x", timeout=0.5)
        assert result == TimedOut("http://api.test/x")
        assert time.monotonic() - t0 < 2.0

    def test_get_table_returns_empty(self, api_url, csv_response, monkeypatch, caplog):
        monkeypatch.setattr("coronanet.config.API_TIMEOUT", 0.5)
        resp = csv_response()
        resp.iter_content = self._trickle
        t0 = time.monotonic()
        with patch("requests.get", return_value=resp):
            with caplog.at_level(logging.WARNING, logger="coronanet/http"):
                df = get_table("policy_intensity", "a=eq.1", time_out=True)
        assert df.empty
        assert "API time-out reached" in caplog.text
        assert time.monotonic() - t0 < 2.0


class TestResolve:
    def test_ok(self):
        df = pd.DataFrame({"a": [1]})
        assert resolve(Ok(df)) is df

    def test_timed_out_logs_notice(self, caplog):
        with caplog.at_level(logging.WARNING, logger="coronanet/http"):
            df = resolve(TimedOut("http://api.test/x"))
        assert df.empty
        assert "API time-out reached" in caplog.text

    def test_failed_raises(self):
        with pytest.raises(CoronaNetAPIError, match="boom"):
            resolve(Failed(CoronaNetAPIError("boom")))


class TestGetTable:
    def test_time_out_uses_ceiling(self, api_url, csv_response, monkeypatch):
        monkeypatch.setattr("coronanet.config.API_TIMEOUT", 3.0)
        with patch("requests.get", return_value=csv_response("a\n1\n")) as get:
            df = get_table("policy_intensity", "a=eq.1", time_out=True)
        assert get.call_args.args[0] == f"{api_url}/policy_intensity?a=eq.1"
        assert get.call_args.kwargs["timeout"] == 3.0
        assert df["a"].tolist() == [1]

    def test_error_propagates(self, api_url, csv_response):
        with patch("requests.get", return_value=csv_response("oops", status_code=503)):
            with pytest.raises(CoronaNetAPIError):
                get_table("policy_intensity", "a=eq.1", time_out=True)
