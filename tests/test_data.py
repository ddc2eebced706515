"""Tests for loading records from files and URLs."""

import json

import pytest
import requests

from jsonsite.data import coerce_records, fetch_json, load_records, read_json, resolve_source
from jsonsite.errors import DataError


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.text is not None:
            return json.loads(self.text)
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True
        return False


class TestCoerceRecords:

    def test_list_of_objects(self):
        assert coerce_records([{"id": 1}, {"id": 2}]) == [{"id": 1}, {"id": 2}]

    def test_single_object_wrapped(self):
        assert coerce_records({"id": 1}) == [{"id": 1}]

    def test_none_is_empty(self):
        assert coerce_records(None) == []

    def test_non_objects_dropped(self):
        assert coerce_records([{"id": 1}, "x", 3, None]) == [{"id": 1}]

    def test_scalar_root_rejected(self):
        with pytest.raises(DataError):
            coerce_records("not records")


class TestReadJson:

    def test_reads_file(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text('[{"id": 1}]', encoding="utf-8")
        assert read_json(path) == [{"id": 1}]

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataError, match="not found"):
            read_json(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(DataError, match="Invalid JSON"):
            read_json(path)

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'[{"id": 1, "tags": ["\xff"]}]')
        with pytest.raises(DataError, match="not UTF-8"):
            read_json(path)


class TestFetchJson:

    def test_success(self):
        session = FakeSession(FakeResponse([{"id": 1}]))
        assert fetch_json("https://example.com/data.json", timeout=5, session=session) == [{"id": 1}]
        assert session.calls == [("https://example.com/data.json", 5)]

    def test_http_error(self):
        session = FakeSession(FakeResponse(status_code=404))
        with pytest.raises(DataError, match="Could not fetch"):
            fetch_json("https://example.com/data.json", session=session)

    def test_network_error(self):
        session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(DataError):
            fetch_json("https://example.com/data.json", session=session)

    def test_invalid_json(self):
        session = FakeSession(FakeResponse(text="<html>"))
        with pytest.raises(DataError):
            fetch_json("https://example.com/data.json", session=session)

    def test_own_session_is_closed(self, monkeypatch):
        session = FakeSession(FakeResponse([{"id": 1}]))
        monkeypatch.setattr("jsonsite.data.requests.Session", lambda: session)
        assert fetch_json("https://example.com/data.json") == [{"id": 1}]
        assert session.closed

    def test_own_session_closed_on_error(self, monkeypatch):
        session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
        monkeypatch.setattr("jsonsite.data.requests.Session", lambda: session)
        with pytest.raises(DataError):
            fetch_json("https://example.com/data.json")
        assert session.closed


class TestLoadRecords:

    def test_relative_path_uses_base_dir(self, tmp_path):
        (tmp_path / "items.json").write_text('{"id": 9}', encoding="utf-8")
        assert load_records("items.json", base_dir=tmp_path) == [{"id": 9}]

    def test_url_goes_through_session(self):
        session = FakeSession(FakeResponse([{"id": 1}, "junk"]))
        assert load_records("http://example.com/x.json", session=session) == [{"id": 1}]


class TestResolveSource:

    def test_first_of_list(self):
        assert resolve_source(["a.json", "b.json"]) == "a.json"

    def test_string(self):
        assert resolve_source(" a.json ") == "a.json"

    @pytest.mark.parametrize("value", [None, "", [], "  "])
    def test_missing(self, value):
        with pytest.raises(DataError):
            resolve_source(value)
