import pytest
import requests

import fetch_datasets

CSV = '"fixed acidity";"volatile acidity";"quality"\n7.4;0.7;5\n7.8;0.88;5\n'


class FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_fetch_writes_file(monkeypatch, tmp_path):
    monkeypatch.setattr(fetch_datasets.requests, "get", lambda url, timeout: FakeResponse(CSV))
    out = tmp_path / "sub" / "winequality-red.csv"
    assert fetch_datasets.fetch_wine_quality("http://example.test/wq.csv", out) == 2
    assert out.read_text(encoding="utf-8") == CSV


def test_fetch_rejects_unexpected_content(monkeypatch, tmp_path):
    monkeypatch.setattr(fetch_datasets.requests, "get",
                        lambda url, timeout: FakeResponse("<html>moved</html>"))
    with pytest.raises(ValueError, match="Unexpected header"):
        fetch_datasets.fetch_wine_quality("http://example.test/wq.csv", tmp_path / "wq.csv")
    assert not (tmp_path / "wq.csv").exists()


def test_fetch_propagates_http_errors(monkeypatch, tmp_path):
    monkeypatch.setattr(fetch_datasets.requests, "get",
                        lambda url, timeout: FakeResponse("", status=404))
    with pytest.raises(requests.HTTPError):
        fetch_datasets.fetch_wine_quality("http://example.test/wq.csv", tmp_path / "wq.csv")
