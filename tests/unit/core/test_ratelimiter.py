from starlette.requests import Request

from src.core.ratelimiter import key_func


def _request(headers) -> Request:
    raw = [(name.encode(), value.encode()) for name, value in headers.items()]
    return Request({"type": "http", "method": "POST", "path": "/", "headers": raw, "client": ("198.51.100.4", 443)})


def test_key_is_scoped_by_service_and_address():
    assert key_func(_request({"x-service-id": "examaxis"})) == "examaxis:198.51.100.4"
    assert key_func(_request({"x-service-id": "quizhub"})) == "quizhub:198.51.100.4"


def test_key_without_service_header():
    assert key_func(_request({})) == "unknown:198.51.100.4"
