import json
from datetime import datetime, timezone

from katana.output.result import ErrorRecord, Request, Response, Result
from katana.utils.formfields import Form


def test_has_response_without_response():
    assert Result(request=Request(url="https://example.com")).has_response() is False


def test_has_response_with_unreceived_response():
    result = Result(request=Request(url="https://example.com"), response=Response())
    assert result.has_response() is False


def test_has_response_with_received_response():
    result = Result(request=Request(url="https://example.com"), response=Response(status_code=200))
    assert result.has_response() is True


def test_request_to_dict_omits_empty_fields():
    request = Request(url="https://example.com/a")
    assert request.to_dict() == {"endpoint": "https://example.com/a"}


def test_request_to_dict_keeps_set_fields():
    request = Request(method="POST", url="https://example.com/a", body="q=1")
    data = request.to_dict()
    assert data["method"] == "POST"
    assert data["body"] == "q=1"
    assert "tag" not in data


def test_result_to_dict_without_response():
    result = Result(request=Request(url="https://example.com"))
    data = result.to_dict()
    assert set(data) == {"request"}
    assert data["request"]["endpoint"] == "https://example.com"


def test_result_to_dict_timestamp_and_error():
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    result = Result(request=Request(url="https://example.com"), timestamp=stamp, error="boom")
    data = result.to_dict()
    assert data["timestamp"] == stamp.isoformat()
    assert data["error"] == "boom"


def test_response_to_dict_forms():
    response = Response(status_code=200, forms=[Form(method="GET", action="/x")])
    data = response.to_dict()
    assert data["forms"][0]["action"] == "/x"
    assert data["forms"][0]["method"] == "GET"
    assert "body" not in data


def test_result_to_dict_is_json_serializable():
    result = Result(
        request=Request(url="https://example.com", headers={"Accept": "*/*"}),
        response=Response(status_code=200, body="hello", stored_response_path="/tmp/x.txt"),
    )
    data = result.to_dict()
    assert json.loads(json.dumps(data)) == data
    assert data["response"]["body"] == "hello"


def test_error_record_to_dict():
    record = ErrorRecord(endpoint="https://example.com", source="a", error="timeout")
    assert record.to_dict() == {"endpoint": "https://example.com", "source": "a", "error": "timeout"}


def test_error_record_empty_to_dict():
    assert ErrorRecord().to_dict() == {}