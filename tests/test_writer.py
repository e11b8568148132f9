import json
import os
import re

import pytest

from katana.output.custom_field import init_custom_field_config_file
from katana.output.files import INDEX_FILE, response_file_name
from katana.output.result import ErrorRecord, Request, Response, Result
from katana.output.writer import (
    OutputError,
    StandardWriter,
    WriterOptions,
    create_dir_name_no_clobber,
    flatten,
    remove_dirs_with_suffix,
)
from katana.utils.extensions import Validator


@pytest.fixture
def field_config(tmp_path):
    return str(init_custom_field_config_file(tmp_path / "home"))


def make_writer(field_config, **kwargs):
    return StandardWriter(WriterOptions(field_config=field_config, **kwargs))


def test_flatten_merges_nested_mappings():
    assert flatten({"a": 1, "b": {"c": 2, "d": {"e": 3}}}) == {"a": 1, "c": 2, "e": 3}


def test_create_dir_name_no_clobber_missing_dir(tmp_path):
    target = str(tmp_path / "resp")
    assert create_dir_name_no_clobber(target) == target


def test_create_dir_name_no_clobber_picks_next_number(tmp_path):
    for name in ("resp", "resp1", "resp3", "respx"):
        (tmp_path / name).mkdir()
    result = create_dir_name_no_clobber(str(tmp_path / "resp"))
    assert result == os.path.join(str(tmp_path), "resp4")


def test_remove_dirs_with_suffix(tmp_path):
    for name in ("resp", "resp2", "respx"):
        (tmp_path / name).mkdir()
    remove_dirs_with_suffix(str(tmp_path / "resp"))
    assert sorted(p.name for p in tmp_path.iterdir()) == ["respx"]


def test_write_none_raises(field_config):
    with make_writer(field_config) as writer:
        with pytest.raises(OutputError, match="nil"):
            writer.write(None)


def test_write_plain_url_to_file_and_stdout(tmp_path, field_config, capsys):
    out = tmp_path / "out.txt"
    with make_writer(field_config, output_file=str(out)) as writer:
        writer.write(Result(request=Request(method="GET", url="https://example.com/a")))
    assert out.read_text() == "https://example.com/a\n"
    assert "https://example.com/a" in capsys.readouterr().out


def test_verbose_colors_are_stripped_from_file(tmp_path, field_config, capsys):
    out = tmp_path / "out.txt"
    request = Request(method="POST", url="https://example.com/a", tag="a", body="q=1")
    with make_writer(field_config, output_file=str(out), verbose=True, colors=True) as writer:
        writer.write(Result(request=request))
    assert out.read_text() == "[a] [POST] https://example.com/a [q=1]\n"
    assert "\x1b[34ma\x1b[0m" in capsys.readouterr().out


def test_json_output_round_trips(tmp_path, field_config):
    out = tmp_path / "out.json"
    result = Result(
        request=Request(method="GET", url="https://example.com/a"),
        response=Response(status_code=200, body="hello"),
    )
    with make_writer(field_config, output_file=str(out), json=True) as writer:
        writer.write(result)
    assert json.loads(out.read_text()) == result.to_dict()


def test_json_output_with_custom_fields_is_empty(field_config):
    result = Result(request=Request(url="https://example.com/", custom_fields={"email": ["a@example.com"]}))
    with make_writer(field_config, json=True) as writer:
        with pytest.raises(OutputError, match="empty"):
            writer.write(result)


def test_fields_output(tmp_path, field_config):
    out = tmp_path / "out.txt"
    with make_writer(field_config, output_file=str(out), fields="fqdn,path") as writer:
        writer.write(Result(request=Request(url="https://example.com/a/b")))
    assert out.read_text().split() == ["example.com", "/a/b"]


def test_invalid_fields_raise(field_config):
    with pytest.raises(OutputError, match="could not validate fields"):
        make_writer(field_config, fields="bogus")


def test_store_fields_writes_per_host_file(tmp_path, field_config):
    directory = tmp_path / "fields"
    with make_writer(field_config, store_fields="fqdn", store_field_dir=str(directory)) as writer:
        writer.write(Result(request=Request(url="https://example.com/a")))
    assert (directory / "https_example.com_fqdn.txt").read_text() == "example.com\n"


def test_match_regex(field_config):
    with make_writer(field_config, match_regex=[re.compile("admin")]) as writer:
        with pytest.raises(OutputError, match="does not match output"):
            writer.write(Result(request=Request(url="https://example.com/home")))
        writer.write(Result(request=Request(url="https://example.com/admin")))


def test_filter_regex(field_config):
    with make_writer(field_config, filter_regex=[re.compile(r"logout")]) as writer:
        with pytest.raises(OutputError, match="filtered"):
            writer.write(Result(request=Request(url="https://example.com/logout")))


def test_filter_condition(field_config):
    condition = 'contains(endpoint, "logout")'
    with make_writer(field_config, output_filter_condition=condition) as writer:
        with pytest.raises(OutputError, match="filtered"):
            writer.write(Result(request=Request(url="https://example.com/logout")))
        writer.write(Result(request=Request(url="https://example.com/home")))


def test_match_condition_on_status_code(field_config):
    condition = 'status_code == 200 && !contains(endpoint, "skip")'
    with make_writer(field_config, output_match_condition=condition) as writer:
        writer.write(Result(request=Request(url="https://example.com/a"), response=Response(status_code=200)))
        with pytest.raises(OutputError, match="does not match output"):
            writer.write(Result(request=Request(url="https://example.com/a"), response=Response(status_code=404)))
        with pytest.raises(OutputError, match="does not match output"):
            writer.write(Result(request=Request(url="https://example.com/skip"), response=Response(status_code=200)))


def test_match_condition_with_missing_parameter(field_config):
    with make_writer(field_config, output_match_condition="missing_field == 1") as writer:
        with pytest.raises(OutputError, match="does not match output"):
            writer.write(Result(request=Request(url="https://example.com/a")))


def test_extension_validator_rejects_denylisted(field_config):
    with make_writer(field_config, extension_validator=Validator()) as writer:
        with pytest.raises(OutputError, match="extension"):
            writer.write(Result(request=Request(url="https://example.com/logo.png")))


def test_omit_raw_clears_raw_fields(field_config):
    result = Result(
        request=Request(url="https://example.com/a", raw="GET /a"),
        response=Response(status_code=200, raw="HTTP/1.1 200 OK", body="body"),
    )
    with make_writer(field_config, omit_raw=True, omit_body=True) as writer:
        writer.write(result)
    assert (result.request.raw, result.response.raw, result.response.body) == ("", "", "")


def test_write_error_to_log(tmp_path, field_config):
    log = tmp_path / "errors.jsonl"
    record = ErrorRecord(endpoint="https://example.com/a", source="https://example.com/", error="boom")
    with make_writer(field_config, error_log_file=str(log)) as writer:
        writer.write_error(record)
    assert json.loads(log.read_text()) == record.to_dict()


def test_store_response(tmp_path, field_config):
    resp_dir = str(tmp_path / "resp")
    url = "https://example.com:8443/page"
    result = Result(
        request=Request(url=url, raw="GET /page"),
        response=Response(status_code=200, status="200 OK", url=url, raw="HTTP/1.1 200 OK"),
    )
    with make_writer(field_config, store_response=True, store_response_dir=resp_dir) as writer:
        writer.write(result)
    expected_file = response_file_name(resp_dir, "example.com_8443", url)
    assert result.response.stored_response_path == os.path.abspath(expected_file)
    with open(expected_file) as handle:
        assert handle.read() == f"{url}\n\n\nGET /page\n\nHTTP/1.1 200 OK\n"
    with open(os.path.join(resp_dir, INDEX_FILE)) as handle:
        assert handle.read() == f"{expected_file} {url} (200 OK)\n"


def test_store_response_removes_numbered_dirs(tmp_path, field_config):
    (tmp_path / "resp2").mkdir()
    with make_writer(field_config, store_response=True, store_response_dir=str(tmp_path / "resp")):
        pass
    assert not (tmp_path / "resp2").exists()
    assert (tmp_path / "resp" / INDEX_FILE).is_file()


def test_store_response_no_clobber(tmp_path, field_config):
    (tmp_path / "resp").mkdir()
    options = dict(store_response=True, store_response_dir=str(tmp_path / "resp"), no_clobber=True)
    with make_writer(field_config, **options) as writer:
        assert writer.store_response_dir == os.path.join(str(tmp_path), "resp1")
    assert (tmp_path / "resp1" / INDEX_FILE).is_file()
    assert (tmp_path / "resp").is_dir()