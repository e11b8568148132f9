from katana.utils.urls import (
    flatten_headers,
    is_url,
    parse_link_tag,
    parse_refresh_tag,
    parse_srcset_tag,
    replace_all_query_param,
    web_user_agent,
)


def test_parse_link_tag():
    header = (
        '<https://api.github.com/user/58276/repos?page=2>; rel="next",'
        '<https://api.github.com/user/58276/repos?page=10>; rel="last"'
    )
    assert sorted(parse_link_tag(header)) == sorted([
        "https://api.github.com/user/58276/repos?page=2",
        "https://api.github.com/user/58276/repos?page=10",
    ])


def test_parse_refresh_tag():
    assert parse_refresh_tag("999; url=/test/headers/refresh.found") == "/test/headers/refresh.found"


def test_parse_refresh_tag_missing():
    assert parse_refresh_tag("999") == ""
    assert parse_refresh_tag("0; url=;") == ""


def test_is_url():
    assert is_url("https://example.com/path") is True
    assert is_url("/relative/path") is False


def test_parse_srcset_tag():
    value = "image-1x.png 1x, image-2x.png 2x"
    assert parse_srcset_tag(value) == ["image-1x.png", "image-2x.png"]


def test_parse_srcset_without_descriptors():
    assert parse_srcset_tag("a.png,b.png") == ["a.png", "b.png"]


def test_flatten_headers():
    headers = {"Accept": ["text/html", "application/json"], "Host": ["example.com"]}
    assert flatten_headers(headers) == {
        "Accept": "text/html;application/json",
        "Host": "example.com",
    }


def test_replace_all_query_param():
    result = replace_all_query_param("https://example.com/p?a=1&b=2&a=3", "x")
    assert result == "https://example.com/p?a=&b="


def test_web_user_agent():
    assert "Chrome/113.0.0.0" in web_user_agent()