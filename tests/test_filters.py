from katana.utils.filters import (
    MAX_CHROME_URL_LENGTH,
    RepeatingSequence,
    SimpleFilter,
    longest_repeating_sequence,
)


def test_simple_filter_unique_url():
    with SimpleFilter() as simple:
        assert simple.unique_url("https://example.com") is True
        assert simple.unique_url("https://example.com") is False


def test_unique_content():
    with SimpleFilter() as simple:
        assert simple.unique_content(b"hello") is True
        assert simple.unique_content(b"hello") is False
        assert simple.unique_content(b"world") is True


def test_close_forgets_entries():
    simple = SimpleFilter()
    assert simple.unique_url("https://example.com/a") is True
    simple.close()
    assert simple.unique_url("https://example.com/a") is True


def test_is_cycle_by_length():
    simple = SimpleFilter()
    url = "https://example.com/" + "a" * MAX_CHROME_URL_LENGTH
    assert simple.is_cycle(url) is True


def test_is_not_cycle():
    simple = SimpleFilter()
    assert simple.is_cycle("https://example.com/index.php") is False


def test_longest_repeating_sequence():
    assert longest_repeating_sequence("geeksforgeeks") == RepeatingSequence("geeks", 2)


def test_longest_repeating_sequence_none():
    result = longest_repeating_sequence("abc")
    assert result.sequence == ""
    assert result.count == 4