import pytest

from hajserv.httpcode import HttpCode, reason_phrase


@pytest.mark.parametrize(
    "code, phrase",
    [
        (200, "OK"),
        (400, "Bad Request"),
        (404, "Not Found"),
        (405, "Method Not Allowed"),
        (501, "Not Implemented"),
        (505, "HTTP Version Not Supported"),
        (413, "Payload Too Large"),
    ],
)
def test_reason_phrase_known(code, phrase):
    assert reason_phrase(code) == phrase


@pytest.mark.parametrize("code", [306, 418, 999, 0, -1])
def test_reason_phrase_unknown(code):
    assert reason_phrase(code) == "Unknown Status"


def test_default_code_is_ok():
    assert HttpCode().code == 200
    assert HttpCode().message() == "OK"


def test_message_matches_reason_phrase():
    for code in (100, 301, 404, 500, 777):
        assert HttpCode(code).message() == reason_phrase(code)


def test_equality_by_code():
    assert HttpCode(404) == HttpCode(404)
    assert HttpCode(404) != HttpCode(400)