import re
from urllib.parse import quote

import pytest

from events.service.pass_ids import PASS_ID_LENGTH, decode_pass_id, generate_pass_id, to_base36

PASS_ID_PATTERN = re.compile(r"^[0-9A-Z]{12}$")


@pytest.mark.parametrize(
    "number,expected",
    [
        (0, "0"),
        (35, "z"),
        (36, "10"),
        (1_700_000_000_000, "loyw3v28"),
    ],
)
def test_to_base36(number: int, expected: str) -> None:
    assert to_base36(number) == expected


def test_to_base36_rejects_negative_numbers() -> None:
    with pytest.raises(ValueError):
        to_base36(-1)


def test_pass_id_is_twelve_uppercase_url_safe_characters() -> None:
    for ticket_id in range(1, 200):
        pass_id = generate_pass_id(5, ticket_id, 2)

        assert len(pass_id) == PASS_ID_LENGTH
        assert PASS_ID_PATTERN.match(pass_id)
        assert quote(pass_id, safe="") == pass_id


def test_pass_id_starts_with_the_timestamp() -> None:
    pass_id = generate_pass_id(5, 1, 2, timestamp_ms=1_700_000_000_000)

    assert pass_id.startswith("LOYW3V28")


def test_pass_ids_are_distinct() -> None:
    pass_ids = {generate_pass_id(5, ticket_id, 2) for ticket_id in range(20)}

    assert len(pass_ids) == 20


def test_short_timestamp_is_padded_with_event_and_ticket_ids() -> None:
    # "1" + 6 random characters leaves 5 characters of padding: "5" + "4321"
    pass_id = generate_pass_id(5, 43210, 2, timestamp_ms=1)

    assert len(pass_id) == PASS_ID_LENGTH
    assert pass_id[0] == "1"
    assert pass_id[7:] == "54321"


def test_padding_falls_back_to_random_characters() -> None:
    pass_id = generate_pass_id(1, 2, 3, timestamp_ms=0)

    assert len(pass_id) == PASS_ID_LENGTH
    assert pass_id[7:9] == "12"
    assert PASS_ID_PATTERN.match(pass_id)


def test_decode_pass_id() -> None:
    assert decode_pass_id("ABC%2FDEF") == "ABC/DEF"
    assert decode_pass_id("LOYW3V28AB12") == "LOYW3V28AB12"
