import pytest
from room_reservation.domain.errors import ValidationError
from room_reservation.domain.values import new_uuid, parse_room_name, parse_slot, parse_uuid, parse_user_id
from room_reservation.models import Slot


def test_new_uuid_is_version_7_and_time_ordered() -> None:
    first, second = new_uuid(), new_uuid()
    assert first.version == 7
    assert str(first) < str(second)


def test_parse_uuid_accepts_v7_in_any_case() -> None:
    raw = str(new_uuid())
    assert parse_uuid(raw.upper()) == parse_uuid(raw)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not-a-uuid",
        "2f1c6f0e-8c1a-4b4e-9d55-1f2a3b4c5d6e",  # version 4
        "0190b0a4-6c4e-7c3a-cb2e-1b2c3d4e5f60",  # bad variant
    ],
)
def test_parse_uuid_rejects_non_v7(raw: str) -> None:
    with pytest.raises(ValidationError):
        parse_uuid(raw)


def test_parse_slot() -> None:
    assert parse_slot("third") is Slot.THIRD
    assert [s.ordinal for s in Slot] == [1, 2, 3, 4, 5]
    with pytest.raises(ValidationError, match="first, second, third, fourth, fifth"):
        parse_slot("sixth")


@pytest.mark.parametrize("raw", ["user_abc123", "user_X"])
def test_parse_user_id_accepts(raw: str) -> None:
    assert parse_user_id(raw) == raw


@pytest.mark.parametrize("raw", ["", "user_", "usr_abc", "user_abc-1", " user_abc"])
def test_parse_user_id_rejects(raw: str) -> None:
    with pytest.raises(ValidationError):
        parse_user_id(raw)


@pytest.mark.parametrize("raw", ["abc", "x" * 20])
def test_parse_room_name_length_bounds(raw: str) -> None:
    assert parse_room_name(raw) == raw


@pytest.mark.parametrize("raw", ["ab", "x" * 21])
def test_parse_room_name_rejects_out_of_range(raw: str) -> None:
    with pytest.raises(ValidationError):
        parse_room_name(raw)


def test_validation_error_is_a_value_error() -> None:
    # pydantic turns ValueError raised in validators into a 422
    assert issubclass(ValidationError, ValueError)
