import pytest

from minish.status import ShellStatus, normalize_status


@pytest.mark.parametrize("code", list(range(-256, 2000)))
def test_normalize_matches_modulo_in_supported_range(code):
    assert normalize_status(code) == code % 256


@pytest.mark.parametrize("code", [0, 1, 127, 130, 255])
def test_normalize_keeps_valid_codes(code):
    assert normalize_status(code) == code


def test_normalize_negative_one_is_255():
    assert normalize_status(-1) == 255


def test_result_always_in_byte_range_for_moderate_input():
    for code in range(-256, 5000, 7):
        assert 0 <= normalize_status(code) <= 255


def test_shell_status_starts_at_zero():
    assert ShellStatus().code == 0


def test_record_stores_and_returns_value():
    status = ShellStatus()
    assert status.record(130) == 130
    assert status.code == 130


def test_record_normalizes():
    status = ShellStatus()
    returned = status.record(256 + 7)
    assert returned == status.code
    assert status.code == normalize_status(256 + 7)
    assert status.code == (256 + 7) % 256


def test_record_overwrites_previous():
    status = ShellStatus(code=5)
    status.record(2)
    assert status.code == 2