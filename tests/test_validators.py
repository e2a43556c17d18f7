from notiapp_backend.core.validators import (
    is_non_empty,
    is_valid_date,
    is_valid_email,
    is_valid_password,
    is_valid_time,
)


def test_email_shape():
    assert is_valid_email("user@example.com")
    assert is_valid_email("a.b+tag@mail.co.uk")
    assert not is_valid_email("user@example")
    assert not is_valid_email("user example@mail.com")
    assert not is_valid_email("@example.com")
    assert not is_valid_email("")
    assert not is_valid_email(None)


def test_non_empty_ignores_whitespace():
    assert is_non_empty("x")
    assert is_non_empty("  x  ")
    assert not is_non_empty("")
    assert not is_non_empty("   \t")
    assert not is_non_empty(None)


def test_password_length():
    assert is_valid_password("123456")
    assert not is_valid_password("12345")
    assert not is_valid_password(None)


def test_date_shape_only():
    assert is_valid_date("2025-01-31")
    # shape check, not calendar validity
    assert is_valid_date("2025-13-45")
    assert not is_valid_date("2025-1-31")
    assert not is_valid_date("31/01/2025")
    assert not is_valid_date("2025-01-31\n")
    assert not is_valid_date("")


def test_time_allows_empty():
    assert is_valid_time("")
    assert is_valid_time("09:30")
    assert is_valid_time("23:59")
    assert not is_valid_time("9:30")
    assert not is_valid_time("09:30:00")
    assert not is_valid_time(None)
