import pytest

from userapi.users import User


def test_round_trip():
    password = "password"
    user = User(id=1, email="john@example.com", password=password)
    assert User.from_dict(user.to_dict()) == user


def test_to_dict_keys():
    assert list(User().to_dict()) == ["id", "email", "password"]


def test_missing_fields_keep_defaults():
    user = User.from_dict({"email": "john@example.com"})
    assert user == User(id=0, email="john@example.com", password="")


def test_null_fields_keep_defaults():
    user = User.from_dict({"id": None, "email": None})
    assert user == User()


def test_unknown_keys_ignored():
    user = User.from_dict({"id": 3, "nickname": "john"})
    assert user == User(id=3)


def test_case_insensitive_keys():
    user = User.from_dict({"ID": 5, "Email": "john@example.com"})
    assert user == User(id=5, email="john@example.com")


def test_exact_key_preferred():
    user = User.from_dict({"EMAIL": "upper@example.com", "email": "lower@example.com"})
    assert user.email == "lower@example.com"


@pytest.mark.parametrize(
    "data",
    [
        {"id": "1"},
        {"id": 1.5},
        {"id": True},
        {"email": 42},
        {"password": ["password"]},
    ],
)
def test_wrong_types_rejected(data):
    with pytest.raises(ValueError):
        User.from_dict(data)


def test_non_object_rejected():
    with pytest.raises(ValueError):
        User.from_dict([1, 2, 3])