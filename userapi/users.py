"""The user record exchanged over the API and stored in the database."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass
class User:
    """A user account."""

    id: int = 0
    email: str = ""
    password: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object form of the user."""
        return {"id": self.id, "email": self.email, "password": self.password}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        """Build a user from a decoded JSON object.

        Unknown keys are ignored, missing or null keys keep their defaults and
        keys match case-insensitively when no exact match exists.
        """
        if not isinstance(data, Mapping):
            raise ValueError("user data must be a JSON object")
        folded = {str(key).lower(): value for key, value in data.items()}
        values: dict[str, Any] = {}
        for spec in fields(cls):
            value = data[spec.name] if spec.name in data else folded.get(spec.name)
            if value is None:
                continue
            if spec.name == "id":
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"field id must be an integer, got {value!r}")
            elif not isinstance(value, str):
                raise ValueError(f"field {spec.name} must be a string, got {value!r}")
            values[spec.name] = value
        return cls(**values)