from __future__ import annotations


def validate_key(key: str) -> None:
    if not isinstance(key, str):
        raise TypeError("Key must be a string")
    if not key:
        raise ValueError("Key cannot be empty")
