from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SignupDTO:
    full_name: str
    email: str
    password: str
