"""Shared test fixtures for the llmjson test suite."""

from typing import Optional

import pytest
from pydantic import BaseModel

from llmjson.errors import RepairError


class StubRepairer:
    """Deterministic repairer: known inputs map to fixed outputs, others fail."""

    def __init__(self, fixes: dict[str, str] | None = None):
        self.fixes = fixes or {}
        self.calls: list[str] = []

    def __call__(self, text: str) -> str:
        self.calls.append(text)
        if text in self.fixes:
            return self.fixes[text]
        raise RepairError(f"No canned fix for {text!r}")


# --- Schemas ---

class Character(BaseModel):
    name: str
    age: int
    favoriteBand: str


class CharacterEnvelope(BaseModel):
    character: Character


class User(BaseModel):
    name: str
    age: int


class UserEnvelope(BaseModel):
    user: User


class RankedItem(BaseModel):
    id: str
    score: float


class RankedEnvelope(BaseModel):
    rankedKnowledge: list[RankedItem]


class NamedUser(BaseModel):
    name: str


class UsersEnvelope(BaseModel):
    users: list[NamedUser]


class Timestamp(BaseModel):
    timestamp: int


class MultiRoot(BaseModel):
    user: NamedUser
    meta: Timestamp


class StringRoot(BaseModel):
    data: str


class Profile(BaseModel):
    name: str
    nickname: Optional[str] = None


class ProfileEnvelope(BaseModel):
    profile: Profile


@pytest.fixture
def stub_repairer():
    return StubRepairer()


@pytest.fixture
def make_repairer():
    return StubRepairer
