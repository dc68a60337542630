"""Identity scoping for every piece of cached notification state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

UserId = Union[int, str]


@dataclass(frozen=True)
class SessionIdentity:
    """The signed-in user whose notifications are being synchronized."""

    user_id: UserId


@dataclass(frozen=True)
class SessionToken:
    """Tag attached to every request issued under a given identity.

    ``generation`` grows on every establishment, so a response issued for
    user 10 is still recognised as stale after a 10 -> 11 -> 10 switch.
    """

    identity: SessionIdentity | None
    generation: int


__all__ = ["SessionIdentity", "SessionToken", "UserId"]
