from __future__ import annotations

import enum


class Visibility(str, enum.Enum):
    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"
    TEAM = "TEAM"


class TeamRole(str, enum.Enum):
    """Team roles, ordered from least to most privileged."""

    MEMBER = "MEMBER"
    OWNER = "OWNER"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def at_least(self, required: "TeamRole") -> bool:
        return self.rank >= required.rank


_ROLE_RANK = {TeamRole.MEMBER: 0, TeamRole.OWNER: 1}
