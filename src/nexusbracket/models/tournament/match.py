"""Match data class."""

# Nexus Bracket
# Copyright (C) 2025  Nexus Bracket developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from nexusbracket.constants import MATCH_COMPLETED, MATCH_PENDING


@dataclass
class Match:
    """One pairing of a single-elimination round.

    Attributes
    ----------
    id : str
        ``{short_code}-R{round}-M{sequence}``.
    tournament_id : str
        Owning tournament.
    guild_id : str
        Community the tournament belongs to.
    round : int
        Round number (1-indexed).
    sequence : int
        Position within the round (1-indexed, pairing order).
    entrant1 : str
        First entrant.
    entrant2 : str or None
        Second entrant, None when this is a bye.
    status : str
        "pending" or "completed".
    winner : str or None
        Winning entrant once completed.
    space_id : str or None
        External place hosting the match (a chat channel), if any.
    """

    id: str
    tournament_id: str
    guild_id: str
    round: int
    sequence: int
    entrant1: str
    entrant2: Optional[str] = None
    status: str = MATCH_PENDING
    winner: Optional[str] = None
    space_id: Optional[str] = None

    @property
    def is_bye(self) -> bool:
        return self.entrant2 is None

    @property
    def is_completed(self) -> bool:
        return self.status == MATCH_COMPLETED

    @property
    def entrants(self) -> List[str]:
        """Entrants actually present in the match."""
        if self.entrant2 is None:
            return [self.entrant1]
        return [self.entrant1, self.entrant2]

    @property
    def loser(self) -> Optional[str]:
        """The entrant who lost; None for byes and pending matches."""
        if not self.is_completed or self.is_bye or self.winner is None:
            return None
        return self.entrant2 if self.winner == self.entrant1 else self.entrant1

    def has_entrant(self, entrant_id: str) -> bool:
        return entrant_id in self.entrants

    def complete(self, winner: str) -> None:
        """Mark the match completed with ``winner``.

        Callers validate the winner; this only flips the state.
        """
        self.winner = winner
        self.status = MATCH_COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "guild_id": self.guild_id,
            "round": self.round,
            "sequence": self.sequence,
            "entrant1": self.entrant1,
            "entrant2": self.entrant2,
            "status": self.status,
            "winner": self.winner,
            "space_id": self.space_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        """Deserialize match from dictionary."""
        return cls(
            id=data["id"],
            tournament_id=data["tournament_id"],
            guild_id=data["guild_id"],
            round=int(data["round"]),
            sequence=int(data.get("sequence", 1)),
            entrant1=data["entrant1"],
            entrant2=data.get("entrant2"),
            status=data.get("status", MATCH_PENDING),
            winner=data.get("winner"),
            space_id=data.get("space_id"),
        )
