"""Tournament data model.

Holds the roster and the ordering of matches. The matches themselves live in
the match store and are referenced here by id only.
"""

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

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from nexusbracket.constants import (
    DEFAULT_BEST_OF,
    STATUS_COMPLETED,
    STATUS_LABELS,
    STATUS_REGISTRATION,
    STATUS_RUNNING,
)
from nexusbracket.models.tournament.podium import Podium


@dataclass
class Tournament:
    """A single-elimination tournament for one guild.

    Attributes
    ----------
    id : str
        ``{guild_id}-{epoch_ms}``.
    short_code : str
        Human-friendly code used as match id prefix (e.g. ``NX4821``).
    guild_id : str
        Community the tournament belongs to.
    name : str
        Display name.
    best_of : int
        Games per match, positive and odd.
    status : str
        "registration", "running" or "completed".
    entrants : list of str
        Roster in registration order.
    current_round : int
        Round being played (1-indexed).
    match_ids : list of str
        All match ids, in creation order.
    bracket_url : str or None
        External bracket page, if one was linked.
    podium : Podium or None
        Recorded when the tournament completes.
    created_at : int
        Creation time in epoch milliseconds.
    """

    id: str
    short_code: str
    guild_id: str
    name: str
    best_of: int = DEFAULT_BEST_OF
    status: str = STATUS_REGISTRATION
    entrants: List[str] = field(default_factory=list)
    current_round: int = 1
    match_ids: List[str] = field(default_factory=list)
    bracket_url: Optional[str] = None
    podium: Optional[Podium] = None
    created_at: int = 0

    # ========== Properties ==========

    @property
    def is_registration(self) -> bool:
        return self.status == STATUS_REGISTRATION

    @property
    def is_running(self) -> bool:
        return self.status == STATUS_RUNNING

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def status_label(self) -> str:
        """Human-readable status."""
        return STATUS_LABELS.get(self.status, self.status)

    def has_entrant(self, entrant_id: str) -> bool:
        return entrant_id in self.entrants

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize tournament to dictionary."""
        return {
            "id": self.id,
            "short_code": self.short_code,
            "guild_id": self.guild_id,
            "name": self.name,
            "best_of": self.best_of,
            "status": self.status,
            "entrants": list(self.entrants),
            "current_round": self.current_round,
            "match_ids": list(self.match_ids),
            "bracket_url": self.bracket_url,
            "podium": self.podium.to_dict() if self.podium else None,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tournament":
        """Deserialize tournament from dictionary."""
        podium_data = data.get("podium")
        return cls(
            id=data["id"],
            short_code=data["short_code"],
            guild_id=data["guild_id"],
            name=data["name"],
            best_of=int(data.get("best_of", DEFAULT_BEST_OF)),
            status=data.get("status", STATUS_REGISTRATION),
            entrants=list(data.get("entrants", [])),
            current_round=int(data.get("current_round", 1)),
            match_ids=list(data.get("match_ids", [])),
            bracket_url=data.get("bracket_url"),
            podium=Podium.from_dict(podium_data) if podium_data else None,
            created_at=int(data.get("created_at", 0)),
        )
