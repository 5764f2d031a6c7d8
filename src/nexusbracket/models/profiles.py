"""Registration profiles and entry portals."""

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

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from nexusbracket.constants import NOT_PROVIDED


@dataclass
class PlayerProfile:
    """Solo registration details, keyed by entrant id.

    Attributes
    ----------
    ign : str
        In-game name.
    whatsapp : str
        Contact number, or "Not provided".
    """

    ign: str
    whatsapp: str = NOT_PROVIDED

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerProfile":
        return cls(ign=data["ign"], whatsapp=data.get("whatsapp", NOT_PROVIDED))


@dataclass
class TeamProfile:
    """Team registration, keyed by the leader's entrant id.

    The leader acts as the team's entrant in the bracket.
    """

    team_name: str
    leader_ign: str
    leader_whatsapp: str = NOT_PROVIDED
    players_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamProfile":
        return cls(
            team_name=data["team_name"],
            leader_ign=data.get("leader_ign", ""),
            leader_whatsapp=data.get("leader_whatsapp", NOT_PROVIDED),
            players_text=data.get("players_text", ""),
        )


@dataclass
class EntryPortal:
    """Where applications for a guild's tournament are collected and reviewed."""

    guild_id: str
    mode: str
    public_space_id: str
    admin_space_id: Optional[str] = None
    start_time: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EntryPortal":
        return cls(
            guild_id=data["guild_id"],
            mode=data["mode"],
            public_space_id=data["public_space_id"],
            admin_space_id=data.get("admin_space_id"),
            start_time=data.get("start_time"),
        )
