"""Final placements of a finished bracket."""

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


@dataclass
class Podium:
    """Champion, runner-up and third place.

    Attributes
    ----------
    champion : str or None
        Winner of the final match.
    runner_up : str or None
        Other entrant of the final; None when the final was a bye.
    third_place : list of str
        Losers of the round before the final (0, 1 or 2 entrants).
        No third-place match is played, so two entrants can share it.
    determined : bool
        False when final-round data is missing or incomplete.
    """

    champion: Optional[str] = None
    runner_up: Optional[str] = None
    third_place: List[str] = field(default_factory=list)
    determined: bool = True

    @classmethod
    def undetermined(cls) -> "Podium":
        return cls(determined=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "champion": self.champion,
            "runner_up": self.runner_up,
            "third_place": list(self.third_place),
            "determined": self.determined,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Podium":
        return cls(
            champion=data.get("champion"),
            runner_up=data.get("runner_up"),
            third_place=list(data.get("third_place", [])),
            determined=data.get("determined", True),
        )
