"""Turn entrant ids into display labels."""

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

from typing import Iterable, List, Optional

from nexusbracket.constants import UNKNOWN_LABEL
from nexusbracket.storage.repositories import ProfileStore
from nexusbracket.type_hints import DisplayNameLookup
from nexusbracket.utils import setup_logger

logger = setup_logger(__name__)


class LabelResolver:
    """Resolves entrant ids to names shown to people.

    Precedence: team name, then player IGN, then the chat platform's display
    name (via ``display_name_lookup``), then ``fallback``. The lookup talks to
    an external service; any failure there only costs the nicer label.
    """

    def __init__(
        self,
        profiles: ProfileStore,
        display_name_lookup: Optional[DisplayNameLookup] = None,
        fallback: str = UNKNOWN_LABEL,
    ):
        self.profiles = profiles
        self.display_name_lookup = display_name_lookup
        self.fallback = fallback

    def label(self, entrant_id: Optional[str]) -> str:
        if not entrant_id:
            return self.fallback

        team = self.profiles.team(entrant_id)
        if team and team.team_name:
            return team.team_name

        player = self.profiles.player(entrant_id)
        if player and player.ign:
            return player.ign

        if self.display_name_lookup is not None:
            try:
                name = self.display_name_lookup(entrant_id)
            except Exception as e:
                logger.warning(f"Display name lookup failed for {entrant_id}: {e}")
                name = None
            if name:
                return name

        return self.fallback

    def labels(self, entrant_ids: Iterable[str]) -> List[str]:
        return [self.label(eid) for eid in entrant_ids]

    def export_label(self, entrant_id: str) -> str:
        """Label for bulk export; unknown ids keep a traceable form."""
        label = self.label(entrant_id)
        if label == self.fallback:
            return f"ID {entrant_id}"
        return label
