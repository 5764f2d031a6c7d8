"""Whole-state JSON snapshot.

Every collection is written as a mapping of id to entity so the file can be
read back losslessly after a restart.
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

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

from nexusbracket.constants import SNAPSHOT_VERSION
from nexusbracket.exceptions import FileLoadException, FileSaveException
from nexusbracket.models import EntryPortal, Match, PlayerProfile, TeamProfile, Tournament
from nexusbracket.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class Snapshot:
    """Full copy of the bot's state.

    Attributes
    ----------
    tournaments : dict
        Tournament id -> Tournament.
    active_tournaments : dict
        Guild id -> id of the guild's active tournament.
    matches : dict
        Match id -> Match.
    match_spaces : dict
        Space id -> match id. Redundant with ``Match.space_id`` but kept so
        the file is readable on its own.
    entry_portals : dict
        "guild:mode" -> EntryPortal.
    player_profiles, team_profiles : dict
        Entrant id -> profile.
    """

    tournaments: Dict[str, Tournament] = field(default_factory=dict)
    active_tournaments: Dict[str, str] = field(default_factory=dict)
    matches: Dict[str, Match] = field(default_factory=dict)
    match_spaces: Dict[str, str] = field(default_factory=dict)
    entry_portals: Dict[str, EntryPortal] = field(default_factory=dict)
    player_profiles: Dict[str, PlayerProfile] = field(default_factory=dict)
    team_profiles: Dict[str, TeamProfile] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "tournaments": {tid: t.to_dict() for tid, t in self.tournaments.items()},
            "active_tournaments": dict(self.active_tournaments),
            "matches": {mid: m.to_dict() for mid, m in self.matches.items()},
            "match_spaces": dict(self.match_spaces),
            "entry_portals": {key: p.to_dict() for key, p in self.entry_portals.items()},
            "player_profiles": {
                eid: p.to_dict() for eid, p in self.player_profiles.items()
            },
            "team_profiles": {eid: p.to_dict() for eid, p in self.team_profiles.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            tournaments={
                tid: Tournament.from_dict(t)
                for tid, t in data.get("tournaments", {}).items()
            },
            active_tournaments=dict(data.get("active_tournaments", {})),
            matches={mid: Match.from_dict(m) for mid, m in data.get("matches", {}).items()},
            match_spaces=dict(data.get("match_spaces", {})),
            entry_portals={
                key: EntryPortal.from_dict(p)
                for key, p in data.get("entry_portals", {}).items()
            },
            player_profiles={
                eid: PlayerProfile.from_dict(p)
                for eid, p in data.get("player_profiles", {}).items()
            },
            team_profiles={
                eid: TeamProfile.from_dict(p)
                for eid, p in data.get("team_profiles", {}).items()
            },
        )


class JsonSnapshotStore:
    """Reads and writes a ``Snapshot`` as a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, snapshot: Snapshot) -> None:
        """Write the snapshot, replacing the previous file atomically.

        Raises:
            FileSaveException: If the file cannot be written
        """
        data = snapshot.to_dict()
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=4)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise FileSaveException(f"Could not save state to {self.path}: {e}") from e

        logger.debug(
            f"Saved state to {self.path}: {len(snapshot.tournaments)} tournaments, "
            f"{len(snapshot.matches)} matches"
        )

    def load(self) -> Snapshot:
        """Read the snapshot. A missing file yields an empty snapshot.

        Raises:
            FileLoadException: If the file exists but cannot be read or parsed
        """
        if not self.path.exists():
            logger.info(f"No saved state at {self.path}, starting fresh")
            return Snapshot()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value is not an object")
            snapshot = Snapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise FileLoadException(f"Could not load state from {self.path}: {e}") from e

        logger.info(
            f"Loaded state from {self.path}: {len(snapshot.tournaments)} tournaments, "
            f"{len(snapshot.matches)} matches"
        )
        return snapshot
