"""Composition root holding every repository of a running bot."""

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

from typing import Optional

from nexusbracket.exceptions import FileLoadException, FileSaveException
from nexusbracket.storage.repositories import (
    MatchStore,
    PortalStore,
    ProfileStore,
    TournamentStore,
)
from nexusbracket.storage.snapshot import JsonSnapshotStore, Snapshot
from nexusbracket.utils import setup_logger

logger = setup_logger(__name__)


class BracketContext:
    """All state of one bot process, plus where it is persisted.

    Built once at startup and handed to the state machine; nothing in the
    package keeps module-level state.
    """

    def __init__(self, snapshot_store: Optional[JsonSnapshotStore] = None):
        self.tournaments = TournamentStore()
        self.matches = MatchStore()
        self.profiles = ProfileStore()
        self.portals = PortalStore()
        self.snapshot_store = snapshot_store

    def snapshot(self) -> Snapshot:
        """Capture the current state."""
        return Snapshot(
            tournaments={t.id: t for t in self.tournaments.list()},
            active_tournaments=self.tournaments.active_index(),
            matches={m.id: m for m in self.matches.list()},
            match_spaces=self.matches.space_index(),
            entry_portals=self.portals.index(),
            player_profiles=dict(self.profiles.players),
            team_profiles=dict(self.profiles.teams),
        )

    def apply(self, snapshot: Snapshot) -> None:
        """Replace the in-memory state with ``snapshot``."""
        self.tournaments.load(snapshot.tournaments.values(), snapshot.active_tournaments)
        self.matches.load(snapshot.matches.values())
        self.profiles.load(snapshot.player_profiles, snapshot.team_profiles)
        self.portals.load(snapshot.entry_portals.values())

    def restore(self) -> bool:
        """Load the persisted snapshot, if any.

        A snapshot that cannot be read is logged and the bot starts empty.

        Returns:
            True if state was loaded from disk
        """
        if self.snapshot_store is None:
            return False
        try:
            snapshot = self.snapshot_store.load()
        except FileLoadException:
            logger.exception("Failed to load saved state, starting empty")
            self.apply(Snapshot())
            return False
        self.apply(snapshot)
        return bool(snapshot.tournaments or snapshot.player_profiles or snapshot.team_profiles)

    def persist(self) -> bool:
        """Write the current state. Failures are logged, never raised.

        Returns:
            True if the snapshot was written
        """
        if self.snapshot_store is None:
            return False
        try:
            self.snapshot_store.save(self.snapshot())
        except FileSaveException:
            logger.exception("Failed to save state")
            return False
        return True
