"""In-memory repositories for tournaments, matches, profiles and portals.

Each repository owns one collection and exposes a narrow upsert/get API.
Entities are stored by reference: callers mutate the object they got back
and then ``upsert`` it to make the change explicit.
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

from typing import Dict, Iterable, List, Optional

from nexusbracket.models import EntryPortal, Match, PlayerProfile, TeamProfile, Tournament


class TournamentStore:
    """Tournaments by id, plus the active tournament of each guild."""

    def __init__(self) -> None:
        self._tournaments: Dict[str, Tournament] = {}
        self._active: Dict[str, str] = {}

    def upsert(self, tournament: Tournament) -> None:
        self._tournaments[tournament.id] = tournament

    def get(self, tournament_id: str) -> Optional[Tournament]:
        return self._tournaments.get(tournament_id)

    def get_active(self, guild_id: str) -> Optional[Tournament]:
        tournament_id = self._active.get(guild_id)
        if tournament_id is None:
            return None
        return self._tournaments.get(tournament_id)

    def set_active(self, guild_id: str, tournament_id: str) -> None:
        self._active[guild_id] = tournament_id

    def short_code_taken(self, short_code: str) -> bool:
        return any(t.short_code == short_code for t in self._tournaments.values())

    def list(self) -> List[Tournament]:
        return list(self._tournaments.values())

    def active_index(self) -> Dict[str, str]:
        return dict(self._active)

    def load(self, tournaments: Iterable[Tournament], active: Dict[str, str]) -> None:
        """Replace the whole collection (used when restoring a snapshot)."""
        self._tournaments = {t.id: t for t in tournaments}
        self._active = {
            guild: tid for guild, tid in active.items() if tid in self._tournaments
        }

    def __len__(self) -> int:
        return len(self._tournaments)


class MatchStore:
    """Canonical match entities, addressable by id or by hosting space."""

    def __init__(self) -> None:
        self._matches: Dict[str, Match] = {}
        self._by_space: Dict[str, str] = {}

    def upsert(self, match: Match) -> None:
        previous = self._matches.get(match.id)
        if previous is not None and previous.space_id and previous.space_id != match.space_id:
            self._by_space.pop(previous.space_id, None)
        self._matches[match.id] = match
        if match.space_id:
            self._by_space[match.space_id] = match.id

    def upsert_many(self, matches: Iterable[Match]) -> None:
        for match in matches:
            self.upsert(match)

    def get(self, match_id: str) -> Optional[Match]:
        return self._matches.get(match_id)

    def get_many(self, match_ids: Iterable[str]) -> List[Match]:
        """Matches for ``match_ids`` in the given order; unknown ids are skipped."""
        return [self._matches[mid] for mid in match_ids if mid in self._matches]

    def find_by_space(self, space_id: str) -> Optional[Match]:
        match_id = self._by_space.get(space_id)
        if match_id is None:
            return None
        return self._matches.get(match_id)

    def for_tournament(self, tournament: Tournament) -> List[Match]:
        return self.get_many(tournament.match_ids)

    def for_round(self, tournament: Tournament, round_number: int) -> List[Match]:
        return [m for m in self.for_tournament(tournament) if m.round == round_number]

    def list(self) -> List[Match]:
        return list(self._matches.values())

    def space_index(self) -> Dict[str, str]:
        return dict(self._by_space)

    def load(self, matches: Iterable[Match]) -> None:
        self._matches = {}
        self._by_space = {}
        self.upsert_many(matches)

    def __len__(self) -> int:
        return len(self._matches)


class ProfileStore:
    """Player and team registration details keyed by entrant id."""

    def __init__(self) -> None:
        self.players: Dict[str, PlayerProfile] = {}
        self.teams: Dict[str, TeamProfile] = {}

    def upsert_player(self, entrant_id: str, profile: PlayerProfile) -> None:
        self.players[entrant_id] = profile

    def upsert_team(self, leader_id: str, profile: TeamProfile) -> None:
        self.teams[leader_id] = profile

    def player(self, entrant_id: str) -> Optional[PlayerProfile]:
        return self.players.get(entrant_id)

    def team(self, entrant_id: str) -> Optional[TeamProfile]:
        return self.teams.get(entrant_id)

    def load(
        self, players: Dict[str, PlayerProfile], teams: Dict[str, TeamProfile]
    ) -> None:
        self.players = dict(players)
        self.teams = dict(teams)


class PortalStore:
    """Entry portals keyed by guild and mode."""

    def __init__(self) -> None:
        self._portals: Dict[str, EntryPortal] = {}

    @staticmethod
    def key(guild_id: str, mode: str) -> str:
        return f"{guild_id}:{mode}"

    def upsert(self, portal: EntryPortal) -> None:
        self._portals[self.key(portal.guild_id, portal.mode)] = portal

    def get(self, guild_id: str, mode: str) -> Optional[EntryPortal]:
        return self._portals.get(self.key(guild_id, mode))

    def list(self) -> List[EntryPortal]:
        return list(self._portals.values())

    def index(self) -> Dict[str, EntryPortal]:
        return dict(self._portals)

    def load(self, portals: Iterable[EntryPortal]) -> None:
        self._portals = {}
        for portal in portals:
            self.upsert(portal)
