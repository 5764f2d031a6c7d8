"""Interfaces to the outside world used by the tournament state machine.

The chat platform provides real implementations (channels per match,
messages in the lobby). The defaults here keep everything local.
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

from abc import ABC, abstractmethod
from typing import List

from nexusbracket.models import Match, Tournament
from nexusbracket.type_hints import SpaceMap
from nexusbracket.utils import setup_logger

logger = setup_logger(__name__)


class MatchSpaceHost(ABC):
    """Provides a place for every playable match of a round.

    Notes
    -----
    ``prepare_round`` is called before anything about the round is stored.
    Raising ``ResourceUnavailableException`` aborts the round and leaves the
    tournament exactly as it was, so the call can be retried later.
    """

    @abstractmethod
    def prepare_round(
        self, tournament: Tournament, round_number: int, matches: List[Match]
    ) -> SpaceMap:
        """Return match id -> space id for the matches that got a space.

        Byes never need a space.
        """


class NullMatchSpaceHost(MatchSpaceHost):
    """Hosts nothing; matches are reported by id."""

    def prepare_round(
        self, tournament: Tournament, round_number: int, matches: List[Match]
    ) -> SpaceMap:
        return {}


class Announcer(ABC):
    """Delivers tournament messages to the participants."""

    @abstractmethod
    def announce(self, tournament: Tournament, message: str) -> None:
        """Publish ``message`` for ``tournament``."""

    @abstractmethod
    def post(self, guild_id: str, space_id: str, message: str) -> None:
        """Send ``message`` to one space of a guild (entry portals, reviews)."""


class LoggingAnnouncer(Announcer):
    """Writes announcements to the log."""

    def announce(self, tournament: Tournament, message: str) -> None:
        logger.info(f"[{tournament.short_code}] {message}")

    def post(self, guild_id: str, space_id: str, message: str) -> None:
        logger.info(f"[{guild_id}/{space_id}] {message}")
