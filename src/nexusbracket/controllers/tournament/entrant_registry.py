"""Roster management for a tournament."""

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

import random
from typing import Iterator, Optional

from nexusbracket.bracket import seed_entrants
from nexusbracket.exceptions import DuplicateEntrantException, TournamentStateException
from nexusbracket.models import Tournament
from nexusbracket.type_hints import Entrants
from nexusbracket.utils import setup_logger

logger = setup_logger(__name__)


class EntrantRegistry:
    """Ordered, duplicate-free roster of one tournament.

    This class is responsible for:
    - Accepting entrants only while registration is open
    - Rejecting duplicates
    - Producing the seeded order used for round 1

    The roster itself keeps registration order; seeding works on a copy.
    """

    def __init__(self, tournament: Tournament):
        self.tournament = tournament

    def __contains__(self, entrant_id: str) -> bool:
        return entrant_id in self.tournament.entrants

    def __len__(self) -> int:
        return len(self.tournament.entrants)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.tournament.entrants))

    def check_can_add(self, entrant_id: str) -> None:
        """Raise if ``entrant_id`` cannot join right now.

        Raises:
            TournamentStateException: If registration is closed
            DuplicateEntrantException: If already registered
        """
        if not self.tournament.is_registration:
            raise TournamentStateException(
                f"Registration is closed: this tournament is currently {self.tournament.status}."
            )
        if entrant_id in self:
            raise DuplicateEntrantException(
                "This player is already registered in the tournament."
            )

    def add(self, entrant_id: str) -> None:
        """Append an entrant to the roster.

        Args:
            entrant_id: Entrant to register

        Raises:
            TournamentStateException: If registration is closed
            DuplicateEntrantException: If already registered
        """
        self.check_can_add(entrant_id)
        self.tournament.entrants.append(entrant_id)
        logger.info(
            f"Registered {entrant_id} in {self.tournament.short_code} "
            f"({len(self)} entrants)"
        )

    def seeded(self, rng: Optional[random.Random] = None) -> Entrants:
        """Uniformly shuffled copy of the roster."""
        return seed_entrants(self.tournament.entrants, rng)
