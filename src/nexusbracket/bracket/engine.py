"""Single-elimination bracket progression.

Pure functions: they build match objects and read them, but never touch
stores, announce anything or persist. The state machine sequences them.
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

import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from nexusbracket.constants import MATCH_COMPLETED, MATCH_PENDING
from nexusbracket.exceptions import BracketException, EmptyRoundException
from nexusbracket.models.tournament import Match, Podium, Tournament
from nexusbracket.type_hints import Entrants, Pairing
from nexusbracket.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class RoundOutcome:
    """What follows a completed round.

    Exactly one of the two is meaningful: ``podium`` is set when the round
    produced a single winner (or none), otherwise ``next_entrants`` holds the
    winners in pairing order.
    """

    next_entrants: Entrants = field(default_factory=list)
    podium: Optional[Podium] = None

    @property
    def is_final(self) -> bool:
        return self.podium is not None


def make_match_id(short_code: str, round_number: int, sequence: int) -> str:
    """Build a match id such as ``NX4821-R2-M1``."""
    return f"{short_code}-R{round_number}-M{sequence}"


def seed_entrants(entrants: Sequence[str], rng: Optional[random.Random] = None) -> Entrants:
    """Return a uniformly shuffled copy of ``entrants``.

    ``random.Random.shuffle`` is a Fisher-Yates shuffle, so every order is
    equally likely. The input is left untouched.
    """
    seeded = list(entrants)
    (rng or random).shuffle(seeded)
    return seeded


def pair_entrants(entrants: Sequence[str]) -> List[Pairing]:
    """Consume entrants two at a time; an odd one out is paired with None."""
    pairings: List[Pairing] = []
    for index in range(0, len(entrants), 2):
        first = entrants[index]
        second = entrants[index + 1] if index + 1 < len(entrants) else None
        pairings.append((first, second))
    return pairings


def create_round(
    tournament: Tournament, round_number: int, entrants: Sequence[str]
) -> List[Match]:
    """Create the matches of one round.

    Args:
        tournament: Owning tournament (id, guild and short code are used)
        round_number: Round being created (1-indexed)
        entrants: Entrants in pairing order; never reordered here

    Returns:
        Matches in sequence order. A lone trailing entrant gets a bye match,
        already completed with that entrant as winner.

    Raises:
        EmptyRoundException: If ``entrants`` is empty
    """
    if not entrants:
        raise EmptyRoundException(
            f"Cannot create round {round_number} of {tournament.short_code} without entrants"
        )

    matches: List[Match] = []
    for sequence, (first, second) in enumerate(pair_entrants(entrants), start=1):
        match = Match(
            id=make_match_id(tournament.short_code, round_number, sequence),
            tournament_id=tournament.id,
            guild_id=tournament.guild_id,
            round=round_number,
            sequence=sequence,
            entrant1=first,
            entrant2=second,
            status=MATCH_PENDING,
        )
        if second is None:
            match.complete(first)
            logger.info(f"{match.id}: {first} gets a bye")
        matches.append(match)

    logger.info(
        f"Created round {round_number} of {tournament.short_code}: "
        f"{len(matches)} matches for {len(entrants)} entrants"
    )
    return matches


def is_round_complete(matches: Iterable[Match]) -> bool:
    """True when every match is completed; vacuously true for no matches."""
    return all(match.status == MATCH_COMPLETED for match in matches)


def _in_pairing_order(matches: Iterable[Match]) -> List[Match]:
    return sorted(matches, key=lambda m: m.sequence)


def round_winners(matches: Iterable[Match]) -> Entrants:
    """Winners of a round in pairing order."""
    return [m.winner for m in _in_pairing_order(matches) if m.winner is not None]


def advance(
    tournament: Tournament,
    round_matches: Sequence[Match],
    all_matches: Optional[Sequence[Match]] = None,
) -> RoundOutcome:
    """Decide what follows a completed round.

    Args:
        tournament: Owning tournament
        round_matches: Matches of the round that just completed
        all_matches: Every match of the tournament, used for the podium.
            Defaults to ``round_matches``.

    Returns:
        RoundOutcome with either the next round's entrants (same order,
        no re-seeding) or the final podium

    Raises:
        BracketException: If the round still has pending matches
    """
    if not is_round_complete(round_matches):
        raise BracketException(
            f"Round of {tournament.short_code} still has pending matches"
        )

    winners = round_winners(round_matches)
    if len(winners) <= 1:
        matches = all_matches if all_matches is not None else round_matches
        return RoundOutcome(podium=compute_podium(tournament, matches))
    return RoundOutcome(next_entrants=winners)


def matches_by_round(matches: Iterable[Match]) -> Dict[int, List[Match]]:
    """Group matches by round, each group in pairing order."""
    grouped: Dict[int, List[Match]] = {}
    for match in matches:
        grouped.setdefault(match.round, []).append(match)
    return {number: _in_pairing_order(group) for number, group in sorted(grouped.items())}


def compute_podium(tournament: Tournament, matches: Iterable[Match]) -> Podium:
    """Derive champion, runner-up and third place.

    This is the only place placements are computed; renderers call it too.

    The final round is the highest round present. It must hold exactly one
    completed match with a winner, otherwise the podium is undetermined.
    Third place goes to the losers of the round before the final; byes
    have no loser and contribute nobody.
    """
    own = [m for m in matches if m.tournament_id == tournament.id]
    if not own:
        if len(tournament.entrants) == 1:
            return Podium(champion=tournament.entrants[0])
        return Podium.undetermined()

    rounds = matches_by_round(own)
    final_round = max(rounds)
    final_matches = rounds[final_round]
    if len(final_matches) != 1:
        return Podium.undetermined()

    final = final_matches[0]
    if not final.is_completed or final.winner is None:
        return Podium.undetermined()

    runner_up = None
    if not final.is_bye:
        runner_up = final.loser

    third_place: List[str] = []
    for match in rounds.get(final_round - 1, []):
        if match.loser is not None:
            third_place.append(match.loser)

    return Podium(
        champion=final.winner,
        runner_up=runner_up,
        third_place=third_place,
    )
