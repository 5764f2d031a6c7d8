"""Plain-text views of a tournament.

Used by the console and for chat messages. Placements always come from
``compute_podium``.
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

from typing import List, Sequence

from nexusbracket.bracket import compute_podium, matches_by_round
from nexusbracket.constants import BYE_LABEL, EMPTY_PLACE, TBD_LABEL
from nexusbracket.controllers.tournament import TournamentInfo
from nexusbracket.identity import LabelResolver
from nexusbracket.models import Match, Podium, Tournament


class BracketTextRenderer:
    """Formats tournament state as text.

    Parameters
    ----------
    resolver : LabelResolver
        Turns entrant ids into names.
    """

    def __init__(self, resolver: LabelResolver):
        self.resolver = resolver

    def format_info(self, info: TournamentInfo) -> str:
        lines = [
            f"{info.name} [{info.short_code}]",
            f"Status: {info.status_label}",
            f"Best of: {info.best_of}",
            f"Players/teams: {info.entrant_count}",
            f"Matches completed: {info.completed_matches}/{info.total_matches}",
            f"Current round: {info.current_round}",
        ]
        if info.bracket_url:
            lines.append(f"Bracket: {info.bracket_url}")

        if info.preview:
            lines.append("")
            lines.append("Registered:")
            lines.extend(f"  {i}. {label}" for i, label in enumerate(info.preview, start=1))
            if info.hidden_count:
                lines.append(f"  …and {info.hidden_count} more")
        else:
            lines.append("No players/teams registered yet.")
        return "\n".join(lines)

    def format_match(self, match: Match) -> str:
        first = self.resolver.label(match.entrant1)
        if match.is_bye:
            return f"{match.id}: {first} vs {BYE_LABEL} -> {first} advances"

        second = self.resolver.label(match.entrant2)
        if match.is_completed:
            return f"{match.id}: {first} vs {second} -> winner {self.resolver.label(match.winner)}"
        return f"{match.id}: {first} vs {second} ({TBD_LABEL})"

    def format_bracket(self, tournament: Tournament, matches: Sequence[Match]) -> str:
        if not matches:
            return f"{tournament.name}: no matches created yet."

        lines = [f"{tournament.name} [{tournament.short_code}] - best of {tournament.best_of}"]
        for number, round_matches in matches_by_round(matches).items():
            lines.append("")
            lines.append(f"Round {number}")
            lines.extend(f"  {self.format_match(m)}" for m in round_matches)

        if tournament.is_completed:
            lines.append("")
            lines.append(self.format_podium(compute_podium(tournament, matches)))
        return "\n".join(lines)

    def format_podium(self, podium: Podium) -> str:
        if not podium.determined:
            return "Final placements are not determined yet."

        third = (
            " / ".join(self.resolver.labels(podium.third_place))
            if podium.third_place
            else EMPTY_PLACE
        )
        runner_up = (
            self.resolver.label(podium.runner_up) if podium.runner_up else EMPTY_PLACE
        )
        return "\n".join(
            [
                "Final results",
                f"  1st: {self.resolver.label(podium.champion)}",
                f"  2nd: {runner_up}",
                f"  3rd: {third}",
            ]
        )

    @staticmethod
    def format_participants(labels: List[str]) -> str:
        """One label per line, ready to paste into a bracket site."""
        return "\n".join(labels)
