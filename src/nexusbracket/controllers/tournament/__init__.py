"""Tournament controllers for Nexus Bracket."""

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

from nexusbracket.controllers.tournament.collaborators import (
    Announcer,
    LoggingAnnouncer,
    MatchSpaceHost,
    NullMatchSpaceHost,
)
from nexusbracket.controllers.tournament.entrant_registry import EntrantRegistry
from nexusbracket.controllers.tournament.state_machine import (
    ApplicationDecision,
    ResultReport,
    RoundProgress,
    TournamentInfo,
    TournamentStateMachine,
)

__all__ = [
    "Announcer",
    "ApplicationDecision",
    "EntrantRegistry",
    "LoggingAnnouncer",
    "MatchSpaceHost",
    "NullMatchSpaceHost",
    "ResultReport",
    "RoundProgress",
    "TournamentInfo",
    "TournamentStateMachine",
]
