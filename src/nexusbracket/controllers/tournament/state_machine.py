"""Tournament lifecycle: registration -> running -> completed.

The state machine is the only writer of tournament and match state. It calls
the pure bracket engine, commits the results to the repositories and writes
a snapshot after every accepted command.
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
from typing import Callable, List, Optional, Tuple

from nexusbracket.bracket import advance, compute_podium, create_round, is_round_complete
from nexusbracket.constants import (
    ENTRY_INSTRUCTIONS,
    ENTRY_RULES,
    EXTERNAL_ID_PREFIX,
    EXTERNAL_ID_RANDOM_MAX,
    INFO_PREVIEW_LIMIT,
    MIN_ENTRANTS_TO_START,
    MODE_SOLO,
    MODE_TEAM,
    NOT_PROVIDED,
    SHORT_CODE_ATTEMPTS,
    SHORT_CODE_MAX,
    SHORT_CODE_MIN,
    SHORT_CODE_PREFIX,
    STATUS_COMPLETED,
    STATUS_REGISTRATION,
    STATUS_RUNNING,
)
from nexusbracket.controllers.tournament.collaborators import (
    Announcer,
    LoggingAnnouncer,
    MatchSpaceHost,
    NullMatchSpaceHost,
)
from nexusbracket.controllers.tournament.entrant_registry import EntrantRegistry
from nexusbracket.exceptions import (
    DuplicateResultException,
    InvalidResultException,
    MatchNotFoundException,
    NotEnoughEntrantsException,
    ResourceUnavailableException,
    TournamentNotFoundException,
    TournamentStateException,
)
from nexusbracket.identity import LabelResolver
from nexusbracket.models import EntryPortal, Match, PlayerProfile, Podium, TeamProfile, Tournament
from nexusbracket.storage import BracketContext
from nexusbracket.utils import epoch_millis, setup_logger
from nexusbracket.utils.validation import (
    validate_best_of_strict,
    validate_bracket_url_strict,
    validate_entry_mode_strict,
    validate_name_strict,
)

logger = setup_logger(__name__)


@dataclass
class RoundProgress:
    """What the round-completion check did.

    Attributes
    ----------
    round_complete : bool
        Every match of the current round is completed.
    next_round : int or None
        Number of the round that was opened, if any.
    podium : Podium or None
        Set when the tournament just completed.
    error_message : str or None
        Set when the next round could not be opened; retry with
        ``check_round``.
    """

    round_complete: bool = False
    next_round: Optional[int] = None
    podium: Optional[Podium] = None
    error_message: Optional[str] = None


@dataclass
class ResultReport:
    """Outcome of an accepted match result."""

    match: Match
    tournament: Tournament
    progress: RoundProgress = field(default_factory=RoundProgress)


@dataclass
class TournamentInfo:
    """Summary of a tournament for display."""

    name: str
    short_code: str
    status: str
    status_label: str
    best_of: int
    entrant_count: int
    completed_matches: int
    total_matches: int
    current_round: int
    preview: List[str] = field(default_factory=list)
    hidden_count: int = 0
    bracket_url: Optional[str] = None


@dataclass
class ApplicationDecision:
    """Outcome of reviewing an application."""

    applicant_id: str
    accepted: bool
    added: bool = False
    reason: Optional[str] = None


class TournamentStateMachine:
    """Sequences the bracket engine and enforces legal commands.

    This class is responsible for:
    - Creating tournaments and registering entrants
    - Starting the bracket with one uniform shuffle
    - Accepting match results and advancing rounds
    - Recording the podium when the last match is decided
    - Persisting a snapshot after every accepted command

    Rejected commands raise a ``PreconditionException`` subclass and change
    nothing.
    """

    def __init__(
        self,
        context: BracketContext,
        resolver: Optional[LabelResolver] = None,
        space_host: Optional[MatchSpaceHost] = None,
        announcer: Optional[Announcer] = None,
        rng: Optional[random.Random] = None,
        short_code_prefix: str = SHORT_CODE_PREFIX,
        info_preview_limit: int = INFO_PREVIEW_LIMIT,
        clock: Callable[[], int] = epoch_millis,
    ):
        """Initialize the state machine.

        Args:
            context: Repositories and snapshot store
            resolver: Label resolver for announcements (built from the
                context's profiles when omitted)
            space_host: Creates a place per match; defaults to none
            announcer: Publishes messages; defaults to the log
            rng: Random source for seeding and codes
            short_code_prefix: Prefix of tournament short codes
            info_preview_limit: Entrants listed by ``info``
            clock: Epoch milliseconds, used for ids
        """
        self.context = context
        self.resolver = resolver or LabelResolver(context.profiles)
        self.space_host = space_host or NullMatchSpaceHost()
        self.announcer = announcer or LoggingAnnouncer()
        self.rng = rng or random.Random()
        self.short_code_prefix = short_code_prefix
        self.info_preview_limit = info_preview_limit
        self.clock = clock

    # ========== Lookups ==========

    def get_tournament(self, guild_id: str) -> Tournament:
        """Active tournament of ``guild_id``.

        Raises:
            TournamentNotFoundException: If the guild has none
        """
        tournament = self.context.tournaments.get_active(guild_id)
        if tournament is None:
            raise TournamentNotFoundException(
                "There is no tournament in this server yet. Create one first."
            )
        return tournament

    def get_match(self, match_id: str) -> Match:
        match = self.context.matches.get(match_id)
        if match is None:
            raise MatchNotFoundException(f"Match {match_id} not found.")
        return match

    def tournament_matches(self, tournament: Tournament) -> List[Match]:
        return self.context.matches.for_tournament(tournament)

    def bracket(self, guild_id: str) -> Tuple[Tournament, List[Match]]:
        """Tournament and all of its matches, in creation order."""
        tournament = self.get_tournament(guild_id)
        return tournament, self.tournament_matches(tournament)

    def podium(self, guild_id: str) -> Podium:
        tournament, matches = self.bracket(guild_id)
        return compute_podium(tournament, matches)

    # ========== Creation and registration ==========

    def create_tournament(self, guild_id: str, name: str, best_of: int) -> Tournament:
        """Create a tournament and make it the guild's active one.

        Args:
            guild_id: Community the tournament belongs to
            name: Display name
            best_of: Positive odd number of games per match

        Returns:
            The new tournament, in registration

        Raises:
            ValidationException: If name or best-of is invalid
        """
        name = validate_name_strict(name, "Tournament name")
        best_of = validate_best_of_strict(best_of)

        previous = self.context.tournaments.get_active(guild_id)
        tournament = Tournament(
            id=self._new_tournament_id(guild_id),
            short_code=self._new_short_code(),
            guild_id=guild_id,
            name=name,
            best_of=best_of,
            status=STATUS_REGISTRATION,
            created_at=self.clock(),
        )
        self.context.tournaments.upsert(tournament)
        self.context.tournaments.set_active(guild_id, tournament.id)
        if previous is not None:
            logger.info(
                f"{previous.short_code} ({previous.status}) is no longer active in {guild_id}"
            )
        logger.info(
            f"Created tournament {tournament.short_code} '{name}' (best of {best_of}) in {guild_id}"
        )

        self._announce(
            tournament,
            f"Tournament created: {name} (code {tournament.short_code}, best of {best_of}). "
            f"Registration is open.",
        )
        self.context.persist()
        return tournament

    def add_entrant(self, guild_id: str, entrant_id: str) -> Tournament:
        """Register an entrant in the guild's active tournament.

        Raises:
            TournamentNotFoundException: If the guild has no tournament
            TournamentStateException: If registration is closed
            DuplicateEntrantException: If already registered
        """
        tournament = self.get_tournament(guild_id)
        EntrantRegistry(tournament).add(entrant_id)
        self.context.tournaments.upsert(tournament)
        self._announce(
            tournament,
            f"{self.resolver.label(entrant_id)} joined {tournament.name} "
            f"({len(tournament.entrants)} registered).",
        )
        self.context.persist()
        return tournament

    def add_player(
        self,
        guild_id: str,
        ign: str,
        user_id: Optional[str] = None,
        whatsapp: Optional[str] = None,
    ) -> str:
        """Register a player by in-game name.

        Players without a platform account get a generated external id.

        Returns:
            The entrant id used
        """
        ign = validate_name_strict(ign, "IGN")
        tournament = self.get_tournament(guild_id)
        entrant_id = user_id or self._new_external_id()
        EntrantRegistry(tournament).check_can_add(entrant_id)

        self.context.profiles.upsert_player(
            entrant_id, PlayerProfile(ign=ign, whatsapp=whatsapp or NOT_PROVIDED)
        )
        self.add_entrant(guild_id, entrant_id)
        return entrant_id

    # ========== Lifecycle ==========

    def start(self, guild_id: str) -> List[Match]:
        """Seed the roster and open round 1.

        Returns:
            Matches of round 1

        Raises:
            TournamentStateException: If not in registration
            NotEnoughEntrantsException: If fewer than two entrants
            ResourceUnavailableException: If round 1 cannot be hosted; the
                tournament stays in registration
        """
        tournament = self.get_tournament(guild_id)
        if not tournament.is_registration:
            raise TournamentStateException(
                f"This tournament is currently {tournament.status}. "
                f"You can only start it while status is {STATUS_REGISTRATION}."
            )
        registry = EntrantRegistry(tournament)
        if len(registry) < MIN_ENTRANTS_TO_START:
            raise NotEnoughEntrantsException(
                f"You need at least {MIN_ENTRANTS_TO_START} players/teams to start the tournament."
            )

        seeded = registry.seeded(self.rng)
        matches = self._open_round(tournament, 1, seeded, reset=True)
        tournament.status = STATUS_RUNNING
        self.context.tournaments.upsert(tournament)
        logger.info(
            f"Started {tournament.short_code} with {len(seeded)} entrants, "
            f"{len(matches)} matches in round 1"
        )

        self._announce(
            tournament,
            f"{tournament.name} has started! Round 1: {len(matches)} matches.",
        )
        self._announce_byes(tournament, matches)
        self.context.persist()
        return matches

    def report_result(self, match_id: str, winner_id: str) -> ResultReport:
        """Record the winner of a pending match and run the round check.

        Raises:
            MatchNotFoundException: If the match does not exist
            TournamentStateException: If the tournament is not running
            DuplicateResultException: If the match is already completed
            InvalidResultException: If the winner did not play the match
        """
        match = self.get_match(match_id)
        tournament = self.context.tournaments.get(match.tournament_id)
        if tournament is None:
            raise TournamentNotFoundException(
                f"Tournament {match.tournament_id} of match {match_id} not found."
            )
        if not tournament.is_running:
            raise TournamentStateException(
                f"This tournament is currently {tournament.status}; results are closed."
            )
        if match.is_completed:
            raise DuplicateResultException("This match is already completed.")
        if not match.has_entrant(winner_id):
            raise InvalidResultException(
                "The selected winner is not one of the players/teams in this match."
            )

        match.complete(winner_id)
        self.context.matches.upsert(match)
        logger.info(f"{match.id}: winner {winner_id}")
        self._announce(
            tournament,
            f"{self.resolver.label(winner_id)} wins {match.id}.",
        )

        progress = self._check_round(tournament)
        self.context.persist()
        return ResultReport(match=match, tournament=tournament, progress=progress)

    def report_result_in_space(self, space_id: str, winner_id: str) -> ResultReport:
        """Report a result from the place hosting the match."""
        match = self.context.matches.find_by_space(space_id)
        if match is None:
            raise MatchNotFoundException(
                "This command must be used inside a match channel."
            )
        return self.report_result(match.id, winner_id)

    def check_round(self, guild_id: str) -> RoundProgress:
        """Run the round-completion check again.

        Used after the next round could not be opened.
        """
        tournament = self.get_tournament(guild_id)
        if not tournament.is_running:
            raise TournamentStateException(
                f"This tournament is currently {tournament.status}; there is no round to check."
            )
        progress = self._check_round(tournament)
        self.context.persist()
        return progress

    # ========== Queries ==========

    def info(self, guild_id: str) -> TournamentInfo:
        tournament, matches = self.bracket(guild_id)
        preview_ids = tournament.entrants[: self.info_preview_limit]
        return TournamentInfo(
            name=tournament.name,
            short_code=tournament.short_code,
            status=tournament.status,
            status_label=tournament.status_label,
            best_of=tournament.best_of,
            entrant_count=len(tournament.entrants),
            completed_matches=sum(1 for m in matches if m.is_completed),
            total_matches=len(matches),
            current_round=tournament.current_round,
            preview=self.resolver.labels(preview_ids),
            hidden_count=max(0, len(tournament.entrants) - len(preview_ids)),
            bracket_url=tournament.bracket_url,
        )

    def participants(self, guild_id: str) -> List[str]:
        """One display label per entrant, in registration order."""
        tournament = self.get_tournament(guild_id)
        return [self.resolver.export_label(eid) for eid in tournament.entrants]

    def set_bracket_url(self, guild_id: str, url: str) -> Tournament:
        tournament = self.get_tournament(guild_id)
        tournament.bracket_url = validate_bracket_url_strict(url)
        self.context.tournaments.upsert(tournament)
        logger.info(f"Bracket link for {tournament.short_code}: {tournament.bracket_url}")
        self._announce(
            tournament,
            f"Bracket link updated for {tournament.name}: {tournament.bracket_url}",
        )
        self.context.persist()
        return tournament

    # ========== Applications ==========

    def register_player_profile(
        self,
        guild_id: str,
        entrant_id: str,
        ign: str,
        whatsapp: Optional[str] = None,
    ) -> PlayerProfile:
        """Store a 1v1 application and forward it for review."""
        profile = PlayerProfile(
            ign=validate_name_strict(ign, "IGN"), whatsapp=whatsapp or NOT_PROVIDED
        )
        self.context.profiles.upsert_player(entrant_id, profile)
        self._submit_application(
            guild_id,
            MODE_SOLO,
            "\n".join(
                [
                    "New 1v1 Application",
                    f"Applicant: {entrant_id}",
                    f"IGN: {profile.ign}",
                    f"WhatsApp: {profile.whatsapp}",
                ]
            ),
        )
        self.context.persist()
        return profile

    def register_team_profile(
        self,
        guild_id: str,
        leader_id: str,
        team_name: str,
        leader_ign: str,
        leader_whatsapp: Optional[str] = None,
        players_text: str = "",
    ) -> TeamProfile:
        """Store a 5v5 application under the team leader and forward it."""
        profile = TeamProfile(
            team_name=validate_name_strict(team_name, "Team name"),
            leader_ign=validate_name_strict(leader_ign, "Leader IGN"),
            leader_whatsapp=leader_whatsapp or NOT_PROVIDED,
            players_text=players_text,
        )
        self.context.profiles.upsert_team(leader_id, profile)
        self._submit_application(
            guild_id,
            MODE_TEAM,
            "\n".join(
                [
                    "New 5v5 Team Application",
                    f"Team leader: {leader_id}",
                    f"Team name: {profile.team_name}",
                    f"Leader IGN: {profile.leader_ign}",
                    f"Leader WhatsApp: {profile.leader_whatsapp}",
                    f"Players: {profile.players_text or NOT_PROVIDED}",
                ]
            ),
        )
        self.context.persist()
        return profile

    def setup_entry_portal(
        self,
        guild_id: str,
        mode: str,
        public_space_id: str,
        admin_space_id: Optional[str] = None,
        start_time: Optional[str] = None,
    ) -> EntryPortal:
        """Open applications for ``mode`` in ``public_space_id``.

        Applications are reviewed in ``admin_space_id``, which defaults to
        the public space. The instructions and rules of the mode are posted
        to the public space.
        """
        mode = validate_entry_mode_strict(mode)
        portal = EntryPortal(
            guild_id=guild_id,
            mode=mode,
            public_space_id=public_space_id,
            admin_space_id=admin_space_id or public_space_id,
            start_time=start_time,
        )
        self.context.portals.upsert(portal)
        logger.info(
            f"Entry portal {mode} set up in {guild_id}: public {portal.public_space_id}, "
            f"review {portal.admin_space_id}"
        )

        lines = [f"{mode.upper()} Applications", ENTRY_INSTRUCTIONS[mode]]
        if start_time:
            lines.append(f"Tournament start time: {start_time}")
        lines.append(ENTRY_RULES[mode])
        self._post(guild_id, portal.public_space_id, "\n\n".join(lines))

        self.context.persist()
        return portal

    def decide_application(
        self, guild_id: str, mode: str, applicant_id: str, accepted: bool
    ) -> ApplicationDecision:
        """Accept or reject an application.

        An accepted applicant (a player for 1v1, the team leader for 5v5)
        joins the active tournament when registration is open and they are
        not already on the roster. Otherwise the roster is left alone.
        """
        mode = validate_entry_mode_strict(mode)
        decision = ApplicationDecision(applicant_id=applicant_id, accepted=accepted)
        if not accepted:
            decision.reason = "Application rejected."
            logger.info(f"Rejected {mode} application of {applicant_id} in {guild_id}")
            return decision

        profile = (
            self.context.profiles.player(applicant_id)
            if mode == MODE_SOLO
            else self.context.profiles.team(applicant_id)
        )
        if profile is None:
            decision.reason = "No application on file for this applicant."
            return decision

        tournament = self.context.tournaments.get_active(guild_id)
        if tournament is None:
            decision.reason = "There is no tournament to join."
        elif not tournament.is_registration:
            decision.reason = f"Registration is closed ({tournament.status})."
        elif tournament.has_entrant(applicant_id):
            decision.reason = "Already registered."
        else:
            self.add_entrant(guild_id, applicant_id)
            decision.added = True

        logger.info(
            f"Accepted {mode} application of {applicant_id} in {guild_id} "
            f"(added={decision.added})"
        )
        return decision

    # ========== Internals ==========

    def _check_round(self, tournament: Tournament) -> RoundProgress:
        """Advance the tournament if its current round is fully decided."""
        round_matches = self.context.matches.for_round(tournament, tournament.current_round)
        if not round_matches or not is_round_complete(round_matches):
            return RoundProgress(round_complete=False)

        outcome = advance(tournament, round_matches, self.tournament_matches(tournament))
        if outcome.is_final:
            tournament.status = STATUS_COMPLETED
            tournament.podium = outcome.podium
            self.context.tournaments.upsert(tournament)
            logger.info(
                f"{tournament.short_code} completed, champion {outcome.podium.champion}"
            )
            self._announce(
                tournament,
                f"{tournament.name} is complete! "
                f"Champion: {self.resolver.label(outcome.podium.champion)}",
            )
            return RoundProgress(round_complete=True, podium=outcome.podium)

        next_round = tournament.current_round + 1
        try:
            matches = self._open_round(tournament, next_round, outcome.next_entrants)
        except ResourceUnavailableException as e:
            logger.exception(f"Could not open round {next_round} of {tournament.short_code}")
            self._announce(
                tournament,
                f"Round {next_round} could not be set up: {e}. Retry with check-round.",
            )
            return RoundProgress(round_complete=True, error_message=str(e))

        qualified = ", ".join(self.resolver.labels(outcome.next_entrants))
        self._announce(
            tournament,
            f"Round {next_round} is starting. Qualified players/teams: {qualified}",
        )
        self._announce_byes(tournament, matches)
        return RoundProgress(round_complete=True, next_round=next_round)

    def _open_round(
        self,
        tournament: Tournament,
        round_number: int,
        entrants: List[str],
        reset: bool = False,
    ) -> List[Match]:
        """Create, host and commit a round.

        Nothing is stored until the space host succeeded, so a
        ``ResourceUnavailableException`` leaves the tournament untouched.
        """
        matches = create_round(tournament, round_number, entrants)
        spaces = self.space_host.prepare_round(tournament, round_number, matches)
        for match in matches:
            match.space_id = spaces.get(match.id)

        self.context.matches.upsert_many(matches)
        match_ids = [m.id for m in matches]
        if reset:
            tournament.match_ids = match_ids
        else:
            tournament.match_ids.extend(match_ids)
        tournament.current_round = round_number
        self.context.tournaments.upsert(tournament)
        return matches

    def _announce_byes(self, tournament: Tournament, matches: List[Match]) -> None:
        for match in matches:
            if match.is_bye:
                self._announce(
                    tournament,
                    f"{self.resolver.label(match.entrant1)} gets a bye in Round "
                    f"{match.round} and automatically advances.",
                )

    def _announce(self, tournament: Tournament, message: str) -> None:
        try:
            self.announcer.announce(tournament, message)
        except Exception:
            logger.exception(f"Failed to deliver announcement for {tournament.short_code}")

    def _post(self, guild_id: str, space_id: str, message: str) -> None:
        try:
            self.announcer.post(guild_id, space_id, message)
        except Exception:
            logger.exception(f"Failed to post to {space_id} in {guild_id}")

    def _submit_application(self, guild_id: str, mode: str, summary: str) -> None:
        """Send an application summary to the portal's review space."""
        portal = self.context.portals.get(guild_id, mode)
        if portal is None:
            logger.warning(f"No {mode} entry portal in {guild_id}; application not forwarded")
            return
        self._post(guild_id, portal.admin_space_id or portal.public_space_id, summary)

    def _new_short_code(self) -> str:
        for _ in range(SHORT_CODE_ATTEMPTS):
            code = f"{self.short_code_prefix}{self.rng.randint(SHORT_CODE_MIN, SHORT_CODE_MAX)}"
            if not self.context.tournaments.short_code_taken(code):
                return code
        # Every random pick collided; fall back to the first free code.
        for number in range(SHORT_CODE_MIN, SHORT_CODE_MAX + 1):
            code = f"{self.short_code_prefix}{number}"
            if not self.context.tournaments.short_code_taken(code):
                return code
        raise TournamentStateException("No tournament codes left.")

    def _new_tournament_id(self, guild_id: str) -> str:
        base = f"{guild_id}-{self.clock()}"
        tournament_id = base
        suffix = 1
        while self.context.tournaments.get(tournament_id) is not None:
            suffix += 1
            tournament_id = f"{base}-{suffix}"
        return tournament_id

    def _new_external_id(self) -> str:
        return (
            f"{EXTERNAL_ID_PREFIX}_{self.clock()}_"
            f"{self.rng.randint(0, EXTERNAL_ID_RANDOM_MAX)}"
        )
