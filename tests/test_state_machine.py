import pytest

from nexusbracket.exceptions import (
    BestOfValidationException,
    BracketUrlValidationException,
    DuplicateEntrantException,
    DuplicateResultException,
    FileSaveException,
    InvalidResultException,
    MatchNotFoundException,
    NotEnoughEntrantsException,
    ResourceUnavailableException,
    TournamentNotFoundException,
    TournamentStateException,
    ValidationException,
)
from nexusbracket.storage import BracketContext, JsonSnapshotStore


def _match_id(tournament, round_number, sequence):
    return f"{tournament.short_code}-R{round_number}-M{sequence}"


# ========== Creation and registration ==========


def test_create_tournament_opens_registration(machine, context, guild_id, state_file):
    tournament = machine.create_tournament(guild_id, "Friday Cup", 3)

    assert tournament.status == "registration"
    assert tournament.best_of == 3
    assert tournament.current_round == 1
    assert tournament.short_code.startswith("NX")
    assert 1000 <= int(tournament.short_code[2:]) <= 9999
    assert tournament.id.startswith(f"{guild_id}-")
    assert context.tournaments.get_active(guild_id) is tournament
    assert state_file.exists()


@pytest.mark.parametrize("best_of", [0, 2, -1, "abc"])
def test_create_tournament_rejects_bad_best_of(machine, context, guild_id, best_of):
    with pytest.raises(BestOfValidationException):
        machine.create_tournament(guild_id, "Friday Cup", best_of)
    assert len(context.tournaments) == 0


def test_new_tournament_replaces_active_but_keeps_history(machine, context, guild_id):
    first = machine.create_tournament(guild_id, "First", 1)
    second = machine.create_tournament(guild_id, "Second", 1)

    assert context.tournaments.get_active(guild_id) is second
    assert context.tournaments.get(first.id) is first
    assert first.short_code != second.short_code


def test_commands_without_tournament_are_rejected(machine, guild_id):
    with pytest.raises(TournamentNotFoundException):
        machine.add_entrant(guild_id, "A")
    with pytest.raises(TournamentNotFoundException):
        machine.start(guild_id)
    with pytest.raises(TournamentNotFoundException):
        machine.info(guild_id)


def test_duplicate_entrant_is_rejected(make_tournament, machine, guild_id):
    tournament = make_tournament(["A", "B"])
    with pytest.raises(DuplicateEntrantException):
        machine.add_entrant(guild_id, "A")
    assert tournament.entrants == ["A", "B"]


def test_add_player_generates_external_id(make_tournament, machine, context, guild_id):
    tournament = make_tournament([])
    entrant_id = machine.add_player(guild_id, "Shadow", whatsapp="+15551234567")

    assert entrant_id.startswith("ext_")
    assert tournament.entrants == [entrant_id]
    assert context.profiles.player(entrant_id).ign == "Shadow"
    assert machine.resolver.label(entrant_id) == "Shadow"


def test_add_player_with_user_id(make_tournament, machine, context, guild_id):
    make_tournament([])
    entrant_id = machine.add_player(guild_id, "Shadow", user_id="user-9")
    assert entrant_id == "user-9"
    assert context.profiles.player("user-9").whatsapp == "Not provided"


def test_add_player_duplicate_leaves_profile_alone(make_tournament, machine, context, guild_id):
    make_tournament([])
    machine.add_player(guild_id, "Shadow", user_id="user-9")
    with pytest.raises(DuplicateEntrantException):
        machine.add_player(guild_id, "Impostor", user_id="user-9")
    assert context.profiles.player("user-9").ign == "Shadow"


# ========== Start ==========


@pytest.mark.parametrize("entrants", [[], ["A"]])
def test_start_needs_two_entrants(make_tournament, machine, context, guild_id, entrants):
    tournament = make_tournament(entrants)
    with pytest.raises(NotEnoughEntrantsException):
        machine.start(guild_id)
    assert tournament.status == "registration"
    assert tournament.match_ids == []
    assert len(context.matches) == 0


def test_start_only_once(make_tournament, machine, guild_id):
    make_tournament(["A", "B"])
    machine.start(guild_id)
    with pytest.raises(TournamentStateException):
        machine.start(guild_id)


def test_registration_closes_on_start(make_tournament, machine, guild_id):
    make_tournament(["A", "B"])
    machine.start(guild_id)
    with pytest.raises(TournamentStateException):
        machine.add_entrant(guild_id, "C")


def test_start_seeds_a_copy(make_tournament, machine, guild_id):
    tournament = make_tournament(["A", "B", "C", "D"])
    matches = machine.start(guild_id)

    assert tournament.status == "running"
    assert tournament.entrants == ["A", "B", "C", "D"]
    assert [(m.entrant1, m.entrant2) for m in matches] == [("A", "B"), ("C", "D")]
    assert tournament.match_ids == [m.id for m in matches]


def test_start_failure_changes_nothing(make_tournament, machine, context, guild_id, space_host):
    tournament = make_tournament(["A", "B", "C"])
    space_host.fail = True

    with pytest.raises(ResourceUnavailableException):
        machine.start(guild_id)
    assert tournament.status == "registration"
    assert tournament.match_ids == []
    assert tournament.current_round == 1
    assert len(context.matches) == 0


# ========== Results and progression ==========


def test_four_entrants_to_podium(make_tournament, machine, guild_id):
    tournament = make_tournament(["A", "B", "C", "D"])
    machine.start(guild_id)

    first = machine.report_result(_match_id(tournament, 1, 1), "A")
    assert first.progress.round_complete is False
    second = machine.report_result(_match_id(tournament, 1, 2), "C")
    assert second.progress.next_round == 2
    assert tournament.current_round == 2

    final = machine.get_match(_match_id(tournament, 2, 1))
    assert (final.entrant1, final.entrant2) == ("A", "C")

    report = machine.report_result(final.id, "A")
    assert tournament.status == "completed"
    assert report.progress.podium.champion == "A"
    assert tournament.podium.runner_up == "C"
    assert sorted(tournament.podium.third_place) == ["B", "D"]
    assert machine.podium(guild_id) == tournament.podium


def test_three_entrants_bye_then_final(make_tournament, machine, guild_id, announcer):
    tournament = make_tournament(["A", "B", "C"])
    matches = machine.start(guild_id)

    assert matches[0].status == "pending"
    assert matches[1].is_bye and matches[1].winner == "C"
    assert any("bye in Round 1" in m for m in announcer.messages)

    machine.report_result(matches[0].id, "A")
    final = machine.get_match(_match_id(tournament, 2, 1))
    assert (final.entrant1, final.entrant2) == ("A", "C")
    assert any(m.startswith("Round 2 is starting") for m in announcer.messages)


def test_winner_must_have_played(make_tournament, machine, guild_id):
    tournament = make_tournament(["A", "B", "C", "D"])
    machine.start(guild_id)
    match_id = _match_id(tournament, 1, 1)

    with pytest.raises(InvalidResultException):
        machine.report_result(match_id, "C")
    match = machine.get_match(match_id)
    assert match.status == "pending"
    assert match.winner is None


def test_result_reported_once(make_tournament, machine, guild_id):
    tournament = make_tournament(["A", "B", "C", "D"])
    machine.start(guild_id)
    match_id = _match_id(tournament, 1, 1)

    machine.report_result(match_id, "A")
    with pytest.raises(DuplicateResultException):
        machine.report_result(match_id, "B")
    assert machine.get_match(match_id).winner == "A"


def test_unknown_match(make_tournament, machine, guild_id):
    make_tournament(["A", "B"])
    machine.start(guild_id)
    with pytest.raises(MatchNotFoundException):
        machine.report_result("NX0000-R9-M9", "A")


def test_report_in_match_space(make_tournament, machine, guild_id):
    tournament = make_tournament(["A", "B"])
    matches = machine.start(guild_id)
    assert matches[0].space_id == f"chan-{matches[0].id}"

    report = machine.report_result_in_space(matches[0].space_id, "B")
    assert report.match.winner == "B"
    assert tournament.status == "completed"

    with pytest.raises(MatchNotFoundException):
        machine.report_result_in_space("lobby", "B")


def test_round_failure_keeps_state_and_retries(
    make_tournament, machine, guild_id, space_host
):
    tournament = make_tournament(["A", "B", "C", "D"])
    machine.start(guild_id)
    space_host.fail = True

    machine.report_result(_match_id(tournament, 1, 1), "A")
    report = machine.report_result(_match_id(tournament, 1, 2), "D")
    assert report.progress.error_message == "Tournament category missing."
    assert report.match.winner == "D"
    assert tournament.current_round == 1
    assert len(tournament.match_ids) == 2

    space_host.fail = False
    progress = machine.check_round(guild_id)
    assert progress.next_round == 2
    assert tournament.current_round == 2
    assert len(tournament.match_ids) == 3

    # nothing left to do until the final is played
    assert machine.check_round(guild_id).round_complete is False


def test_persistence_failure_is_not_fatal(make_tournament, machine, context, guild_id, monkeypatch):
    tournament = make_tournament(["A"])

    def broken_save(snapshot):
        raise FileSaveException("disk full")

    monkeypatch.setattr(context.snapshot_store, "save", broken_save)
    machine.add_entrant(guild_id, "B")
    assert tournament.entrants == ["A", "B"]


def test_state_survives_restart(make_tournament, machine, guild_id, state_file):
    tournament = make_tournament(["A", "B", "C"])
    machine.start(guild_id)
    machine.report_result(_match_id(tournament, 1, 1), "B")

    restored = BracketContext(JsonSnapshotStore(state_file))
    assert restored.restore()
    again = restored.tournaments.get_active(guild_id)
    assert again.to_dict() == tournament.to_dict()
    assert [m.to_dict() for m in restored.matches.for_tournament(again)] == [
        m.to_dict() for m in machine.tournament_matches(tournament)
    ]


def test_announcer_failure_is_not_fatal(make_tournament, machine, guild_id, announcer, monkeypatch):
    def broken(tournament, message):
        raise RuntimeError("gateway down")

    monkeypatch.setattr(announcer, "announce", broken)
    tournament = make_tournament(["A", "B"])
    machine.start(guild_id)
    assert tournament.status == "running"


# ========== Queries and extras ==========


def test_info_preview(make_tournament, machine, guild_id):
    make_tournament([f"user-{i}" for i in range(25)])
    info = machine.info(guild_id)

    assert info.entrant_count == 25
    assert len(info.preview) == 20
    assert info.hidden_count == 5
    assert info.status == "registration"
    assert (info.completed_matches, info.total_matches) == (0, 0)


def test_info_counts_matches(make_tournament, machine, guild_id):
    make_tournament(["A", "B", "C"])
    machine.start(guild_id)
    info = machine.info(guild_id)
    assert (info.completed_matches, info.total_matches) == (1, 2)
    assert info.hidden_count == 0


def test_bracket_link(make_tournament, machine, announcer, guild_id):
    tournament = make_tournament([])
    with pytest.raises(BracketUrlValidationException):
        machine.set_bracket_url(guild_id, "ftp://example.com")
    assert tournament.bracket_url is None

    machine.set_bracket_url(guild_id, " https://challonge.com/nexus ")
    assert tournament.bracket_url == "https://challonge.com/nexus"
    assert announcer.messages[-1] == (
        "Bracket link updated for Friday Cup: https://challonge.com/nexus"
    )


def test_participants_export(make_tournament, machine, guild_id):
    make_tournament([])
    machine.register_team_profile(guild_id, "leader-1", "Night Owls", "Owl")
    machine.add_entrant(guild_id, "leader-1")
    machine.add_player(guild_id, "Shadow", user_id="user-2")
    machine.add_entrant(guild_id, "user-3")

    assert machine.participants(guild_id) == ["Night Owls", "Shadow", "ID user-3"]


def test_team_application_accepted(make_tournament, machine, guild_id):
    tournament = make_tournament([])
    machine.setup_entry_portal(guild_id, "5v5", "apply-here", admin_space_id="review")
    machine.register_team_profile(
        guild_id, "leader-1", "Night Owls", "Owl", players_text="a, b, c, d"
    )

    decision = machine.decide_application(guild_id, "5v5", "leader-1", accepted=True)
    assert decision.added
    assert tournament.entrants == ["leader-1"]

    again = machine.decide_application(guild_id, "5v5", "leader-1", accepted=True)
    assert not again.added
    assert tournament.entrants == ["leader-1"]


def test_application_rejected_or_closed(make_tournament, machine, guild_id):
    tournament = make_tournament(["A", "B"])
    machine.register_player_profile(guild_id, "user-5", "Late")

    rejected = machine.decide_application(guild_id, "1v1", "user-5", accepted=False)
    assert not rejected.added

    machine.start(guild_id)
    closed = machine.decide_application(guild_id, "1v1", "user-5", accepted=True)
    assert not closed.added
    assert "closed" in closed.reason
    assert "user-5" not in tournament.entrants


def test_application_without_profile(make_tournament, machine, guild_id):
    tournament = make_tournament([])
    decision = machine.decide_application(guild_id, "1v1", "stranger", accepted=True)
    assert not decision.added
    assert tournament.entrants == []


# ========== Entry portals ==========


def test_entry_portal_posts_instructions_and_rules(machine, announcer, guild_id):
    portal = machine.setup_entry_portal(guild_id, "1v1", "public-chan", start_time="20:00")

    assert portal.admin_space_id == "public-chan"
    assert len(announcer.posts) == 1
    posted_guild, space_id, message = announcer.posts[0]
    assert (posted_guild, space_id) == (guild_id, "public-chan")
    assert "1V1 Applications" in message
    assert "Tournament start time: 20:00" in message
    assert "1v1 Rules" in message


def test_player_application_goes_to_review_space(machine, announcer, guild_id):
    machine.setup_entry_portal(guild_id, "1v1", "public-chan", admin_space_id="admin-chan")
    machine.register_player_profile(guild_id, "u1", "Alice")

    posted_guild, space_id, message = announcer.posts[-1]
    assert (posted_guild, space_id) == (guild_id, "admin-chan")
    assert "New 1v1 Application" in message
    assert "IGN: Alice" in message
    assert "WhatsApp: Not provided" in message


def test_team_application_uses_public_space_by_default(machine, announcer, guild_id):
    machine.setup_entry_portal(guild_id, "5v5", "teams")
    machine.register_team_profile(
        guild_id, "leader-1", "Night Owls", "Owl", players_text="a\nb"
    )

    posted_guild, space_id, message = announcer.posts[-1]
    assert space_id == "teams"
    assert "Team name: Night Owls" in message
    assert "5v5 Team Rules" in announcer.posts[0][2]


def test_application_without_portal_is_only_stored(machine, announcer, context, guild_id):
    machine.setup_entry_portal(guild_id, "5v5", "teams")
    machine.register_player_profile(guild_id, "u1", "Alice")

    assert len(announcer.posts) == 1
    assert context.profiles.player("u1").ign == "Alice"


def test_entry_portal_rejects_unknown_mode(machine, announcer, guild_id):
    with pytest.raises(ValidationException):
        machine.setup_entry_portal(guild_id, "3v3", "public-chan")
    assert announcer.posts == []
