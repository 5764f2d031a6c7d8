import pytest

from nexusbracket.identity import LabelResolver
from nexusbracket.models import PlayerProfile
from nexusbracket.presentation import BracketTextRenderer


@pytest.fixture
def named(machine, context):
    for entrant, ign in [("A", "Alpha"), ("B", "Bravo"), ("C", "Charlie"), ("D", "Delta")]:
        context.profiles.upsert_player(entrant, PlayerProfile(ign=ign))
    return BracketTextRenderer(LabelResolver(context.profiles))


def test_bracket_text_shows_rounds_and_byes(make_tournament, machine, guild_id, named):
    make_tournament(["A", "B", "C"])
    machine.start(guild_id)

    tournament, matches = machine.bracket(guild_id)
    text = named.format_bracket(tournament, matches)
    assert "Round 1" in text
    assert "Alpha vs Bravo (TBD)" in text
    assert "Charlie vs BYE -> Charlie advances" in text


def test_completed_bracket_lists_podium(make_tournament, machine, guild_id, named):
    tournament = make_tournament(["A", "B", "C", "D"])
    machine.start(guild_id)
    machine.report_result(f"{tournament.short_code}-R1-M1", "A")
    machine.report_result(f"{tournament.short_code}-R1-M2", "D")
    machine.report_result(f"{tournament.short_code}-R2-M1", "D")

    tournament, matches = machine.bracket(guild_id)
    text = named.format_bracket(tournament, matches)
    assert "1st: Delta" in text
    assert "2nd: Alpha" in text
    assert "3rd: Bravo / Charlie" in text


def test_podium_not_determined(make_tournament, machine, guild_id, named):
    make_tournament(["A", "B"])
    machine.start(guild_id)
    assert named.format_podium(machine.podium(guild_id)) == (
        "Final placements are not determined yet."
    )


def test_info_text(make_tournament, machine, guild_id, named):
    make_tournament(["A", "B"])
    machine.set_bracket_url(guild_id, "https://example.com/b")
    text = named.format_info(machine.info(guild_id))

    assert "Status: Registration open" in text
    assert "Matches completed: 0/0" in text
    assert "1. Alpha" in text
    assert "Bracket: https://example.com/b" in text


def test_info_text_mentions_hidden_entrants(make_tournament, machine, guild_id, named):
    make_tournament([f"user-{i}" for i in range(23)])
    assert "…and 3 more" in named.format_info(machine.info(guild_id))


def test_empty_bracket(make_tournament, machine, guild_id, named):
    make_tournament([])
    tournament, matches = machine.bracket(guild_id)
    assert "no matches created yet" in named.format_bracket(tournament, matches)
