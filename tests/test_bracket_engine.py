import math
import random
from collections import Counter

import pytest

from nexusbracket.bracket import (
    advance,
    compute_podium,
    create_round,
    is_round_complete,
    make_match_id,
    seed_entrants,
)
from nexusbracket.exceptions import BracketException, EmptyRoundException
from nexusbracket.models import Match, Tournament


def _tournament(entrants=None, tournament_id="guild-1-1"):
    return Tournament(
        id=tournament_id,
        short_code="NX1234",
        guild_id="guild-1",
        name="Friday Cup",
        entrants=list(entrants or []),
    )


def _play(matches, winners):
    """Complete pending matches in order with the given winners."""
    pending = [m for m in matches if not m.is_completed]
    assert len(pending) == len(winners)
    for match, winner in zip(pending, winners):
        match.complete(winner)


def test_match_id_format():
    assert make_match_id("NX1234", 2, 3) == "NX1234-R2-M3"


def test_create_round_pairs_in_given_order():
    tournament = _tournament()
    matches = create_round(tournament, 1, ["A", "B", "C", "D"])

    assert [(m.entrant1, m.entrant2) for m in matches] == [("A", "B"), ("C", "D")]
    assert [m.id for m in matches] == ["NX1234-R1-M1", "NX1234-R1-M2"]
    assert all(m.status == "pending" for m in matches)
    assert all(m.tournament_id == tournament.id for m in matches)


@pytest.mark.parametrize("size", range(1, 10))
def test_create_round_covers_every_entrant_once(size):
    entrants = [f"p{i}" for i in range(size)]
    matches = create_round(_tournament(), 1, entrants)

    assert len(matches) == math.ceil(size / 2)
    seen = Counter()
    for match in matches:
        seen.update(match.entrants)
    assert seen == Counter(entrants)
    assert [m.sequence for m in matches] == list(range(1, len(matches) + 1))


def test_lone_entrant_gets_completed_bye():
    matches = create_round(_tournament(), 2, ["A", "B", "C"])

    bye = matches[-1]
    assert bye.is_bye
    assert bye.entrant1 == "C"
    assert bye.entrant2 is None
    assert bye.status == "completed"
    assert bye.winner == "C"
    assert bye.id == "NX1234-R2-M2"


def test_single_entrant_round_is_one_bye():
    matches = create_round(_tournament(), 1, ["A"])
    assert len(matches) == 1
    assert matches[0].is_bye and matches[0].winner == "A"


def test_empty_round_is_rejected():
    with pytest.raises(EmptyRoundException):
        create_round(_tournament(), 1, [])


def test_round_completion():
    matches = create_round(_tournament(), 1, ["A", "B", "C"])
    assert not is_round_complete(matches)
    matches[0].complete("B")
    assert is_round_complete(matches)
    assert is_round_complete([])


def test_advance_rejects_pending_round():
    tournament = _tournament()
    matches = create_round(tournament, 1, ["A", "B"])
    with pytest.raises(BracketException):
        advance(tournament, matches)


def test_four_entrants_full_bracket():
    tournament = _tournament(["A", "B", "C", "D"])
    round1 = create_round(tournament, 1, ["A", "B", "C", "D"])
    _play(round1, ["A", "C"])

    outcome = advance(tournament, round1, round1)
    assert not outcome.is_final
    assert outcome.next_entrants == ["A", "C"]

    round2 = create_round(tournament, 2, outcome.next_entrants)
    assert [(m.entrant1, m.entrant2) for m in round2] == [("A", "C")]
    _play(round2, ["A"])

    final = advance(tournament, round2, round1 + round2)
    assert final.is_final
    assert final.podium.champion == "A"
    assert final.podium.runner_up == "C"
    assert sorted(final.podium.third_place) == ["B", "D"]


def test_three_entrants_bye_advances():
    tournament = _tournament(["A", "B", "C"])
    round1 = create_round(tournament, 1, ["A", "B", "C"])
    _play(round1, ["A"])

    outcome = advance(tournament, round1, round1)
    assert outcome.next_entrants == ["A", "C"]

    round2 = create_round(tournament, 2, outcome.next_entrants)
    _play(round2, ["C"])
    podium = compute_podium(tournament, round1 + round2)
    assert podium.champion == "C"
    assert podium.runner_up == "A"
    # the bye in round 1 has no loser
    assert podium.third_place == ["B"]


def test_advance_is_idempotent():
    tournament = _tournament()
    round1 = create_round(tournament, 1, ["A", "B", "C", "D", "E"])
    _play(round1, ["B", "D"])

    first = advance(tournament, round1, round1)
    second = advance(tournament, round1, round1)
    assert first == second
    assert first.next_entrants == ["B", "D", "E"]


def test_podium_of_bye_final():
    tournament = _tournament(["A"])
    matches = create_round(tournament, 1, ["A"])
    podium = compute_podium(tournament, matches)
    assert podium.determined
    assert podium.champion == "A"
    assert podium.runner_up is None
    assert podium.third_place == []


def test_podium_undetermined_while_final_pending():
    tournament = _tournament()
    matches = create_round(tournament, 1, ["A", "B"])
    podium = compute_podium(tournament, matches)
    assert not podium.determined
    assert podium.champion is None


def test_podium_undetermined_with_several_final_matches():
    tournament = _tournament()
    matches = create_round(tournament, 1, ["A", "B", "C", "D"])
    _play(matches, ["A", "C"])
    assert not compute_podium(tournament, matches).determined


def test_podium_without_matches():
    assert compute_podium(_tournament(["A"]), []).champion == "A"
    assert not compute_podium(_tournament(["A", "B"]), []).determined


def test_podium_ignores_other_tournaments():
    tournament = _tournament(["A", "B"])
    other = _tournament(["X", "Y"], tournament_id="guild-1-2")
    foreign = create_round(other, 1, ["X", "Y"])
    _play(foreign, ["X"])
    assert not compute_podium(tournament, foreign).determined


def test_seed_entrants_returns_shuffled_copy():
    entrants = [f"p{i}" for i in range(16)]
    original = list(entrants)

    seeded = seed_entrants(entrants, random.Random(42))
    assert entrants == original
    assert sorted(seeded) == sorted(original)
    assert seeded == seed_entrants(entrants, random.Random(42))


def test_match_serialization_keeps_bye():
    match = create_round(_tournament(), 3, ["A"])[0]
    restored = Match.from_dict(match.to_dict())
    assert restored == match
    assert restored.is_bye
