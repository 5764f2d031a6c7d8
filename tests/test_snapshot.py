import json

import pytest

from nexusbracket.bracket import create_round
from nexusbracket.exceptions import FileLoadException, FileSaveException
from nexusbracket.models import EntryPortal, PlayerProfile, Podium, TeamProfile, Tournament
from nexusbracket.storage import BracketContext, JsonSnapshotStore, Snapshot


def _populated_context(path):
    context = BracketContext(JsonSnapshotStore(path))
    tournament = Tournament(
        id="guild-1-1700000000000",
        short_code="NX4821",
        guild_id="guild-1",
        name="Friday Cup",
        best_of=3,
        status="completed",
        entrants=["A", "B", "C"],
        current_round=2,
        bracket_url="https://example.com/bracket",
        podium=Podium(champion="C", runner_up="A", third_place=["B"]),
        created_at=1700000000000,
    )
    round1 = create_round(tournament, 1, ["A", "B", "C"])
    round1[0].complete("A")
    round1[0].space_id = "chan-1"
    round2 = create_round(tournament, 2, ["A", "C"])
    round2[0].complete("C")
    tournament.match_ids = [m.id for m in round1 + round2]

    context.tournaments.upsert(tournament)
    context.tournaments.set_active("guild-1", tournament.id)
    context.matches.upsert_many(round1 + round2)
    context.profiles.upsert_player("A", PlayerProfile(ign="Alpha", whatsapp="+1555"))
    context.profiles.upsert_team("C", TeamProfile(team_name="Crows", leader_ign="Cee"))
    context.portals.upsert(EntryPortal(guild_id="guild-1", mode="1v1", public_space_id="apply"))
    return context


def test_round_trip_is_lossless(tmp_path):
    path = tmp_path / "state.json"
    original = _populated_context(path)
    assert original.persist()

    restored = BracketContext(JsonSnapshotStore(path))
    assert restored.restore()
    assert restored.snapshot().to_dict() == original.snapshot().to_dict()
    assert restored.matches.find_by_space("chan-1").id == "NX4821-R1-M1"
    assert restored.tournaments.get_active("guild-1").podium.champion == "C"


def test_file_layout(tmp_path):
    path = tmp_path / "state.json"
    _populated_context(path).persist()

    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data["tournaments"]) == {"guild-1-1700000000000"}
    assert data["active_tournaments"] == {"guild-1": "guild-1-1700000000000"}
    assert data["match_spaces"] == {"chan-1": "NX4821-R1-M1"}
    assert data["matches"]["NX4821-R1-M2"]["entrant2"] is None
    assert data["player_profiles"]["A"]["ign"] == "Alpha"
    assert data["entry_portals"]["guild-1:1v1"]["public_space_id"] == "apply"


def test_save_leaves_no_temp_files(tmp_path):
    path = tmp_path / "state.json"
    context = _populated_context(path)
    context.persist()
    context.persist()
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_missing_file_is_empty(tmp_path):
    store = JsonSnapshotStore(tmp_path / "nothing.json")
    assert store.load() == Snapshot()

    context = BracketContext(store)
    assert context.restore() is False
    assert len(context.tournaments) == 0


def test_corrupt_file(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonSnapshotStore(path)

    with pytest.raises(FileLoadException):
        store.load()

    context = BracketContext(store)
    assert context.restore() is False
    assert len(context.tournaments) == 0


def test_unwritable_location(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonSnapshotStore(blocker / "state.json")

    with pytest.raises(FileSaveException):
        store.save(Snapshot())

    context = BracketContext(store)
    assert context.persist() is False


def test_context_without_store():
    context = BracketContext()
    assert context.persist() is False
    assert context.restore() is False
