from nexusbracket.identity import LabelResolver
from nexusbracket.models import PlayerProfile, TeamProfile
from nexusbracket.storage import ProfileStore


def _profiles():
    profiles = ProfileStore()
    profiles.upsert_team("leader", TeamProfile(team_name="Night Owls", leader_ign="Owl"))
    profiles.upsert_player("leader", PlayerProfile(ign="Owl"))
    profiles.upsert_player("solo", PlayerProfile(ign="Shadow"))
    return profiles


def test_team_name_wins_over_ign():
    resolver = LabelResolver(_profiles())
    assert resolver.label("leader") == "Night Owls"
    assert resolver.label("solo") == "Shadow"


def test_platform_display_name_then_fallback():
    names = {"member": "Member Display"}
    resolver = LabelResolver(_profiles(), display_name_lookup=names.get)

    assert resolver.label("member") == "Member Display"
    assert resolver.label("ghost") == "Unknown"
    assert resolver.label(None) == "Unknown"


def test_lookup_failure_falls_back():
    def lookup(entrant_id):
        raise ConnectionError("gateway unreachable")

    resolver = LabelResolver(_profiles(), display_name_lookup=lookup, fallback="TBD")
    assert resolver.label("ghost") == "TBD"
    assert resolver.label("solo") == "Shadow"


def test_export_label_keeps_unknown_ids_traceable():
    resolver = LabelResolver(_profiles())
    assert resolver.export_label("solo") == "Shadow"
    assert resolver.export_label("ghost") == "ID ghost"
    assert resolver.labels(["leader", "solo"]) == ["Night Owls", "Shadow"]
