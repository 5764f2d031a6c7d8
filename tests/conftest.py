import itertools
import random

import pytest

from nexusbracket.controllers.tournament import (
    Announcer,
    MatchSpaceHost,
    TournamentStateMachine,
)
from nexusbracket.exceptions import ResourceUnavailableException
from nexusbracket.storage import BracketContext, JsonSnapshotStore


class NoShuffleRandom(random.Random):
    """Random source that keeps seeding order equal to registration order."""

    def shuffle(self, x, *args, **kwargs):
        return None


class RecordingAnnouncer(Announcer):
    def __init__(self):
        self.messages = []
        self.posts = []

    def announce(self, tournament, message):
        self.messages.append(message)

    def post(self, guild_id, space_id, message):
        self.posts.append((guild_id, space_id, message))


class FlakySpaceHost(MatchSpaceHost):
    """Gives every playable match a space; can be told to fail."""

    def __init__(self):
        self.fail = False
        self.calls = 0

    def prepare_round(self, tournament, round_number, matches):
        self.calls += 1
        if self.fail:
            raise ResourceUnavailableException("Tournament category missing.")
        return {m.id: f"chan-{m.id}" for m in matches if not m.is_bye}


@pytest.fixture
def state_file(tmp_path):
    return tmp_path / "state.json"


@pytest.fixture
def context(state_file):
    return BracketContext(JsonSnapshotStore(state_file))


@pytest.fixture
def announcer():
    return RecordingAnnouncer()


@pytest.fixture
def space_host():
    return FlakySpaceHost()


@pytest.fixture
def machine(context, announcer, space_host):
    counter = itertools.count(1_700_000_000_000)
    return TournamentStateMachine(
        context,
        space_host=space_host,
        announcer=announcer,
        rng=NoShuffleRandom(7),
        clock=lambda: next(counter),
    )


@pytest.fixture
def guild_id():
    return "guild-1"


@pytest.fixture
def make_tournament(machine, guild_id):
    """Create a tournament in registration with the given entrants."""

    def _make(entrants, name="Friday Cup", best_of=3):
        tournament = machine.create_tournament(guild_id, name, best_of)
        for entrant in entrants:
            machine.add_entrant(guild_id, entrant)
        return tournament

    return _make
