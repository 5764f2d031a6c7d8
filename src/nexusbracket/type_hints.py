"""Type hints used in Nexus Bracket."""

from typing import Callable, Dict, List, Literal, Optional, Tuple

# Tournament lifecycle literals
TournamentStatus = Literal["registration", "running", "completed"]
MatchStatus = Literal["pending", "completed"]

# Entry portal mode
EntryMode = Literal["1v1", "5v5"]

# Opaque entrant token (platform user id, team leader id or generated id)
EntrantId = str
Entrants = List[EntrantId]
MaybeEntrant = Optional[EntrantId]
# One pairing slot; the second entrant is None for a bye
Pairing = Tuple[EntrantId, MaybeEntrant]

# match id -> external space id (e.g. a chat channel)
SpaceMap = Dict[str, str]

# entrant id -> display name on the chat platform, may raise
DisplayNameLookup = Callable[[EntrantId], Optional[str]]
