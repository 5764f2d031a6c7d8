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

# --- Constants ---
DEFAULT_STATE_FILE = "state.json"
SNAPSHOT_VERSION = 1

# Tournament lifecycle
STATUS_REGISTRATION = "registration"
STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"

STATUS_LABELS = {
    STATUS_REGISTRATION: "Registration open",
    STATUS_RUNNING: "In progress",
    STATUS_COMPLETED: "Finished",
}

# Match lifecycle
MATCH_PENDING = "pending"
MATCH_COMPLETED = "completed"

# Short codes look like NX4821
SHORT_CODE_PREFIX = "NX"
SHORT_CODE_MIN = 1000
SHORT_CODE_MAX = 9999
SHORT_CODE_ATTEMPTS = 100

# External entrants (no platform account) get generated ids
EXTERNAL_ID_PREFIX = "ext"
EXTERNAL_ID_RANDOM_MAX = 999999

MIN_ENTRANTS_TO_START = 2
DEFAULT_BEST_OF = 1

# Entry portal modes
MODE_SOLO = "1v1"
MODE_TEAM = "5v5"
ENTRY_MODES = (MODE_SOLO, MODE_TEAM)

ENTRY_INSTRUCTIONS = {
    MODE_SOLO: (
        "To apply, send your IGN (in-game name). A WhatsApp number is optional."
    ),
    MODE_TEAM: (
        "To apply, send your team name, the team leader IGN and WhatsApp, "
        "and 5 players (IGN + WhatsApp, one per line)."
    ),
}

ENTRY_RULES = {
    MODE_SOLO: "\n".join(
        [
            "1v1 Rules",
            "- Winner: most kills at 10:00, mid lane only.",
            "- Tied at 10:00: the first kill after 10:00 wins.",
            "- A surrender or a destroyed Nexus also ends the match.",
            "- No jungle, no river, no farming other lanes.",
            "- No toxicity, no mastery or emote spam.",
            "- Any rule break is an instant loss.",
            "- Remakes only for proven server or network issues.",
        ]
    ),
    MODE_TEAM: "\n".join(
        [
            "5v5 Team Rules",
            "- Normal competitive match, no special in-game rules.",
            "- No remakes by default.",
            "- The whole team must be ready before match time.",
            "- A player more than 15 minutes late is a loss for the team.",
            "- Follow staff instructions in match channels.",
        ]
    ),
}

# Display labels
UNKNOWN_LABEL = "Unknown"
BYE_LABEL = "BYE"
TBD_LABEL = "TBD"
NOT_PROVIDED = "Not provided"
EMPTY_PLACE = "—"
INFO_PREVIEW_LIMIT = 20

# User-facing fallback for unexpected failures
GENERIC_ERROR_MESSAGE = "Something went wrong."

# Environment overrides
ENV_STATE_FILE = "NEXUS_STATE_FILE"
ENV_LOG_LEVEL = "NEXUS_LOG_LEVEL"
ENV_GUILD_ID = "NEXUS_GUILD_ID"

DEFAULT_GUILD_ID = "local"
DEFAULT_LOG_LEVEL = "INFO"

# Bracket image colours
IMAGE_BACKGROUND = "#020617"
IMAGE_TITLE = "#22c55e"
IMAGE_SUBTITLE = "#9ca3af"
IMAGE_ROUND_HEADER = "#fbbf24"
IMAGE_CARD = "#0f172a"
IMAGE_CARD_BORDER = "#1f2937"
IMAGE_CARD_BORDER_DONE = "#22c55e"
IMAGE_TEXT = "#e5e7eb"
IMAGE_WINNER_TEXT = "#4ade80"
IMAGE_MUTED_TEXT = "#6b7280"
IMAGE_GOLD = "#facc15"
IMAGE_SILVER = "#e5e7eb"
IMAGE_BRONZE = "#f97316"
