"""Nexus Bracket console.

Runs tournament commands against the saved state, either one command per
invocation or in an interactive session with autocomplete.
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

import argparse
import random
import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import NestedCompleter, WordCompleter
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style

from nexusbracket.config import BotConfig, load_config
from nexusbracket.constants import ENTRY_MODES, GENERIC_ERROR_MESSAGE
from nexusbracket.controllers.tournament import TournamentStateMachine
from nexusbracket.exceptions import (
    ConfigurationException,
    PreconditionException,
    ResourceUnavailableException,
)
from nexusbracket.identity import LabelResolver
from nexusbracket.presentation import BracketTextRenderer
from nexusbracket.storage import BracketContext, JsonSnapshotStore
from nexusbracket.utils import configure_logging, setup_logger

logger = setup_logger(__name__)


# ANSI color codes for terminal output
class Colors:
    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


# Command definitions with their options
COMMANDS = {
    "create": {
        "description": "Create a tournament (opens registration)",
        "options": {"<name>": "Tournament name", "--best-of": "Games per match (odd)"},
    },
    "add": {
        "description": "Register an entrant by id",
        "options": {"<entrant>": "Entrant id"},
    },
    "add-player": {
        "description": "Register a player by in-game name",
        "options": {
            "<ign>": "In-game name",
            "--user": "Platform user id (generated when omitted)",
            "--whatsapp": "Contact number",
        },
    },
    "start": {"description": "Shuffle the roster and open round 1", "options": {}},
    "report": {
        "description": "Report the winner of a match",
        "options": {
            "<match>": "Match id (or space id with --space)",
            "<winner>": "Winning entrant id",
            "--space": "Treat <match> as the id of the match's space",
        },
    },
    "check-round": {
        "description": "Retry opening the next round",
        "options": {},
    },
    "info": {"description": "Show tournament status", "options": {}},
    "bracket": {"description": "Show every round as text", "options": {}},
    "render": {
        "description": "Save the bracket as a PNG image",
        "options": {"--output": "Image path (default: bracket.png)"},
    },
    "podium": {"description": "Show final placements", "options": {}},
    "set-bracket-link": {
        "description": "Attach an external bracket page",
        "options": {"<url>": "http:// or https:// link"},
    },
    "export": {
        "description": "List participants one per line",
        "options": {"--output": "Write to a file instead of the screen"},
    },
    "setup-entry": {
        "description": "Configure an entry portal",
        "options": {
            "<mode>": "1v1 or 5v5",
            "<public-space>": "Where applications are collected",
            "--admin-space": "Where applications are reviewed",
            "--start-time": "Announced start time",
        },
    },
    "apply-player": {
        "description": "Submit a 1v1 application",
        "options": {"<entrant>": "Applicant id", "<ign>": "In-game name", "--whatsapp": "Contact"},
    },
    "apply-team": {
        "description": "Submit a 5v5 application",
        "options": {
            "<leader>": "Team leader id",
            "<team-name>": "Team name",
            "<leader-ign>": "Leader in-game name",
            "--whatsapp": "Leader contact",
            "--players": "Roster text",
        },
    },
    "accept": {
        "description": "Accept an application",
        "options": {"<mode>": "1v1 or 5v5", "<applicant>": "Applicant id"},
    },
    "reject": {
        "description": "Reject an application",
        "options": {"<mode>": "1v1 or 5v5", "<applicant>": "Applicant id"},
    },
    "help": {
        "description": "Show help for specific command",
        "options": {"<command>": "Command name to get help for"},
    },
    "exit": {"description": "Exit the interactive mode", "options": {}},
}


@dataclass
class Console:
    """Everything a command needs."""

    machine: TournamentStateMachine
    renderer: BracketTextRenderer
    resolver: LabelResolver
    guild_id: str


def build_console(config: BotConfig, guild_id: Optional[str] = None) -> Console:
    """Wire repositories, snapshot and state machine from ``config``."""
    context = BracketContext(JsonSnapshotStore(config.state_file))
    context.restore()
    resolver = LabelResolver(context.profiles)
    rng = random.Random(config.seed) if config.seed is not None else random.Random()
    machine = TournamentStateMachine(
        context,
        resolver=resolver,
        rng=rng,
        short_code_prefix=config.short_code_prefix,
        info_preview_limit=config.info_preview_limit,
    )
    return Console(
        machine=machine,
        renderer=BracketTextRenderer(resolver),
        resolver=resolver,
        guild_id=guild_id or config.guild_id,
    )


def print_banner():
    """Print the application banner."""
    banner = f"""
{Colors.OKBLUE}╔═══════════════════════════════════════════════════════════════╗
║                                                               ║
║                     NEXUS BRACKET - CLI                       ║
║                                                               ║
║               [Single elimination, round by round]            ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝{Colors.ENDC}

Type {Colors.BOLD}/help{Colors.ENDC} to see all available commands
Type {Colors.BOLD}exit{Colors.ENDC} or {Colors.BOLD}quit{Colors.ENDC} to leave interactive mode
"""
    print(banner)


def print_commands_list():
    """Print list of all available commands."""
    print(f"\n{Colors.BOLD}Available Commands:{Colors.ENDC}\n")
    for cmd, info in COMMANDS.items():
        print(f"  {Colors.OKGREEN}{cmd:18}{Colors.ENDC} - {info['description']}")
    print()


def print_command_help(command: str):
    """Print detailed help for a specific command."""
    if command not in COMMANDS:
        print(f"{Colors.FAIL}Unknown command: {command}{Colors.ENDC}")
        print_commands_list()
        return

    cmd_info = COMMANDS[command]
    print(f"\n{Colors.BOLD}{Colors.OKBLUE}Command: {command}{Colors.ENDC}")
    print(f"{Colors.BOLD}Description:{Colors.ENDC} {cmd_info['description']}\n")

    if cmd_info["options"]:
        print(f"{Colors.BOLD}Options:{Colors.ENDC}")
        for option, description in cmd_info["options"].items():
            print(f"  {Colors.OKCYAN}{option:20}{Colors.ENDC} {description}")
    print()


def create_completer() -> NestedCompleter:
    """Create autocomplete completer for interactive mode."""
    completions = {}
    for cmd, info in COMMANDS.items():
        flags = [option for option in info["options"] if option.startswith("--")]
        if cmd in ("accept", "reject", "setup-entry"):
            flags = list(ENTRY_MODES) + flags
        options_completer = WordCompleter(flags) if flags else None
        # Support both "/command" and "command"
        completions[cmd] = options_completer
        completions[f"/{cmd}"] = options_completer

    completions["/list"] = None
    return NestedCompleter.from_nested_dict(completions)


# ========== Command handlers ==========


def run_create_command(console: Console, args: argparse.Namespace) -> int:
    tournament = console.machine.create_tournament(console.guild_id, args.name, args.best_of)
    print(
        f"{Colors.OKGREEN}Created {tournament.name} [{tournament.short_code}], "
        f"best of {tournament.best_of}. Registration is open.{Colors.ENDC}"
    )
    return 0


def run_add_command(console: Console, args: argparse.Namespace) -> int:
    tournament = console.machine.add_entrant(console.guild_id, args.entrant)
    print(
        f"{Colors.OKGREEN}Added {console.resolver.label(args.entrant)} "
        f"({len(tournament.entrants)} registered).{Colors.ENDC}"
    )
    return 0


def run_add_player_command(console: Console, args: argparse.Namespace) -> int:
    entrant_id = console.machine.add_player(
        console.guild_id, args.ign, user_id=args.user, whatsapp=args.whatsapp
    )
    print(f"{Colors.OKGREEN}Added {args.ign} as {entrant_id}.{Colors.ENDC}")
    return 0


def run_start_command(console: Console, args: argparse.Namespace) -> int:
    matches = console.machine.start(console.guild_id)
    print(f"{Colors.OKGREEN}Tournament started. Round 1:{Colors.ENDC}")
    for match in matches:
        print(f"  {console.renderer.format_match(match)}")
    return 0


def run_report_command(console: Console, args: argparse.Namespace) -> int:
    if args.space:
        report = console.machine.report_result_in_space(args.match, args.winner)
    else:
        report = console.machine.report_result(args.match, args.winner)

    print(f"{Colors.OKGREEN}{console.renderer.format_match(report.match)}{Colors.ENDC}")
    progress = report.progress
    if progress.podium is not None:
        print(console.renderer.format_podium(progress.podium))
    elif progress.next_round is not None:
        print(f"Round {progress.next_round} is starting.")
    elif progress.error_message:
        print(
            f"{Colors.WARNING}Next round could not be set up: {progress.error_message}. "
            f"Retry with check-round.{Colors.ENDC}"
        )
    return 0


def run_check_round_command(console: Console, args: argparse.Namespace) -> int:
    progress = console.machine.check_round(console.guild_id)
    if progress.podium is not None:
        print(console.renderer.format_podium(progress.podium))
    elif progress.next_round is not None:
        print(f"{Colors.OKGREEN}Round {progress.next_round} is starting.{Colors.ENDC}")
    elif progress.error_message:
        print(f"{Colors.FAIL}Still failing: {progress.error_message}{Colors.ENDC}")
        return 1
    else:
        print("The current round still has pending matches.")
    return 0


def run_info_command(console: Console, args: argparse.Namespace) -> int:
    print(console.renderer.format_info(console.machine.info(console.guild_id)))
    return 0


def run_bracket_command(console: Console, args: argparse.Namespace) -> int:
    tournament, matches = console.machine.bracket(console.guild_id)
    print(console.renderer.format_bracket(tournament, matches))
    return 0


def run_render_command(console: Console, args: argparse.Namespace) -> int:
    """Save the bracket image."""
    from nexusbracket.presentation.bracket_image import render_bracket_image

    tournament, matches = console.machine.bracket(console.guild_id)
    output_path = Path(args.output)
    output_path.write_bytes(render_bracket_image(console.resolver, tournament, matches))
    print(f"{Colors.OKGREEN}Bracket saved to: {output_path}{Colors.ENDC}")
    return 0


def run_podium_command(console: Console, args: argparse.Namespace) -> int:
    print(console.renderer.format_podium(console.machine.podium(console.guild_id)))
    return 0


def run_set_bracket_link_command(console: Console, args: argparse.Namespace) -> int:
    tournament = console.machine.set_bracket_url(console.guild_id, args.url)
    print(f"{Colors.OKGREEN}Bracket link set: {tournament.bracket_url}{Colors.ENDC}")
    return 0


def run_export_command(console: Console, args: argparse.Namespace) -> int:
    labels = console.machine.participants(console.guild_id)
    if not labels:
        print("No players/teams registered yet.")
        return 0

    content = console.renderer.format_participants(labels)
    if args.output:
        Path(args.output).write_text(content + "\n", encoding="utf-8")
        print(f"{Colors.OKGREEN}Exported {len(labels)} participants to: {args.output}{Colors.ENDC}")
    else:
        print(content)
    return 0


def run_setup_entry_command(console: Console, args: argparse.Namespace) -> int:
    portal = console.machine.setup_entry_portal(
        console.guild_id,
        args.mode,
        args.public_space,
        admin_space_id=args.admin_space,
        start_time=args.start_time,
    )
    print(
        f"{Colors.OKGREEN}Entry portal {portal.mode} ready in {portal.public_space_id}; "
        f"applications go to {portal.admin_space_id}.{Colors.ENDC}"
    )
    return 0


def run_apply_player_command(console: Console, args: argparse.Namespace) -> int:
    console.machine.register_player_profile(
        console.guild_id, args.entrant, args.ign, args.whatsapp
    )
    print(f"Application received from {args.ign}.")
    return 0


def run_apply_team_command(console: Console, args: argparse.Namespace) -> int:
    console.machine.register_team_profile(
        console.guild_id,
        args.leader,
        args.team_name,
        args.leader_ign,
        leader_whatsapp=args.whatsapp,
        players_text=args.players or "",
    )
    print(f"Application received from team {args.team_name}.")
    return 0


def _run_decision(console: Console, args: argparse.Namespace, accepted: bool) -> int:
    decision = console.machine.decide_application(
        console.guild_id, args.mode, args.applicant, accepted
    )
    label = console.resolver.label(args.applicant)
    if decision.added:
        print(f"{Colors.OKGREEN}Accepted {label}; added to the tournament.{Colors.ENDC}")
    elif accepted:
        print(f"{Colors.WARNING}Accepted {label}, not added: {decision.reason}{Colors.ENDC}")
    else:
        print(f"Rejected {label}.")
    return 0


def run_accept_command(console: Console, args: argparse.Namespace) -> int:
    return _run_decision(console, args, accepted=True)


def run_reject_command(console: Console, args: argparse.Namespace) -> int:
    return _run_decision(console, args, accepted=False)


# ========== Parsers ==========


def _add_create_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("name", help="Tournament name")
    parser.add_argument("--best-of", default=1, help="Games per match (odd)")


def _add_add_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("entrant", help="Entrant id")


def _add_add_player_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("ign", help="In-game name")
    parser.add_argument("--user", help="Platform user id")
    parser.add_argument("--whatsapp", help="Contact number")


def _add_report_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("match", help="Match id")
    parser.add_argument("winner", help="Winning entrant id")
    parser.add_argument("--space", action="store_true", help="<match> is a space id")


def _add_render_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--output", default="bracket.png", help="Image path")


def _add_set_bracket_link_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("url", help="Bracket link")


def _add_export_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--output", help="Output file path")


def _add_setup_entry_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("mode", choices=ENTRY_MODES)
    parser.add_argument("public_space", help="Where applications are collected")
    parser.add_argument("--admin-space", help="Where applications are reviewed")
    parser.add_argument("--start-time", help="Announced start time")


def _add_apply_player_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("entrant", help="Applicant id")
    parser.add_argument("ign", help="In-game name")
    parser.add_argument("--whatsapp", help="Contact number")


def _add_apply_team_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("leader", help="Team leader id")
    parser.add_argument("team_name", help="Team name")
    parser.add_argument("leader_ign", help="Leader in-game name")
    parser.add_argument("--whatsapp", help="Leader contact number")
    parser.add_argument("--players", help="Roster text")


def _add_decision_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("mode", choices=ENTRY_MODES)
    parser.add_argument("applicant", help="Applicant id")


def _add_no_arguments(parser: argparse.ArgumentParser):
    pass


# command -> (argument builder, handler)
COMMAND_TABLE: Dict[str, tuple] = {
    "create": (_add_create_arguments, run_create_command),
    "add": (_add_add_arguments, run_add_command),
    "add-player": (_add_add_player_arguments, run_add_player_command),
    "start": (_add_no_arguments, run_start_command),
    "report": (_add_report_arguments, run_report_command),
    "check-round": (_add_no_arguments, run_check_round_command),
    "info": (_add_no_arguments, run_info_command),
    "bracket": (_add_no_arguments, run_bracket_command),
    "render": (_add_render_arguments, run_render_command),
    "podium": (_add_no_arguments, run_podium_command),
    "set-bracket-link": (_add_set_bracket_link_arguments, run_set_bracket_link_command),
    "export": (_add_export_arguments, run_export_command),
    "setup-entry": (_add_setup_entry_arguments, run_setup_entry_command),
    "apply-player": (_add_apply_player_arguments, run_apply_player_command),
    "apply-team": (_add_apply_team_arguments, run_apply_team_command),
    "accept": (_add_decision_arguments, run_accept_command),
    "reject": (_add_decision_arguments, run_reject_command),
}


def create_command_parser(command: str) -> argparse.ArgumentParser:
    """Create parser for one command (interactive mode)."""
    add_arguments, _ = COMMAND_TABLE[command]
    parser = argparse.ArgumentParser(prog=command, description=COMMANDS[command]["description"])
    add_arguments(parser)
    return parser


def create_main_parser() -> argparse.ArgumentParser:
    """Create main argument parser."""
    parser = argparse.ArgumentParser(
        prog="nexus-bracket",
        description="Single-elimination tournament manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode
  nexus-bracket -i

  # Run a small bracket
  nexus-bracket create "Friday Cup" --best-of 3
  nexus-bracket add-player Alice
  nexus-bracket add-player Bob
  nexus-bracket start
  nexus-bracket bracket
        """,
    )
    parser.add_argument(
        "--interactive", "-i", action="store_true", help="Start in interactive mode"
    )
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--state-file", help="Override the state file")
    parser.add_argument("--guild", help="Guild id to act on")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    for command, (add_arguments, handler) in COMMAND_TABLE.items():
        sub = subparsers.add_parser(command, help=COMMANDS[command]["description"])
        add_arguments(sub)
        sub.set_defaults(func=handler)
    return parser


# ========== Execution ==========


def execute(
    console: Console,
    handler: Callable[[Console, argparse.Namespace], int],
    args: argparse.Namespace,
) -> int:
    """Run a handler, turning errors into messages.

    Rejected commands show their own message. Anything unexpected shows a
    generic message and is logged with its traceback.
    """
    try:
        return handler(console, args)
    except (PreconditionException, ResourceUnavailableException) as e:
        print(f"{Colors.FAIL}{e}{Colors.ENDC}")
        return 1
    except Exception:
        logger.exception("Command execution failed")
        print(f"{Colors.FAIL}{GENERIC_ERROR_MESSAGE}{Colors.ENDC}")
        return 1


def execute_command(console: Console, command: str, args_list: List[str]) -> int:
    """Parse and run one command line (already split into words)."""
    if command not in COMMAND_TABLE:
        print(f"{Colors.FAIL}Unknown command: {command}{Colors.ENDC}")
        return 1
    try:
        args = create_command_parser(command).parse_args(args_list)
    except SystemExit:
        # argparse already printed the problem
        return 2
    _, handler = COMMAND_TABLE[command]
    return execute(console, handler, args)


def run_interactive_mode(console: Console) -> int:
    """Run in interactive mode with autocomplete."""
    print_banner()

    style = Style.from_dict({"prompt": "#00aa00 bold"})
    session = PromptSession(
        completer=create_completer(),
        history=InMemoryHistory(),
        style=style,
    )

    while True:
        try:
            user_input = session.prompt("nexus> ").strip()

            if not user_input:
                continue

            if user_input in ["exit", "quit", "q", "/exit"]:
                print(f"\n{Colors.OKGREEN}Goodbye!{Colors.ENDC}\n")
                break

            if user_input in ["/help", "help", "?", "/list"]:
                print_commands_list()
                continue

            try:
                parts = shlex.split(user_input)
            except ValueError as e:
                print(f"{Colors.FAIL}Could not parse input: {e}{Colors.ENDC}")
                continue

            command = parts[0].lstrip("/")
            if command == "help":
                if len(parts) > 1:
                    print_command_help(parts[1].lstrip("/"))
                else:
                    print_commands_list()
                continue

            if command not in COMMAND_TABLE:
                print(f"{Colors.FAIL}Unknown command: {command}{Colors.ENDC}")
                print(f"Type {Colors.BOLD}/help{Colors.ENDC} to see available commands")
                continue

            execute_command(console, command, parts[1:])

        except KeyboardInterrupt:
            print(f"\n{Colors.WARNING}Use 'exit' or 'quit' to leave{Colors.ENDC}")
        except EOFError:
            print(f"\n{Colors.OKGREEN}Goodbye!{Colors.ENDC}\n")
            break
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_main_parser()
    args = parser.parse_args(argv)

    cli_overrides = {}
    if args.state_file:
        cli_overrides["state_file"] = args.state_file
    try:
        config = load_config(args.config)
        if cli_overrides:
            config = BotConfig.from_dict({**config.to_dict(), **cli_overrides})
    except ConfigurationException as e:
        print(f"{Colors.FAIL}Invalid configuration: {e}{Colors.ENDC}")
        return 2

    configure_logging(config.log_level, config.log_file)
    console = build_console(config, guild_id=args.guild)

    if args.interactive:
        return run_interactive_mode(console)

    if hasattr(args, "func"):
        return execute(console, args.func, args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
