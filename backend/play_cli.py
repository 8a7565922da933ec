#!/usr/bin/env python3
"""
Skirmish - terminal duel runner

Drives the combat engine directly, no HTTP server needed. Each player
command runs the player's half-turn, then the enemy's half-turn runs
after a short pause.

Usage:
    cd backend
    python play_cli.py --class Warrior --enemy Goblin
    python play_cli.py --class Wizard --enemy "Cult Acolyte" --difficulty 2 --seed 7
    python play_cli.py --class Warrior --moves strike,wound,fortify,kidneyshot
"""
import argparse
import logging
import random
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

try:
    from rich.console import Console
    from rich.panel import Panel
    from rich.prompt import Prompt
    from rich.table import Table
    from rich.box import ROUNDED
except ImportError:
    print("rich is required: pip install rich")
    sys.exit(1)

from skirmish.combat import CombatController, CombatEngine
from skirmish.combat.enemy_registry import ENEMY_TEMPLATES
from skirmish.combat.rules import CLASS_TEMPLATES
from skirmish.config import settings


# ==================== Config ====================

ENEMY_DELAY_SECONDS = 0.6

COLORS = {
    "player": "bright_green",
    "enemy": "bright_red",
    "system": "bright_magenta",
    "status": "yellow",
    "error": "bright_red",
    "hint": "dim",
}


# ==================== Rendering ====================

class DuelRenderer:
    """Console renderer for one fight"""

    def __init__(self):
        self.console = Console()

    def print_banner(self, state: Dict[str, Any]):
        player, enemy = state["player"], state["enemy"]
        self.console.print(Panel(
            f"[{COLORS['player']}]{player['name']}[/] the {player['class']}  vs  "
            f"[{COLORS['enemy']}]{enemy['name']}[/]",
            title="[bold]Skirmish[/bold]",
            border_style="bright_blue",
        ))

    def print_help(self):
        self.console.print(
            "[bold]Commands:[/bold]\n"
            "  attack            basic weapon attack\n"
            "  move <id>         use a move (see the table)\n"
            "  defend            halve the next hit\n"
            "  item [potion]     drink a potion\n"
            "  flee              try to run\n"
            "  help / quit",
            style=COLORS["hint"],
        )

    def print_state(self, state: Dict[str, Any]):
        table = Table(box=ROUNDED, show_header=True)
        table.add_column("", style="bold")
        table.add_column("HP")
        table.add_column("MP")
        table.add_column("SP")
        table.add_column("AC")
        table.add_column("Status", style=COLORS["status"])
        for side in ("player", "enemy"):
            unit = state[side]
            statuses = ", ".join(
                f"{key}({info['turns'] if info['turns'] is not None else 'inf'})"
                for key, info in unit["status"].items()
            )
            table.add_row(
                f"[{COLORS[side]}]{unit['name']}[/]",
                f"{unit['HP']}/{unit['maxHP']}",
                f"{unit['MP']}/{unit['maxMP']}",
                f"{unit['SP']}/{unit['maxSP']}",
                str(unit["AC"]),
                statuses or "-",
            )
        self.console.print(table)

    def print_moves(self, moves: List[Dict[str, Any]]):
        table = Table(title="Moves", box=None, padding=(0, 2))
        table.add_column("id", style="yellow")
        table.add_column("name")
        table.add_column("cost", style="dim")
        table.add_column("element", style="dim")
        for move in moves:
            cost = f"{move['cost']['amount']} {move['cost']['pool']}"
            style = "" if move["affordable"] else "dim strike"
            table.add_row(move["id"], move["name"], cost, move["element"], style=style)
        self.console.print(table)

    def print_log(self, log: List[Dict[str, Any]], enemy_name: str):
        for entry in log:
            line = format_entry(entry, enemy_name)
            if line:
                self.console.print(line)

    def print_error(self, message: str):
        self.console.print(f"[{COLORS['error']}]Error: {message}[/]")


def format_entry(entry: Dict[str, Any], enemy_name: str) -> Optional[str]:
    """One log entry as a console line"""
    kind = entry.get("type")
    if kind in ("player_attack", "enemy_attack"):
        who = "You attack" if kind == "player_attack" else f"{enemy_name} attacks"
        color = COLORS["player"] if kind == "player_attack" else COLORS["enemy"]
        if entry.get("fumble"):
            outcome = "FUMBLE"
        elif entry.get("hit"):
            outcome = f"{'CRIT ' if entry.get('crit') else ''}HIT for {entry.get('dmg')}"
        else:
            outcome = "MISS"
        return f"[{color}]{who}: d20={entry['roll']} total={entry['total']} -> {outcome}[/]"
    if kind in ("player_move", "enemy_move"):
        who = "You use" if kind == "player_move" else f"{enemy_name} uses"
        color = COLORS["player"] if kind == "player_move" else COLORS["enemy"]
        if entry.get("roll") is None:
            return f"[{color}]{who} {entry['name']}.[/]"
        return (
            f"[{color}]{who} {entry['name']}: d20={entry['roll']} total={entry['total']} "
            f"{'HIT' if entry.get('hit') else 'MISS'}[/]"
        )
    if kind == "move_effect":
        if entry["effect"] == "status":
            if not entry.get("applied"):
                return f"[{COLORS['hint']}]  {entry['key']} did not take hold.[/]"
            return f"[{COLORS['status']}]  {entry['key']} applied ({entry['turns']} turns).[/]"
        return f"  {entry['effect']}: {entry['amount']}"
    if kind == "status_tick":
        if entry["kind"] == "info":
            return None
        return f"[{COLORS['status']}]{entry['who']} {entry['key']}: {entry['kind']} {entry['amount']}[/]"
    if kind == "status_end":
        return f"[{COLORS['hint']}]{entry['who']}'s {entry['key']} wore off.[/]"
    if kind == "player_item":
        return f"[{COLORS['player']}]Potion heals {entry['heal']}.[/]"
    if kind == "player_flee":
        outcome = "SUCCESS" if entry["success"] else "FAIL"
        return f"Flee: {entry['total']} vs DC {entry['dc']} -> {outcome}"
    if kind == "combat_end":
        return f"[bold {COLORS['system']}]Combat over: {entry['winner']}[/]"
    return entry.get("text")


# ==================== Game loop ====================

class DuelCLI:
    """Interactive duel"""

    def __init__(self, controller: CombatController):
        self.controller = controller
        self.renderer = DuelRenderer()

    def run(self):
        state = self.controller.get_public_state()
        self.renderer.print_banner(state)
        self.renderer.print_help()

        while not self.controller.ended:
            state = self.controller.get_public_state()
            self.renderer.print_state(state)
            self.renderer.print_moves(state["player_moves"])

            raw = Prompt.ask(f"[{COLORS['player']}]>[/]").strip()
            if not raw:
                continue
            parts = raw.split(maxsplit=1)
            command, arg = parts[0].lower(), (parts[1] if len(parts) > 1 else None)
            if command in ("quit", "exit"):
                return
            if command == "help":
                self.renderer.print_help()
                continue
            if command == "run":
                command = "flee"

            result = self.controller.act_player(command, arg)
            if not result.ok:
                self.renderer.print_error(result.error or "action rejected")
                continue
            self.renderer.print_log(result.log, self.controller.enemy.name)
            if result.ended:
                break

            time.sleep(ENEMY_DELAY_SECONDS)
            result = self.controller.act_enemy()
            self.renderer.print_log(result.log, self.controller.enemy.name)

        summary = self.controller.get_combat_result()
        self.renderer.console.print(Panel(summary.to_display_text(), title="Result"))


def main():
    parser = argparse.ArgumentParser(description="Skirmish terminal duel")
    parser.add_argument("--class", dest="player_class", default="Warrior", choices=list(CLASS_TEMPLATES))
    parser.add_argument("--enemy", default=None, choices=list(ENEMY_TEMPLATES), help="enemy type (random if omitted)")
    parser.add_argument("--name", default=None, help="player name")
    parser.add_argument("--difficulty", type=int, default=0)
    parser.add_argument("--seed", type=int, default=settings.rng_seed)
    parser.add_argument("--moves", default=None, help="comma-separated basic moves from the class pool")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    rng = random.Random(args.seed) if args.seed is not None else None
    moves = [move_id.strip() for move_id in args.moves.split(",")] if args.moves else None
    engine = CombatEngine()
    try:
        controller = engine.start_encounter(
            args.player_class,
            enemy_type=args.enemy,
            difficulty=args.difficulty,
            player_name=args.name,
            rng=rng,
            moves=moves,
        )
    except ValueError as exc:
        parser.error(str(exc))
    DuelCLI(controller).run()


if __name__ == "__main__":
    main()
