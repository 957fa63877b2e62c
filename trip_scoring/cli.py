"""
Command-line interface for the golf trip scoring engine.
Scores exported rounds so results can be checked against the trip spreadsheets.
"""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from .config import get_config
from .handicap import stroke_allocation
from .scorecard import (
    load_balances_json, load_round_json, round_skins, score_round_matches, tilt_round
)
from .settlement import simplify_debts
from .tilt import compute_tilt_tournament

console = Console()


def _load_round(path: str):
    try:
        return load_round_json(Path(path), get_config())
    except ValueError as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version="1.0.0", prog_name="Golf Trip Scoring")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Golf trip scoring - matches, skins, TILT and settle-up."""
    config = get_config()
    level = "DEBUG" if verbose else config.log_level
    logging.basicConfig(level=level, format="%(message)s")
    for error in config.validate_config():
        console.print(f"[yellow]Config: {error}[/]")


@cli.command()
@click.argument("round_json", type=click.Path(exists=True, dir_okay=False))
def handicaps(round_json: str):
    """Show playing handicaps and stroke holes for each match."""
    config = get_config()
    doc = _load_round(round_json)
    outcomes = score_round_matches(doc, config.points_for_win, config.points_for_half)

    table = Table(title=f"Playing Handicaps - {doc.format.value}", box=box.ROUNDED)
    table.add_column("Match", style="dim")
    table.add_column("Side", justify="center")
    table.add_column("Player", style="cyan")
    table.add_column("Index", justify="right")
    table.add_column("Course", justify="right")
    table.add_column("Playing", justify="right", style="bold")
    table.add_column("Stroke Holes")

    for outcome in outcomes:
        for ctx in outcome.handicaps:
            holes = stroke_allocation(ctx.playing_handicap, doc.tee.holes)
            table.add_row(
                outcome.match.match_id,
                str(ctx.side),
                doc.names.get(ctx.player_id, ctx.player_id),
                f"{ctx.handicap_index:.1f}",
                str(ctx.course_handicap),
                str(ctx.playing_handicap),
                ", ".join(str(h) for h in holes) or "-",
            )

    console.print(table)


@cli.command()
@click.argument("round_json", type=click.Path(exists=True, dir_okay=False))
def match(round_json: str):
    """Show match status and results for a round."""
    config = get_config()
    doc = _load_round(round_json)
    outcomes = score_round_matches(doc, config.points_for_win, config.points_for_half)

    table = Table(title=f"Matches - {doc.format.value}", box=box.ROUNDED)
    table.add_column("Match", style="dim")
    table.add_column("Side 1", style="cyan")
    table.add_column("Side 2", style="magenta")
    table.add_column("Thru", justify="right")
    table.add_column("Status")
    table.add_column("Result", style="bold")
    table.add_column("Points", justify="center")

    for outcome in outcomes:
        state = outcome.state
        table.add_row(
            outcome.match.match_id,
            " / ".join(doc.names.get(p, p) for p in outcome.match.side1),
            " / ".join(doc.names.get(p, p) for p in outcome.match.side2),
            str(state.holes_played),
            state.display_text,
            state.result_text or "-",
            f"{state.side1_points:g} - {state.side2_points:g}",
        )

    console.print(table)


@cli.command()
@click.argument("round_json", type=click.Path(exists=True, dir_okay=False))
def skins(round_json: str):
    """Show skins won per hole and payouts."""
    doc = _load_round(round_json)
    outcome = round_skins(doc)
    result = outcome.result

    table = Table(title="Skins", box=box.ROUNDED)
    table.add_column("Hole", justify="right")
    table.add_column("Winner", style="green")
    table.add_column("Net", justify="right")
    table.add_column("Skins", justify="right")
    table.add_column("Value", justify="right")

    for hole in result.holes:
        if hole.winner_id:
            members = outcome.team_members.get(hole.winner_id, [hole.winner_id])
            winner = " / ".join(doc.names.get(m, m) for m in members)
        else:
            winner = "[dim]-[/]"
        table.add_row(
            str(hole.hole_number),
            winner,
            "-" if hole.net_score is None else str(hole.net_score),
            str(hole.skins) if hole.skins else "",
            f"${hole.value:,.2f}" if hole.value else "",
        )
    console.print(table)

    payouts = Table(title="Payouts", box=box.SIMPLE)
    payouts.add_column("Player", style="cyan")
    payouts.add_column("Skins", justify="right")
    payouts.add_column("Won", justify="right", style="green")
    for p in sorted(outcome.payouts, key=lambda p: p.money_won, reverse=True):
        payouts.add_row(doc.names.get(p.player_id, p.player_id), str(p.skins_won), f"${p.money_won:,.2f}")
    console.print(payouts)

    console.print(Panel.fit(
        f"Pot: ${result.total_pot:,.2f}  |  Skins: {result.skins_awarded}  |  "
        f"Per skin: ${result.skin_value:,.2f}  |  Players: {outcome.unique_player_count}"
    ))


@cli.command()
@click.argument("round_jsons", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--carryover/--no-carryover", default=None, help="Carry multiplier and streak between rounds")
def tilt(round_jsons, carryover):
    """Score TILT over one or more rounds and split the pot."""
    config = get_config()
    if carryover is None:
        carryover = config.tilt_carryover

    docs = [_load_round(path) for path in round_jsons]
    names = {}
    for doc in docs:
        names.update(doc.names)

    tournament = compute_tilt_tournament([tilt_round(doc) for doc in docs], carryover=carryover)

    table = Table(title=f"TILT {'(carryover)' if carryover else ''}", box=box.ROUNDED)
    table.add_column("Player", style="cyan")
    for i, doc in enumerate(docs, 1):
        table.add_column(doc.round_id or f"R{i}", justify="right")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Payout", justify="right", style="green")

    ranked = sorted(tournament.grand_totals.items(), key=lambda item: item[1], reverse=True)
    for player_id, total in ranked:
        row = [names.get(player_id, player_id)]
        for rnd in tournament.rounds:
            player = next((p for p in rnd.players if p.player_id == player_id), None)
            row.append(str(player.total_points) if player else "-")
        row.append(str(total))
        payout = tournament.payouts.get(player_id)
        row.append(f"${payout:,.2f}" if payout else "")
        table.add_row(*row)

    console.print(table)
    console.print(f"Pot: ${tournament.total_pot:,.2f}")


@cli.command()
@click.argument("balances_json", type=click.Path(exists=True, dir_okay=False))
def settle(balances_json: str):
    """Simplify trip balances into a minimal list of payments."""
    try:
        balances = load_balances_json(Path(balances_json))
    except ValueError as e:
        raise click.ClickException(str(e))

    debts = simplify_debts(balances)
    if not debts:
        console.print("[green]Everyone is square![/]")
        return

    table = Table(title="Settle Up", box=box.ROUNDED)
    table.add_column("From", style="red")
    table.add_column("To", style="green")
    table.add_column("Amount", justify="right", style="bold")
    for debt in debts:
        table.add_row(debt.from_name, debt.to_name, f"${debt.amount:,.2f}")
    console.print(table)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
