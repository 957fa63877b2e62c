"""
Trip finances.
Expense splitting, balance aggregation, and debt simplification down to a
short list of transfers.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .models import (
    Expense, PaymentItem, PlayerBalance, RoundSkins, SimplifiedDebt, SplitResult,
    SplitType, TiltTournament
)
from .money import round_money

logger = logging.getLogger(__name__)

# Balances smaller than this are settled
SETTLED_EPSILON = 0.01


class ExpenseSplitError(ValueError):
    """Expense split input that does not describe a valid split."""
    pass


# ============================================================================
# EXPENSE SPLITS
# ============================================================================

def validate_expense_split(
    total_amount: float,
    split_type: SplitType,
    all_player_ids: Sequence[str],
    paid_by_id: str,
    selected_player_ids: Optional[Sequence[str]] = None,
    custom_amounts: Optional[Mapping[str, float]] = None,
) -> None:
    """
    Check an expense split before calculating it.

    Raises:
        ExpenseSplitError: When the split references unknown players or
            does not add up to the expense total.
    """
    split_type = SplitType(split_type)
    known = set(all_player_ids)

    if total_amount <= 0:
        raise ExpenseSplitError(f"Expense amount must be positive, got {total_amount}")
    if paid_by_id not in known:
        raise ExpenseSplitError(f"Payer {paid_by_id} is not a trip player")

    unknown = [pid for pid in (selected_player_ids or []) if pid not in known]
    unknown += [pid for pid in (custom_amounts or {}) if pid not in known]
    if unknown:
        raise ExpenseSplitError(f"Unknown players in split: {', '.join(sorted(set(unknown)))}")

    if split_type == SplitType.EVEN_ALL and not all_player_ids:
        raise ExpenseSplitError("No players to split between")
    if split_type == SplitType.EVEN_SOME and not selected_player_ids:
        raise ExpenseSplitError("No players selected to split between")
    if split_type == SplitType.FULL_PAYBACK and not selected_player_ids:
        raise ExpenseSplitError("Full payback needs a borrower")
    if split_type == SplitType.CUSTOM:
        if not custom_amounts:
            raise ExpenseSplitError("Custom split needs per-player amounts")
        if any(amount < 0 for amount in custom_amounts.values()):
            raise ExpenseSplitError("Custom split amounts cannot be negative")
        if abs(sum(custom_amounts.values()) - total_amount) > SETTLED_EPSILON:
            raise ExpenseSplitError(
                f"Custom amounts add up to {sum(custom_amounts.values()):.2f}, expected {total_amount:.2f}"
            )


def calculate_expense_splits(
    total_amount: float,
    split_type: SplitType,
    all_player_ids: Sequence[str],
    paid_by_id: str,
    selected_player_ids: Optional[Sequence[str]] = None,
    custom_amounts: Optional[Mapping[str, float]] = None,
) -> List[SplitResult]:
    """
    Calculate per-player amounts for an expense.

    Args:
        total_amount: Total expense in dollars
        split_type: How to divide the expense
        all_player_ids: All active trip players (EVEN_ALL)
        paid_by_id: Player who paid
        selected_player_ids: Split group for EVEN_SOME, borrower first for FULL_PAYBACK
        custom_amounts: Player -> amount for CUSTOM

    Returns:
        One SplitResult per involved player, amounts rounded to cents
    """
    split_type = SplitType(split_type)

    if split_type == SplitType.EVEN_ALL:
        return _even_split(total_amount, list(all_player_ids), paid_by_id)

    elif split_type == SplitType.EVEN_SOME:
        group = list(selected_player_ids or [])
        if paid_by_id not in group:
            group.insert(0, paid_by_id)
        return _even_split(total_amount, group, paid_by_id)

    elif split_type == SplitType.CUSTOM:
        return [
            SplitResult(player_id=pid, amount=round_money(amount), is_payer=pid == paid_by_id)
            for pid, amount in (custom_amounts or {}).items()
        ]

    elif split_type == SplitType.FULL_PAYBACK:
        if not selected_player_ids:
            return []
        return [
            SplitResult(player_id=paid_by_id, amount=0.0, is_payer=True),
            SplitResult(player_id=selected_player_ids[0], amount=round_money(total_amount), is_payer=False),
        ]

    raise ExpenseSplitError(f"Unsupported split type: {split_type}")


def _even_split(total_amount: float, player_ids: List[str], paid_by_id: str) -> List[SplitResult]:
    if not player_ids:
        return []
    per_person = round_money(total_amount / len(player_ids))
    return [SplitResult(player_id=pid, amount=per_person, is_payer=pid == paid_by_id) for pid in player_ids]


# ============================================================================
# BALANCES
# ============================================================================

def payment_balances(player_ids: Sequence[str], items: Sequence[PaymentItem]) -> Dict[str, float]:
    """Paid minus owed on the payment schedule. Negative = still owes."""
    owed = sum(item.amount for item in items)
    return {
        pid: sum(item.paid.get(pid, 0.0) for item in items) - owed
        for pid in player_ids
    }


def expense_balances(player_ids: Sequence[str], expenses: Sequence[Expense]) -> Dict[str, float]:
    """Each non-payer split moves its amount from the ower to the payer."""
    balances = {pid: 0.0 for pid in player_ids}
    for expense in expenses:
        for split in expense.splits:
            if split.is_payer:
                continue
            balances[expense.paid_by_id] = balances.get(expense.paid_by_id, 0.0) + split.amount
            balances[split.player_id] = balances.get(split.player_id, 0.0) - split.amount
    return balances


def gambling_balances(
    player_ids: Sequence[str],
    skins_rounds: Sequence[RoundSkins] = (),
    tilt: Optional[TiltTournament] = None,
) -> Dict[str, float]:
    """
    Net side game winnings.

    Every participant pays the entry fee for each round they enter;
    winnings come from skins payouts and the TILT tournament payout.
    """
    balances = {pid: 0.0 for pid in player_ids}

    for rnd in skins_rounds:
        won = {p.player_id: p.money_won for p in rnd.payouts}
        for pid in rnd.participants:
            balances[pid] = balances.get(pid, 0.0) + won.get(pid, 0.0) - rnd.entry_fee

    if tilt is not None:
        for rnd in tilt.rounds:
            for player in rnd.players:
                balances[player.player_id] = balances.get(player.player_id, 0.0) - rnd.entry_fee
        for pid, amount in tilt.payouts.items():
            balances[pid] = balances.get(pid, 0.0) + amount

    return balances


def build_player_balances(
    players: Mapping[str, str],
    payment_items: Sequence[PaymentItem] = (),
    expenses: Sequence[Expense] = (),
    skins_rounds: Sequence[RoundSkins] = (),
    tilt: Optional[TiltTournament] = None,
) -> List[PlayerBalance]:
    """
    Combine payment, expense and gambling balances per player.

    Args:
        players: Player id -> display name
    """
    ids = list(players)
    payments = payment_balances(ids, payment_items)
    spent = expense_balances(ids, expenses)
    gambling = gambling_balances(ids, skins_rounds, tilt)

    balances = []
    for pid, name in players.items():
        payment_bal = round_money(payments.get(pid, 0.0))
        expense_bal = round_money(spent.get(pid, 0.0))
        gambling_bal = round_money(gambling.get(pid, 0.0))
        balances.append(PlayerBalance(
            player_id=pid,
            name=name,
            net_balance=round_money(payment_bal + expense_bal + gambling_bal),
            payment_balance=payment_bal,
            expense_balance=expense_bal,
            gambling_balance=gambling_bal,
        ))
    return balances


# ============================================================================
# SETTLEMENT
# ============================================================================

def simplify_debts(balances: Sequence[PlayerBalance]) -> List[SimplifiedDebt]:
    """
    Reduce balances to a short list of transfers.

    Repeatedly settles the largest creditor against the largest debtor.
    Balances are fungible, so transfers need not follow who paid for what.
    Produces at most N-1 transfers for N non-zero balances.
    """
    creditors: Dict[str, float] = {}
    debtors: Dict[str, float] = {}
    names = {}

    for b in balances:
        amount = round_money(b.net_balance)
        names[b.player_id] = b.name
        if amount >= SETTLED_EPSILON:
            creditors[b.player_id] = amount
        elif amount <= -SETTLED_EPSILON:
            debtors[b.player_id] = -amount

    transfers: List[SimplifiedDebt] = []
    while creditors and debtors:
        creditor = max(creditors, key=creditors.get)
        debtor = max(debtors, key=debtors.get)
        amount = min(creditors[creditor], debtors[debtor])

        transfers.append(SimplifiedDebt(
            from_player_id=debtor,
            from_name=names[debtor],
            to_player_id=creditor,
            to_name=names[creditor],
            amount=round_money(amount),
        ))

        creditors[creditor] -= amount
        debtors[debtor] -= amount
        if creditors[creditor] < SETTLED_EPSILON:
            del creditors[creditor]
        if debtors[debtor] < SETTLED_EPSILON:
            del debtors[debtor]

    if creditors or debtors:
        logger.warning(
            f"Balances do not net to zero, unsettled: "
            f"{sum(creditors.values()) - sum(debtors.values()):.2f}"
        )

    return transfers
