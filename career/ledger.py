# career/ledger.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List

from .config import FFP_HEALTHY_LIMIT, FFP_WARNING_LIMIT, TRANSACTION_JOURNAL_LIMIT
from .errors import InsufficientFunds
from .types import (
    Club, Financials, Transaction,
    FFP_HEALTHY, FFP_VIOLATION, FFP_WARNING,
)

logger = logging.getLogger(__name__)

REVENUE = "revenue"
EXPENDITURE = "expenditure"


def weekly_wages(club: Club) -> int:
    """Every squad salary plus the manager's, charged once per match."""
    return sum(int(p.salary) for p in club.players) + int(club.manager_salary)


def net_spend(fin: Financials) -> int:
    return int(fin.expenditure) - int(fin.revenue)


def ffp_status(fin: Financials) -> str:
    """Healthy up to 15M net spend, Warning up to 30M, Violation beyond."""
    net = net_spend(fin)
    if net <= FFP_HEALTHY_LIMIT:
        return FFP_HEALTHY
    if net <= FFP_WARNING_LIMIT:
        return FFP_WARNING
    return FFP_VIOLATION


def _journal(entries: List[Transaction], tx: Transaction) -> List[Transaction]:
    out = list(entries) + [tx]
    return out[-TRANSACTION_JOURNAL_LIMIT:]


def post(fin: Financials, kind: str, category: str, amount: int, label: str = "", matchday: int = 0) -> Financials:
    """Return new season totals with one entry applied; status is recomputed, never nudged."""
    amount = int(amount)
    if amount < 0:
        raise ValueError("ledger amounts are positive; use the entry kind for direction")
    tx = Transaction(kind=kind, category=category, amount=amount, label=label, matchday=matchday)
    if kind == REVENUE:
        out = replace(fin, revenue=fin.revenue + amount)
    elif kind == EXPENDITURE:
        out = replace(
            fin,
            expenditure=fin.expenditure + amount,
            wage_bill=fin.wage_bill + (amount if category == "wages" else 0),
            transfer_spend=fin.transfer_spend + (amount if category == "transfer" else 0),
        )
    else:
        raise ValueError(f"unknown ledger entry kind: {kind!r}")
    out = replace(out, transactions=_journal(fin.transactions, tx))
    return replace(out, ffp_status=ffp_status(out))


# ---------------------------------------------------------------------------
# Fund movements (the only places Club.funds changes)
# ---------------------------------------------------------------------------

def settle_match(club: Club, revenue: int) -> Club:
    """
    Credit gate revenue and charge the weekly wage bill. Always applies:
    funds may go negative here.
    """
    wages = weekly_wages(club)
    fin = post(club.financials, REVENUE, "match_revenue", revenue, "Matchday revenue", club.matchday)
    fin = post(fin, EXPENDITURE, "wages", wages, "Weekly wages", club.matchday)
    return replace(club, funds=club.funds + int(revenue) - wages, financials=fin)


def charge(club: Club, amount: int, category: str, label: str = "") -> Club:
    """Pay for a purchase or fee; raises InsufficientFunds without touching the club."""
    amount = int(amount)
    if amount > club.funds:
        logger.info("Rejected %s (%s): need %d, have %d", category, label, amount, club.funds)
        raise InsufficientFunds(amount, club.funds, label or category)
    fin = post(club.financials, EXPENDITURE, category, amount, label, club.matchday)
    return replace(club, funds=club.funds - amount, financials=fin)


def credit(club: Club, amount: int, category: str, label: str = "") -> Club:
    fin = post(club.financials, REVENUE, category, amount, label, club.matchday)
    return replace(club, funds=club.funds + int(amount), financials=fin)


def reset_season(fin: Financials) -> Financials:
    """Fresh season totals; the journal is kept so old entries stay traceable."""
    return Financials(transactions=list(fin.transactions))
