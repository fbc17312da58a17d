from dataclasses import replace

import pytest

from career import ledger
from career.config import TRANSACTION_JOURNAL_LIMIT
from career.creator import new_club
from career.errors import InsufficientFunds
from career.types import Financials


def test_ffp_thresholds():
    assert ledger.ffp_status(Financials(expenditure=15_000_000)) == "Healthy"
    assert ledger.ffp_status(Financials(expenditure=15_000_001)) == "Warning"
    assert ledger.ffp_status(Financials(expenditure=30_000_000)) == "Warning"
    assert ledger.ffp_status(Financials(expenditure=40_000_000, revenue=9_999_999)) == "Violation"
    assert ledger.ffp_status(Financials(expenditure=40_000_000, revenue=10_000_000)) == "Warning"


def test_status_recomputed_both_ways():
    fin = ledger.post(Financials(), "expenditure", "transfer", 31_000_000)
    assert fin.ffp_status == "Violation" and fin.transfer_spend == 31_000_000
    fin = ledger.post(fin, "revenue", "match_revenue", 20_000_000)
    assert fin.ffp_status == "Healthy"


def test_settle_match_conserves_funds_and_may_go_negative():
    club = new_club(5)
    wages = ledger.weekly_wages(club)
    assert wages == sum(p.salary for p in club.players) + club.manager_salary
    after = ledger.settle_match(club, 750_000)
    assert after.funds == club.funds + 750_000 - wages
    assert after.financials.revenue == 750_000
    assert after.financials.wage_bill == wages
    assert after.financials.expenditure == wages

    broke = ledger.settle_match(replace(club, funds=0), 0)
    assert broke.funds == -wages


def test_charge_refuses_without_touching_the_club():
    club = replace(new_club(5), funds=1_000)
    with pytest.raises(InsufficientFunds) as ei:
        ledger.charge(club, 5_000, "transfer", "Striker")
    assert ei.value.needed == 5_000 and ei.value.available == 1_000
    assert club.funds == 1_000 and club.financials.expenditure == 0

    paid = ledger.charge(club, 1_000, "transfer", "Striker")
    assert paid.funds == 0 and paid.financials.transfer_spend == 1_000


def test_negative_amount_rejected():
    with pytest.raises(ValueError):
        ledger.post(Financials(), "revenue", "x", -1)


def test_journal_is_bounded_and_survives_reset():
    fin = Financials()
    for i in range(TRANSACTION_JOURNAL_LIMIT + 10):
        fin = ledger.post(fin, "revenue", "match_revenue", 1, label=str(i))
    assert len(fin.transactions) == TRANSACTION_JOURNAL_LIMIT
    assert fin.transactions[-1].label == str(TRANSACTION_JOURNAL_LIMIT + 9)
    fresh = ledger.reset_season(fin)
    assert fresh.revenue == 0 and len(fresh.transactions) == TRANSACTION_JOURNAL_LIMIT
