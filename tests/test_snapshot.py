"""Tests for the account report calculator.

**Feature: prop-journal**
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from propjournal.models import Account, ComplianceEntry, Database, Firm
from propjournal.reporting import account_report, account_snapshot, snapshot_for

DATES = ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"]


def _account(**fields) -> Account:
    return Account(id="a1", firm_id="f1", name="50K Eval", **fields)


def _entry(entry_id: str, date: str, start: str = "", end: str = "", **fields) -> ComplianceEntry:
    return ComplianceEntry(
        id=entry_id, account_id="a1", date=date,
        starting_balance=start, ending_balance=end, **fields,
    )


class TestScenarios:
    def test_overall_drawdown_after_losing_day(self):
        account = _account(initial_balance="50000", overall_max_loss_limit="2500")
        snap = account_snapshot(account, [_entry("c1", "2024-01-01", "50000", "49000")])

        assert snap.current_balance == 49000
        assert snap.overall_used == 1000
        assert snap.overall_remaining == 1500
        assert snap.as_of_date == "2024-01-01"

    def test_trailing_drawdown_from_high_water_mark(self):
        account = _account(initial_balance="50000", trailing_drawdown_limit="2500")
        entries = [
            _entry("c1", "2024-01-01", "50000", "49000"),
            _entry("c2", "2024-01-02", "49000", "51000"),
            _entry("c3", "2024-01-03", end="50500"),
        ]
        snap = account_snapshot(account, entries)

        assert snap.high_water_mark == 51000
        assert snap.trailing_used == 500
        assert snap.trailing_remaining == 2000
        assert snap.overall_used == 0

    def test_cutoff_reconstructs_earlier_state(self):
        account = _account(initial_balance="50000", trailing_drawdown_limit="2500")
        entries = [
            _entry("c3", "2024-01-03", end="50500"),
            _entry("c1", "2024-01-01", "50000", "49000"),
            _entry("c2", "2024-01-02", "49000", "51000"),
        ]
        snap = account_snapshot(account, entries, "2024-01-02")

        assert snap.current_balance == 51000
        assert snap.high_water_mark == 51000
        assert snap.trailing_used == 0
        assert snap.entry_count == 2
        assert snap.as_of_date == "2024-01-02"

    def test_initial_balance_falls_back_to_first_entry(self):
        entries = [
            _entry("c2", "2024-01-02", "25500", "26000"),
            _entry("c1", "2024-01-01", "25000", "25500"),
        ]
        snap = account_snapshot(_account(), entries)
        assert snap.initial_balance == 25000
        assert snap.profit_incl_withdrawals == 1000

    def test_withdrawals_count_as_profit(self):
        entries = [
            _entry("c1", "2024-01-01", "50000", "52000"),
            _entry("c2", "2024-01-02", "52000", "51000", withdrew_funds=True, withdrawal_amount="1,000"),
        ]
        snap = account_snapshot(_account(initial_balance="$50,000"), entries)
        assert snap.total_withdrawals == 1000
        assert snap.profit_incl_withdrawals == 2000

    def test_no_entries(self):
        snap = account_snapshot(_account(initial_balance="50000", overall_max_loss_limit="2000"), [])
        assert snap.current_balance == 0
        assert snap.high_water_mark == 0
        assert snap.as_of_date is None
        assert snap.overall_used == 50000
        assert snap.overall_remaining == 0

    def test_unset_limits_report_zero_remaining(self):
        snap = account_snapshot(_account(initial_balance="50000"), [_entry("c1", "2024-01-01", end="49000")])
        assert snap.overall_remaining == 0
        assert snap.trailing_remaining == 0


class TestMonotonicCutoff:
    """
    **Feature: prop-journal, Property 7: Monotonic Cutoff**

    *For any* entries and cutoff, the snapshot only depends on entries dated
    on or before the cutoff, and an earlier cutoff never considers more
    entries.
    """

    @given(
        rows=st.lists(
            st.tuples(st.sampled_from(DATES), st.integers(min_value=45000, max_value=55000)),
            max_size=10,
        ),
        cutoffs=st.tuples(st.sampled_from(DATES), st.sampled_from(DATES)),
    )
    @settings(max_examples=150)
    def test_cutoff_is_a_prefix(self, rows, cutoffs):
        account = _account(initial_balance="50000", trailing_drawdown_limit="2000")
        entries = [_entry(f"c{i}", d, end=str(v)) for i, (d, v) in enumerate(rows)]
        early, late = sorted(cutoffs)

        snap_late = account_snapshot(account, entries, late)
        prefix_only = account_snapshot(account, [e for e in entries if e.date <= late])
        assert snap_late == prefix_only

        snap_early = account_snapshot(account, entries, early)
        assert snap_early.entry_count <= snap_late.entry_count


class TestReportQueries:
    def _db(self) -> Database:
        return Database(
            firms=(Firm(id="f1", name="Apex"), Firm(id="f2", name="Topstep")),
            accounts=(
                Account(id="a2", firm_id="f2", name="Combine", platform="Tradovate",
                        initial_balance="50000", overall_max_loss_limit="2000",
                        trailing_drawdown_limit="2000"),
                Account(id="a1", firm_id="f1", name="Apex PA", account_type="Sim Funded"),
            ),
            compliance=(
                ComplianceEntry(id="c1", account_id="a1", date="2024-01-01",
                                starting_balance="25000", ending_balance="25400"),
                ComplianceEntry(id="c2", account_id="a2", date="2024-01-01", ending_balance="49500"),
            ),
        )

    def test_snapshot_for_unknown_account_is_none(self):
        assert snapshot_for(self._db(), "missing") is None

    def test_snapshot_for(self):
        snap = snapshot_for(self._db(), "a2")
        assert snap.current_balance == 49500
        assert snap.overall_remaining == 1500

    def test_report_rows_sorted_by_name(self):
        rows = account_report(self._db())
        assert [r.account_id for r in rows] == ["a1", "a2"]
        assert rows[0].firm_name == "Apex"
        assert rows[0].platform == "—"
        assert rows[0].missing_limits is True
        assert rows[1].missing_limits is False

    def test_report_search_is_case_insensitive(self):
        assert [r.account_id for r in account_report(self._db(), query="TOPSTEP")] == ["a2"]
        assert [r.account_id for r in account_report(self._db(), query="sim funded")] == ["a1"]
        assert account_report(self._db(), query="nothing") == []

    def test_report_as_of(self):
        rows = account_report(self._db(), account_id="a1", as_of="2023-12-31")
        assert len(rows) == 1
        assert rows[0].snapshot.current_balance == 0
        assert rows[0].snapshot.as_of_date is None

    @pytest.mark.parametrize("as_of", [None, "2024-01-01", "2030-01-01"])
    def test_report_matches_snapshot_for(self, as_of):
        db = self._db()
        for row in account_report(db, as_of=as_of):
            assert row.snapshot == snapshot_for(db, row.account_id, as_of)
