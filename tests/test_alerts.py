"""Tests for the drawdown alert evaluator.

**Feature: prop-journal**
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from propjournal.models import Account, ComplianceEntry, Database, Firm
from propjournal.reporting import has_low_drawdown_warning, low_drawdown_alerts


def _db(account: Account, *entries: ComplianceEntry) -> Database:
    return Database(
        firms=(Firm(id="f1", name="Apex"), Firm(id="f2", name="Other")),
        accounts=(account,),
        compliance=entries,
    )


def _entry(date: str = "2024-01-01", end: str = "", manual: str = "") -> ComplianceEntry:
    return ComplianceEntry(
        id=f"c-{date}", account_id="a1", date=date,
        ending_balance=end, manual_drawdown_remaining=manual,
    )


class TestLowDrawdownWarning:
    """
    **Feature: prop-journal, Property 9: Low Drawdown Warning**

    An account warns when its remaining drawdown (manual override, else
    derived from initial and latest ending balance) is under 20% of its
    limit, trailing limit first.
    """

    def test_manual_override_below_threshold(self):
        account = Account(id="a1", firm_id="f1", trailing_drawdown_limit="1000")
        assert has_low_drawdown_warning(_db(account, _entry(manual="150")))

    def test_manual_override_above_threshold(self):
        account = Account(id="a1", firm_id="f1", trailing_drawdown_limit="1000")
        assert not has_low_drawdown_warning(_db(account, _entry(manual="250")))

    def test_exactly_twenty_percent_is_not_low(self):
        account = Account(id="a1", firm_id="f1", trailing_drawdown_limit="1000")
        assert not has_low_drawdown_warning(_db(account, _entry(manual="200")))

    def test_derived_remaining(self):
        account = Account(id="a1", firm_id="f1", initial_balance="50000", overall_max_loss_limit="2000")
        assert has_low_drawdown_warning(_db(account, _entry(end="48300")))
        assert not has_low_drawdown_warning(_db(account, _entry(end="48500")))

    def test_uses_latest_entry(self):
        account = Account(id="a1", firm_id="f1", initial_balance="50000", overall_max_loss_limit="2000")
        db = _db(account, _entry("2024-01-02", end="49900"), _entry("2024-01-01", end="48100"))
        assert not has_low_drawdown_warning(db)

    def test_trailing_limit_takes_precedence(self):
        account = Account(
            id="a1", firm_id="f1", initial_balance="50000",
            trailing_drawdown_limit="1000", overall_max_loss_limit="5000",
        )
        # 900 lost: 10% of the trailing limit left, 82% of the overall limit
        assert has_low_drawdown_warning(_db(account, _entry(end="49100")))

    def test_initial_balance_falls_back_to_first_entry(self):
        account = Account(id="a1", firm_id="f1", overall_max_loss_limit="1000")
        first = ComplianceEntry(id="c1", account_id="a1", date="2024-01-01",
                                starting_balance="10000", ending_balance="9500")
        latest = ComplianceEntry(id="c2", account_id="a1", date="2024-01-02", ending_balance="9100")
        assert has_low_drawdown_warning(_db(account, first, latest))

    def test_accounts_without_limits_or_entries_are_skipped(self):
        no_limit = Account(id="a1", firm_id="f1", initial_balance="50000")
        assert not has_low_drawdown_warning(_db(no_limit, _entry(end="10")))

        no_entries = Account(id="a1", firm_id="f1", trailing_drawdown_limit="1000")
        assert not has_low_drawdown_warning(_db(no_entries))

    def test_firm_scope(self):
        account = Account(id="a1", firm_id="f1", trailing_drawdown_limit="1000")
        db = _db(account, _entry(manual="100"))
        assert has_low_drawdown_warning(db, "f1")
        assert not has_low_drawdown_warning(db, "f2")

    def test_alert_details(self):
        account = Account(id="a1", firm_id="f1", name="50K", trailing_drawdown_limit="1000")
        (alert,) = low_drawdown_alerts(_db(account, _entry(manual="150")))
        assert alert.account_name == "50K"
        assert alert.firm_name == "Apex"
        assert alert.remaining == 150
        assert alert.max_limit == 1000
        assert alert.ratio == 0.15
        assert alert.manual is True

    @given(
        limit=st.integers(min_value=1, max_value=10000),
        manual=st.integers(min_value=1, max_value=20000),
    )
    @settings(max_examples=100)
    def test_warning_matches_alert_list(self, limit: int, manual: int):
        """*For any* limit and override, the boolean agrees with the listing."""
        account = Account(id="a1", firm_id="f1", trailing_drawdown_limit=str(limit))
        db = _db(account, _entry(manual=str(manual)))
        assert has_low_drawdown_warning(db) == bool(low_drawdown_alerts(db))
        assert has_low_drawdown_warning(db) == (manual / limit < 0.20)
