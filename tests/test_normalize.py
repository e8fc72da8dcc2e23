"""Property-based tests for database normalization.

**Feature: prop-journal**
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from propjournal.db.normalize import normalize, normalize_with_report
from propjournal.models import Database

ACCOUNT_KEYS = [
    "id", "firmId", "name", "accountType", "platform", "startDate",
    "initialBalance", "overallMaxLossLimit", "trailingDrawdownLimit", "legacyField",
]
COMPLIANCE_KEYS = [
    "id", "accountId", "date", "complianceGrade", "startingBalance", "endingBalance",
    "dailyPnL", "manualDrawdownRemaining", "stayedWithinDailyMaxLoss",
    "followedStopRule11", "withdrewFunds", "withdrawalAmount", "notes", "oldField",
]
JOURNAL_KEYS = ["id", "date", "focus", "hardStopTime", "keyLevels", "tradingRules"]

json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-10**6, max_value=10**6),
    st.floats(allow_nan=True, allow_infinity=True),
    st.text(max_size=6),
    st.sampled_from(["Evaluation", "Live", "A", "F", "2024-01-01", "f1", "a1"]),
)
ids = st.sampled_from(["f1", "f2", "a1", "a2", "a3", "j1", 7, "", None])


def record_strategy(keys: list[str], id_keys: tuple[str, ...]):
    """Generate a raw record with a random subset of known and legacy keys."""
    values = st.dictionaries(st.sampled_from(keys), json_scalars, max_size=len(keys))
    refs = st.fixed_dictionaries({}, optional={k: ids for k in id_keys})
    return st.builds(lambda v, r: {**v, **r}, values, refs)


raw_databases = st.one_of(
    st.none(),
    st.integers(),
    st.text(max_size=5),
    st.fixed_dictionaries(
        {},
        optional={
            "firms": st.one_of(
                st.lists(
                    st.one_of(
                        record_strategy(["id", "name"], ("id",)),
                        json_scalars,
                    ),
                    max_size=4,
                ),
                json_scalars,
            ),
            "accounts": st.lists(record_strategy(ACCOUNT_KEYS, ("id", "firmId")), max_size=5),
            "compliance": st.lists(
                record_strategy(COMPLIANCE_KEYS, ("id", "accountId")), max_size=8
            ),
            "journals": st.lists(
                st.one_of(
                    record_strategy(JOURNAL_KEYS, ("id",)),
                    st.builds(
                        lambda rules: {"id": "j1", "tradingRules": rules},
                        st.dictionaries(
                            st.sampled_from(["dailyMaxLoss", "maxTrades", "other"]),
                            json_scalars,
                        ),
                    ),
                ),
                max_size=3,
            ),
        },
    ),
)


class TestNormalizationIdempotence:
    """
    **Feature: prop-journal, Property 2: Normalization Idempotence**

    *For any* raw input, normalizing twice gives the same database as
    normalizing once, and normalizing never raises.
    """

    @given(raw=raw_databases)
    @settings(max_examples=200)
    def test_idempotent(self, raw):
        once = normalize(raw)
        assert normalize(once) == once
        assert normalize(once.to_dict()) == once


class TestReferentialIntegrity:
    """
    **Feature: prop-journal, Property 3: Referential Integrity**

    *For any* normalized database, every account references an existing
    firm and every compliance entry references an existing account.
    """

    @given(raw=raw_databases)
    @settings(max_examples=200)
    def test_references_resolve(self, raw):
        db = normalize(raw)
        firm_ids = {f.id for f in db.firms}
        account_ids = {a.id for a in db.accounts}
        assert all(a.firm_id in firm_ids for a in db.accounts)
        assert all(c.account_id in account_ids for c in db.compliance)

    def test_orphans_are_dropped_and_counted(self):
        raw = {
            "firms": [{"id": "f1", "name": "Apex"}],
            "accounts": [
                {"id": "a1", "firmId": "f1", "name": "Kept"},
                {"id": "a2", "firmId": "gone", "name": "Orphan"},
            ],
            "compliance": [
                {"id": "c1", "accountId": "a1", "date": "2024-01-01"},
                {"id": "c2", "accountId": "a2", "date": "2024-01-01"},
                {"id": "c3", "accountId": "nobody", "date": "2024-01-01"},
            ],
        }
        db, report = normalize_with_report(raw)

        assert [a.id for a in db.accounts] == ["a1"]
        assert [c.id for c in db.compliance] == ["c1"]
        assert report.dropped_accounts == 1
        assert report.dropped_compliance == 2
        assert report.total == 3


class TestDefaults:
    """Missing fields get defaults; present fields are never overwritten."""

    def test_missing_collections_are_empty(self):
        assert normalize({}) == Database()
        assert normalize(None) == Database()
        assert normalize("not a database") == Database()

    def test_account_defaults(self):
        db = normalize({
            "firms": [{"id": "f1", "name": "Apex"}],
            "accounts": [{"id": "a1", "firmId": "f1", "name": "50K", "initialBalance": "50000"}],
        })
        account = db.accounts[0]
        assert account.initial_balance == "50000"
        assert account.overall_max_loss_limit == ""
        assert account.trailing_drawdown_limit == ""
        assert account.account_type == "Evaluation"

    def test_compliance_defaults(self):
        db = normalize({
            "firms": [{"id": "f1"}],
            "accounts": [{"id": "a1", "firmId": "f1"}],
            "compliance": [{"id": "c1", "accountId": "a1", "endingBalance": "49000"}],
        })
        entry = db.compliance[0]
        assert entry.ending_balance == "49000"
        assert entry.compliance_grade == "C"
        assert entry.followed_stop_rule_11 is True
        assert entry.stayed_within_daily_max_loss is False
        assert entry.withdrew_funds is False
        assert entry.manual_drawdown_remaining == ""
        assert entry.notes == ""

    def test_wrongly_typed_values_are_coerced(self):
        db = normalize({
            "firms": [{"id": 1, "name": "Numeric id"}],
            "accounts": [{
                "id": "a1",
                "firmId": "1",
                "accountType": "Gambling",
                "initialBalance": 50000,
                "trailingDrawdownLimit": 2500.5,
            }],
            "compliance": [{
                "id": "c1",
                "accountId": "a1",
                "complianceGrade": "Z",
                "withdrewFunds": "yes",
                "followedStopRule11": None,
            }],
        })
        assert db.firms[0].id == "1"
        account = db.accounts[0]
        assert account.account_type == "Evaluation"
        assert account.initial_balance == "50000"
        assert account.trailing_drawdown_limit == "2500.5"
        entry = db.compliance[0]
        assert entry.compliance_grade == "C"
        assert entry.withdrew_funds is False
        assert entry.followed_stop_rule_11 is True

    def test_oversized_integers_fall_back_to_defaults(self):
        huge = 10**5000
        db, report = normalize_with_report({
            "firms": [{"id": "f1", "name": huge}, {"id": huge, "name": "Huge id"}],
            "accounts": [{"id": "a1", "firmId": "f1", "initialBalance": huge}],
        })
        assert [f.id for f in db.firms] == ["f1"]
        assert db.firms[0].name == ""
        assert db.accounts[0].initial_balance == ""
        assert report.dropped_firms == 1

    def test_records_without_ids_are_dropped(self):
        db, report = normalize_with_report({
            "firms": [{"name": "No id"}, {"id": "  ", "name": "Blank"}, "junk"],
            "journals": [{"focus": "no id"}],
        })
        assert db.firms == ()
        assert db.journals == ()
        assert report.dropped_firms == 3
        assert report.dropped_journals == 1

    def test_trading_rules_merge_per_field(self):
        db = normalize({
            "journals": [{"id": "j1", "date": "2024-01-02", "tradingRules": {"maxTrades": "3"}}],
        })
        journal = db.journals[0]
        assert journal.trading_rules.max_trades == "3"
        assert journal.trading_rules.daily_max_loss == ""
        assert journal.hard_stop_time == "11:00 AM"

    def test_serialized_form_uses_camel_case(self):
        db = normalize({
            "firms": [{"id": "f1", "name": "Apex"}],
            "accounts": [{"id": "a1", "firmId": "f1"}],
        })
        data = db.to_dict()
        assert set(data) == {"firms", "accounts", "journals", "compliance"}
        assert data["accounts"][0]["firmId"] == "f1"
        assert "trailingDrawdownLimit" in data["accounts"][0]
