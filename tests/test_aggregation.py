"""Tests for the pure aggregation functions."""

from decimal import Decimal

import pytest

from household_meter.services.aggregation import (
    build_yearly_report,
    report_rows,
    rollup_by_month_and_user,
    rollup_by_user,
    summarize,
    total_for_owner,
)
from household_meter.services.kwh import round_kwh
from tests.factories import make_reading, ms


@pytest.fixture
def household_readings():
    return [
        make_reading("alice", "2.5", ms(2024, 1, 5), created_by="alice"),
        make_reading("bob", "4.0", ms(2024, 1, 20), created_by="bob"),
        make_reading("alice", "1.25", ms(2024, 2, 3), created_by="bob"),
        make_reading("alice", "6.0", ms(2024, 3, 31, 23, 59), created_by="alice"),
        make_reading("bob", "0.75", ms(2024, 12, 24), created_by="bob"),
    ]


class TestRoundKwh:
    """Tests for the single rounding rule."""

    def test_default_step_is_three_decimals(self):
        assert round_kwh(Decimal("5.12349")) == Decimal("5.123")
        assert round_kwh(Decimal("5.1235")) == Decimal("5.124")

    def test_half_step(self):
        assert round_kwh(Decimal("5.24"), Decimal("0.5")) == Decimal("5.0")
        assert round_kwh(Decimal("5.25"), Decimal("0.5")) == Decimal("5.5")

    def test_tenth_step(self):
        assert round_kwh(Decimal("5.25"), Decimal("0.1")) == Decimal("5.3")

    def test_float_input(self):
        assert round_kwh(15.5 - 10.0) == Decimal("5.500")


class TestRollupByUser:
    """Tests for per-user rollups."""

    def test_groups_by_owner(self, household_readings):
        rollups = {r.username: r for r in rollup_by_user(household_readings)}
        assert set(rollups) == {"alice", "bob"}

        alice = rollups["alice"]
        assert alice.total_kwh == 9.75
        assert alice.count == 3
        assert alice.min_kwh == 1.25
        assert alice.max_kwh == 6.0
        assert alice.avg_kwh == 3.25

        bob = rollups["bob"]
        assert bob.total_kwh == 4.75
        assert bob.count == 2

    def test_sorted_by_username(self, household_readings):
        assert [r.username for r in rollup_by_user(household_readings)] == ["alice", "bob"]

    def test_on_behalf_reading_counts_for_owner_not_creator(self):
        rollups = rollup_by_user([make_reading("bob", "3.0", ms(2024, 5, 1), created_by="alice")])
        assert [r.username for r in rollups] == ["bob"]

    def test_legacy_username_fallback(self):
        legacy = make_reading(None, "2.0", ms(2024, 5, 1), username="carol")
        assert [r.username for r in rollup_by_user([legacy])] == ["carol"]

    def test_unknown_when_no_owner_fields(self):
        orphan = make_reading(None, "2.0", ms(2024, 5, 1), username="")
        assert [r.username for r in rollup_by_user([orphan])] == ["unknown"]

    def test_empty(self):
        assert rollup_by_user([]) == []

    def test_totals_equal_sum_of_deltas(self):
        deltas = [Decimal("0.125"), Decimal("1.5"), Decimal("2.333"), Decimal("10"), Decimal("0.042")]
        owners = ["alice", "bob", "alice", "carol", "bob"]
        readings = [
            make_reading(owner, str(delta), ms(2024, 6, i + 1))
            for i, (owner, delta) in enumerate(zip(owners, deltas, strict=True))
        ]

        for rollup in rollup_by_user(readings):
            expected = sum(
                (d for o, d in zip(owners, deltas, strict=True) if o == rollup.username),
                Decimal("0"),
            )
            assert Decimal(str(rollup.total_kwh)) == expected

        assert Decimal(str(summarize(readings).total_kwh)) == sum(deltas, Decimal("0"))


class TestRollupByMonthAndUser:
    """Tests for the twelve-month table."""

    def test_twelve_rows_zero_filled(self, household_readings):
        months = rollup_by_month_and_user(household_readings)
        assert [m.month for m in months] == [f"{i:02d}" for i in range(1, 13)]
        for month in months:
            assert set(month.totals) == {"alice", "bob"}

    def test_values_land_in_utc_month(self, household_readings):
        months = {m.month: m.totals for m in rollup_by_month_and_user(household_readings)}
        assert months["01"] == {"alice": 2.5, "bob": 4.0}
        assert months["02"] == {"alice": 1.25, "bob": 0.0}
        # 23:59 UTC on March 31st is still March
        assert months["03"]["alice"] == 6.0
        assert months["04"] == {"alice": 0.0, "bob": 0.0}
        assert months["12"]["bob"] == 0.75

    def test_explicit_user_columns(self, household_readings):
        months = rollup_by_month_and_user(household_readings, ["alice", "bob", "zed"])
        assert months[0].totals["zed"] == 0.0


class TestSummarize:
    """Tests for the global summary."""

    def test_summary(self, household_readings):
        summary = summarize(household_readings)
        assert summary.total_kwh == 14.5
        assert summary.count == 5
        assert summary.avg_per_reading == 2.9
        assert summary.first_timestamp == ms(2024, 1, 5)
        assert summary.last_timestamp == ms(2024, 12, 24)

    def test_empty_set_is_zero_safe(self):
        summary = summarize([])
        assert summary.total_kwh == 0
        assert summary.count == 0
        assert summary.avg_per_reading == 0
        assert summary.first_timestamp is None
        assert summary.last_timestamp is None


class TestReport:
    """Tests for report detail rows and the yearly report."""

    def test_rows_sorted_by_owner_then_time(self, household_readings):
        rows = report_rows(reversed(household_readings))
        assert [(r.username, r.timestamp) for r in rows] == [
            ("alice", ms(2024, 1, 5)),
            ("alice", ms(2024, 2, 3)),
            ("alice", ms(2024, 3, 31, 23, 59)),
            ("bob", ms(2024, 1, 20)),
            ("bob", ms(2024, 12, 24)),
        ]

    def test_rows_collapse_whitespace_in_notes(self):
        reading = make_reading("alice", "1.0", ms(2024, 1, 1), notes="  washing\n machine  ")
        assert report_rows([reading])[0].notes == "washing machine"

    def test_on_behalf_flag_in_rows(self, household_readings):
        rows = report_rows(household_readings)
        flagged = [r for r in rows if r.on_behalf]
        assert len(flagged) == 1
        assert flagged[0].created_by == "bob"
        assert flagged[0].username == "alice"

    def test_yearly_report(self, household_readings):
        report = build_yearly_report(household_readings, 2024, generated_at=123)
        assert report.year == 2024
        assert report.generated_at == 123
        assert report.summary.count == 5
        assert [u.username for u in report.users] == ["alice", "bob"]
        assert len(report.months) == 12
        assert len(report.rows) == 5

    def test_total_for_owner(self, household_readings):
        assert total_for_owner(household_readings, "alice") == Decimal("9.750")
        assert total_for_owner(household_readings, "nobody") == Decimal("0.000")
