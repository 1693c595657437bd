from datetime import date

import pytest

from household_reviews.domain.value_objects import (
    AdvanceKind,
    AdvanceOption,
    Priority,
    ReviewStatus,
    month_name,
    parse_month,
)


class TestMonthNames:
    def test_month_name(self):
        assert month_name(1) == "January"
        assert month_name(12) == "December"

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_name_out_of_range(self, month):
        with pytest.raises(ValueError):
            month_name(month)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (3, 3),
            ("3", 3),
            (" 11 ", 11),
            ("March", 3),
            ("march", 3),
            ("Sep", 9),
            ("sept", 9),
            ("DECEMBER", 12),
        ],
    )
    def test_parse_month(self, value, expected):
        assert parse_month(value) == expected

    @pytest.mark.parametrize("value", ["Ma", "Smarch", "", "0", 13])
    def test_parse_month_rejects_unknown(self, value):
        with pytest.raises(ValueError):
            parse_month(value)


class TestAdvanceOption:
    def test_factories(self):
        assert AdvanceOption.none().kind == AdvanceKind.NONE
        assert AdvanceOption.next_month().kind == AdvanceKind.NEXT_MONTH
        custom = AdvanceOption.custom(date(2024, 6, 1))
        assert custom.kind == AdvanceKind.CUSTOM_DATE
        assert custom.custom_date == date(2024, 6, 1)

    def test_custom_requires_date(self):
        with pytest.raises(ValueError, match="required"):
            AdvanceOption(AdvanceKind.CUSTOM_DATE)

    def test_date_only_allowed_for_custom(self):
        with pytest.raises(ValueError, match="not allowed"):
            AdvanceOption(AdvanceKind.NEXT_MONTH, date(2024, 6, 1))


class TestEnums:
    def test_enum_values_match_display_labels(self):
        assert Priority("VIP") == Priority.VIP
        assert ReviewStatus.OVERDUE.value == "Overdue"
