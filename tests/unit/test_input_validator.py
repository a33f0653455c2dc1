"""
Unit tests for InputValidator.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import DragonNestJob, VoteType
from guildhall.modules.shared.exceptions import ValidationError


@pytest.mark.unit
class TestIntegerValidation:
    def test_accepts_numeric_strings(self):
        assert InputValidator.validate_integer("42", "amount") == 42

    def test_accepts_integral_float(self):
        assert InputValidator.validate_integer(3.0, "amount") == 3

    @pytest.mark.parametrize("value", [True, False, 2.5, "4.2", "abc", None, []])
    def test_rejects_non_integers(self, value):
        with pytest.raises(ValidationError):
            InputValidator.validate_integer(value, "amount")

    def test_bounds_are_inclusive(self):
        assert InputValidator.validate_integer(2, "size", min_value=2, max_value=20) == 2
        assert InputValidator.validate_integer(20, "size", min_value=2, max_value=20) == 20

        with pytest.raises(ValidationError, match="at least 2"):
            InputValidator.validate_integer(1, "size", min_value=2)
        with pytest.raises(ValidationError, match="Cannot exceed 20"):
            InputValidator.validate_integer(21, "size", max_value=20)

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_rejects_non_finite_floats(self, value):
        with pytest.raises(ValidationError, match="whole number"):
            InputValidator.validate_id(value, "team_id")

    def test_validate_id_upper_bound(self):
        assert InputValidator.validate_id(2**31 - 1, "id") == 2**31 - 1
        with pytest.raises(ValidationError):
            InputValidator.validate_id(2**31, "id")

    def test_error_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_id(0, "team_id")

        assert exc_info.value.field == "team_id"
        assert exc_info.value.error_code == "VALIDATION_TEAM_ID"


@pytest.mark.unit
class TestStringValidation:
    def test_strips_whitespace(self):
        assert InputValidator.validate_string("  Kaede ", "ign", min_length=1) == "Kaede"

    def test_blank_fails_min_length(self):
        with pytest.raises(ValidationError):
            InputValidator.validate_string("   ", "ign", min_length=1)

    def test_rejects_non_text(self):
        with pytest.raises(ValidationError, match="Must be text"):
            InputValidator.validate_string(123, "ign")

    def test_optional_blank_becomes_none(self):
        assert InputValidator.validate_optional_string("   ", "description") is None
        assert InputValidator.validate_optional_string(None, "description") is None
        assert InputValidator.validate_optional_string(" hi ", "description") == "hi"


@pytest.mark.unit
class TestChoiceValidation:
    def test_member_passes_through(self):
        assert InputValidator.validate_enum(VoteType.UPVOTE, "vote_type", VoteType) is VoteType.UPVOTE

    def test_case_insensitive_value(self):
        assert InputValidator.validate_enum(" DownVote ", "vote_type", VoteType) is VoteType.DOWNVOTE

    def test_unknown_value_lists_choices(self):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_enum("meh", "vote_type", VoteType)

        assert "upvote, downvote" in exc_info.value.message

    def test_job_enum(self):
        assert InputValidator.validate_enum("Sting_Breezer", "job", DragonNestJob) is (
            DragonNestJob.STING_BREEZER
        )


@pytest.mark.unit
class TestDatetimeValidation:
    def test_aware_utc_datetime_unchanged(self):
        when = datetime(2030, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert InputValidator.validate_datetime(when, "event_date") == when

    def test_naive_datetime_is_taken_as_utc(self):
        parsed = InputValidator.validate_datetime(datetime(2030, 5, 1, 12, 0), "event_date")

        assert parsed.tzinfo is timezone.utc
        assert parsed == datetime(2030, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_offset_is_converted_to_utc(self):
        tokyo = timezone(timedelta(hours=9))
        parsed = InputValidator.validate_datetime(
            datetime(2030, 5, 1, 21, 0, tzinfo=tokyo), "event_date"
        )

        assert parsed.tzinfo is timezone.utc
        assert parsed.hour == 12

    def test_iso_string(self):
        parsed = InputValidator.validate_datetime("2030-05-01T12:00:00", "event_date")
        assert parsed == datetime(2030, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_iso_string_with_offset(self):
        parsed = InputValidator.validate_datetime("2030-05-01T14:00:00+02:00", "event_date")
        assert parsed == datetime(2030, 5, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["tomorrow", 12345, None])
    def test_rejects_other_values(self, value):
        with pytest.raises(ValidationError):
            InputValidator.validate_datetime(value, "event_date")


@pytest.mark.unit
class TestDateValidation:
    def test_accepts_date_and_iso_string(self):
        assert InputValidator.validate_date(date(2030, 6, 3), "week_start") == date(2030, 6, 3)
        assert InputValidator.validate_date(" 2030-06-03 ", "week_start") == date(2030, 6, 3)

    def test_datetime_uses_utc_calendar_day(self):
        late_in_tokyo = datetime(2030, 6, 4, 2, 0, tzinfo=timezone(timedelta(hours=9)))
        assert InputValidator.validate_date(late_in_tokyo, "week_start") == date(2030, 6, 3)

    @pytest.mark.parametrize("value", ["03/06/2030", "", None, 20300603])
    def test_rejects_other_values(self, value):
        with pytest.raises(ValidationError, match="calendar date"):
            InputValidator.validate_date(value, "week_start")


@pytest.mark.unit
class TestAmountValidation:
    @pytest.mark.parametrize(
        "value,expected",
        [(10, "10.00"), ("0.01", "0.01"), (12.5, "12.50"), (Decimal("99.9"), "99.90")],
    )
    def test_quantizes_to_cents(self, value, expected):
        assert InputValidator.validate_amount(value, "amount") == Decimal(expected)

    @pytest.mark.parametrize(
        "value", [0, -1, "0.001", "ten", None, True, float("inf"), "NaN", [5]]
    )
    def test_rejects_invalid_amounts(self, value):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_amount(value, "amount")

        assert exc_info.value.field == "amount"

    def test_upper_bound(self):
        cap = Decimal("100.00")
        assert InputValidator.validate_amount("100", "amount", max_value=cap) == cap
        with pytest.raises(ValidationError, match="Cannot exceed"):
            InputValidator.validate_amount("100.01", "amount", max_value=cap)


@pytest.mark.unit
class TestStringListValidation:
    def test_strips_items(self):
        assert InputValidator.validate_string_list([" raid ", "pvp"], "tags") == ["raid", "pvp"]

    def test_accepts_tuple(self):
        assert InputValidator.validate_string_list(("raid",), "tags", max_count=1) == ["raid"]

    def test_too_many_items(self):
        with pytest.raises(ValidationError, match="more than 2 items"):
            InputValidator.validate_string_list(["a", "b", "c"], "tags", max_count=2)

    def test_error_names_item_index(self):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_string_list(["ok", "x" * 30], "tags", max_length=20)

        assert exc_info.value.field == "tags"
        assert exc_info.value.validation_message.startswith("Item 1:")

    def test_rejects_non_list(self):
        with pytest.raises(ValidationError, match="Must be a list"):
            InputValidator.validate_string_list("raid", "tags")
