from datetime import date

from goalflow.services.day_parser import (
    day_names_to_numbers,
    day_numbers_to_names,
    format_days_for_display,
    is_day_allowed,
    parse_day_expression,
    parse_day_times,
    validate_day_expression,
    weekday_token,
)

CANONICAL = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def test_keywords_expand_to_fixed_sets():
    assert parse_day_expression("weekdays") == ["Mon", "Tue", "Wed", "Thu", "Fri"]
    assert parse_day_expression("Weekday") == ["Mon", "Tue", "Wed", "Thu", "Fri"]
    assert parse_day_expression("weekends") == ["Sun", "Sat"]
    assert parse_day_expression(" weekend ") == ["Sun", "Sat"]


def test_range_wraps_around_the_week():
    assert set(parse_day_expression("Friday-Monday")) == {"Fri", "Sat", "Sun", "Mon"}
    assert parse_day_expression("Friday-Monday") == ["Sun", "Mon", "Fri", "Sat"]


def test_range_connectors():
    assert parse_day_expression("mon through wed") == ["Mon", "Tue", "Wed"]
    assert parse_day_expression("Tue to Thu") == ["Tue", "Wed", "Thu"]
    assert parse_day_expression("mon - fri") == ["Mon", "Tue", "Wed", "Thu", "Fri"]


def test_list_is_deduplicated_and_week_ordered():
    assert parse_day_expression("Fri, mon, Wednesday, fri") == ["Mon", "Wed", "Fri"]
    assert parse_day_expression("Sat Sun") == ["Sun", "Sat"]
    assert parse_day_expression("tues and thurs") == ["Tue", "Thu"]


def test_abbreviations_and_misspellings():
    assert parse_day_expression("tu, th") == ["Tue", "Thu"]
    assert parse_day_expression("wednsday, fridays") == ["Wed", "Fri"]
    assert parse_day_expression("Mondays") == ["Mon"]


def test_unknown_words_are_dropped():
    assert parse_day_expression("every mon and some xyz") == ["Mon"]
    assert parse_day_expression("whenever") == []
    assert parse_day_expression("") == []
    assert parse_day_expression(None) == []


def test_segments_can_mix_ranges_and_days():
    assert parse_day_expression("Mon-Wed, Sat") == ["Mon", "Tue", "Wed", "Sat"]


def test_output_is_always_a_canonical_subset():
    for text in ["fri,thu,wed,tue,mon,sun,sat", "saturday-tuesday", "weekends, wed", "th sa mo"]:
        days = parse_day_expression(text)
        assert set(days) <= set(CANONICAL)
        assert len(days) == len(set(days))
        assert days == [day for day in CANONICAL if day in days]


def test_validate_day_expression_reports_empty_parse():
    result = validate_day_expression("not a day")
    assert not result.is_valid
    assert result.days == []
    assert "Could not parse day expression" in result.error

    ok = validate_day_expression("Mon,Wed,Fri")
    assert ok.is_valid
    assert ok.days == ["Mon", "Wed", "Fri"]
    assert ok.error is None


def test_parse_day_times_compound_phrase():
    assert parse_day_times("Mon 5pm, Thu 5pm, Sat 10am") == {"Mon": "17:00", "Thu": "17:00", "Sat": "10:00"}


def test_parse_day_times_24_hour_and_minutes():
    assert parse_day_times("Monday 17:00; Thursday 5:30 pm") == {"Mon": "17:00", "Thu": "17:30"}


def test_parse_day_times_skips_bare_numbers():
    assert parse_day_times("Mon 5, Tue 6pm") == {"Tue": "18:00"}


def test_parse_day_times_midnight_and_noon():
    assert parse_day_times("Sun 12am, Sat 12pm") == {"Sun": "00:00", "Sat": "12:00"}


def test_parse_day_times_last_write_wins():
    assert parse_day_times("Mon 5pm, Mon 7am") == {"Mon": "07:00"}


def test_parse_day_times_assigns_time_to_every_day_in_segment():
    assert parse_day_times("Mon and Wed 6:15am") == {"Mon": "06:15", "Wed": "06:15"}
    assert parse_day_times("Mon-Wed 7am") == {"Mon": "07:00", "Tue": "07:00", "Wed": "07:00"}


def test_parse_day_times_clamps_out_of_range_values():
    assert parse_day_times("Mon 25:00, Tue 10:75") == {"Mon": "23:00", "Tue": "10:59"}


def test_parse_day_times_empty_input():
    assert parse_day_times("") == {}
    assert parse_day_times(None) == {}


def test_day_number_helpers():
    assert day_names_to_numbers(["Sun", "Wed", "bogus"]) == [0, 3]
    assert day_numbers_to_names([6, 1, 9]) == ["Sat", "Mon"]
    assert is_day_allowed(1, ["Mon"])
    assert not is_day_allowed(2, ["Mon"])
    assert not is_day_allowed(8, ["Mon"])


def test_weekday_token_uses_sunday_first_calendar():
    assert weekday_token(date(2026, 10, 19)) == "Mon"
    assert weekday_token(date(2026, 10, 25)) == "Sun"


def test_format_days_for_display():
    assert format_days_for_display(["Fri", "Mon", "Tue", "Wed", "Thu"]) == "Weekdays (Mon-Fri)"
    assert format_days_for_display(["Sat", "Sun"]) == "Weekends (Sat-Sun)"
    assert format_days_for_display(["Wed"]) == "Wednesday"
    assert format_days_for_display(["Fri", "Mon"]) == "Monday and Friday"
    assert format_days_for_display(["Fri", "Mon", "Wed"]) == "Monday, Wednesday, and Friday"
