"""Tests for header/continuation line classification."""

from chatlog_reader.parsing.lines import HeaderLine, classify_line


class TestHeaderLines:
    def test_ios_bracketed_with_seconds_and_meridiem(self):
        header = classify_line("[1/2/23, 10:00:00 AM] Alice: Hello")
        assert header == HeaderLine(timestamp="1/2/23, 10:00:00 AM", sender="Alice", body="Hello")

    def test_android_hyphen_separator(self):
        header = classify_line("26/05/2023, 21:14 - Bob Smith: Hi there")
        assert header is not None
        assert header.timestamp == "26/05/2023, 21:14"
        assert header.sender == "Bob Smith"
        assert header.body == "Hi there"

    def test_dotted_date_without_comma(self):
        header = classify_line("26.05.23 21:14 - Carol: ok")
        assert header is not None
        assert header.timestamp == "26.05.23 21:14"
        assert header.sender == "Carol"

    def test_year_first_date(self):
        header = classify_line("2023-05-26, 9:05 pm - Dave: hey")
        assert header is not None
        assert header.timestamp == "2023-05-26, 9:05 pm"

    def test_colon_separator(self):
        header = classify_line("26/05/2023, 21:14: Erin: back soon")
        assert header is not None
        assert header.timestamp == "26/05/2023, 21:14"
        assert header.sender == "Erin"
        assert header.body == "back soon"

    def test_seconds_never_split_into_sender(self):
        header = classify_line("[26/05/23, 10:00:00] Alice: hi")
        assert header is not None
        assert header.timestamp == "26/05/23, 10:00:00"
        assert header.sender == "Alice"

    def test_phone_number_sender(self):
        header = classify_line("[26/05/23, 10:00:00] +44 7700 900123: call me")
        assert header is not None
        assert header.sender == "+44 7700 900123"

    def test_body_keeps_later_colons(self):
        header = classify_line("[26/05/23, 10:00:00] Alice: meet at 10:30: bring snacks")
        assert header is not None
        assert header.sender == "Alice"
        assert header.body == "meet at 10:30: bring snacks"

    def test_body_is_raw(self):
        header = classify_line("[26/05/23, 10:00:00] Alice:   spaced  ")
        assert header is not None
        assert header.body == "  spaced  "


class TestContinuationLines:
    def test_plain_text(self):
        assert classify_line("How are you?") is None

    def test_system_line_without_sender(self):
        assert classify_line("26/05/2023, 21:14 - Messages are end-to-end encrypted.") is None

    def test_missing_space_after_colon(self):
        assert classify_line("[26/05/23, 10:00:00] Alice:") is None

    def test_time_only(self):
        assert classify_line("10:00 Alice: hi") is None

    def test_blank_sender(self):
        assert classify_line("[26/05/23, 10:00:00] : hi") is None
