"""Tests for sliced parsing and parse runs."""

import asyncio
from pathlib import Path

from chatlog_reader.parsing import ParseCursor
from chatlog_reader.scheduler import CancelToken, ParseRun, advance

FIXTURES = Path(__file__).parent / "fixtures"

MEDIA = {
    "IMG-20230513-WA0001.jpg": "file:///m/IMG-20230513-WA0001.jpg",
    "img-20230513-wa0001.jpg": "file:///m/IMG-20230513-WA0001.jpg",
}


def _dicts(messages):
    return [m.to_dict() for m in messages]


def _single_pass(text: str, media=None):
    cursor = ParseCursor()
    result = advance(text, 0, len(text) + 1, media or {}, cursor)
    assert result.next_offset == len(text)
    return result.messages


def _sliced(text: str, limit: int, media=None):
    cursor = ParseCursor()
    messages = []
    offset = 0
    while offset < len(text):
        result = advance(text, offset, limit, media or {}, cursor)
        assert result.next_offset > offset
        messages.extend(result.messages)
        offset = result.next_offset
    return messages


def _transcript(count: int) -> str:
    lines = []
    for i in range(count):
        lines.append(f"[1/2/23, 10:00:{i % 60:02d}] User{i % 3}: message {i}")
    return "\n".join(lines)


class TestAdvance:
    def test_respects_line_budget(self):
        text = _transcript(5)
        cursor = ParseCursor()
        result = advance(text, 0, 2, {}, cursor)
        assert len(result.messages) == 2
        assert cursor.offset == result.next_offset
        assert text[result.next_offset:].startswith("[1/2/23, 10:00:02]")

    def test_blank_lines_do_not_count(self):
        text = "[1/2/23, 10:00:00] A: one\n\n\n   \n[1/2/23, 10:00:01] B: two\n"
        result = advance(text, 0, 2, {}, ParseCursor())
        assert [m.text for m in result.messages] == ["one", "two"]
        assert result.next_offset == len(text)

    def test_offset_past_end(self):
        text = "[1/2/23, 10:00:00] A: one"
        result = advance(text, len(text), 10, {}, ParseCursor())
        assert result.messages == []
        assert result.next_offset == len(text)

    def test_empty_transcript(self):
        result = advance("", 0, 10, {}, ParseCursor())
        assert result.messages == []
        assert result.next_offset == 0

    def test_windows_line_endings(self):
        text = "[1/2/23, 10:00:00] A: one\r\ncontinued\r\n"
        messages = _single_pass(text)
        assert messages[0].text == "one\ncontinued"

    def test_open_message_continues_across_slices(self):
        text = "[1/2/23, 10:00:00] A: one\ntwo\nthree"
        cursor = ParseCursor()
        first = advance(text, 0, 1, {}, cursor)
        second = advance(text, first.next_offset, 10, {}, cursor)
        assert len(first.messages) == 1
        assert second.messages == []
        assert first.messages[0].text == "one\ntwo\nthree"


class TestChunkInvariance:
    def test_every_line_budget_matches_single_pass(self):
        text = (FIXTURES / "android-chat.txt").read_text()
        expected = _dicts(_single_pass(text, MEDIA))
        for limit in range(1, 10):
            assert _dicts(_sliced(text, limit, MEDIA)) == expected, f"limit={limit}"

    def test_every_two_way_split_matches_single_pass(self):
        text = (FIXTURES / "ios-chat.txt").read_text()
        expected = _dicts(_single_pass(text))
        line_count = len([line for line in text.splitlines() if line.strip()])
        for split in range(1, line_count):
            cursor = ParseCursor()
            first = advance(text, 0, split, {}, cursor)
            second = advance(text, first.next_offset, line_count, {}, cursor)
            assert second.next_offset == len(text)
            assert _dicts(first.messages + second.messages) == expected, f"split={split}"

    def test_fixture_records(self):
        messages = _single_pass((FIXTURES / "android-chat.txt").read_text(), MEDIA)
        assert [m.sender for m in messages] == ["Alice", "Bob", "Alice", "Bob"]
        assert messages[1].text == "Sure\nsee you at 8"
        assert messages[1].media_url == "file:///m/IMG-20230513-WA0001.jpg"
        assert messages[3].text == ""
        assert messages[3].media_url is None


class TestParseRun:
    def test_run_returns_all_messages(self):
        run = ParseRun(_transcript(50), first_slice_lines=7, slice_lines=7)
        messages = run.run()
        assert messages is not None
        assert len(messages) == 50
        assert run.finished

    def test_yield_point_called_between_slices(self):
        calls = []
        run = ParseRun(_transcript(10), first_slice_lines=4, slice_lines=3)
        run.run(yield_point=lambda: calls.append(len(run.messages)))
        # Slices of 4, 3, 3 lines: yields after the first two only.
        assert calls == [4, 7]

    def test_progress_cadence(self):
        delivered = []
        run = ParseRun(
            _transcript(10) + "\n",
            first_slice_lines=2,
            slice_lines=2,
            flush_every=4,
            on_progress=lambda messages: delivered.append(len(messages)),
        )
        run.run()
        assert delivered == [2, 6, 10]

    def test_cancel_stops_before_next_slice(self):
        token = CancelToken()
        delivered = []
        run = ParseRun(
            _transcript(30),
            first_slice_lines=10,
            slice_lines=10,
            token=token,
            on_progress=lambda messages: delivered.append(len(messages)),
        )
        assert run.run(yield_point=token.cancel) is None
        assert run.cancelled
        assert not run.finished
        assert len(run.messages) == 10
        assert delivered == [10]

    def test_cancel_before_start(self):
        token = CancelToken()
        token.cancel()
        run = ParseRun(_transcript(3), token=token)
        assert run.run() is None
        assert run.messages == []

    def test_empty_transcript_finishes(self):
        run = ParseRun("")
        assert run.run() == []
        assert run.finished

    def test_run_async_matches_sync(self):
        text = _transcript(40)
        sync_messages = ParseRun(text, first_slice_lines=3, slice_lines=5).run()
        async_messages = asyncio.run(ParseRun(text, first_slice_lines=3, slice_lines=5).run_async())
        assert _dicts(async_messages) == _dicts(sync_messages)

    def test_run_async_custom_yield_point(self):
        yields = []

        async def yield_point():
            yields.append(True)
            await asyncio.sleep(0)

        run = ParseRun(_transcript(9), first_slice_lines=3, slice_lines=3)
        messages = asyncio.run(run.run_async(yield_point))
        assert len(messages) == 9
        assert len(yields) == 2

    def test_large_transcript_is_split_into_many_slices(self):
        text = _transcript(100_000)
        slices = []
        run = ParseRun(text, first_slice_lines=1000, slice_lines=15000)
        messages = run.run(yield_point=lambda: slices.append(len(run.messages)))
        assert len(messages) == 100_000
        # Eight slices: 1000 lines, then up to 15000 each; yields fall between them.
        assert len(slices) == 7
        assert messages[-1].text == "message 99999"
