"""Tests for candidate display and interactive stream selection.

``questionary`` and the Rich table are mocked to avoid terminal
interaction.  We test the logical mapping between the user's selection
and the returned :class:`StreamRecord`.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from yt_html5.cli.stream_prompt import (
    _build_choice_label,
    _format_bitrate,
    _format_filesize,
    _format_tracks,
    display_candidates,
    prompt_stream_selection,
)
from yt_html5.core.models import MediaKind, Playability, StreamRecord
from yt_html5.exceptions import FormatSelectionError


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _rec(**overrides: Any) -> StreamRecord:
    defaults: dict[str, Any] = {
        "raw": None,
        "url": "https://cdn.example/137",
        "itag": 137,
        "format_label": "1080p",
        "media_kind": MediaKind.VIDEO,
        "mime_subtype": "mp4",
        "codecs": ("avc1.640028",),
        "has_audio": False,
        "has_video": True,
        "playability": Playability.PROBABLY,
        "bitrate": 2_500_000,
        "content_length": 50_000_000,
    }
    defaults.update(overrides)
    return StreamRecord(**defaults)


def _questionary(answer: object) -> MagicMock:
    questionary_mod = MagicMock()
    questionary_mod.Choice = _real_choice_class()
    questionary_mod.select.return_value.ask.return_value = answer
    return questionary_mod


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

class TestFormatFilesize:
    def test_none_returns_unknown(self) -> None:
        assert _format_filesize(None) == "Unknown"

    def test_zero_returns_unknown(self) -> None:
        assert _format_filesize(0) == "Unknown"

    def test_bytes_to_mb(self) -> None:
        assert _format_filesize(1_048_576) == "1.0 MB"

    def test_large_filesize(self) -> None:
        assert _format_filesize(524_288_000) == "500.0 MB"


class TestFormatBitrate:
    def test_zero_returns_dash(self) -> None:
        assert _format_bitrate(0) == "—"

    def test_kbps(self) -> None:
        assert _format_bitrate(2_500_000) == "2500 kbps"

    def test_rounded(self) -> None:
        assert _format_bitrate(129_600) == "130 kbps"


class TestFormatTracks:
    def test_muxed(self) -> None:
        assert _format_tracks(_rec(has_audio=True)) == "A+V"

    def test_video_only(self) -> None:
        assert _format_tracks(_rec()) == "V"

    def test_audio_only(self) -> None:
        assert _format_tracks(_rec(has_audio=True, has_video=False)) == "A"

    def test_neither(self) -> None:
        assert _format_tracks(_rec(has_video=False)) == "?"


class TestBuildChoiceLabel:
    def test_contains_all_fields(self) -> None:
        label = _build_choice_label(0, _rec())
        assert "1080p" in label
        assert "video/mp4" in label
        assert "2500 kbps" in label
        assert " V " in label

    def test_missing_label(self) -> None:
        assert "?" in _build_choice_label(0, _rec(format_label=None))

    def test_index_one_based_display(self) -> None:
        assert _build_choice_label(0, _rec()).strip().startswith("1.")

    def test_second_item(self) -> None:
        assert "2." in _build_choice_label(1, _rec())


# ---------------------------------------------------------------------------
# display_candidates
# ---------------------------------------------------------------------------

class TestDisplayCandidates:
    def test_one_row_per_record(self) -> None:
        table_cls = MagicMock()
        with patch("yt_html5.cli.stream_prompt._import_rich_table", return_value=table_cls):
            display_candidates("abc123", [_rec(), _rec(itag=136, format_label="720p")])

        rows = table_cls.return_value.add_row.call_args_list
        assert len(rows) == 2
        assert rows[0].args[:2] == ("1", "1080p")
        assert rows[1].args[:2] == ("2", "720p")
        assert rows[0].args[4] == "probably"

    def test_empty_list(self) -> None:
        table_cls = MagicMock()
        with patch("yt_html5.cli.stream_prompt._import_rich_table", return_value=table_cls):
            display_candidates("abc123", [])
        table_cls.return_value.add_row.assert_not_called()


# ---------------------------------------------------------------------------
# prompt_stream_selection — selection mapping
# ---------------------------------------------------------------------------

class TestPromptStreamSelection:
    """``questionary.select().ask()`` is mocked to return a known index."""

    @patch("yt_html5.cli.stream_prompt._import_questionary")
    def test_returns_selected_record(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _questionary(1)
        records = [_rec(), _rec(itag=248, mime_subtype="webm")]

        with patch(
            "yt_html5.cli.stream_prompt._import_rich_table",
            return_value=_real_table_class(),
        ):
            result = prompt_stream_selection("abc123", records)
        assert result is records[1]

    @patch("yt_html5.cli.stream_prompt._import_questionary")
    def test_none_selection_raises_format_selection_error(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _questionary(None)

        with patch(
            "yt_html5.cli.stream_prompt._import_rich_table",
            return_value=_real_table_class(),
        ):
            with pytest.raises(FormatSelectionError, match="No stream selected"):
                prompt_stream_selection("abc123", [_rec()])

    @patch("yt_html5.cli.stream_prompt._import_questionary")
    def test_choices_built_correctly(self, mock_q: MagicMock) -> None:
        questionary_mod = _questionary(0)
        mock_q.return_value = questionary_mod
        records = [_rec(), _rec(itag=136), _rec(itag=135)]

        with patch(
            "yt_html5.cli.stream_prompt._import_rich_table",
            return_value=_real_table_class(),
        ):
            prompt_stream_selection("abc123", records)

        choices = questionary_mod.select.call_args.kwargs["choices"]
        assert [choice.value for choice in choices] == [0, 1, 2]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _real_choice_class() -> type:
    """Return a minimal Choice-like class for mocking questionary.Choice."""

    class FakeChoice:
        def __init__(self, title: str, value: int) -> None:
            self.title = title
            self.value = value

    return FakeChoice


def _real_table_class() -> type:
    """Return a minimal Table-like class for tests without rich."""

    class FakeTable:
        def __init__(self, *args: object, **kwargs: object) -> None:
            self.args = args
            self.kwargs = kwargs

        def add_column(self, *args: object, **kwargs: object) -> None:
            _ = args, kwargs

        def add_row(self, *args: object, **kwargs: object) -> None:
            _ = args, kwargs

    return FakeTable
