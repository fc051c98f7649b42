"""Tests for use cases with mocked ports."""

from __future__ import annotations

from pathlib import Path
from threading import Event
from unittest.mock import MagicMock

import pytest
from conftest import make_candidate

from promo_shorts.application.use_cases import (
    GenerateVisualCueUseCase,
    ResolveAssetUseCase,
    SynthesizeNarrationUseCase,
    SynthesizeScriptUseCase,
)
from promo_shorts.domain.entities import ScriptLine, SearchConstraints, VoiceSettings
from promo_shorts.domain.exceptions import (
    ConfigurationError,
    TextGenerationError,
    VoiceGenerationError,
)
from promo_shorts.domain.templates import SCRIPT_TEMPLATES
from promo_shorts.domain.value_objects import Mood, ProductCategory
from promo_shorts.domain.voices import ELEVENLABS_VOICES


class TestSynthesizeScriptUseCase:
    """Tests for template-based script synthesis."""

    def test_funny_beauty_script(self) -> None:
        lines = SynthesizeScriptUseCase().execute("Magic Glow Serum", Mood.FUNNY)

        assert len(lines) == 10
        assert lines[1].text == "Magic Glow Serum literally broke my mirror"
        assert [line.position for line in lines] == list(range(10))

    def test_unknown_mood_falls_back_to_trendy(self) -> None:
        lines = SynthesizeScriptUseCase().execute("Widget", "sarcastic")

        expected = SCRIPT_TEMPLATES[Mood.TRENDY][ProductCategory.DEFAULT]
        assert lines[0].text == expected[0]
        assert lines[1].text == "Widget hits different bestie"

    def test_missing_category_uses_trendy_default(self) -> None:
        # exciting has no food set and no default set
        lines = SynthesizeScriptUseCase().execute("Protein Snack", Mood.EXCITING)

        assert lines[1].text == "Protein Snack hits different bestie"

    def test_first_category_match_wins(self) -> None:
        # "face" (beauty) is checked before "device" (tech)
        lines = SynthesizeScriptUseCase().execute("Face Device", Mood.EXCITING)

        assert lines[0].text == "Face Device is absolutely life changing"

    def test_luxurious_ignores_category(self) -> None:
        lines = SynthesizeScriptUseCase().execute("Gaming Laptop", Mood.LUXURIOUS)

        assert lines[0].text == "Gaming Laptop is pure luxury experience"

    def test_line_timing(self) -> None:
        lines = SynthesizeScriptUseCase().execute("Widget", Mood.TRENDY)

        assert lines[0].start == 0.0
        assert lines[-1].end == pytest.approx(25.0)

    def test_empty_subject_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            SynthesizeScriptUseCase().execute("   ", Mood.TRENDY)


class TestGenerateVisualCueUseCase:
    """Tests for LLM visual cue generation."""

    def test_cue_is_cleaned(self) -> None:
        generator = MagicMock()
        generator.generate.return_value = '  "**serum bottle glowing skin**"\n'

        line = ScriptLine(position=2, text="I'm glowing like a lightbulb now")
        cue = GenerateVisualCueUseCase(generator).execute(line, "Magic Glow Serum", Mood.FUNNY)

        assert cue is not None
        assert cue.position == 2
        assert cue.text == "serum bottle glowing skin"

    def test_prompt_mentions_subject_line_and_mood(self) -> None:
        generator = MagicMock()
        generator.generate.return_value = "keywords"

        line = ScriptLine(position=0, text="Quality that speaks for itself")
        GenerateVisualCueUseCase(generator).execute(line, "Watch", Mood.LUXURIOUS)

        prompt = generator.generate.call_args.args[0]
        assert '"Watch"' in prompt
        assert "Quality that speaks for itself" in prompt
        assert "luxurious mood visuals" in prompt
        assert prompt.endswith("Only return keywords, no explanation.")

    def test_provider_failure_skips_cue(self) -> None:
        generator = MagicMock()
        generator.generate.side_effect = TextGenerationError("all failed")

        line = ScriptLine(position=0, text="x")
        assert GenerateVisualCueUseCase(generator).execute(line, "Widget", Mood.TRENDY) is None

    def test_blank_output_skips_cue(self) -> None:
        generator = MagicMock()
        generator.generate.return_value = "  ** ''  "

        line = ScriptLine(position=0, text="x")
        assert GenerateVisualCueUseCase(generator).execute(line, "Widget", Mood.TRENDY) is None


class TestResolveAssetUseCase:
    """Tests for stock clip resolution."""

    def test_primary_query_combines_subject_and_cue(self) -> None:
        search = MagicMock()
        search.search.return_value = [make_candidate("1")]

        ref = ResolveAssetUseCase(search).execute("glowing skin", "Serum")

        assert ref is not None
        assert ref.url == "https://videos.example/1.mp4"
        assert ref.quality == "hd"
        search.search.assert_called_once_with("Serum glowing skin", SearchConstraints())

    def test_empty_primary_retries_with_cue_only(self) -> None:
        search = MagicMock()
        search.search.side_effect = [[], [make_candidate("2")]]

        ref = ResolveAssetUseCase(search).execute("glowing skin", "Serum")

        assert ref is not None and ref.provider_id == "2"
        assert [c.args[0] for c in search.search.call_args_list] == [
            "Serum glowing skin",
            "glowing skin",
        ]

    def test_skips_out_of_window_and_non_hd(self) -> None:
        search = MagicMock()
        search.search.return_value = [
            make_candidate("short", duration=5),
            make_candidate("long", duration=41),
            make_candidate("sd", duration=20, quality="sd"),
            make_candidate("ok", duration=40),
        ]

        ref = ResolveAssetUseCase(search).execute("cue", "Serum")

        assert ref is not None and ref.provider_id == "ok"

    def test_window_bounds_are_inclusive(self) -> None:
        use_case = ResolveAssetUseCase(MagicMock())

        assert use_case.select([make_candidate("a", duration=8)]).provider_id == "a"
        assert use_case.select([make_candidate("b", duration=40)]).provider_id == "b"

    def test_empty_link_is_ignored(self) -> None:
        use_case = ResolveAssetUseCase(MagicMock())

        assert use_case.select([make_candidate("a", link="")]) is None

    def test_no_candidates_returns_none(self) -> None:
        search = MagicMock()
        search.search.return_value = []

        assert ResolveAssetUseCase(search).execute("cue", "Serum") is None
        assert search.search.call_count == 2

    def test_search_failure_returns_none(self) -> None:
        search = MagicMock()
        search.search.side_effect = ConnectionError("Pexels down")

        assert ResolveAssetUseCase(search).execute("cue", "Serum") is None

    def test_unconfigured_search_is_raised(self) -> None:
        search = MagicMock()
        search.search.side_effect = ConfigurationError("Pexels API key is missing")

        with pytest.raises(ConfigurationError):
            ResolveAssetUseCase(search).execute("cue", "Serum")


class TestSynthesizeNarrationUseCase:
    """Tests for narration synthesis."""

    def test_narration_text_joins_lines(self) -> None:
        lines = [ScriptLine(0, "First line"), ScriptLine(1, "Second line")]

        assert SynthesizeNarrationUseCase.narration_text(lines) == "First line. Second line."

    def test_voice_selection_first_match(self, tmp_path: Path) -> None:
        use_case = SynthesizeNarrationUseCase(MagicMock(), ELEVENLABS_VOICES, tmp_path)

        # "tech" precedes "gadgets" in the table
        assert use_case.select_voice("Tech Gadgets Bundle") == ELEVENLABS_VOICES["tech"]
        assert use_case.select_voice("Luxury Candle") == ELEVENLABS_VOICES["default"]

    def test_successful_synthesis(self, tmp_path: Path) -> None:
        provider = MagicMock()
        provider.name = "elevenlabs"
        provider.synthesize.return_value = b"ID3audio"
        settings = VoiceSettings(stability=0.5)

        use_case = SynthesizeNarrationUseCase(provider, ELEVENLABS_VOICES, tmp_path, settings)
        asset = use_case.execute("Hello.", "voice-1", run_id=1700000000000)

        assert asset.path == tmp_path / "voice-1700000000000.mp3"
        assert asset.path.read_bytes() == b"ID3audio"
        assert asset.voice_id == "voice-1"
        assert asset.duration_seconds == 25.0
        provider.synthesize.assert_called_once_with("Hello.", "voice-1", settings)

    def test_provider_failure_raises_domain_error(self, tmp_path: Path) -> None:
        provider = MagicMock()
        provider.synthesize.side_effect = ConnectionError("TTS unavailable")

        use_case = SynthesizeNarrationUseCase(provider, ELEVENLABS_VOICES, tmp_path)
        with pytest.raises(VoiceGenerationError, match="TTS unavailable"):
            use_case.execute("Hello.", "voice-1", run_id=1)
        assert not (tmp_path / "voice-1.mp3").exists()

    def test_provider_domain_error_passes_through(self, tmp_path: Path) -> None:
        provider = MagicMock()
        error = VoiceGenerationError("quota exceeded")
        provider.synthesize.side_effect = error

        use_case = SynthesizeNarrationUseCase(provider, ELEVENLABS_VOICES, tmp_path)
        with pytest.raises(VoiceGenerationError) as exc_info:
            use_case.execute("Hello.", "voice-1", run_id=1)
        assert exc_info.value is error

    def test_cancelled_synthesis_writes_nothing(self, tmp_path: Path) -> None:
        provider = MagicMock()
        provider.synthesize.return_value = b"ID3audio"
        cancel = Event()
        cancel.set()

        use_case = SynthesizeNarrationUseCase(provider, ELEVENLABS_VOICES, tmp_path)
        with pytest.raises(VoiceGenerationError, match="cancelled"):
            use_case.execute("Hello.", "voice-1", 1, "en", 25.0, cancel)
        assert not (tmp_path / "voice-1.mp3").exists()
