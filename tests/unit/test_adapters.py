"""Tests for infrastructure adapters with the network patched out."""

from __future__ import annotations

import io
import json
import random
import urllib.error
from pathlib import Path
from threading import Event
from unittest.mock import MagicMock, patch

import pytest

from promo_shorts.core.config import Settings
from promo_shorts.domain.entities import SearchConstraints, VoiceSettings
from promo_shorts.domain.exceptions import (
    AssetResolutionError,
    ConfigurationError,
    RenderError,
    TextGenerationError,
    VoiceGenerationError,
)
from promo_shorts.infrastructure.adapters.cloud_llm import GeminiTextGenerator, OpenAITextGenerator
from promo_shorts.infrastructure.adapters.edge_tts import EdgeTTSSpeechProvider
from promo_shorts.infrastructure.adapters.elevenlabs import ElevenLabsSpeechProvider
from promo_shorts.infrastructure.adapters.http_fetcher import HttpFragmentFetcher
from promo_shorts.infrastructure.adapters.music_library import DirectoryMusicLibrary
from promo_shorts.infrastructure.adapters.ollama import OllamaTextGenerator
from promo_shorts.infrastructure.adapters.pexels import PexelsVideoSearch


def _response(body: bytes) -> MagicMock:
    resp = MagicMock()
    resp.__enter__.return_value.read.return_value = body
    return resp


def _stream(body: bytes) -> MagicMock:
    resp = MagicMock()
    resp.__enter__.return_value = io.BytesIO(body)
    return resp


PEXELS_BODY = {
    "videos": [
        {
            "id": 101,
            "duration": 14,
            "video_files": [
                {"quality": "sd", "link": "https://p/101-sd.mp4", "width": 540, "height": 960},
                {"quality": "hd", "link": "https://p/101-hd.mp4", "width": 1080, "height": 1920},
            ],
        }
    ]
}


class TestPexelsVideoSearch:
    def test_parses_candidates_and_sends_constraints(self, settings: Settings) -> None:
        settings.pexels.api_key = "px-key"
        with patch(
            "urllib.request.urlopen", return_value=_response(json.dumps(PEXELS_BODY).encode())
        ) as urlopen:
            candidates = PexelsVideoSearch(settings).search("glow serum", SearchConstraints())

        assert len(candidates) == 1
        assert candidates[0].provider_id == "101"
        assert candidates[0].duration_seconds == 14.0
        assert [f.quality for f in candidates[0].files] == ["sd", "hd"]

        req = urlopen.call_args.args[0]
        assert req.get_header("Authorization") == "px-key"
        assert "query=glow+serum" in req.full_url
        assert "orientation=portrait" in req.full_url
        assert "per_page=20" in req.full_url
        assert "min_duration=8" in req.full_url
        assert "max_duration=40" in req.full_url

    def test_missing_key_is_a_configuration_error(self, settings: Settings) -> None:
        with pytest.raises(ConfigurationError, match="PEXELS_API_KEY"):
            PexelsVideoSearch(settings).search("x", SearchConstraints())

    def test_http_error_is_wrapped(self, settings: Settings) -> None:
        settings.pexels.api_key = "px-key"
        error = urllib.error.HTTPError("https://p", 429, "Too Many Requests", {}, None)
        with patch("urllib.request.urlopen", side_effect=error):
            with pytest.raises(AssetResolutionError, match="429"):
                PexelsVideoSearch(settings).search("x", SearchConstraints())


class TestElevenLabsSpeechProvider:
    def test_posts_voice_settings(self, settings: Settings) -> None:
        settings.elevenlabs.api_key = "el-key"
        with patch("urllib.request.urlopen", return_value=_response(b"ID3")) as urlopen:
            audio = ElevenLabsSpeechProvider(settings).synthesize(
                "Hello.", "voice-1", VoiceSettings()
            )

        assert audio == b"ID3"
        req = urlopen.call_args.args[0]
        assert req.full_url.endswith("/v1/text-to-speech/voice-1")
        body = json.loads(req.data)
        assert body["model_id"] == "eleven_multilingual_v2"
        assert body["voice_settings"] == {
            "stability": 0.7,
            "similarity_boost": 0.8,
            "style": 0.4,
            "use_speaker_boost": True,
        }

    def test_empty_body_is_an_error(self, settings: Settings) -> None:
        settings.elevenlabs.api_key = "el-key"
        with patch("urllib.request.urlopen", return_value=_response(b"")):
            with pytest.raises(VoiceGenerationError, match="empty"):
                ElevenLabsSpeechProvider(settings).synthesize("x", "v", VoiceSettings())

    def test_missing_key(self, settings: Settings) -> None:
        with pytest.raises(VoiceGenerationError, match="ELEVENLABS_API_KEY"):
            ElevenLabsSpeechProvider(settings).synthesize("x", "v", VoiceSettings())


class TestGeminiTextGenerator:
    def test_joins_candidate_parts(self, settings: Settings) -> None:
        settings.gemini.api_key = "g-key"
        body = {"candidates": [{"content": {"parts": [{"text": "serum "}, {"text": "glow"}]}}]}
        with patch("urllib.request.urlopen", return_value=_response(json.dumps(body).encode())):
            assert GeminiTextGenerator(settings).generate("p") == "serum glow"

    def test_malformed_body(self, settings: Settings) -> None:
        settings.gemini.api_key = "g-key"
        with patch("urllib.request.urlopen", return_value=_response(b'{"candidates": []}')):
            with pytest.raises(TextGenerationError):
                GeminiTextGenerator(settings).generate("p")


class TestDirectoryMusicLibrary:
    def test_lists_audio_files_only(self, tmp_path: Path) -> None:
        for name in ("a.mp3", "b.WAV", "c.m4a", "notes.txt"):
            (tmp_path / name).write_bytes(b"x")

        names = [p.name for p in DirectoryMusicLibrary(tmp_path).tracks()]
        assert names == ["a.mp3", "b.WAV", "c.m4a"]

    def test_pick_is_random_from_pool(self, tmp_path: Path) -> None:
        (tmp_path / "a.mp3").write_bytes(b"x")
        (tmp_path / "b.mp3").write_bytes(b"x")

        track = DirectoryMusicLibrary(tmp_path, rng=random.Random(0)).pick()
        assert track is not None
        assert track.path.parent == tmp_path

    def test_empty_or_missing_pool(self, tmp_path: Path) -> None:
        assert DirectoryMusicLibrary(tmp_path).pick() is None
        assert DirectoryMusicLibrary(tmp_path / "missing").pick() is None


class TestOpenAITextGenerator:
    def test_returns_first_choice(self, settings: Settings) -> None:
        settings.openai.api_key = "sk-test"
        body = {"choices": [{"message": {"content": "  serum glow skin  "}}]}
        with patch(
            "urllib.request.urlopen", return_value=_response(json.dumps(body).encode())
        ) as urlopen:
            assert OpenAITextGenerator(settings).generate("p") == "serum glow skin"

        req = urlopen.call_args.args[0]
        assert req.full_url == "https://api.openai.com/v1/chat/completions"
        assert req.get_header("Authorization") == "Bearer sk-test"
        sent = json.loads(req.data)
        assert sent["model"] == "gpt-3.5-turbo"
        assert sent["messages"] == [{"role": "user", "content": "p"}]
        assert sent["max_tokens"] == 800

    def test_missing_key(self, settings: Settings) -> None:
        with pytest.raises(TextGenerationError, match="OPENAI_API_KEY"):
            OpenAITextGenerator(settings).generate("p")

    def test_transport_error_is_wrapped(self, settings: Settings) -> None:
        settings.openai.api_key = "sk-test"
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused")):
            with pytest.raises(TextGenerationError, match="refused"):
                OpenAITextGenerator(settings).generate("p")


class TestOllamaTextGenerator:
    def test_generate(self, settings: Settings) -> None:
        with patch(
            "urllib.request.urlopen",
            return_value=_response(json.dumps({"response": " glowing skin "}).encode()),
        ) as urlopen:
            assert OllamaTextGenerator(settings).generate("p") == "glowing skin"

        req = urlopen.call_args.args[0]
        assert req.full_url == "http://localhost:11434/api/generate"
        sent = json.loads(req.data)
        assert sent["model"] == "gemma3:12b"
        assert sent["stream"] is False

    def test_empty_response(self, settings: Settings) -> None:
        with patch("urllib.request.urlopen", return_value=_response(b'{"response": ""}')):
            with pytest.raises(TextGenerationError, match="empty"):
                OllamaTextGenerator(settings).generate("p")

    def test_malformed_body(self, settings: Settings) -> None:
        with patch("urllib.request.urlopen", return_value=_response(b"<html>")):
            with pytest.raises(TextGenerationError, match="Ollama generation failed"):
                OllamaTextGenerator(settings).generate("p")

    def test_is_running(self, settings: Settings) -> None:
        with patch("urllib.request.urlopen", return_value=_response(b"{}")):
            assert OllamaTextGenerator(settings).is_running()
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused")):
            assert not OllamaTextGenerator(settings).is_running()


class FakeCommunicate:
    """Stands in for edge_tts.Communicate; streams two audio chunks."""

    instances: list[FakeCommunicate] = []

    def __init__(self, text: str, voice: str, rate: str = "+0%") -> None:
        self.text = text
        self.voice = voice
        self.rate = rate
        FakeCommunicate.instances.append(self)

    async def stream(self):
        yield {"type": "WordBoundary", "offset": 0, "text": "Hello"}
        yield {"type": "audio", "data": b"ID3"}
        yield {"type": "audio", "data": b"more"}


class TestEdgeTTSSpeechProvider:
    def test_collects_audio_chunks(self) -> None:
        FakeCommunicate.instances.clear()
        with patch("edge_tts.Communicate", FakeCommunicate):
            audio = EdgeTTSSpeechProvider(rate="+10%").synthesize(
                "Hello.", "en-US-AriaNeural", VoiceSettings()
            )

        assert audio == b"ID3more"
        communicate = FakeCommunicate.instances[0]
        assert (communicate.text, communicate.voice, communicate.rate) == (
            "Hello.",
            "en-US-AriaNeural",
            "+10%",
        )

    def test_service_error_is_wrapped(self) -> None:
        with patch("edge_tts.Communicate", side_effect=RuntimeError("no route")):
            with pytest.raises(VoiceGenerationError, match="no route"):
                EdgeTTSSpeechProvider().synthesize("Hello.", "en-US-AriaNeural", VoiceSettings())


class TestHttpFragmentFetcher:
    def test_streams_clip_to_destination(self, tmp_path: Path) -> None:
        destination = tmp_path / "tmp" / "clip-1-0.mp4"
        with patch("urllib.request.urlopen", return_value=_stream(b"x" * 200_000)) as urlopen:
            path = HttpFragmentFetcher().fetch("https://videos.example/1.mp4", destination)

        assert path == destination
        assert destination.read_bytes() == b"x" * 200_000
        req = urlopen.call_args.args[0]
        assert req.full_url == "https://videos.example/1.mp4"
        assert urlopen.call_args.kwargs["timeout"] == 30.0

    def test_retries_transient_errors(self, tmp_path: Path) -> None:
        sleeps: list[float] = []
        destination = tmp_path / "clip.mp4"
        with patch(
            "urllib.request.urlopen",
            side_effect=[urllib.error.URLError("reset"), _stream(b"clip")],
        ) as urlopen:
            HttpFragmentFetcher(max_retries=3, sleep=sleeps.append).fetch("https://v/1", destination)

        assert urlopen.call_count == 2
        assert sleeps == [1.0]
        assert destination.read_bytes() == b"clip"

    def test_partial_file_removed_on_failure(self, tmp_path: Path) -> None:
        destination = tmp_path / "clip.mp4"
        resp = MagicMock()
        resp.__enter__.return_value.read.side_effect = [b"part", ConnectionError("reset")]
        with patch("urllib.request.urlopen", return_value=resp):
            with pytest.raises(ConnectionError):
                HttpFragmentFetcher(max_retries=1).fetch("https://v/1", destination)

        assert not destination.exists()

    def test_gives_up_after_max_retries(self, tmp_path: Path) -> None:
        sleeps: list[float] = []
        with patch(
            "urllib.request.urlopen", side_effect=urllib.error.URLError("down")
        ) as urlopen:
            with pytest.raises(urllib.error.URLError):
                HttpFragmentFetcher(max_retries=2, sleep=sleeps.append).fetch(
                    "https://v/1", tmp_path / "clip.mp4"
                )

        assert urlopen.call_count == 2
        assert sleeps == [1.0]

    def test_cancelled_fetch_leaves_no_file(self, tmp_path: Path) -> None:
        destination = tmp_path / "clip.mp4"
        cancel = Event()
        cancel.set()
        with patch("urllib.request.urlopen") as urlopen:
            with pytest.raises(RenderError, match="cancelled"):
                HttpFragmentFetcher().fetch("https://v/1", destination, cancel)

        urlopen.assert_not_called()
        assert not destination.exists()

    def test_cancel_between_chunks(self, tmp_path: Path) -> None:
        destination = tmp_path / "clip.mp4"
        cancel = Event()
        resp = MagicMock()

        def read(size: int) -> bytes:
            cancel.set()
            return b"chunk"

        resp.__enter__.return_value.read.side_effect = read
        with patch("urllib.request.urlopen", return_value=resp):
            with pytest.raises(RenderError, match="cancelled"):
                HttpFragmentFetcher().fetch("https://v/1", destination, cancel)

        assert not destination.exists()
