"""
CLI Entry Point — command-line interface for the promo video pipeline.

Provides a user-friendly CLI with Rich console output.

Usage:
    promo-shorts generate --product "Magic Glow Serum" --mood funny
    promo-shorts generate --url https://shop.example/serum --audio music --json
    promo-shorts batch --input products.json
    promo-shorts setup
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from promo_shorts.domain.entities import GenerationRequest, RunResult
from promo_shorts.domain.value_objects import AudioMode, Mood

console = Console()


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv).

    Returns:
        Exit code (0 = success, 1 = failure).
    """
    parser = argparse.ArgumentParser(
        prog="promo-shorts",
        description="🎬 Promo Shorts — 25-second vertical product videos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  promo-shorts generate --product "Magic Glow Serum"   Generate one video
  promo-shorts generate --product Laptop --audio voice Narration only
  promo-shorts setup                                   Validate your configuration
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    gen_parser = subparsers.add_parser("generate", help="Generate one promo video")
    gen_parser.add_argument("--product", default="", help="Product name")
    gen_parser.add_argument("--url", default="", help="Product URL (used when no name is given)")
    gen_parser.add_argument(
        "--mood",
        default=Mood.TRENDY.value,
        help="Script mood: funny, exciting, trendy, luxurious (unknown → trendy)",
    )
    gen_parser.add_argument(
        "--audio",
        default=AudioMode.VOICE_AND_MUSIC.value,
        help="Audio tracks: voice+music, voice, music or none",
    )
    gen_parser.add_argument("--language", default="en", help="Narration language hint")
    gen_parser.add_argument(
        "--no-subtitles", action="store_true", help="Report subtitles as disabled"
    )
    gen_parser.add_argument("--json", action="store_true", help="Print the result payload as JSON")
    gen_parser.add_argument("--env-file", default=".env", help="Path to environment file")

    batch_parser = subparsers.add_parser("batch", help="Generate videos for products in a JSON file")
    batch_parser.add_argument("--input", required=True, help="Path to JSON list of products")
    batch_parser.add_argument("--env-file", default=".env", help="Path to environment file")

    setup_parser = subparsers.add_parser("setup", help="Validate configuration and dependencies")
    setup_parser.add_argument("--env-file", default=".env", help="Path to environment file")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "setup":
        return _cmd_setup(env_file=args.env_file)
    elif args.command == "generate":
        try:
            request = build_request(
                product=args.product,
                url=args.url,
                mood=args.mood,
                audio=args.audio,
                language=args.language,
                subtitles=not args.no_subtitles,
            )
        except ValueError as e:
            console.print(f"[red]❌ {e}[/red]")
            return 2
        return _cmd_generate(
            request, env_file=args.env_file, as_json=args.json, verbose=args.verbose
        )
    elif args.command == "batch":
        return _cmd_batch(input_file=args.input, env_file=args.env_file, verbose=args.verbose)

    return 0


def build_request(
    product: str = "",
    url: str = "",
    mood: str = "trendy",
    audio: str = "voice+music",
    language: str = "en",
    subtitles: bool = True,
) -> GenerationRequest:
    """Turn raw option strings into a GenerationRequest."""
    return GenerationRequest(
        product_name=product,
        product_url=url,
        mood=Mood.from_str(mood, default=Mood.TRENDY),
        language=language or "en",
        audio_mode=AudioMode.from_str(audio),
        include_subtitles=subtitles,
    )


def _build_orchestrator(env_file: str, verbose: bool = False) -> Any:
    import logging

    from promo_shorts.application.pipeline import PipelineOrchestrator
    from promo_shorts.core.config import Settings
    from promo_shorts.core.container import Container
    from promo_shorts.core.logging import setup_logging

    setup_logging(level=logging.DEBUG if verbose else logging.INFO)
    settings = Settings(_env_file=env_file)
    return PipelineOrchestrator.from_container(Container(settings))


def _print_result(result: RunResult) -> None:
    if not result.success:
        console.print(f"\n[red]❌ {result.error.message if result.error else 'Run failed'}[/red]")
        if result.error and result.error.detail:
            console.print(f"   Error: {result.error.detail}")
        return

    console.print("\n[green]✅ Video generated successfully![/green]")
    console.print(f"   🎬 Video: {result.output_path}")
    console.print(f"   🔗 URL: {result.video_url}")

    table = Table(title="📝 Script")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Line")
    for i, line in enumerate(result.script_lines, 1):
        table.add_row(str(i), line)
    console.print(table)

    if result.metadata:
        meta = result.metadata.to_dict()
        console.print(f"   🎤 Voice: {meta['voiceId']}  🎞️  Clips: {meta['videoClips']}")
        console.print(f"   ⏱️  Total time: {result.metadata.timings.get('total', 0.0):.1f}s")


def _cmd_generate(
    request: GenerationRequest,
    env_file: str,
    as_json: bool = False,
    verbose: bool = False,
) -> int:
    """Run the pipeline once."""
    try:
        orchestrator = _build_orchestrator(env_file, verbose)
        result = asyncio.run(orchestrator.run(request))
    except KeyboardInterrupt:
        console.print("\n[yellow]🛑 Interrupted[/yellow]")
        return 130
    except Exception as e:
        console.print(f"\n[red]❌ Fatal error: {e}[/red]")
        return 1

    if as_json:
        print(json.dumps(result.to_payload(), indent=2))
    else:
        _print_result(result)
    return 0 if result.success else 1


def _cmd_batch(input_file: str, env_file: str, verbose: bool = False) -> int:
    """Generate one video per product listed in a JSON file.

    Each item is either a product name or an object with ``product``,
    ``url``, ``mood`` and ``audio`` keys.
    """
    from pathlib import Path

    input_path = Path(input_file)
    if not input_path.exists():
        console.print(f"[red]❌ File not found: {input_file}[/red]")
        return 1

    try:
        with open(input_path, encoding="utf-8") as f:
            items = json.load(f)
    except json.JSONDecodeError as e:
        console.print(f"[red]❌ Invalid JSON: {e}[/red]")
        return 1

    orchestrator = _build_orchestrator(env_file, verbose)

    async def _run_all() -> int:
        succeeded = 0
        for i, item in enumerate(items, 1):
            if isinstance(item, str):
                item = {"product": item}
            try:
                request = build_request(
                    product=item.get("product", ""),
                    url=item.get("url", ""),
                    mood=item.get("mood", "trendy"),
                    audio=item.get("audio", "voice+music"),
                )
            except ValueError as e:
                console.print(f"\n[{i}/{len(items)}] ❌ Skipped: {e}")
                continue
            console.print(f"\n[{i}/{len(items)}] Processing: {request.subject[:50]}...")
            result = await orchestrator.run(request)
            if result.success:
                succeeded += 1
                console.print(f"   ✅ {result.video_url}")
            else:
                console.print(f"   ❌ {result.error.message if result.error else 'failed'}")
        return succeeded

    succeeded = asyncio.run(_run_all())
    console.print(f"\n📊 Batch complete: {succeeded}/{len(items)} succeeded")
    return 0 if succeeded == len(items) else 1


def _cmd_setup(env_file: str = ".env") -> int:
    """Validate configuration and print status."""
    import shutil

    from promo_shorts.core.config import Settings
    from promo_shorts.core.logging import setup_logging
    from promo_shorts.infrastructure.adapters.music_library import DirectoryMusicLibrary

    setup_logging()

    try:
        settings = Settings(_env_file=env_file)
    except Exception as e:
        console.print(f"[red]❌ Configuration error: {e}[/red]")
        return 1

    tracks = DirectoryMusicLibrary(settings.music_dir).tracks()
    ffmpeg = shutil.which(settings.ffmpeg_path)

    table = Table(title="🔧 Configuration Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Status", style="green")

    table.add_row("Pexels API Key", "✅" if settings.pexels.api_key else "❌ Not set")
    table.add_row("Google Gemini Key", "✅" if settings.gemini.api_key else "⚠️  Not set")
    table.add_row("OpenAI Key", "✅" if settings.openai.api_key else "⚠️  Not set")
    table.add_row("Text Providers", ", ".join(settings.text_providers))
    if "ollama" in settings.text_providers:
        from promo_shorts.infrastructure.adapters.ollama import OllamaTextGenerator

        running = OllamaTextGenerator(settings).is_running()
        table.add_row(
            "Ollama Host",
            f"✅ {settings.ollama.host}" if running else f"⚠️  Not responding at {settings.ollama.host}",
        )
        table.add_row("Ollama Model", settings.ollama.model)
    table.add_row("TTS Engine", settings.tts_engine)
    if settings.tts_engine == "elevenlabs":
        table.add_row("ElevenLabs Key", "✅" if settings.elevenlabs.api_key else "❌ Not set")
    table.add_row("FFmpeg", ffmpeg or "❌ Not found")
    table.add_row("Music Tracks", f"{len(tracks)} in {settings.music_dir}")
    table.add_row("Output", str(settings.videos_dir))
    table.add_row("Public URL", settings.public_base_url)

    console.print(table)

    ok = bool(settings.pexels.api_key and ffmpeg)
    if ok:
        console.print("\n✅ Configuration validated!")
    else:
        console.print("\n⚠️  Pexels API key and FFmpeg are required to render videos")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
