import argparse
import logging
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

from .client import GeminiClient
from .config import Config, ConfigManager
from .errors import MissingCredentialError
from .exporter import BriefingExporter
from .models import PERSONAS, VOICES, Article, ArticleKind, PlaybackState
from .orchestrator import BriefingOrchestrator
from .player import PlaybackEngine


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="Briefly - turn articles into a spoken news briefing")
    parser.add_argument("--config", help="Path to TOML or JSON config file", default=None)
    parser.add_argument("--text", help="Article text (repeatable)", action="append", default=[])
    parser.add_argument("--url", help="Article URL to read and summarize (repeatable)", action="append", default=[])
    parser.add_argument("--file", help="Read article text from a file (repeatable)", action="append", default=[])
    parser.add_argument("--persona", help=f"Anchor persona, e.g. {', '.join(PERSONAS)}", default=None)
    parser.add_argument("--voice", help="Prebuilt voice name", choices=VOICES, default=None)
    parser.add_argument("--output", help="Output directory", default=None)
    parser.add_argument("--format", help="Audio file format (wav, mp3, ...)", default=None)
    parser.add_argument("--play", help="Play the briefing after generating it", action="store_true")
    parser.add_argument("--verbose", help="Verbose logging", action="store_true")
    return parser, parser.parse_args(argv)


def _load_config(args) -> Config:
    if args.config:
        config = ConfigManager.load_config(args.config)
    elif Path("briefly.toml").exists():
        # Project-level config is picked up without --config
        config = ConfigManager.load_config("briefly.toml")
    else:
        config = ConfigManager.get_default_config()
    if args.persona:
        config.persona = args.persona
    if args.voice:
        config.voice = args.voice
    if args.output:
        config.output_dir = args.output
    if args.format:
        config.audio_format = args.format
    return config


def _collect_articles(args) -> list[Article]:
    articles = [Article(id=str(uuid.uuid4()), content=t, kind=ArticleKind.TEXT) for t in args.text]
    for path in args.file:
        with open(path, "r", encoding="utf-8") as f:
            articles.append(Article(id=str(uuid.uuid4()), content=f.read(), kind=ArticleKind.TEXT))
    articles.extend(Article(id=str(uuid.uuid4()), content=u, kind=ArticleKind.URL) for u in args.url)
    return [a for a in articles if not a.is_blank]


def _play(result, config: Config) -> None:
    engine = PlaybackEngine(tick_rate=config.tick_rate, end_epsilon=config.end_epsilon, fft_size=config.fft_size)
    last_index = -1

    def show_word(state: PlaybackState) -> None:
        nonlocal last_index
        if state.active_token_index != last_index and state.active_token_index >= 0:
            last_index = state.active_token_index
            print(result.tokens[last_index].word, end=" ", flush=True)

    engine.subscribe(show_word)
    engine.load(result.buffer, result.tokens)
    engine.play()
    try:
        engine.wait()
    except KeyboardInterrupt:
        engine.stop()
    print()


def main(argv=None) -> int:
    load_dotenv()
    parser, args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = _load_config(args)
    errors = ConfigManager.validate_config(config)
    if errors:
        for e in errors:
            print(f"Config error: {e}", file=sys.stderr)
        return 2

    articles = _collect_articles(args)
    if not articles:
        parser.error("Please enter at least one article content or URL.")

    try:
        client = GeminiClient.from_config(config)
    except MissingCredentialError as e:
        print(f"{e}. Set GEMINI_API_KEY in the environment or a .env file.", file=sys.stderr)
        return 1

    orchestrator = BriefingOrchestrator(client, config)
    result = orchestrator.run(articles, config.persona, config.voice)
    if result is None:
        print(f"Generation failed: {orchestrator.state.message}", file=sys.stderr)
        return 1

    paths = BriefingExporter(config).export(result, config.persona, config.voice)
    print(f"Headline: {result.headline}")
    print(f"Final audio: {paths['audio']} ({result.duration:.1f}s)")
    print(f"Transcript: {paths['transcript']}")
    print(f"Metadata: {paths['metadata']}")

    if args.play:
        _play(result, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
