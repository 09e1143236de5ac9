#!/usr/bin/env python3
"""
CLI for the personalized feed ranker

Usage:
    python -m feedrank.cli --signals backup.json rank [--page 2] [--mode flat] [--variant paginated]
    python -m feedrank.cli --signals backup.json queries
    python -m feedrank.cli --signals backup.json profile [--top 20]
"""
import argparse
import asyncio
import json
import logging
import random
import sys

from pydantic import ValidationError

from .feed.config import FeedVariant, RankingConfig, ScoringMode
from .feed.errors import RecommendationsUnavailableError
from .feed.models import UserSignals, Video
from .feed.pipeline import FeedRanker
from .feed.profile import build_profile
from .feed.queries import generate_queries, generate_shorts_queries
from .signals import load_signals
from .sources.youtube import YouTubeDataSource

logger = logging.getLogger(__name__)


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Personalized video feed ranker"
    )
    parser.add_argument(
        "--signals",
        required=True,
        help="Path to the app's JSON backup file (subscriptions, history, preferences)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for shuffles and noise (default: random)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    rank_parser = subparsers.add_parser(
        "rank",
        help="Fetch candidates and rank a home feed"
    )
    rank_parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page number (default: 1)"
    )
    rank_parser.add_argument(
        "--mode",
        choices=[m.value for m in ScoringMode],
        default=ScoringMode.VECTOR.value,
        help="Scoring mode (default: vector)"
    )
    rank_parser.add_argument(
        "--variant",
        choices=[v.value for v in FeedVariant],
        default=FeedVariant.FULL.value,
        help="Feed variant (default: full)"
    )
    rank_parser.add_argument(
        "--no-noise",
        action="store_true",
        help="Disable exploration noise in scores"
    )
    rank_parser.add_argument(
        "--require-japanese",
        action="store_true",
        help="Reject non-Japanese videos from channels you are not subscribed to"
    )
    rank_parser.add_argument(
        "--region",
        default="JP",
        help="Region code for search and trending (default: JP)"
    )

    subparsers.add_parser(
        "queries",
        help="Show the search queries that would be issued"
    )

    profile_parser = subparsers.add_parser(
        "profile",
        help="Show the heaviest terms of the user profile"
    )
    profile_parser.add_argument(
        "--top",
        type=int,
        default=20,
        help="Number of terms to show (default: 20)"
    )

    return parser.parse_args()


def _video_dict(video: Video) -> dict:
    return {
        "id": video.id,
        "title": video.title,
        "channel_id": video.channel_id,
        "channel_name": video.channel_name,
        "duration": video.duration_text or video.duration,
    }


def build_config(args) -> RankingConfig:
    """Map CLI flags onto a RankingConfig."""
    config = RankingConfig(seed=args.seed)
    if getattr(args, "mode", None):
        config.scoring_mode = ScoringMode(args.mode)
    if getattr(args, "variant", None):
        config.variant = FeedVariant(args.variant)
    if getattr(args, "no_noise", False):
        config.noise_scale = 0.0
    if getattr(args, "require_japanese", False):
        config.require_japanese = True
    return config


async def cmd_rank(signals: UserSignals, args) -> dict:
    """Execute the rank command."""
    if signals.is_new_user:
        return {
            "command": "rank",
            "new_user": True,
            "videos": [],
            "shorts": [],
        }

    config = build_config(args)
    async with YouTubeDataSource(region_code=args.region) as source:
        ranker = FeedRanker(source, config)
        result = await ranker.rank(signals, page=args.page)

    return {
        "command": "rank",
        "new_user": False,
        "page": args.page,
        "variant": config.variant.value,
        "backfilled": result.backfilled,
        "videos": [_video_dict(v) for v in result.videos],
        "shorts": [_video_dict(v) for v in result.shorts],
    }


def cmd_queries(signals: UserSignals, args) -> dict:
    """Execute the queries command."""
    rng = random.Random(args.seed)
    profile = build_profile(signals)
    return {
        "command": "queries",
        "queries": generate_queries(signals, rng),
        "shorts_queries": generate_shorts_queries(profile),
    }


def cmd_profile(signals: UserSignals, args) -> dict:
    """Execute the profile command."""
    profile = build_profile(signals)
    return {
        "command": "profile",
        "term_count": len(profile.weights),
        "magnitude": round(profile.magnitude, 4),
        "top_terms": [
            {"term": t, "weight": round(profile.weights[t], 4)}
            for t in profile.top_terms(args.top)
        ],
        "preferences": profile.preferences.model_dump(mode="json"),
    }


def print_result(result: dict) -> None:
    print(f"\n{'=' * 50}")
    print(f"Command: {result['command']}")
    print(f"{'=' * 50}")

    if result["command"] == "rank":
        if result.get("new_user"):
            print("No history, subscriptions or preferences yet.")
            print("Search for something or subscribe to a channel first.")
        else:
            flag = " (backfilled from trending)" if result.get("backfilled") else ""
            print(f"Page {result['page']} ({result['variant']}): "
                  f"{len(result['videos'])} videos, {len(result['shorts'])} shorts{flag}")
            for i, v in enumerate(result["videos"], 1):
                print(f"  #{i:>2} {v['title'][:60]}")
                print(f"      {v['channel_name']} | {v['duration'] or 'n/a'}")
            if result["shorts"]:
                print("\nShorts:")
                for v in result["shorts"]:
                    print(f"  - {v['title'][:60]} ({v['channel_name']})")

    elif result["command"] == "queries":
        print("Queries:")
        for q in result["queries"]:
            print(f"  - {q}")
        print("Shorts queries:")
        for q in result["shorts_queries"]:
            print(f"  - {q}")

    elif result["command"] == "profile":
        print(f"Terms: {result['term_count']} (magnitude {result['magnitude']})")
        for entry in result["top_terms"]:
            print(f"  {entry['weight']:>8.3f}  {entry['term']}")
        print("\nPreferences:")
        for axis, value in result["preferences"].items():
            print(f"  {axis}: {value}")

    print(f"{'=' * 50}\n")


async def main():
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        signals = load_signals(args.signals, page=getattr(args, "page", 1))
    except (OSError, ValueError, ValidationError) as e:
        logger.error(f"Could not load signals from {args.signals}: {e}")
        sys.exit(1)

    if args.command == "rank":
        try:
            result = await cmd_rank(signals, args)
        except RecommendationsUnavailableError as e:
            logger.error(f"{e}")
            sys.exit(1)
    elif args.command == "queries":
        result = cmd_queries(signals, args)
    elif args.command == "profile":
        result = cmd_profile(signals, args)
    else:
        logger.error(f"Unknown command: {args.command}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print_result(result)


def run():
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
