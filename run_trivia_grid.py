#!/usr/bin/env python3
"""
Trivia Grid Generator

Complete pipeline for 3×3 trivia grid generation from a football player pool:
entity loading, combination pre-computation, grid assembly, answer validation
and local game storage.

Features:
- Load the entity pool from a local JSON file or a HuggingFace dataset
- Generate games with 7-9 playable cells and persist them locally
- Validate externally supplied question sets against the minimum-answer rule
- Inspect combination statistics and export the candidate table to CSV
- Configuration-driven defaults with CLI/env override

Usage Examples:
  # Use config defaults (minimal command)
  python run_trivia_grid.py generate

  # Generate several games from a specific pool
  python run_trivia_grid.py generate --entity-file data/players.json --count 5 --mode multiplayer

  # Load the pool from the HuggingFace Hub
  python run_trivia_grid.py generate --hf-dataset user/football-players --split train

  # Validate a question set
  python run_trivia_grid.py validate questions.json --minimum 3

  # Combination statistics and candidate export
  python run_trivia_grid.py stats --entity-file data/players.json --export-csv candidates.csv
"""

import argparse
import json
import logging
import os
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from trivia_grid.core.exceptions import TriviaGridError
from trivia_grid.data.game_store import LocalGameStore
from trivia_grid.generate.game_builder import GameBuilder
from trivia_grid.utils.config_loader import get_config
from trivia_grid.validate.question_validator import validate


def get_config_defaults():
    """Get configuration defaults for CLI arguments."""
    config = get_config()
    return config.get_cli_defaults()


def apply_config_defaults(args):
    """Apply configuration defaults to CLI arguments when not specified."""
    defaults = get_config_defaults()

    if hasattr(args, "hf_token") and not args.hf_token:
        args.hf_token = defaults["hf_token"] or os.getenv("HF_TOKEN")

    return args


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Setup logging configuration with file output for traceability."""
    level = logging.DEBUG if verbose else logging.INFO

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(console_handler)

    # File handler for detailed tracing
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

        logging.info("=== TRIVIA GRID GENERATOR TRACE ===")
        logging.info(f"Start time: {datetime.now().isoformat()}")
        logging.info(f"Log file: {log_file}")
        logging.info(f"Verbose mode: {verbose}")
        logging.info("=" * 60)

    return log_file


def load_entity_pool(builder: GameBuilder, args):
    """Load the entity pool from the Hub or a local JSON file into the builder."""
    if args.hf_dataset:
        print(f"📥 Loading entity pool from HuggingFace: {args.hf_dataset}")
        return builder.load_hub_dataset(args.hf_dataset, args.hf_config, args.split)

    print(f"📥 Loading entity pool from {args.entity_file}")
    return builder.load_entity_file(args.entity_file)


def run_game_generation(args) -> bool:
    """Generate and store trivia grid games."""
    print("🧩 TRIVIA GRID GENERATION")
    print("=" * 60)

    try:
        store = None if args.no_store else LocalGameStore(args.store_dir)
        builder = GameBuilder(game_store=store, hf_token=args.hf_token, seed=args.seed)
        index = load_entity_pool(builder, args)

        print("📋 Configuration:")
        print(f"   Entities: {index.entity_count}")
        print(f"   Combinations: {len(index)}")
        print(f"   Game mode: {args.mode}")
        print(f"   Games: {args.count}")
        print(f"   Store: {'disabled' if store is None else store.store_dir}")

        session_id = args.session_id or uuid.uuid4().hex[:8]
        created = 0

        print("\n🔄 Generating games...")
        for i in range(args.count):
            try:
                result = builder.create_game(args.mode, session_id)
            except TriviaGridError as e:
                print(f"   ❌ Game {i + 1}: {e}")
                logging.error(f"Game {i + 1} failed: {e}")
                continue

            if not result.accepted:
                print(f"   ❌ Game {i + 1} rejected: {result.validation.message}")
                continue

            created += 1
            valid_cells = result.grid["validCells"] if result.grid else len(result.questions)
            print(
                f"   ✅ {result.game_id}: {valid_cells}/9 cells, "
                f"{'saved' if result.persisted else 'not saved'}"
            )
            print(f"      Rows: {', '.join(result.grid['rowHeaders'])}")
            print(f"      Cols: {', '.join(result.grid['colHeaders'])}")

            if args.output_json:
                output_path = Path(args.output_json)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                with open(output_path, "a", encoding="utf-8") as f:
                    f.write(json.dumps(result.to_dict(), ensure_ascii=False) + "\n")

        stats = builder.get_generation_statistics()
        print("\n📊 GENERATION STATISTICS")
        print("=" * 60)
        print(f"Total attempts: {stats['total_attempts']}")
        print(f"Successful generations: {stats['successful_generations']}")
        print(f"Failed generations: {stats['failed_generations']}")
        print(f"Success rate: {stats['success_rate']}")
        print(f"Average valid cells: {stats['average_valid_cells']}")
        if stats["source_distribution"]:
            print("\nGrid sources:")
            for source, count in stats["source_distribution"].items():
                print(f"  • {source}: {count}")

        print(f"\n🎉 Created {created}/{args.count} games")
        logging.info(f"GENERATION_COMPLETE: {created} games created")
        return created > 0

    except (OSError, ValueError) as e:
        print(f"❌ Game generation failed: {e}")
        logging.error(f"Generation error: {e}", exc_info=True)
        return False


def run_validation(args) -> bool:
    """Validate a question set stored as JSON."""
    print("🔍 QUESTION VALIDATION")
    print("=" * 60)

    try:
        with open(args.questions_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"❌ Could not read {args.questions_file}: {e}")
        return False

    questions = data.get("questions", []) if isinstance(data, dict) else data
    if not isinstance(questions, list):
        print("❌ Questions file must contain a list or a {\"questions\": [...]} object")
        return False

    report = validate(questions, args.minimum)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        for detail in report.details:
            status = "✅" if detail.meets_minimum else "❌"
            print(
                f"{status} Q{detail.question_number}: {detail.row_feature} × {detail.col_feature} "
                f"({detail.unique_answers} unique answers)"
            )
            for issue in detail.issues:
                print(f"     • {issue}")
        print(f"\n{report.message}")

    return report.is_valid


def run_statistics(args) -> bool:
    """Show combination statistics for an entity pool."""
    print("📊 COMBINATION STATISTICS")
    print("=" * 60)

    try:
        builder = GameBuilder(hf_token=args.hf_token)
        index = load_entity_pool(builder, args)
    except (OSError, ValueError) as e:
        print(f"❌ Could not load entity pool: {e}")
        logging.error(f"Statistics error: {e}", exc_info=True)
        return False

    stats = index.get_stats()
    print(f"Entities: {stats['entityCount']}")
    print(f"Total combinations: {stats['totalCombinations']}")
    print(f"Excluded teams configured: {stats['excludedTeams']}")
    print(f"Average answers per combination: {stats['averageAnswers']:.2f}")
    print("\nBy difficulty:")
    for difficulty, count in stats["byDifficulty"].items():
        print(f"  • {difficulty}: {count}")
    print("\nBy question type:")
    for question_type, count in stats["byQuestionType"].items():
        print(f"  • {question_type}: {count}")

    if args.top:
        print(f"\nTop {args.top} candidates:")
        print(index.to_dataframe().head(args.top).to_string(index=False))

    if args.export_csv:
        rows = builder.export_candidates_csv(args.export_csv)
        print(f"\n📁 Exported {rows} candidates to {args.export_csv}")

    return True


def add_pool_arguments(subparser, config_defaults):
    subparser.add_argument(
        "--entity-file",
        default=config_defaults["entity_file"],
        help=f"Entity pool JSON file (default: {config_defaults['entity_file']})",
    )
    subparser.add_argument(
        "--hf-dataset", help="HuggingFace dataset repo id (overrides --entity-file)"
    )
    subparser.add_argument("--hf-config", help="HuggingFace dataset configuration")
    subparser.add_argument("--split", default="train", help="Dataset split (default: train)")
    subparser.add_argument(
        "--hf-token",
        help="HuggingFace token (fallback: config default or HF_TOKEN env var)",
    )


def main():
    """Main CLI entry point."""
    config_defaults = get_config_defaults()

    parser = argparse.ArgumentParser(
        description="Trivia Grid Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate
  %(prog)s generate --entity-file data/players.json --count 5
  %(prog)s validate questions.json
  %(prog)s stats --export-csv candidates.csv
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Generate command
    generate_parser = subparsers.add_parser("generate", help="Generate trivia grid games")
    add_pool_arguments(generate_parser, config_defaults)
    generate_parser.add_argument(
        "--mode",
        default=config_defaults["game_mode"],
        help=f"Game mode (default: {config_defaults['game_mode']})",
    )
    generate_parser.add_argument(
        "--count",
        type=int,
        default=config_defaults["count"],
        help=f"Number of games to generate (default: {config_defaults['count']})",
    )
    generate_parser.add_argument("--session-id", help="Session id used in game ids")
    generate_parser.add_argument("--seed", type=int, help="Random seed for reproducible grids")
    generate_parser.add_argument(
        "--store-dir",
        default=config_defaults["store_dir"],
        help=f"Game store directory (default: {config_defaults['store_dir']})",
    )
    generate_parser.add_argument(
        "--no-store", action="store_true", help="Do not persist generated games"
    )
    generate_parser.add_argument(
        "--output-json", help="Append each created game as a JSON line to this file"
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a question set")
    validate_parser.add_argument("questions_file", help="JSON file with questions")
    validate_parser.add_argument(
        "--minimum", type=int, help="Minimum unique answers per question (default: config)"
    )
    validate_parser.add_argument(
        "--json", action="store_true", help="Print the full validation report as JSON"
    )

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Show combination statistics")
    add_pool_arguments(stats_parser, config_defaults)
    stats_parser.add_argument("--top", type=int, default=0, help="Show the top N candidates")
    stats_parser.add_argument("--export-csv", help="Export all candidates to CSV")

    args = parser.parse_args()
    args = apply_config_defaults(args)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = f"logs/trivia_grid_{timestamp}.log"
    actual_log_file = setup_logging(args.verbose, log_file)

    if actual_log_file:
        print(f"📝 Detailed trace logging to: {actual_log_file}")

    logging.info(f"COMMAND: {' '.join(sys.argv)}")

    if not args.command:
        parser.print_help()
        return False

    try:
        if args.command == "generate":
            return run_game_generation(args)
        elif args.command == "validate":
            return run_validation(args)
        elif args.command == "stats":
            return run_statistics(args)
        else:
            print(f"❌ Unknown command: {args.command}")
            return False

    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        return False


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
