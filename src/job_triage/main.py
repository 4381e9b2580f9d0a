"""Command-line entry point for job triage."""

import argparse
import asyncio
import sys
from typing import List, Optional

from job_triage.ai.providers import AITask, AIProvider, create_provider
from job_triage.config import TriageConfig, load_config
from job_triage.filters.models import JobPosting
from job_triage.learning.analyzer import RejectionAnalyzer
from job_triage.learning.engine import RejectionLearningEngine
from job_triage.logging_config import get_logger, setup_logging
from job_triage.mapping.classifiers import LexicalLabelClassifier, LLMLabelClassifier
from job_triage.mapping.mapper import LabelMapper
from job_triage.storage import (
    FirestoreLearningStorage,
    LearningStorage,
    MemoryLearningStorage,
)

logger = get_logger(__name__)


def build_storage(config: TriageConfig) -> LearningStorage:
    """Create the configured learning storage backend."""
    if config.storage.backend == "firestore":
        logger.info(f"Using Firestore learning storage (database: {config.storage.database_name})")
        return FirestoreLearningStorage(
            credentials_path=config.storage.credentials_path,
            database_name=config.storage.database_name,
        )

    logger.info("Using in-memory learning storage (state is not persisted)")
    return MemoryLearningStorage()


def build_provider(config: TriageConfig, task: AITask) -> Optional[AIProvider]:
    """Create an AI provider for a task, or None when AI is disabled."""
    if not config.ai.enabled:
        return None
    return create_provider(
        config.ai.provider,
        model=config.ai.model,
        task=task,
        timeout=config.ai.timeout_seconds,
    )


def build_engine(config: TriageConfig, storage: LearningStorage) -> RejectionLearningEngine:
    """Create the rejection learning engine."""
    analyzer = RejectionAnalyzer(provider=build_provider(config, AITask.REJECTION_ANALYSIS))
    return RejectionLearningEngine(storage, config=config.learning, analyzer=analyzer)


def build_label_mapper(config: TriageConfig, storage: Optional[LearningStorage]) -> LabelMapper:
    """Create the label mapper with the configured fallback classifier."""
    fallback = config.mapping.fallback
    classifier = None
    if fallback == "lexical":
        classifier = LexicalLabelClassifier()
    elif fallback == "llm":
        provider = build_provider(config, AITask.LABEL_MAPPING)
        if provider is None:
            logger.warning("LLM label fallback requested but AI is disabled; using lexical fallback")
            classifier = LexicalLabelClassifier()
        else:
            classifier = LLMLabelClassifier(provider)

    return LabelMapper(
        classifier=classifier,
        storage=storage,
        timeout=config.mapping.fallback_timeout_seconds,
        cache_min_confidence=config.mapping.cache_min_confidence,
    )


def _job_from_args(args: argparse.Namespace) -> JobPosting:
    return JobPosting(
        title=args.title,
        company=args.company,
        description=args.description,
        profile=args.profile,
    )


def _add_job_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--title", default="", help="Job title")
    parser.add_argument("--company", default="", help="Company name")
    parser.add_argument("--description", default="", help="Job description text")
    parser.add_argument("--profile", default=None, help="Search profile tag (e.g. core, legacy-web)")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Job Triage - filter jobs, learn from rejections, map form labels"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to configuration file (default: $JOB_TRIAGE_CONFIG or config/config.yaml)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check-job", help="Run a job through static and learned filters")
    _add_job_arguments(check)

    reject = subparsers.add_parser("reject", help="Record a rejected job")
    _add_job_arguments(reject)
    reject.add_argument("--reason", required=True, help="Why the job was rejected")
    reject.add_argument("--category", default=None, help="Scoring category to penalise")

    stats = subparsers.add_parser("stats", help="Show learned adjustments, patterns and filters")
    stats.add_argument("--limit", type=int, default=10, help="Rows per section (default: 10)")
    stats.add_argument("--profile", default=None, help="Profile for effective weights")

    labels = subparsers.add_parser("map-labels", help="Map form labels to canonical keys")
    labels.add_argument("labels", nargs="+", help="Form labels")

    add_filter = subparsers.add_parser("add-filter", help="Add a manual filter")
    add_filter.add_argument("type", choices=["company", "keyword", "tech_stack", "seniority"])
    add_filter.add_argument("value", help="Company name, keyword, technology or seniority phrase")

    subparsers.add_parser("reset-weights", help="Reset learned weight adjustments")
    subparsers.add_parser("clear-filters", help="Clear rejection patterns and learned filters")
    subparsers.add_parser("clear-caches", help="Clear the label mapping cache")

    return parser


def run_command(args: argparse.Namespace, config: TriageConfig) -> None:
    """Execute one CLI command."""
    storage = build_storage(config)

    if args.command == "map-labels":
        mapper = build_label_mapper(config, storage)
        for mapping in asyncio.run(mapper.map_labels_smart(args.labels)):
            print(f"{mapping.label!r:40} -> {mapping.key.value:22} {mapping.confidence:.2f} ({mapping.source})")
        return

    engine = build_engine(config, storage)

    if args.command == "check-job":
        verdict = engine.apply_filters(_job_from_args(args), args.profile)
        if verdict.blocked:
            print(f"BLOCKED [{verdict.filter_type}]: {verdict.reason}")
        else:
            print("ALLOWED")

    elif args.command == "reject":
        events = engine.record_rejection(_job_from_args(args), args.reason, args.category)
        print(f"Recorded rejection: {len(events)} weight adjustment(s)")
        for event in events:
            print(f"  {event.category}: {event.adjustment:+.1f} - {event.reason}")

    elif args.command == "stats":
        _print_stats(engine, args.limit, args.profile)

    elif args.command == "add-filter":
        pattern = engine.add_manual_filter(args.type, args.value)
        print(f"Added filter: {pattern.type} = {pattern.value!r} (count {pattern.count})")

    elif args.command == "reset-weights":
        engine.reset_weight_adjustments()
        print("Weight adjustments reset")

    elif args.command == "clear-filters":
        engine.clear_all_filters()
        print("Rejection patterns and filters cleared")

    elif args.command == "clear-caches":
        engine.clear_all_caches()
        print("Label mapping cache cleared")


def _print_stats(engine: RejectionLearningEngine, limit: int, profile: Optional[str]) -> None:
    print("\n" + "=" * 60)
    print("LEARNING STATS")
    print("=" * 60)

    print("\nActive adjustments:")
    adjustments = engine.get_active_adjustments()
    for adjustment in adjustments:
        print(f"  {adjustment.category:24} {adjustment.delta:+.1f}%")
    if not adjustments:
        print("  (none)")

    print("\nTop patterns:")
    for pattern in engine.get_top_patterns(limit):
        print(f"  {pattern.type:14} {pattern.value:30} x{pattern.count}")

    print("\nRecent learnings:")
    for event in engine.get_recent_learnings(limit):
        print(f"  {event.timestamp:%Y-%m-%d %H:%M} {event.category:20} {event.adjustment:+.1f} - {event.reason}")

    print("\nFilter stats:")
    for stat in engine.get_filter_stats():
        print(f"  {stat.type:24} {stat.count}")

    print(f"\nEffective weights ({profile or 'default'}):")
    for category, weight in engine.get_active_weights(profile).items():
        print(f"  {category:24} {weight:.1f}%")
    print("=" * 60 + "\n")


def main(argv: Optional[List[str]] = None) -> None:
    """Main execution function."""
    args = create_parser().parse_args(argv)
    setup_logging(log_level=args.log_level)

    try:
        config = load_config(args.config)
        run_command(args, config)
    except Exception as e:
        logger.error(f"Command '{args.command}' failed: {str(e)}")
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
