#!/usr/bin/env python3
"""Sample scope harness for manual end-to-end validation.

Opens nested logging scopes, forks work into a flowing thread, an unflowed
thread and an asyncio task, and logs from each so the enriched records can
be inspected by eye. Every branch checks its own view of the ambient state
and the harness exits non-zero if any check fails.

Usage:
    # Settings defaults (thread propagation, key-value output)
    python scripts/run_sample_scopes.py

    # JSON output, thread-confined propagation
    python scripts/run_sample_scopes.py --propagation thread --format json

    # Settings from a file (LOGSCOPE_* environment variables still apply)
    python scripts/run_sample_scopes.py --config logscope.yaml
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from logscope.config import ConfigurationError, PropagationMode, load_settings
from logscope.logging import get_logger
from logscope.logging.config import configure_logging_from_settings
from logscope.scopes import ScopeManager
from logscope.utils.threads import spawn, spawn_unflowed

logger = get_logger(__name__, component="harness")


def print_header(title: str):
    """Print a formatted section header."""
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def run_scenarios(manager: ScopeManager, logical: bool) -> List[str]:
    """Run every scenario and return the failed checks."""
    failures: List[str] = []

    def check(label: str, condition: bool):
        if not condition:
            failures.append(label)
            logger.error("Check failed", extra={"event": "harness.check_failed", "check": label})

    with manager.begin_scope("request", {"request_id": "req-1"}):
        logger.info("Request received")

        with manager.begin_scope("db", {"table": "orders"}, prefix="db."):
            manager.push_variable("attempt", 1)
            logger.info("Querying")
            check("inner scope sees outer variable", manager.variables.get("request_id") == "req-1")

        check("inner variables restored", not manager.variables.contains("db.table"))

        def flowing_worker():
            check(
                "flowing thread inherits scope",
                manager.variables.get("request_id") == ("req-1" if logical else None),
            )
            with manager.begin_scope("worker", {"worker": "flowing"}):
                logger.info("Worker running")

        def unflowed_worker():
            check("unflowed thread starts empty", not manager.variables.contains("request_id"))
            with manager.begin_scope("worker", {"worker": "unflowed"}):
                logger.info("Worker running")

        for thread in (spawn(flowing_worker), spawn_unflowed(unflowed_worker)):
            thread.join(timeout=5)

        check("worker variables never leak back", not manager.variables.contains("worker"))

        if logical:

            async def task_body():
                manager.push_variable("task_local", True)
                logger.info("Task running")

            async def run_task():
                await asyncio.create_task(task_body())
                check("task writes stay in the task", not manager.variables.contains("task_local"))

            asyncio.run(run_task())

    check("everything restored after outer scope", len(manager.variables) == 0)
    check("markers restored after outer scope", not manager.nested.has_items)
    return failures


def main():
    """Main entry point for the sample scope harness."""
    parser = argparse.ArgumentParser(
        description="Exercise logging scopes across threads and tasks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=Path, default=None, help="Optional settings file")
    parser.add_argument(
        "--propagation",
        default=None,
        choices=[mode.value for mode in PropagationMode],
        help="Propagation mode (overrides settings)",
    )
    parser.add_argument(
        "--format",
        default=None,
        choices=["json", "key-value"],
        help="Log output format (overrides settings)",
    )

    args = parser.parse_args()

    # Load environment variables
    load_dotenv()

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        print(f"\n❌ Error: {e}")
        return 1

    updates = {}
    if args.propagation:
        updates["propagation"] = PropagationMode(args.propagation)
    if args.format:
        updates["logging"] = settings.logging.model_copy(update={"format": args.format})
    if updates:
        settings = settings.model_copy(update=updates)

    manager = ScopeManager.from_settings(settings)
    configure_logging_from_settings(settings, manager=manager)

    print_header("logscope - Sample Scope Harness")
    print(f"Propagation: {PropagationMode(settings.propagation).value}")
    print(f"Format: {settings.logging.format}\n")

    logical = PropagationMode(settings.propagation) is PropagationMode.LOGICAL
    failures = run_scenarios(manager, logical)

    print_header("Result")
    if failures:
        for failure in failures:
            print(f"✗ {failure}")
        return 1

    print("✓ All checks passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
