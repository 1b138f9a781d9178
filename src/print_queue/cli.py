"""Command line access to the print queue.

Usage:
    print-queue enqueue JOB
    print-queue start JOB
    print-queue complete JOB
    print-queue fail JOB
    print-queue show JOB
    print-queue list [--limit N]
    print-queue stats
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence

from .config import Config, configure_logging
from .errors import QueueError
from .mqtt import shutdown_broadcaster
from .queue_manager import QueueManager
from .schemas import QueueStatus
from .shared_db import SQLAlchemyQueueStore, create_db_engine, create_session_factory

logger = logging.getLogger("print-queue")

_TRANSITIONS = {
    "start": QueueStatus.in_progress,
    "complete": QueueStatus.completed,
    "fail": QueueStatus.failed,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="print-queue", description="Manage print queue entries")
    parser.add_argument("--database-url", default=Config.DATABASE_URL, help="SQLAlchemy database URL")
    parser.add_argument("--log-level", default=Config.LOG_LEVEL, help="Logging level")

    commands = parser.add_subparsers(dest="command", required=True)
    for name in ("enqueue", "show", *_TRANSITIONS):
        command = commands.add_parser(name)
        command.add_argument("job_reference", help="Print job identifier")
    list_command = commands.add_parser("list", help="List active entries by position")
    list_command.add_argument("--limit", type=int, default=Config.QUEUE_LIST_LIMIT)
    _ = commands.add_parser("stats", help="Count pending and in-progress entries")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    engine = create_db_engine(args.database_url, echo=Config.DATABASE_ECHO)
    manager = QueueManager(SQLAlchemyQueueStore(create_session_factory(engine)))

    try:
        if args.command == "enqueue":
            output = manager.enqueue(args.job_reference).model_dump(mode="json")
        elif args.command in _TRANSITIONS:
            entry = manager.transition(args.job_reference, _TRANSITIONS[args.command])
            output = entry.model_dump(mode="json")
        elif args.command == "show":
            output = manager.get_entry(args.job_reference).model_dump(mode="json")
        elif args.command == "list":
            output = [e.model_dump(mode="json") for e in manager.current_queue(limit=args.limit)]
        else:
            output = manager.queue_stats().model_dump(mode="json")
    except QueueError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        shutdown_broadcaster()
        engine.dispose()

    print(json.dumps(output))
    return 0


if __name__ == "__main__":
    sys.exit(main())
