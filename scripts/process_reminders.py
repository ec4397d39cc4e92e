"""CLI script to run a due-reminder pass."""
from __future__ import annotations

import argparse
from datetime import datetime

from packtrack.core.clock import FrozenClock
from packtrack.db.session import SessionLocal
from packtrack.services.notification_service import NotificationService
from packtrack.services.reminder_job import ReminderProcessingJob
from packtrack.tasks.reminders import process_due_reminders


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Process due reminders and send push notifications",
    )
    parser.add_argument(
        "--async",
        action="store_true",
        dest="use_async",
        help="Queue task asynchronously instead of running immediately",
    )
    parser.add_argument(
        "--at",
        type=datetime.fromisoformat,
        help="Evaluate as if it were this ISO timestamp (reminder time zone if naive)",
    )

    args = parser.parse_args()

    if args.use_async and args.at:
        parser.error("--at cannot be combined with --async")

    if args.use_async:
        task = process_due_reminders.apply_async()
        print(f"Task queued: {task.id}")
    elif args.at:
        db = SessionLocal()
        try:
            job = ReminderProcessingJob(db, NotificationService(db), clock=FrozenClock(args.at))
            print(f"Result: {job.run_due_pass().as_dict()}")
        finally:
            db.close()
    else:
        result = process_due_reminders.run()
        print(f"Result: {result}")


if __name__ == "__main__":
    main()
