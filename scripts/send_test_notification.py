"""CLI script to send a test push notification."""
from __future__ import annotations

import argparse

from packtrack.tasks.notifications import send_test_notification


def main() -> None:
    parser = argparse.ArgumentParser(description="Send a test push notification")
    parser.add_argument(
        "user_id",
        nargs="?",
        help="User to notify (defaults to the first user with a subscription)",
    )
    args = parser.parse_args()

    result = send_test_notification.run(args.user_id)
    print(
        f"Result: {result['success']} sent, {result['failed']} failed, "
        f"{len(result['expired'])} expired"
    )


if __name__ == "__main__":
    main()
