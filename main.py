"""Run a notification client for one user and log every change."""

from __future__ import annotations

import argparse
import asyncio
import logging

from notification_sync.application.sync import NotificationView, badge_label
from notification_sync.client import NotificationSyncClient
from notification_sync.utils import format_relative_age

logger = logging.getLogger("notification_sync")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--user-id", required=True, help="Identity whose notifications are synchronized")
    parser.add_argument(
        "--show-list",
        action="store_true",
        help="Keep the notification list open so it refreshes with the counter",
    )
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def _log_view(view: NotificationView) -> None:
    logger.info(
        "unread=%s connected=%s items=%s",
        badge_label(view.unread_count) or "0",
        view.connected,
        len(view.notifications),
    )
    for notification in view.notifications:
        logger.debug(
            "  [%s] %s (%s)",
            "x" if notification.is_read else " ",
            notification.title,
            format_relative_age(notification.created_at),
        )


async def run(user_id: str, *, show_list: bool) -> None:
    async with NotificationSyncClient() as client:
        client.subscribe(_log_view)
        client.login(user_id)
        if show_list:
            client.open_list()
        await asyncio.Event().wait()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run(args.user_id, show_list=args.show_list))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
