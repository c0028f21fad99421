"""Entry point for the scan list service.

Polls the scan feed, swaps each result in as a new snapshot and keeps the
list window (plus detail history of expanded rows) up to date.
"""

import asyncio
import signal

from loguru import logger

from config.settings import settings
from src.db.preferences import create_preference_store
from src.db.redis import close_redis
from src.listing.controller import TokenListController
from src.listing.details import DetailHistoryLoader
from src.parsers.feed.client import TokenFeedClient
from src.parsers.history.client import HistoryClient
from src.utils.logger import setup_logger


def build_controller() -> TokenListController:
    store = create_preference_store(
        settings.preferences_backend,
        path=settings.preferences_path,
        redis_key=settings.preferences_redis_key,
    )
    return TokenListController(
        store=store,
        viewport_height=settings.list_viewport_height_px,
        overscan_items=settings.list_overscan_items,
        overscan_px=settings.list_overscan_px,
        padding_start=settings.list_padding_start_px,
        padding_end=settings.list_padding_end_px,
        prune_stale_expansions=settings.prune_stale_expansions,
    )


def report_details(controller: TokenListController, details: DetailHistoryLoader) -> None:
    """Load history for expanded rows in view and log what their detail cards show."""
    expanded = {
        scan.token_address
        for scan in controller.visible_scans()
        if scan.token_address in controller.expansion
    }
    details.retain(expanded)

    for row in controller.rows():
        if not row.expanded:
            continue
        details.request(row.scan.token_address)
        if row.warnings:
            logger.debug(f"[LIST] {row.scan.token_symbol}: {'; '.join(row.warnings)}")

    stagnant = details.stagnant(controller.criteria)
    if stagnant:
        logger.info(f"[LIST] {len(stagnant)} expanded tokens have flat history: {', '.join(sorted(stagnant))}")


async def run_list(shutdown_event: asyncio.Event) -> None:
    controller = build_controller()
    feed = TokenFeedClient(
        settings.feed_api_url,
        timeout=settings.feed_timeout_sec,
        max_retries=settings.feed_max_retries,
    )
    history = HistoryClient(
        settings.feed_api_url,
        timeout=settings.feed_timeout_sec,
        max_retries=settings.feed_max_retries,
    )
    details = DetailHistoryLoader(history.fetch_history, max_age=settings.detail_history_max_age_sec)

    try:
        while not shutdown_event.is_set():
            scans = await feed.fetch_tokens()
            if scans is None:
                logger.warning("[LIST] Feed unavailable, keeping previous snapshot")
            else:
                controller.replace_snapshot(scans)

            report_details(controller, details)

            logger.info(f"[LIST] {controller.metrics.format_status()}")

            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=settings.feed_poll_interval_sec)
            except TimeoutError:
                pass
    finally:
        await details.aclose()
        await feed.close()
        await history.close()


async def main() -> None:
    setup_logger(json_logs=settings.json_logs, level=settings.log_level)
    logger.info("Starting scan list...")

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_event_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    await run_list(shutdown_event)

    close_redis()
    logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
