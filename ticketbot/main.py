"""Main entry point for ticketbot.

Initializes logging in two phases (defaults then config-driven),
creates the TicketBot, and runs the async event loop with graceful
shutdown on SIGTERM/SIGINT.

Key functions:
    main: Async entry point.
    run: Synchronous wrapper that calls asyncio.run(main()).
"""

import asyncio
import signal

import structlog

from . import __version__
from .logging_config import setup_logging


async def main():
    """Main async entry point."""
    # Phase 1: defaults, cache_logger_on_first_use=False
    setup_logging()
    logger = structlog.get_logger("ticketbot")

    logger.info("ticketbot_starting", version=__version__)

    # Import here to ensure logging is configured first
    from .bot import TicketBot
    from .config import get_config

    config = get_config()
    config.validate()

    # Phase 2: reconfigure with real config
    setup_logging(config)

    bot = TicketBot(config)

    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def handle_shutdown(sig):
        logger.info("shutdown_signal_received", signal=sig.name)
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, handle_shutdown, sig)
        except NotImplementedError:
            # Windows: only SIGINT via signal.signal
            if sig == signal.SIGINT:
                signal.signal(
                    signal.SIGINT,
                    lambda s, f: handle_shutdown(signal.SIGINT),
                )

    try:
        bot_task = asyncio.create_task(bot.run())
        # A failed start ends the wait as well
        bot_task.add_done_callback(lambda _: shutdown_event.set())
        await shutdown_event.wait()

        bot_task.cancel()
        try:
            await bot_task
        except asyncio.CancelledError:
            pass

    except Exception as e:
        logger.error("bot_error", error=str(e))
        raise
    finally:
        await bot.stop()
        logger.info("ticketbot_stopped")


def run():
    """Synchronous entry point for the ``ticketbot`` console script."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
