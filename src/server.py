"""Protean Engine runner for the marketplace domain.

In production (``PROTEAN_ENV=production``) events are processed
asynchronously: the Engine publishes outbox events and feeds them to the
order summary and payment history projectors.

Usage:
    python src/server.py
    python src/server.py --test-mode    # Drain pending events and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine

from marketplace.utils.logging import configure_logging


def _get_domain():
    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


async def run(test_mode=False):
    engine = Engine(_get_domain(), test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Harvest Hub marketplace Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending events once and exit",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
