"""Protean Engine runner for the ordering domain.

Runs the workers that handle events asynchronously when the domain is
configured for async processing (the ``production`` overlay):
- OutboxProcessor: publishes committed events to the broker
- StreamSubscriptions: feeds projectors and the notification handler

Usage:
    python src/server.py
"""

import asyncio

from protean.server.engine import Engine

from ordering.domain import ordering
from ordering.utils.logging import configure_logging


async def run():
    ordering.init()
    await Engine(ordering).run()


def main():
    configure_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
