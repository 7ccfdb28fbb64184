"""Protean Engine runner for the billing domain.

Starts the Engine workers that process messages asynchronously:
- OutboxProcessor: polls the outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams and invokes the event handlers,
  including the read-model projector and the stock outbox dispatcher

Usage:
    python src/server.py
    python src/server.py --test-mode   # Process what is pending, then exit
"""

import argparse

from protean.server.engine import Engine


def build_engine(test_mode: bool = False) -> Engine:
    from billing.domain import billing

    billing.init()
    return Engine(billing, test_mode=test_mode)


def main():
    parser = argparse.ArgumentParser(description="Billing Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages and stop",
    )
    args = parser.parse_args()

    build_engine(args.test_mode).run()


if __name__ == "__main__":
    main()
