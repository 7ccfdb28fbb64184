"""Billing management CLI.

Usage:
    python src/manage.py setup-db             # Create all tables
    python src/manage.py drop-db              # Drop all tables
    python src/manage.py drain-stock-outbox   # Retry pending stock adjustments
"""

import argparse
import sys


def _init_domain():
    from billing.domain import billing

    billing.init()
    return billing


def setup_database():
    from billing.utils.db import setup_db

    print("Initializing billing domain...")
    domain = _init_domain()
    print("Creating billing database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from billing.utils.db import drop_db

    print("Initializing billing domain...")
    domain = _init_domain()
    print("Dropping billing database schema...")
    drop_db(domain)
    print("Done.")


def drain_stock_outbox(limit: int = 100) -> dict:
    """Retry every pending or failed stock adjustment."""
    from billing.stock.dispatch import DrainStockOutbox

    domain = _init_domain()
    with domain.domain_context():
        result = domain.process(DrainStockOutbox(limit=limit), asynchronous=False)
    print(f"Attempted {result['attempted']} adjustment(s), applied {result['applied']}.")
    return result


def main():
    parser = argparse.ArgumentParser(description="Billing management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    drain_parser = subparsers.add_parser("drain-stock-outbox", help="Retry pending or failed stock adjustments")
    drain_parser.add_argument("--limit", type=int, default=100, help="Maximum adjustments to attempt")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "drain-stock-outbox":
        drain_stock_outbox(args.limit)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
