"""Marketplace database management CLI.

Creates or drops the relational tables behind the marketplace read models
when the domain runs against postgres.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db
    PROTEAN_ENV=production python src/manage.py drop-db
"""

import argparse
import sys


def _initialized_domain():
    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


def setup_databases():
    from marketplace.utils.db import setup_db

    print("Initializing marketplace domain...")
    domain = _initialized_domain()
    print("Creating marketplace database schema...")
    setup_db(domain)
    print("Done.")


def drop_databases():
    from marketplace.utils.db import drop_db

    print("Initializing marketplace domain...")
    domain = _initialized_domain()
    print("Dropping marketplace database schema...")
    drop_db(domain)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Harvest Hub marketplace database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
