"""Memorials database management CLI.

Creates and drops the database schema for the memorials domain, reusing
the setup_db/drop_db utilities from ``memorials.utils.db``.

Usage:
    python src/manage.py setup-db                  # Create all tables
    python src/manage.py drop-db                   # Drop all tables
    python src/manage.py setup-db --env production # Against the production overlay
"""

import argparse
import os
import sys


def _init_domain(env=None):
    if env:
        os.environ["PROTEAN_ENV"] = env

    from memorials.domain import memorials

    print("Initializing memorials domain...")
    memorials.init()
    return memorials


def setup_database(env=None):
    """Create the database schema."""
    from memorials.utils.db import setup_db

    domain = _init_domain(env)
    print("Creating memorials database schema...")
    touched = setup_db(domain)
    if touched:
        print(f"  Schema ready on: {', '.join(touched)}.")
    else:
        print("  No database-backed providers configured; nothing to create.")
    print("Done.")


def drop_database(env=None):
    """Drop the database schema."""
    from memorials.utils.db import drop_db

    domain = _init_domain(env)
    print("Dropping memorials database schema...")
    touched = drop_db(domain)
    if touched:
        print(f"  Schema dropped on: {', '.join(touched)}.")
    else:
        print("  No database-backed providers configured; nothing to drop.")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Memorials database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("setup-db", "Create all database tables"), ("drop-db", "Drop all database tables")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--env", help="Config environment overlay (sets PROTEAN_ENV)")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database(args.env)
    elif args.command == "drop-db":
        drop_database(args.env)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
