#!/usr/bin/env python3
"""
Watch the entities container change feed from a workstation.

Runs the same change listener as the CosmosDBTrigger function, but polls the
change feed directly instead of going through the Functions host and its
lease container. Progress is not persisted; every run starts from "now".

Usage:
    export cosmosDBConnection='AccountEndpoint=...;AccountKey=...;'
    python scripts/watch-changes.py --database entities_db --container entities
"""
import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from providers.azure.config import get_connection_string
from providers.azure.database import CosmosStore
from shared.changefeed import run_change_listener
from shared.config import Settings


def main():
    settings = Settings()
    parser = argparse.ArgumentParser(description="Log entity changes from the Cosmos DB change feed")
    parser.add_argument("--database", default=settings.database_name)
    parser.add_argument("--container", default=settings.container_name)
    parser.add_argument("--connection-setting", default=settings.connection_setting,
                        help="Environment variable holding the connection string")
    parser.add_argument("--poll-seconds", type=float, default=settings.change_feed_poll_seconds)
    parser.add_argument("--max-batches", type=int, default=None, help="Stop after N batches")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")

    settings.connection_setting = args.connection_setting
    try:
        connection_string = get_connection_string(settings)
    except RuntimeError as e:
        print(f"Error: {e}")
        sys.exit(1)

    store = CosmosStore(
        connection_string=connection_string,
        database_name=args.database,
        container_name=args.container,
        poll_interval=args.poll_seconds,
    )
    print(f"Watching {args.database}/{args.container} (Ctrl+C to stop)...")
    try:
        handled = run_change_listener(store, max_batches=args.max_batches)
    except KeyboardInterrupt:
        print("\nStopped.")
        return
    print(f"Handled {handled} batch(es).")


if __name__ == '__main__':
    main()
