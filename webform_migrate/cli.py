"""Command line interface for the webform migrator."""

import argparse
import json
import logging
import sys
from typing import Any, Dict

from .extractors.legacy_db import LegacyDatabaseReader
from .models.migration import MigrationConfig
from .orchestrator import WebformMigrator
from .services.component_mapper import ComponentMapper, with_synthetic_components
from .storage import StateStore

logger = logging.getLogger(__name__)


def load_config(args) -> MigrationConfig:
    """Build the configuration from an optional JSON file and CLI flags."""
    config_data: Dict[str, Any] = {}
    if getattr(args, "config", None):
        with open(args.config) as f:
            config_data = json.load(f)

    config = MigrationConfig.from_dict(config_data)

    if getattr(args, "nid", None) is not None:
        config.nid = args.nid
    if getattr(args, "simulate", False):
        config.simulate = True
    if getattr(args, "new_only", False):
        config.new_only = True
    if getattr(args, "max_submissions", None) is not None:
        config.max_submissions = args.max_submissions
    if getattr(args, "state_file", None):
        config.state_file = args.state_file

    return config


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Webform Migration Tool - Migrate legacy webforms, their components and submissions"
    )
    parser.add_argument("--config", help="Path to migration config file")
    parser.add_argument("--state-file", help="Path to the persisted state file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run migration
    run_parser = subparsers.add_parser("run", help="Migrate one or all legacy webforms")
    run_parser.add_argument("--nid", type=int, help="Only migrate the webform of this legacy node")
    run_parser.add_argument("--simulate", action="store_true", help="Log writes instead of performing them")
    run_parser.add_argument("--new-only", action="store_true", help="Leave existing webforms untouched")
    run_parser.add_argument("--max-submissions", type=int, help="Maximum submissions to import per form")

    # Preview elements
    preview_parser = subparsers.add_parser("preview", help="Print the elements a legacy webform maps to")
    preview_parser.add_argument("--nid", type=int, required=True, help="Legacy node id")

    # Delete submissions
    delete_parser = subparsers.add_parser("delete-submissions", help="Delete migrated submissions of a webform")
    delete_parser.add_argument("--nid", type=int, required=True, help="Legacy node id")
    delete_parser.add_argument("--simulate", action="store_true", help="Log instead of deleting")

    # Persisted state
    state_parser = subparsers.add_parser("state", help="Show or change persisted state")
    state_parser.add_argument("key", nargs="?", help="State key (e.g. last_imported_sid, max_delete_items)")
    state_parser.add_argument("value", nargs="?", type=int, help="New value")

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.command == "run":
        return run_migration(args)
    elif args.command == "preview":
        return run_preview(args)
    elif args.command == "delete-submissions":
        return run_delete(args)
    elif args.command == "state":
        return run_state(args)
    else:
        parser.print_help()
        return 1


def run_migration(args) -> int:
    """Run a migration."""
    config = load_config(args)
    migrator = WebformMigrator(config)
    result = migrator.run_migration()

    print("\n" + "=" * 60)
    print("MIGRATION COMPLETE")
    print("=" * 60)
    print(f"Status: {result.status.value}")
    print(f"Forms: {len(result.forms)}")
    print(f"Submissions Processed: {result.total_submissions_processed}")
    print(f"Succeeded: {result.total_submissions_succeeded}")
    print(f"Failed: {result.total_submissions_failed}")
    if result.duration_seconds:
        print(f"Duration: {result.duration_seconds:.2f} seconds")

    if result.errors:
        print("\nErrors:")
        for error in result.errors:
            print(f"  - {error['error']}")

    return 0 if result.status.value == "completed" else 1


def run_preview(args) -> int:
    """Print the elements of a legacy webform without writing anything."""
    config = load_config(args)
    reader = LegacyDatabaseReader(config.legacy_db_url)

    form = reader.get_form(args.nid)
    if form is None:
        print(f"No legacy webform found for node {args.nid}")
        return 1

    components = with_synthetic_components(form, reader.get_components(args.nid))
    print(json.dumps(ComponentMapper(form, components).to_form_array(), indent=2))
    return 0


def run_delete(args) -> int:
    """Delete the migrated submissions of a webform."""
    config = load_config(args)
    migrator = WebformMigrator(config)
    deleted = migrator.delete_submissions(args.nid)
    print(f"Deleted {deleted} submissions of webform_{args.nid}")
    return 0


def run_state(args) -> int:
    """Show or change a persisted state value."""
    config = load_config(args)
    state = StateStore(config.state_file)

    if args.key is None:
        print(json.dumps(state.to_dict(), indent=2))
    elif args.value is None:
        print(state.get(args.key))
    else:
        state.set(args.key, args.value)
        print(f"{args.key} = {args.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
