"""ccnuke CLI entry point."""
import argparse
import logging
import sys
import time

import yaml
from botocore.exceptions import BotoCoreError

from ccnuke.catalog import list_resource_types
from ccnuke.core.config import load_config, load_nuke_plan
from ccnuke.core.errors import AggregateRunError, CcnukeError
from ccnuke.core.logging import setup_logging, get_run_id
from ccnuke.discovery import get_all_resources
from ccnuke.nuke import nuke_all_resources
from ccnuke.query import exclude_after_from, new_query
from ccnuke.report import render_inventory
from ccnuke.session import SessionProvider


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='ccnuke - delete AWS resources through the Cloud Control API')
    parser.add_argument('--config', '-c', help='Path to YAML config file')
    parser.add_argument('--region', action='append', default=[],
                        help='Region to nuke (repeatable)')
    parser.add_argument('--exclude-region', action='append', default=[],
                        help='Region to skip (repeatable)')
    parser.add_argument('--resource-type', action='append', default=[],
                        help='Resource type to nuke, e.g. AWS::Logs::LogGroup (repeatable)')
    parser.add_argument('--exclude-resource-type', action='append', default=[],
                        help='Resource type to skip (repeatable)')
    parser.add_argument('--older-than', help='Only nuke resources older than this, e.g. 24h or 7d')
    parser.add_argument('--list-resource-types', action='store_true',
                        help='List the resource types that can be nuked and exit')
    parser.add_argument('--nuke-plan', action='store_true',
                        help='Read resource types from nuke-plan.yml in the working directory')
    parser.add_argument('--profile', help='AWS profile to use')
    parser.add_argument('--dry-run', action='store_true',
                        help='Only list the resources that would be nuked')
    parser.add_argument('--force', action='store_true',
                        help='Skip the countdown before deleting')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Verbosity: -v=INFO, -vv=DEBUG')
    parser.add_argument('--json-logs', action='store_true',
                        help='Output logs in JSON format')
    return parser.parse_args(argv)


def build_config(args):
    config = load_config(args.config)

    # CLI args override config
    if args.region:
        config.regions = args.region
    if args.exclude_region:
        config.exclude_regions = args.exclude_region
    if args.resource_type:
        config.resource_types = args.resource_type
    if args.exclude_resource_type:
        config.exclude_resource_types = args.exclude_resource_type
    if args.older_than:
        config.older_than = args.older_than
    if args.profile:
        config.profile = args.profile
    if args.verbose:
        config.verbosity = args.verbose
    if args.json_logs:
        config.json_logs = True
    if args.dry_run:
        config.dry_run = True
    if args.force:
        config.force = True
    if args.nuke_plan:
        config.resource_types = load_nuke_plan().targets
    return config


def countdown(seconds=5):
    logging.warning("Resources WILL be deleted")
    for i in range(seconds, 0, -1):
        print(f"Starting in {i}s... (Ctrl+C to cancel)", end='\r')
        time.sleep(1)
    print(" " * 40, end='\r')


def run(config, session_provider) -> int:
    query = new_query(
        session_provider,
        regions=config.regions,
        exclude_regions=config.exclude_regions,
        resource_types=config.resource_types,
        exclude_resource_types=config.exclude_resource_types,
        exclude_after=exclude_after_from(config.older_than),
    )
    account = get_all_resources(session_provider, query)

    if not account.resources:
        logging.warning("No resources found to nuke")
        return 0

    if config.dry_run:
        render_inventory(account)
        return 0

    if not config.force:
        countdown()

    try:
        nuke_all_resources(session_provider, account, list(query.regions))
    except AggregateRunError as e:
        logging.error(f"Nuke finished with failures:\n{e}")
        return 1
    logging.info(f"Nuked {account.total_count()} resources")
    return 0


def main(argv=None):
    args = parse_args(argv)

    try:
        config = build_config(args)
    except (OSError, yaml.YAMLError, CcnukeError) as e:
        setup_logging()
        logging.error(f"Could not load configuration: {e}")
        return 1

    setup_logging(config.verbosity, config.json_logs)
    logging.info(f"ccnuke run_id={get_run_id()} dry_run={config.dry_run}")

    session_provider = SessionProvider(profile_name=config.profile)

    if args.list_resource_types:
        try:
            for type_name in list_resource_types(session_provider):
                print(type_name)
        except CcnukeError as e:
            logging.error(str(e))
            return 1
        return 0

    try:
        return run(config, session_provider)
    except KeyboardInterrupt:
        logging.info("Cancelled by user")
        return 1
    except (CcnukeError, BotoCoreError) as e:
        logging.error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
