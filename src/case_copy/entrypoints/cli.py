"""Command line entrypoint: copy cases from DHIS2 to Go.Data."""

import argparse
import asyncio
import logging
import sys

import config
from case_copy.domain.commands import CopyCases
from case_copy.domain.exceptions import CaseCopyError
from case_copy.service_layer import handlers
from case_copy.service_layer.unit_of_work import HTTPUnitOfWork

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Copy tracked entity instances of the DHIS2 cases program into Go.Data outbreaks"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the JSON copy configuration (default: $CASE_COPY_CONFIG or config.json)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the whole pipeline but do not send cases to Go.Data",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def run(copy_config, dry_run=False, uow=None):
    """Handle a CopyCases command inside a unit of work and return the number of cases."""
    uow = uow or HTTPUnitOfWork()
    async with uow:
        return await handlers.copy_cases(CopyCases(config=copy_config, dry_run=dry_run), uow)


def main(argv=None):
    """Main entry point for the case copy."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        copy_config = config.load_copy_config(args.config)
        count = asyncio.run(run(copy_config, dry_run=args.dry_run))
    except CaseCopyError as e:
        logger.error(f"Case copy failed: {e}")
        return 1

    logger.info(f"Done: {count} cases {'would be ' if args.dry_run else ''}copied")
    return 0


if __name__ == "__main__":
    sys.exit(main())
