"""
Set a company's SIC code and region.

Usage:
    python scripts/seed_sic_region.py 00000006 --sic 62020 --region London
"""
import sys

import structlog

from _common import base_parser, setup
from sbri_api import dependencies
from sbri_api.seeding import set_sic_region

logger = structlog.get_logger("sbri.scripts.seed_sic_region")


def main(argv=None) -> int:
    parser = base_parser("Set SIC code and region on an existing profile.")
    parser.add_argument("company_number")
    parser.add_argument("--sic", required=True)
    parser.add_argument("--region", required=True)
    args = parser.parse_args(argv)
    setup(args)

    with dependencies.get_db() as conn:
        try:
            set_sic_region(conn, args.company_number, args.sic, args.region)
        except LookupError as e:
            logger.error("sic_region_not_set", error=str(e))
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
