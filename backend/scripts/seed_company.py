"""
Seed a demo company: profile, accounts trail, filings, CCJs, director changes.

Usage:
    python scripts/seed_company.py 00000006 "SBRI Test Co Ltd" --variant tech-london
    python scripts/seed_company.py 00000007 --name "NEWCO TEST LTD" --sic 62020 --region London
    python scripts/seed_company.py 00000006 --clean
    python scripts/seed_company.py 00000006 --clean-only
"""
import sys

import structlog

from _common import base_parser, setup
from sbri_api import dependencies
from sbri_api.schema import ensure_schema
from sbri_api.seeding import VARIANTS, clean_company, seed_company

logger = structlog.get_logger("sbri.scripts.seed_company")


def main(argv=None) -> int:
    parser = base_parser("Seed one demo company from a variant.")
    parser.add_argument("company_number", nargs="?", default="00000006")
    parser.add_argument("company_name", nargs="?", default="SBRI Test Co Ltd")
    parser.add_argument("--name", help="Company name (wins over the positional name)")
    parser.add_argument("--variant", default="tech-london", choices=sorted(VARIANTS))
    parser.add_argument("--sic", help="Override the variant's SIC code")
    parser.add_argument("--region", help="Override the variant's region")
    parser.add_argument("--clean", action="store_true", help="Delete existing rows before seeding")
    parser.add_argument("--clean-only", action="store_true", help="Delete existing rows and stop")
    args = parser.parse_args(argv)
    setup(args)

    name = args.name or args.company_name
    with dependencies.get_db() as conn:
        ensure_schema(conn)
        if args.clean or args.clean_only:
            clean_company(conn, args.company_number)
            if args.clean_only:
                return 0
        seed_company(conn, args.company_number, name, args.variant, sic=args.sic, region=args.region)
    return 0


if __name__ == "__main__":
    sys.exit(main())
