"""
Create the SBRI schema and optionally seed a demo company end to end.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --reseed 00000006 --name "SBRI Test Co Ltd" --variant tech-london
    python scripts/init_db.py --clean 00000006
"""
import sys

import structlog

from _common import base_parser, setup
from sbri_api import dependencies
from sbri_api.schema import ensure_schema
from sbri_api.seeding import VARIANTS, clean_company, seed_company, seed_sector_benchmark

logger = structlog.get_logger("sbri.scripts.init_db")


def main(argv=None) -> int:
    parser = base_parser("Create tables and indexes; optionally clean or reseed a company.")
    parser.add_argument("--clean", metavar="COMPANY_NUMBER", help="Delete all rows for a company")
    parser.add_argument("--reseed", metavar="COMPANY_NUMBER", help="Clean, then seed company, stats and benchmark")
    parser.add_argument("--name", default="SBRI Test Co Ltd", help="Company name used with --reseed")
    parser.add_argument("--variant", default="tech-london", choices=sorted(VARIANTS))
    args = parser.parse_args(argv)
    setup(args)

    with dependencies.get_db() as conn:
        ensure_schema(conn)
        logger.info("schema_initialised", path=str(dependencies.DB_PATH))

        if args.clean:
            clean_company(conn, args.clean)

        if args.reseed:
            clean_company(conn, args.reseed)
            seed_company(conn, args.reseed, args.name, args.variant)
            try:
                seed_sector_benchmark(conn, args.reseed)
            except LookupError as e:
                logger.error("benchmark_not_seeded", error=str(e))
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
