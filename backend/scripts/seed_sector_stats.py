"""
Upsert sector statistics, or copy them onto a company as its benchmark.

Usage:
    python scripts/seed_sector_stats.py --sic 62020 --region London --period 2024Q4 \
        --avg-margin 0.12 --failure-rate 0.018 --sample-size 1432
    python scripts/seed_sector_stats.py --from-company 00000006
"""
import sys

import structlog

from _common import base_parser, setup
from sbri_api import dependencies
from sbri_api.schema import ensure_schema
from sbri_api.seeding import seed_sector_benchmark, upsert_sector_stats

logger = structlog.get_logger("sbri.scripts.seed_sector_stats")


def main(argv=None) -> int:
    parser = base_parser("Seed sector stats for a SIC code and region.")
    parser.add_argument("--sic", help="SIC code")
    parser.add_argument("--region", help="Region name")
    parser.add_argument("--period", default="2024Q4", help="Reporting period, e.g. 2024Q4")
    parser.add_argument("--avg-margin", type=float, default=None)
    parser.add_argument("--failure-rate", type=float, default=None)
    parser.add_argument("--sample-size", type=int, default=None)
    parser.add_argument(
        "--from-company",
        metavar="COMPANY_NUMBER",
        help="Copy the latest stats for this company's SIC and region into its benchmark",
    )
    args = parser.parse_args(argv)

    if not args.from_company and not (args.sic and args.region):
        parser.error("either --from-company or both --sic and --region are required")
    setup(args)

    with dependencies.get_db() as conn:
        ensure_schema(conn)
        if args.from_company:
            try:
                seed_sector_benchmark(conn, args.from_company)
            except LookupError as e:
                logger.error("benchmark_not_seeded", error=str(e))
                return 1
        else:
            upsert_sector_stats(
                conn, args.sic, args.region, args.period,
                args.avg_margin, args.failure_rate, args.sample_size,
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
