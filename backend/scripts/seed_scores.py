"""
Store risk thresholds for a SIC code, or a precomputed score for a company.

Usage:
    python scripts/seed_scores.py thresholds 62020 --high 80 --medium 50 [--region London]
    python scripts/seed_scores.py score 00000006 85 --reason "Manual review"
"""
import sys

import structlog

from _common import base_parser, setup
from sbri_api import dependencies
from sbri_api.schema import ensure_schema
from sbri_api.seeding import store_score, upsert_thresholds

logger = structlog.get_logger("sbri.scripts.seed_scores")


def main(argv=None) -> int:
    parser = base_parser("Seed risk thresholds or stored scores.")
    sub = parser.add_subparsers(dest="command", required=True)

    thresholds = sub.add_parser("thresholds", help="Upsert score cut-points for a SIC code")
    thresholds.add_argument("sic")
    thresholds.add_argument("--high", type=float)
    thresholds.add_argument("--medium", type=float)
    thresholds.add_argument("--region", help="Omit to apply to every region")

    score = sub.add_parser("score", help="Store a precomputed score for a company")
    score.add_argument("company_number")
    score.add_argument("score", type=float)
    score.add_argument("--reason", action="append", default=[], help="Repeatable")

    args = parser.parse_args(argv)
    setup(args)

    with dependencies.get_db() as conn:
        ensure_schema(conn)
        if args.command == "thresholds":
            if args.high is not None and args.medium is not None and args.high < args.medium:
                logger.warning("thresholds_inverted", high=args.high, medium=args.medium)
            upsert_thresholds(conn, args.sic, args.high, args.medium, region=args.region)
        else:
            store_score(conn, args.company_number, args.score, args.reason)
    return 0


if __name__ == "__main__":
    sys.exit(main())
