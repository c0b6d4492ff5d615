"""
Demo data and store maintenance helpers.

Used by the scripts in backend/scripts and by the test fixtures. Every write
is an upsert keyed on the natural key of the row, so re-running a seed never
duplicates data.
"""
from __future__ import annotations

import json
import math
import sqlite3
from datetime import datetime, timezone
from typing import Any

import structlog

from .schema import COMPANY_TABLES, ensure_schema
from .services.normalize import primary_sic_code

logger = structlog.get_logger("sbri.seeding")

ACCOUNT_YEARS = (2022, 2023, 2024)

VARIANTS: dict[str, dict[str, Any]] = {
    "tech-london": {
        "sic": "62020",
        "region": "London",
        "incorporation_date": "2016-04-18",
        "address": {
            "address_line_1": "1 Tech Lane",
            "address_line_2": "Farringdon",
            "postal_code": "EC1A 1AA",
            "country": "United Kingdom",
        },
        "sector": {"avg_margin": 0.12, "failure_rate": 0.018, "sample_size": 1432, "period": "2024Q4"},
        "accounts": {"base_turnover": 1100000, "growth": 0.12, "margin": 0.12, "employees": 12},
        "insolvency": None,
        "ccjs": [
            {
                "case_number": "TL123456", "judgment_date": "2023-06-12", "amount": 950,
                "court": "County Court Business Centre", "status": "satisfied",
                "satisfied_date": "2023-08-01",
            },
        ],
        "directors": [
            ("2025-03-15", "Appointed", "Alice Smith", "Director", "Appointed as director"),
            ("2025-07-02", "Resigned", "Bob Jones", "Director", "Resigned from board"),
            ("2025-01-20", "RoleChanged", "Carol White", "Company Secretary", "Role changed to Company Secretary"),
        ],
        "filings": [
            ("t1", "2024-10-31", "accounts", "Total exemption full accounts made up to 2024-03-31"),
            ("t2", "2024-06-10", "confirmation-statement", "Confirmation statement made on 2024-06-01"),
        ],
    },
    "manufacturing-midlands": {
        "sic": "28290",
        "region": "West Midlands",
        "incorporation_date": "2010-09-07",
        "address": {
            "address_line_1": "42 Foundry Road",
            "address_line_2": "Jewellery Quarter",
            "postal_code": "B1 1AA",
            "country": "United Kingdom",
        },
        "sector": {"avg_margin": 0.08, "failure_rate": 0.032, "sample_size": 987, "period": "2024Q4"},
        "accounts": {"base_turnover": 2400000, "growth": 0.05, "margin": 0.08, "employees": 45},
        "insolvency": {
            "date": "2023-08-15",
            "type": "Winding-up order (example)",
            "url": "https://www.thegazette.co.uk/",
        },
        "ccjs": [
            {
                "case_number": "BM445566", "judgment_date": "2024-11-20", "amount": 4820,
                "court": "Birmingham County Court", "status": "open",
            },
            {
                "case_number": "TL654321", "judgment_date": "2023-03-03", "amount": 1200,
                "court": "County Court Business Centre", "status": "satisfied",
                "satisfied_date": "2023-05-10",
            },
        ],
        "directors": [
            ("2025-02-10", "Appointed", "Diane Patel", "Operations Director", "New operations director"),
            ("2024-11-05", "Appointed", "Ethan Brown", "Finance Director", "Appointed FD"),
            ("2024-09-25", "Resigned", "Farah Khan", "Director", "Resigned after tenure"),
        ],
        "filings": [
            ("m1", "2024-12-31", "accounts", "Full accounts made up to 2024-06-30"),
            ("m2", "2024-07-15", "change-registered-office-address", "Registered office address changed"),
        ],
    },
    "retail-northwest": {
        "sic": "47190",
        "region": "North West",
        "incorporation_date": "2018-02-12",
        "address": {
            "address_line_1": "77 High Street",
            "address_line_2": "City Centre",
            "postal_code": "M1 1AE",
            "country": "United Kingdom",
        },
        "sector": {"avg_margin": 0.03, "failure_rate": 0.041, "sample_size": 2210, "period": "2024Q4"},
        "accounts": {"base_turnover": 900000, "growth": -0.03, "margin": 0.03, "employees": 8},
        "insolvency": None,
        "ccjs": [],
        "directors": [
            ("2025-05-01", "Appointed", "Grace Lee", "Director", "New board appointment"),
            ("2025-04-12", "Other", "Hao Chen", None, "PSC statement filed"),
        ],
        "filings": [
            ("r1", "2025-01-31", "accounts", "Micro-entity accounts made up to 2024-10-31"),
            ("r2", "2024-10-10", "confirmation-statement", "Confirmation statement filed"),
        ],
    },
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _round(value: float) -> int:
    # Half-up, so 0.5 always rounds towards +inf
    return int(math.floor(value + 0.5))


def _upsert(conn: sqlite3.Connection, table: str, keys: dict, values: dict) -> int:
    """
    Update the row matching ``keys`` or insert a new one. Returns the row id.

    Keys are compared with ``IS`` so a NULL key (e.g. "any region") matches
    NULL rather than nothing.
    """
    where = " AND ".join(f"{column} IS ?" for column in keys)
    cursor = conn.execute(f"SELECT id FROM {table} WHERE {where}", tuple(keys.values()))
    row = cursor.fetchone()
    if row is not None:
        assignments = ", ".join(f"{column} = ?" for column in values)
        conn.execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            (*values.values(), row[0]),
        )
        return row[0]

    record = {**keys, **values}
    columns = ", ".join(record)
    placeholders = ", ".join("?" for _ in record)
    cursor = conn.execute(
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
        tuple(record.values()),
    )
    return cursor.lastrowid


def _upsert_by_company(conn: sqlite3.Connection, table: str, company_number: str, values: dict) -> None:
    """Upsert for tables keyed by company_number alone."""
    record = {"company_number": company_number, **values}
    columns = ", ".join(record)
    placeholders = ", ".join("?" for _ in record)
    updates = ", ".join(f"{column} = excluded.{column}" for column in values)
    conn.execute(
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders}) "
        f"ON CONFLICT(company_number) DO UPDATE SET {updates}",
        tuple(record.values()),
    )


def build_accounts(company_number: str, accounts: dict) -> list[dict]:
    """Three-year accounts trail derived from a base turnover, growth and margin."""
    documents = []
    for i, year in enumerate(ACCOUNT_YEARS):
        turnover = _round(accounts["base_turnover"] * (1 + accounts["growth"]) ** i)
        profit = _round(turnover * accounts["margin"])
        assets = _round(turnover * (0.75 + accounts["margin"] / 2))
        documents.append({
            "company_number": company_number,
            "period_end": f"{year}-03-31",
            "turnover": turnover,
            "employees": accounts["employees"],
            "profit": profit,
            "assets": assets,
            "liabilities": _round(assets * 0.55),
            "margin": accounts["margin"],
            "gross_margin": profit,
        })
    return documents


def upsert_sector_stats(
    conn: sqlite3.Connection,
    sic: str,
    region: str | None,
    period: str,
    avg_margin: float | None,
    failure_rate: float | None,
    sample_size: int | None,
) -> None:
    now = _now()
    row_id = _upsert(
        conn,
        "sector_stats",
        {"sic_code": str(sic), "region": region, "period": period},
        {
            "avg_margin": avg_margin,
            "failure_rate": failure_rate,
            "sample_size": sample_size,
            "updated_at": now,
        },
    )
    conn.execute("UPDATE sector_stats SET created_at = COALESCE(created_at, ?) WHERE id = ?", (now, row_id))
    conn.commit()
    logger.info("sector_stats_upserted", sic_code=sic, region=region, period=period)


def seed_company(
    conn: sqlite3.Connection,
    company_number: str,
    name: str,
    variant: str = "tech-london",
    sic: str | None = None,
    region: str | None = None,
) -> dict:
    """
    Seed one demo company from a variant.

    ``sic`` and ``region`` override the variant's own values. Returns a
    summary of what was written.
    """
    if variant not in VARIANTS:
        raise ValueError(f"Unknown variant {variant!r}. Choose from: {', '.join(VARIANTS)}")

    template = VARIANTS[variant]
    company_number = str(company_number)
    sic = str(sic or template["sic"])
    region = region or template["region"]
    now = _now()

    ensure_schema(conn)

    _upsert_by_company(conn, "profiles", company_number, {
        "company_name": name,
        "status": "active",
        "incorporation_date": template["incorporation_date"],
        "sic_codes": json.dumps([sic]),
        "region": region,
        "address": json.dumps(template["address"]),
        "jurisdiction": "uk",
        "updated_at": now,
    })
    _upsert_by_company(conn, "business_profiles", company_number, {
        "name": name,
        "status": "active",
        "sector": json.dumps(template["sector"]),
        "region": region,
        "last_updated": now,
    })

    accounts = build_accounts(company_number, template["accounts"])
    for document in accounts:
        _upsert(
            conn,
            "financial_accounts",
            {"company_number": company_number, "period_end": document["period_end"]},
            {"document": json.dumps({**document, "updated_at": now}), "updated_at": now},
        )

    for transaction_id, filing_date, category, description in template["filings"]:
        _upsert(
            conn,
            "filings",
            {"company_number": company_number, "transaction_id": transaction_id},
            {"filing_date": filing_date, "category": category, "description": description},
        )

    insolvency = template["insolvency"]
    if insolvency:
        _upsert(
            conn,
            "insolvency_notices",
            {"company_number": company_number, "notice_date": insolvency["date"]},
            {"notice_type": insolvency["type"], "url": insolvency["url"]},
        )

    for event_date, action, person, role, note in template["directors"]:
        existing = conn.execute(
            """
            SELECT id FROM director_changes
            WHERE company_number = ?
              AND json_extract(document, '$.person_name') = ?
              AND json_extract(document, '$.event') = ?
              AND json_extract(document, '$.event_date') = ?
            """,
            (company_number, person, action, event_date),
        ).fetchone()
        document = json.dumps({
            "company_number": company_number,
            "person_name": person,
            "event": action,
            "role": role,
            "note": note,
            "event_date": event_date,
            "source": "Seeder",
        })
        if existing is None:
            conn.execute(
                "INSERT INTO director_changes (company_number, document, created_at) VALUES (?, ?, ?)",
                (company_number, document, now),
            )
        else:
            conn.execute("UPDATE director_changes SET document = ? WHERE id = ?", (document, existing[0]))

    for ccj in template["ccjs"]:
        _upsert(
            conn,
            "ccj_details",
            {"company_number": company_number, "case_number": ccj["case_number"]},
            {
                "judgment_date": ccj["judgment_date"],
                "amount": float(ccj.get("amount") or 0),
                "court": ccj.get("court"),
                "status": (ccj.get("status") or "open").lower(),
                "satisfied_date": ccj.get("satisfied_date"),
                "source": "Seeder",
            },
        )
    conn.commit()

    sector = template["sector"]
    upsert_sector_stats(
        conn, sic, region, sector["period"],
        sector["avg_margin"], sector["failure_rate"], sector["sample_size"],
    )

    summary = {
        "company_number": company_number,
        "company_name": name,
        "variant": variant,
        "sic_code": sic,
        "region": region,
        "accounts": len(accounts),
        "filings": len(template["filings"]),
        "director_changes": len(template["directors"]),
        "ccjs": len(template["ccjs"]),
        "insolvency_notices": 1 if insolvency else 0,
    }
    logger.info("company_seeded", **summary)
    return summary


def clean_company(conn: sqlite3.Connection, company_number: str) -> dict[str, int]:
    """Delete every row belonging to a company. Returns deleted counts per table."""
    deleted = {}
    for table in COMPANY_TABLES:
        cursor = conn.execute(f"DELETE FROM {table} WHERE company_number = ?", (str(company_number),))
        deleted[table] = cursor.rowcount
    conn.commit()
    logger.info("company_cleaned", company_number=company_number, **deleted)
    return deleted


def set_sic_region(conn: sqlite3.Connection, company_number: str, sic: str, region: str) -> None:
    """Set industry code and region on an existing profile (and its business profile)."""
    cursor = conn.execute(
        "UPDATE profiles SET sic_codes = ?, region = ?, updated_at = ? WHERE company_number = ?",
        (json.dumps([str(sic)]), region, _now(), str(company_number)),
    )
    if cursor.rowcount == 0:
        conn.rollback()
        raise LookupError(f"No profile found for {company_number}. Seed the company first.")
    conn.execute(
        "UPDATE business_profiles SET region = ?, last_updated = ? WHERE company_number = ?",
        (region, _now(), str(company_number)),
    )
    conn.commit()
    logger.info("sic_region_set", company_number=company_number, sic_code=sic, region=region)


def seed_sector_benchmark(conn: sqlite3.Connection, company_number: str) -> dict:
    """Copy the latest sector stats for the company's SIC and region onto the company."""
    company_number = str(company_number)
    row = conn.execute(
        "SELECT sic_codes, region FROM profiles WHERE company_number = ?",
        (company_number,),
    ).fetchone()
    if row is None:
        raise LookupError(f"No profile found for {company_number}. Seed the company first.")

    try:
        sic_codes = json.loads(row[0]) if row[0] else []
    except ValueError:
        sic_codes = []
    sic = primary_sic_code({"sic_codes": sic_codes})
    region = row[1]
    if not sic or not region:
        raise LookupError(f"Missing SIC/region for {company_number}. Set them first.")

    latest = conn.execute(
        """
        SELECT period, avg_margin, failure_rate, sample_size
        FROM sector_stats
        WHERE sic_code = ? AND region = ?
        ORDER BY period DESC, id DESC
        LIMIT 1
        """,
        (sic, region),
    ).fetchone()
    if latest is None:
        raise LookupError(f"No sector stats for SIC {sic} in {region}. Seed sector stats first.")

    now = _now()
    benchmark = {
        "sic_code": sic,
        "region": region,
        "period": latest[0],
        "avg_margin": latest[1],
        "failure_rate": latest[2],
        "sample_size": latest[3],
        "updated_at": now,
    }
    _upsert_by_company(conn, "sector_benchmarks", company_number, benchmark)
    conn.execute(
        "UPDATE sector_benchmarks SET created_at = COALESCE(created_at, ?) WHERE company_number = ?",
        (now, company_number),
    )
    conn.commit()
    logger.info("sector_benchmark_seeded", company_number=company_number, sic_code=sic, region=region)
    return {"company_number": company_number, **benchmark}


def upsert_thresholds(
    conn: sqlite3.Connection,
    sic: str,
    high: float | None,
    medium: float | None,
    region: str | None = None,
) -> None:
    """Store score cut-points for an industry code. ``region=None`` applies to any region."""
    _upsert(
        conn,
        "risk_thresholds",
        {"sic_code": str(sic), "region": region},
        {"high": high, "medium": medium, "updated_at": _now()},
    )
    conn.commit()
    logger.info("thresholds_upserted", sic_code=sic, region=region, high=high, medium=medium)


def store_score(
    conn: sqlite3.Connection,
    company_number: str,
    score: float,
    reasons: list[str] | None = None,
) -> None:
    """Save a precomputed score. The newest stored score overrides computation."""
    conn.execute(
        "INSERT INTO risk_scores (company_number, score, reasons, updated_at) VALUES (?, ?, ?, ?)",
        (str(company_number), score, json.dumps(list(reasons or [])), _now()),
    )
    conn.commit()
    logger.info("score_stored", company_number=company_number, score=score)
