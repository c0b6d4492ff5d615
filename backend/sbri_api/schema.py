"""
SQLite schema for the SBRI store.

Accounts and director changes keep the source document as JSON because their
field names vary between loads; services/normalize.py reads them. Everything
else is plain columns.
"""
import sqlite3

import structlog

logger = structlog.get_logger("sbri.schema")

TABLES = {
    "profiles": """
        CREATE TABLE IF NOT EXISTS profiles (
            company_number TEXT PRIMARY KEY,
            company_name TEXT,
            status TEXT,
            incorporation_date TEXT,
            sic_codes TEXT,          -- JSON array, first entry is primary
            region TEXT,
            address TEXT,            -- JSON object
            jurisdiction TEXT,
            updated_at TEXT
        )
    """,
    "business_profiles": """
        CREATE TABLE IF NOT EXISTS business_profiles (
            company_number TEXT PRIMARY KEY,
            name TEXT,
            status TEXT,
            sector TEXT,             -- JSON object
            region TEXT,
            last_updated TEXT
        )
    """,
    "financial_accounts": """
        CREATE TABLE IF NOT EXISTS financial_accounts (
            id INTEGER PRIMARY KEY,
            company_number TEXT NOT NULL,
            period_end TEXT,
            document TEXT NOT NULL,
            updated_at TEXT,
            UNIQUE(company_number, period_end)
        )
    """,
    "filings": """
        CREATE TABLE IF NOT EXISTS filings (
            id INTEGER PRIMARY KEY,
            company_number TEXT NOT NULL,
            transaction_id TEXT,
            filing_date TEXT,
            category TEXT,
            description TEXT,
            UNIQUE(company_number, transaction_id)
        )
    """,
    "insolvency_notices": """
        CREATE TABLE IF NOT EXISTS insolvency_notices (
            id INTEGER PRIMARY KEY,
            company_number TEXT NOT NULL,
            notice_date TEXT,
            notice_type TEXT,
            url TEXT,
            UNIQUE(company_number, notice_date)
        )
    """,
    "director_changes": """
        CREATE TABLE IF NOT EXISTS director_changes (
            id INTEGER PRIMARY KEY,
            company_number TEXT NOT NULL,
            document TEXT NOT NULL,
            created_at TEXT
        )
    """,
    "ccj_details": """
        CREATE TABLE IF NOT EXISTS ccj_details (
            id INTEGER PRIMARY KEY,
            company_number TEXT NOT NULL,
            case_number TEXT,
            judgment_date TEXT,
            amount REAL DEFAULT 0,
            court TEXT,
            status TEXT DEFAULT 'open',
            satisfied_date TEXT,
            source TEXT,
            UNIQUE(company_number, case_number)
        )
    """,
    "sector_stats": """
        CREATE TABLE IF NOT EXISTS sector_stats (
            id INTEGER PRIMARY KEY,
            sic_code TEXT NOT NULL,
            region TEXT,
            period TEXT,
            avg_margin REAL,
            failure_rate REAL,
            sample_size INTEGER,
            created_at TEXT,
            updated_at TEXT,
            UNIQUE(sic_code, region, period)
        )
    """,
    "sector_benchmarks": """
        CREATE TABLE IF NOT EXISTS sector_benchmarks (
            company_number TEXT PRIMARY KEY,
            sic_code TEXT,
            region TEXT,
            period TEXT,
            avg_margin REAL,
            failure_rate REAL,
            sample_size INTEGER,
            created_at TEXT,
            updated_at TEXT
        )
    """,
    "risk_thresholds": """
        CREATE TABLE IF NOT EXISTS risk_thresholds (
            id INTEGER PRIMARY KEY,
            sic_code TEXT NOT NULL,
            region TEXT,             -- NULL means "any region"
            high REAL,
            medium REAL,
            updated_at TEXT
        )
    """,
    "risk_scores": """
        CREATE TABLE IF NOT EXISTS risk_scores (
            id INTEGER PRIMARY KEY,
            company_number TEXT NOT NULL,
            score REAL,
            reasons TEXT,            -- JSON array
            updated_at TEXT
        )
    """,
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_profiles_name ON profiles(company_name)",
    "CREATE INDEX IF NOT EXISTS idx_accounts_company ON financial_accounts(company_number, period_end DESC)",
    "CREATE INDEX IF NOT EXISTS idx_filings_company ON filings(company_number, filing_date DESC)",
    "CREATE INDEX IF NOT EXISTS idx_insolvency_company ON insolvency_notices(company_number, notice_date DESC)",
    "CREATE INDEX IF NOT EXISTS idx_director_changes_company ON director_changes(company_number)",
    "CREATE INDEX IF NOT EXISTS idx_ccj_company ON ccj_details(company_number, judgment_date DESC)",
    "CREATE INDEX IF NOT EXISTS idx_ccj_status ON ccj_details(company_number, status)",
    "CREATE INDEX IF NOT EXISTS idx_sector_stats_lookup ON sector_stats(sic_code, region, period DESC)",
    "CREATE INDEX IF NOT EXISTS idx_thresholds_lookup ON risk_thresholds(sic_code, region)",
    "CREATE INDEX IF NOT EXISTS idx_scores_company ON risk_scores(company_number, updated_at DESC)",
]

# Tables holding per-company rows, in the order they are cleaned
COMPANY_TABLES = [
    "profiles",
    "business_profiles",
    "financial_accounts",
    "filings",
    "insolvency_notices",
    "director_changes",
    "ccj_details",
    "sector_benchmarks",
    "risk_scores",
]


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes. Safe to run repeatedly."""
    cursor = conn.cursor()
    for name, ddl in TABLES.items():
        cursor.execute(ddl)
    for ddl in INDEXES:
        cursor.execute(ddl)
    conn.commit()
    logger.info("schema_ready", tables=len(TABLES), indexes=len(INDEXES))


def missing_tables(conn: sqlite3.Connection) -> list[str]:
    """Names of expected tables that do not exist yet."""
    cursor = conn.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    present = {row[0] for row in cursor.fetchall()}
    return [name for name in TABLES if name not in present]
