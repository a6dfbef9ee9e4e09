"""
Job Store — SQLite-based persistence for emitted jobs and the
excluded-companies table.

The pipeline reads identity keys from here before a run and hands the
emitted jobs back afterwards; it never writes through this module itself.
"""

import json
import os
import re
import sqlite3
from datetime import datetime, timezone

from models.job import CanonicalJob
from models.results import UpsertResult
from models.rules import ExcludedCompanyRow


DEFAULT_DB_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "data",
    "culinary_jobs.db",
)
DEFAULT_TABLE = "culinary_jobs"
EXCLUDED_COMPANIES_TABLE = "excluded_companies"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_JOB_COLUMNS = (
    "title", "company", "location", "salary_min", "salary_max", "salary_currency",
    "salary_period", "salary_text", "description", "apply_url", "source", "provider",
    "posted_at", "schedule", "experience_level", "skills", "company_website", "company_domain",
)


def _table_name(table: str = None) -> str:
    """Validate a table name before it is formatted into SQL."""
    table = table or DEFAULT_TABLE
    if not _IDENTIFIER.match(table):
        raise ValueError(f"Invalid table name: {table!r}")
    return table


def _get_connection(db_path: str = None) -> sqlite3.Connection:
    """Get a SQLite connection, creating the database and directory if needed."""
    db_path = db_path or DEFAULT_DB_PATH
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return sqlite3.connect(db_path)


def init_db(db_path: str = None, table: str = None) -> None:
    """Create the jobs table and the excluded_companies table if they don't exist."""
    table = _table_name(table)
    conn = _get_connection(db_path)
    try:
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                identity_key TEXT UNIQUE NOT NULL,
                title TEXT NOT NULL,
                company TEXT NOT NULL,
                location TEXT,
                salary_min REAL,
                salary_max REAL,
                salary_currency TEXT,
                salary_period TEXT,
                salary_text TEXT,
                description TEXT,
                apply_url TEXT,
                source TEXT,
                provider TEXT,
                posted_at TEXT,
                schedule TEXT,
                experience_level TEXT,
                skills TEXT,
                company_website TEXT,
                company_domain TEXT,
                first_seen_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {EXCLUDED_COMPANIES_TABLE} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                company_name TEXT UNIQUE NOT NULL,
                parent_company TEXT,
                domain TEXT,
                added_at TEXT NOT NULL
            )
        """)
        conn.commit()
    finally:
        conn.close()


def load_existing_identities(table: str = None, db_path: str = None) -> set[str]:
    """
    Return every identity key already stored in the jobs table.

    Raises:
        sqlite3.Error: if the table cannot be read. Callers must not treat
            this as "no existing jobs".
    """
    table = _table_name(table)
    conn = _get_connection(db_path)
    try:
        rows = conn.execute(f"SELECT identity_key FROM {table}").fetchall()
        return {row[0] for row in rows}
    finally:
        conn.close()


def _job_values(job: CanonicalJob) -> tuple:
    salary = job.salary
    return (
        job.title,
        job.company,
        job.location,
        salary.min if salary else None,
        salary.max if salary else None,
        salary.currency if salary else None,
        salary.period.value if salary else None,
        job.salary_text,
        job.description,
        job.apply_url,
        job.source,
        job.provider,
        job.posted_at,
        job.schedule,
        job.experience_level,
        json.dumps(job.skills),
        job.company_website,
        job.company_domain,
    )


def upsert_jobs(jobs: list[CanonicalJob], table: str = None, db_path: str = None) -> list[UpsertResult]:
    """
    Insert new jobs and update existing ones, matched by identity key.

    Args:
        jobs: Emitted jobs (none of them may carry an exclusion reason).
        table: Jobs table name.
        db_path: Path to SQLite database.

    Returns:
        One UpsertResult(id, was_new) per job, in input order.

    Raises:
        ValueError: if any job is excluded. Nothing is written in that case.
    """
    table = _table_name(table)
    if not jobs:
        return []

    for job in jobs:
        if job.is_excluded:
            raise ValueError(
                f"Refusing to store excluded job \"{job.title}\" at \"{job.company}\" "
                f"({job.exclusion_reason.value})"
            )

    now = datetime.now(timezone.utc).isoformat()
    columns = ", ".join(_JOB_COLUMNS)
    placeholders = ", ".join("?" for _ in _JOB_COLUMNS)
    assignments = ", ".join(
        f"{column} = COALESCE(?, {column})" if column in ("company_website", "company_domain")
        else f"{column} = ?"
        for column in _JOB_COLUMNS
    )

    results = []
    conn = _get_connection(db_path)
    try:
        with conn:
            for job in jobs:
                key = job.identity_key
                row = conn.execute(
                    f"SELECT id FROM {table} WHERE identity_key = ?", (key,)
                ).fetchone()

                if row:
                    conn.execute(
                        f"UPDATE {table} SET {assignments}, updated_at = ? WHERE id = ?",
                        (*_job_values(job), now, row[0]),
                    )
                    results.append(UpsertResult(id=row[0], was_new=False))
                else:
                    cursor = conn.execute(
                        f"INSERT INTO {table} (identity_key, {columns}, first_seen_at, updated_at) "
                        f"VALUES (?, {placeholders}, ?, ?)",
                        (key, *_job_values(job), now, now),
                    )
                    results.append(UpsertResult(id=cursor.lastrowid, was_new=True))

        new = sum(1 for result in results if result.was_new)
        print(f"[Store] Upserted {len(results)} jobs into {table} ({new} new)")
        return results
    finally:
        conn.close()


def load_excluded_companies(db_path: str = None) -> list[ExcludedCompanyRow]:
    """Rows of the persisted excluded-companies table, oldest first."""
    conn = _get_connection(db_path)
    try:
        rows = conn.execute(
            f"SELECT company_name, parent_company, domain FROM {EXCLUDED_COMPANIES_TABLE} ORDER BY id"
        ).fetchall()
        return [
            ExcludedCompanyRow(company_name=name, parent_company=parent, domain=domain)
            for name, parent, domain in rows
        ]
    finally:
        conn.close()


def add_excluded_company(
    company_name: str,
    parent_company: str = None,
    domain: str = None,
    db_path: str = None,
) -> bool:
    """
    Add a company to the excluded-companies table.

    Returns:
        True if inserted, False if the company was already listed.
    """
    conn = _get_connection(db_path)
    now = datetime.now(timezone.utc).isoformat()
    try:
        try:
            conn.execute(
                f"INSERT INTO {EXCLUDED_COMPANIES_TABLE} (company_name, parent_company, domain, added_at) "
                "VALUES (?, ?, ?, ?)",
                (company_name.strip(), parent_company, domain, now),
            )
        except sqlite3.IntegrityError:
            return False  # Already listed
        conn.commit()
        return True
    finally:
        conn.close()


def get_job_count(table: str = None, db_path: str = None) -> int:
    """Return total number of stored jobs."""
    table = _table_name(table)
    conn = _get_connection(db_path)
    try:
        cursor = conn.execute(f"SELECT COUNT(*) FROM {table}")
        return cursor.fetchone()[0]
    finally:
        conn.close()
