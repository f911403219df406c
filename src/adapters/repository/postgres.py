"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Uniqueness Enforcement:
----------------------
The accounts table carries a UNIQUE constraint on username and a unique
expression index on lower(email) (see migrations/). These are the actual
guarantee against duplicate accounts: two concurrent registrations can both
pass the domain's duplicate pre-check, but only one INSERT can succeed.

The losing INSERT raises psycopg.errors.UniqueViolation, which is mapped to
the same ConflictError the pre-check would have produced. To report which
key collided, the adapter re-reads the identity keys after rolling back;
the constraint name is the fallback when the colliding row is no longer
visible. Every other psycopg error becomes PersistenceError.
"""

import logging
from pathlib import Path

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import ConflictError, PersistenceError
from src.domain.models import Account, NewAccount
from src.domain.ports import ConflictSubject

logger = logging.getLogger(__name__)

USERNAME_CONSTRAINT = "accounts_username_key"
EMAIL_CONSTRAINT = "accounts_email_lower_key"

_ACCOUNT_COLUMNS = """
    id, username, email, password_hash, password_salt, full_name, country,
    postcode, city, address, phone_number, date_of_birth, registration_time,
    email_confirmed, identity_confirmed
"""


def _subject_from_flags(username_taken: bool, email_taken: bool) -> ConflictSubject | None:
    if username_taken and email_taken:
        return ConflictSubject.BOTH
    if username_taken:
        return ConflictSubject.USERNAME
    if email_taken:
        return ConflictSubject.EMAIL
    return None


def _subject_from_constraint(constraint_name: str | None) -> ConflictSubject:
    if constraint_name == USERNAME_CONSTRAINT:
        return ConflictSubject.USERNAME
    return ConflictSubject.EMAIL


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_identity(self, username: str, email: str) -> list[Account]:
        """
        Find accounts whose username matches or whose email matches
        case-insensitively.

        Args:
            username: Requested username
            email: Requested email, any casing

        Returns:
            Matching accounts ordered by id
        """
        sql = f"""
            SELECT {_ACCOUNT_COLUMNS}
            FROM accounts
            WHERE username = %s OR lower(email) = lower(%s)
            ORDER BY id
        """
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (username, email))
                rows = cursor.fetchall()
        except psycopg.Error as exc:
            raise PersistenceError(f"Account lookup failed: {exc}") from exc
        return [Account(**row) for row in rows]

    def create_account(self, account: NewAccount) -> Account:
        """
        Insert a new account and return the stored row.

        Args:
            account: Account payload with hashed credential

        Returns:
            Stored Account with assigned id and default confirmation flags

        Raises:
            ConflictError: Username and/or email uniqueness violated
            PersistenceError: Any other database failure
        """
        sql = f"""
            INSERT INTO accounts (
                username, email, password_hash, password_salt, full_name, country,
                postcode, city, address, phone_number, date_of_birth, registration_time
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_ACCOUNT_COLUMNS}
        """
        params = (
            account.username,
            account.email,
            account.credential.password_hash,
            account.credential.salt,
            account.full_name,
            account.country,
            account.postcode,
            account.city,
            account.address,
            account.phone_number,
            account.date_of_birth,
            account.registration_time,
        )

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                try:
                    cursor.execute(sql, params)
                except pg_errors.UniqueViolation as exc:
                    conn.rollback()
                    subject = self._conflict_subject(cursor, account, exc)
                    logger.warning("Concurrent registration lost uniqueness race on %s", subject.value)
                    raise ConflictError(subject) from None
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Account creation failed: {exc}") from exc

        if row is None:
            raise PersistenceError("Account creation returned no row")
        return Account(**row)

    def confirm_account(self, account_id: int) -> Account:
        """
        Set both confirmation flags on an existing account.

        Single UPDATE ... RETURNING statement; no other column is touched.

        Args:
            account_id: Identifier of the account

        Returns:
            The updated Account

        Raises:
            PersistenceError: Account not found or database failure
        """
        sql = f"""
            UPDATE accounts
            SET email_confirmed = TRUE, identity_confirmed = TRUE
            WHERE id = %s
            RETURNING {_ACCOUNT_COLUMNS}
        """
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (account_id,))
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Account confirmation failed: {exc}") from exc

        if row is None:
            raise PersistenceError(f"Account {account_id} not found")
        return Account(**row)

    def _conflict_subject(
        self, cursor: psycopg.Cursor, account: NewAccount, exc: pg_errors.UniqueViolation
    ) -> ConflictSubject:
        cursor.execute(
            """
            SELECT COALESCE(bool_or(username = %s), FALSE) AS username_taken,
                   COALESCE(bool_or(lower(email) = lower(%s)), FALSE) AS email_taken
            FROM accounts
            WHERE username = %s OR lower(email) = lower(%s)
            """,
            (account.username, account.email, account.username, account.email),
        )
        flags = cursor.fetchone()
        subject = None
        if flags is not None:
            subject = _subject_from_flags(flags["username_taken"], flags["email_taken"])
        return subject or _subject_from_constraint(exc.diag.constraint_name)


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
