"""SQLite data store for Deltalytix."""

import json
import logging
import sqlite3
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional

from deltalytix.models import AccountConfiguration, Payout, Trade

logger = logging.getLogger(__name__)


def _dec(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def _to_dec(value: Optional[str]) -> Optional[Decimal]:
    return None if value is None else Decimal(value)


def _ts(value: Optional[datetime]) -> Optional[str]:
    return None if value is None else value.isoformat()


def _to_ts(value: Optional[str]) -> Optional[datetime]:
    return None if value is None else datetime.fromisoformat(value)


class DataStore:
    """SQLite-based data store for accounts, trades and payouts.

    Monetary values are stored as TEXT so Decimals round-trip exactly.
    """

    REQUIRED_TABLES = [
        "accounts",
        "trades",
        "payouts",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # Accounts table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    account_number TEXT PRIMARY KEY,
                    starting_balance TEXT NOT NULL,
                    profit_target TEXT NOT NULL,
                    drawdown_threshold TEXT NOT NULL,
                    trailing_drawdown INTEGER NOT NULL DEFAULT 0,
                    trailing_stop_profit TEXT NOT NULL,
                    propfirm TEXT,
                    consistency_percentage TEXT NOT NULL,
                    reset_date TEXT,
                    buffer TEXT NOT NULL,
                    consider_buffer INTEGER NOT NULL DEFAULT 1,
                    min_pnl_to_count_as_day TEXT NOT NULL
                )
            """)

            # Trades table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    account_number TEXT NOT NULL,
                    instrument TEXT NOT NULL,
                    side TEXT NOT NULL,
                    quantity INTEGER NOT NULL,
                    entry_price TEXT,
                    close_price TEXT,
                    pnl TEXT NOT NULL,
                    commission TEXT NOT NULL,
                    entry_date TEXT,
                    close_date TEXT,
                    time_in_position REAL NOT NULL DEFAULT 0,
                    tags TEXT NOT NULL DEFAULT '[]',
                    comment TEXT,
                    trade_hash TEXT NOT NULL UNIQUE
                )
            """)

            # Payouts table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS payouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    account_number TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    date TEXT NOT NULL,
                    status TEXT NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Accounts ====================

    def save_account(self, account: AccountConfiguration) -> None:
        """Create or replace an account configuration.

        Args:
            account: Account to save.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR REPLACE INTO accounts
                (account_number, starting_balance, profit_target, drawdown_threshold,
                 trailing_drawdown, trailing_stop_profit, propfirm, consistency_percentage,
                 reset_date, buffer, consider_buffer, min_pnl_to_count_as_day)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    account.account_number,
                    _dec(account.starting_balance),
                    _dec(account.profit_target),
                    _dec(account.drawdown_threshold),
                    1 if account.trailing_drawdown else 0,
                    _dec(account.trailing_stop_profit),
                    account.propfirm,
                    _dec(account.consistency_percentage),
                    _ts(account.reset_date),
                    _dec(account.buffer),
                    1 if account.consider_buffer else 0,
                    _dec(account.min_pnl_to_count_as_day),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def _row_to_account(self, row: sqlite3.Row) -> AccountConfiguration:
        return AccountConfiguration(
            account_number=row["account_number"],
            starting_balance=_to_dec(row["starting_balance"]),
            profit_target=_to_dec(row["profit_target"]),
            drawdown_threshold=_to_dec(row["drawdown_threshold"]),
            trailing_drawdown=bool(row["trailing_drawdown"]),
            trailing_stop_profit=_to_dec(row["trailing_stop_profit"]),
            propfirm=row["propfirm"],
            consistency_percentage=_to_dec(row["consistency_percentage"]),
            reset_date=_to_ts(row["reset_date"]),
            buffer=_to_dec(row["buffer"]),
            consider_buffer=bool(row["consider_buffer"]),
            min_pnl_to_count_as_day=_to_dec(row["min_pnl_to_count_as_day"]),
        )

    def get_account(self, account_number: str) -> Optional[AccountConfiguration]:
        """Get an account by number.

        Args:
            account_number: Account number.

        Returns:
            Account if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM accounts WHERE account_number = ?",
                (account_number,),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_account(row)
            return None
        finally:
            conn.close()

    def list_accounts(self) -> list[AccountConfiguration]:
        """Get all accounts ordered by account number."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM accounts ORDER BY account_number")
            return [self._row_to_account(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def delete_account(self, account_number: str) -> bool:
        """Delete an account together with its trades and payouts.

        Returns:
            True if the account existed.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM trades WHERE account_number = ?", (account_number,))
            cursor.execute("DELETE FROM payouts WHERE account_number = ?", (account_number,))
            cursor.execute("DELETE FROM accounts WHERE account_number = ?", (account_number,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted
        finally:
            conn.close()

    # ==================== Trades ====================

    def _insert_trade(self, cursor: sqlite3.Cursor, trade: Trade) -> None:
        cursor.execute(
            """
            INSERT OR IGNORE INTO trades
            (account_number, instrument, side, quantity, entry_price, close_price, pnl,
             commission, entry_date, close_date, time_in_position, tags, comment, trade_hash)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                trade.account_number,
                trade.instrument,
                trade.side,
                trade.quantity,
                _dec(trade.entry_price),
                _dec(trade.close_price),
                _dec(trade.pnl),
                _dec(trade.commission),
                _ts(trade.entry_date),
                _ts(trade.close_date),
                trade.time_in_position,
                json.dumps(trade.tags),
                trade.comment,
                trade.trade_hash,
            ),
        )

    def log_trade(self, trade: Trade) -> Optional[int]:
        """Store a single trade.

        Args:
            trade: Trade to store.

        Returns:
            The new trade ID, or None if an identical trade already exists.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._insert_trade(cursor, trade)
            conn.commit()
            return cursor.lastrowid if cursor.rowcount > 0 else None
        finally:
            conn.close()

    def save_trades(self, trades: Iterable[Trade]) -> int:
        """Store trades in one transaction, skipping duplicates.

        Args:
            trades: Trades to store.

        Returns:
            Number of trades actually inserted.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            inserted = 0
            for trade in trades:
                self._insert_trade(cursor, trade)
                inserted += cursor.rowcount
            conn.commit()
            logger.info("Saved %d new trades", inserted)
            return inserted
        finally:
            conn.close()

    def _row_to_trade(self, row: sqlite3.Row) -> Trade:
        return Trade(
            id=row["id"],
            account_number=row["account_number"],
            instrument=row["instrument"],
            side=row["side"],
            quantity=row["quantity"],
            entry_price=_to_dec(row["entry_price"]),
            close_price=_to_dec(row["close_price"]),
            pnl=_to_dec(row["pnl"]),
            commission=_to_dec(row["commission"]),
            entry_date=_to_ts(row["entry_date"]),
            close_date=_to_ts(row["close_date"]),
            time_in_position=row["time_in_position"],
            tags=json.loads(row["tags"]),
            comment=row["comment"],
        )

    def get_trades(
        self,
        account_number: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> list[Trade]:
        """Get trades, optionally for one account and an entry date range.

        Args:
            account_number: Optional account filter.
            from_date: Optional first entry date (inclusive).
            to_date: Optional last entry date (inclusive).

        Returns:
            List of trades ordered by entry date.
        """
        clauses = []
        params: list = []
        if account_number is not None:
            clauses.append("account_number = ?")
            params.append(account_number)
        if from_date is not None:
            clauses.append("date(entry_date) >= ?")
            params.append(from_date.isoformat())
        if to_date is not None:
            clauses.append("date(entry_date) <= ?")
            params.append(to_date.isoformat())
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT * FROM trades {where} ORDER BY entry_date, id",
                params,
            )
            return [self._row_to_trade(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_trade(self, trade_id: int) -> Optional[Trade]:
        """Get a trade by ID."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM trades WHERE id = ?", (trade_id,))
            row = cursor.fetchone()
            return self._row_to_trade(row) if row else None
        finally:
            conn.close()

    def update_trade_annotations(
        self,
        trade_id: int,
        tags: Optional[list[str]] = None,
        comment: Optional[str] = None,
    ) -> bool:
        """Update the user-editable fields of a trade.

        Fields passed as None are left unchanged.

        Returns:
            True if the trade exists.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if tags is not None:
                cursor.execute(
                    "UPDATE trades SET tags = ? WHERE id = ?",
                    (json.dumps(sorted(set(tags))), trade_id),
                )
            if comment is not None:
                cursor.execute(
                    "UPDATE trades SET comment = ? WHERE id = ?",
                    (comment or None, trade_id),
                )
            cursor.execute("SELECT 1 FROM trades WHERE id = ?", (trade_id,))
            found = cursor.fetchone() is not None
            conn.commit()
            return found
        finally:
            conn.close()

    def delete_trade(self, trade_id: int) -> bool:
        """Delete a trade.

        Returns:
            True if a trade was deleted.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    # ==================== Payouts ====================

    def save_payout(self, payout: Payout) -> int:
        """Save a payout.

        Args:
            payout: Payout to save.

        Returns:
            The ID of the saved payout.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO payouts (account_number, amount, date, status)
                VALUES (?, ?, ?, ?)
                """,
                (
                    payout.account_number,
                    _dec(payout.amount),
                    _ts(payout.date),
                    payout.status,
                ),
            )
            conn.commit()
            return cursor.lastrowid or 0
        finally:
            conn.close()

    def _row_to_payout(self, row: sqlite3.Row) -> Payout:
        return Payout(
            id=row["id"],
            account_number=row["account_number"],
            amount=_to_dec(row["amount"]),
            date=_to_ts(row["date"]),
            status=row["status"],
        )

    def get_payouts(self, account_number: Optional[str] = None) -> list[Payout]:
        """Get payouts, optionally for one account, ordered by date."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if account_number is not None:
                cursor.execute(
                    "SELECT * FROM payouts WHERE account_number = ? ORDER BY date, id",
                    (account_number,),
                )
            else:
                cursor.execute("SELECT * FROM payouts ORDER BY date, id")
            return [self._row_to_payout(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_payout_status(self, payout_id: int, status: str) -> bool:
        """Change the status of a payout.

        Returns:
            True if the payout exists.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE payouts SET status = ? WHERE id = ?",
                (status.strip().upper(), payout_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def delete_payout(self, payout_id: int) -> bool:
        """Delete a payout.

        Returns:
            True if a payout was deleted.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM payouts WHERE id = ?", (payout_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
