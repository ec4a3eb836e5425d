"""Chat history persistence service.

Stores copilot sessions and their messages in a dedicated SQLite file and
serves the history listing surface (offset pagination, oldest first).
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from copilot.domain.models import (
    ChatHistory,
    ChatMessage,
    ChatSessionOptions,
    ChatSessionState,
    ListHistoriesOptions,
)
from copilot.domain.validation import validate_chat_history, validate_chat_message

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    workspace_id TEXT NOT NULL,
    doc_id TEXT NOT NULL,
    prompt_name TEXT NOT NULL,
    action TEXT,
    tokens INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    role TEXT NOT NULL CHECK(role IN ('system', 'assistant', 'user')),
    content TEXT NOT NULL,
    attachments TEXT,
    params TEXT,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_messages_session_id ON messages(session_id, position);
CREATE INDEX IF NOT EXISTS idx_sessions_owner ON sessions(user_id, workspace_id, doc_id);
"""


def _utcnow() -> str:
    return datetime.now(UTC).isoformat(timespec="microseconds")


def _dump_optional(value: object | None) -> str | None:
    return None if value is None else json.dumps(value)


def _load_optional(value: str | None) -> object | None:
    return None if value is None else json.loads(value)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ChatHistoryService:
    """Session and message storage backed by a SQLite file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open (or create) the database and ensure the schema exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")
        self.conn.executescript(_SCHEMA_SQL)
        self.conn.commit()
        logger.info("Copilot history DB ready at {}", self.db_path)

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(
        self,
        options: ChatSessionOptions,
        action: str | None = None,
        session_id: str | None = None,
    ) -> str:
        """Create an empty session and return its ID (generated when not given)."""
        assert self.conn
        session_id = session_id or str(uuid.uuid4())
        now = _utcnow()
        self.conn.execute(
            "INSERT INTO sessions (id, user_id, workspace_id, doc_id, prompt_name, action, "
            "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                session_id,
                options.user_id,
                options.workspace_id,
                options.doc_id,
                options.prompt_name,
                action,
                now,
                now,
            ),
        )
        self.conn.commit()
        logger.info("Created session {} | prompt={}", session_id, options.prompt_name)
        return session_id

    def save_session(self, state: ChatSessionState, tokens: int = 0) -> None:
        """Replace the stored messages of a session with *state.messages*.

        *tokens* is the token count attributable to the recorded exchange.
        """
        assert self.conn
        with self.conn:
            cursor = self.conn.execute(
                "UPDATE sessions SET tokens = ?, updated_at = ? WHERE id = ?",
                (tokens, _utcnow(), state.session_id),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"Unknown session {state.session_id}")
            self.conn.execute("DELETE FROM messages WHERE session_id = ?", (state.session_id,))
            self.conn.executemany(
                "INSERT INTO messages (id, session_id, position, role, content, attachments, "
                "params, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        str(uuid.uuid4()),
                        state.session_id,
                        position,
                        str(message.role),
                        message.content,
                        _dump_optional(message.attachments),
                        _dump_optional(message.params),
                        message.created_at.isoformat(timespec="microseconds"),
                    )
                    for position, message in enumerate(state.messages)
                ],
            )

    def get_session_messages(self, session_id: str) -> list[ChatMessage]:
        """Return the stored messages of a session in insertion order."""
        assert self.conn
        rows = self.conn.execute(
            "SELECT * FROM messages WHERE session_id = ? ORDER BY position ASC", (session_id,)
        ).fetchall()
        return [validate_chat_message(self._row_to_message(row)).unwrap() for row in rows]

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_histories(
        self,
        user_id: str,
        workspace_id: str,
        doc_id: str | None = None,
        options: ListHistoriesOptions | None = None,
    ) -> list[ChatHistory]:
        """Return history records for an owner, oldest session first.

        Pagination is offset-based: ``skip`` records are dropped before at
        most ``limit`` are returned.  Records whose stored messages no longer
        validate are logged and left out.
        """
        assert self.conn
        options = options or ListHistoriesOptions()

        clauses = ["user_id = ?", "workspace_id = ?"]
        args: list[object] = [user_id, workspace_id]
        if doc_id is not None:
            clauses.append("doc_id = ?")
            args.append(doc_id)
        if options.session_id is not None:
            clauses.append("id = ?")
            args.append(options.session_id)
        if options.action is True:
            clauses.append("action IS NOT NULL")
        elif options.action is False:
            clauses.append("action IS NULL")
        elif options.action is not None:
            clauses.append("action = ?")
            args.append(options.action)

        sql = (
            f"SELECT * FROM sessions WHERE {' AND '.join(clauses)} "
            "ORDER BY created_at ASC, rowid ASC"
        )
        if options.limit is not None or options.skip is not None:
            sql += " LIMIT ? OFFSET ?"
            args.extend([-1 if options.limit is None else options.limit, options.skip or 0])

        histories: list[ChatHistory] = []
        for row in self.conn.execute(sql, args).fetchall():
            messages = self.conn.execute(
                "SELECT * FROM messages WHERE session_id = ? ORDER BY position ASC", (row["id"],)
            ).fetchall()
            result = validate_chat_history(
                {
                    "sessionId": row["id"],
                    "action": row["action"],
                    "tokens": row["tokens"],
                    "messages": [self._row_to_message(m) for m in messages],
                    "createdAt": row["created_at"],
                }
            )
            if not result.ok:
                logger.error("Unexpected message schema in session {}: {}", row["id"], result.errors)
                continue
            histories.append(result.unwrap())
        return histories

    # ------------------------------------------------------------------
    # Row helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_message(row: sqlite3.Row) -> dict:
        return {
            "role": row["role"],
            "content": row["content"],
            "attachments": _load_optional(row["attachments"]),
            "params": _load_optional(row["params"]),
            "createdAt": row["created_at"],
        }
