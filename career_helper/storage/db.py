from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator, Literal

from pydantic import BaseModel

from career_helper.core.config import settings
from career_helper.ranking.models import Candidate

logger = logging.getLogger(__name__)

AnalysisType = Literal["ats", "job-match"]
ANALYSIS_TYPES = ("ats", "job-match")


class StoredResume(BaseModel):
    id: str
    user_id: str
    name: str
    text: str
    uploaded_at: str
    file_type: str


class AnalysisRecord(BaseModel):
    id: str
    user_id: str
    resume_id: str
    type: AnalysisType
    data: dict[str, Any]
    created_at: str


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def _get_db_path() -> Path:
    return Path(settings.storage_db_path)


@contextmanager
def _connect() -> Iterator[sqlite3.Connection]:
    conn = sqlite3.connect(_get_db_path())
    conn.row_factory = sqlite3.Row
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def init_db() -> None:
    db_path = _get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with _connect() as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS resumes (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                text TEXT NOT NULL,
                uploaded_at TEXT NOT NULL,
                file_type TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_resumes_user_uploaded
            ON resumes (user_id, uploaded_at)
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS analyses (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                resume_id TEXT NOT NULL,
                type TEXT NOT NULL,
                data_json TEXT NOT NULL,
                candidate_email TEXT,
                created_at TEXT NOT NULL,
                UNIQUE (user_id, candidate_email, type)
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_analyses_user_type_created
            ON analyses (user_id, type, created_at)
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS current_resume (
                user_id TEXT PRIMARY KEY,
                resume_id TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS ai_analysis_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                run_id TEXT NOT NULL,
                tool_slug TEXT NOT NULL,
                model TEXT NOT NULL,
                schema_valid INTEGER NOT NULL,
                status TEXT NOT NULL,
                error_code TEXT,
                latency_ms INTEGER
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_ai_analysis_runs_created_at
            ON ai_analysis_runs (created_at)
            """
        )


def _row_to_resume(row: sqlite3.Row) -> StoredResume:
    return StoredResume(**{key: row[key] for key in row.keys()})


def _row_to_analysis(row: sqlite3.Row) -> AnalysisRecord:
    try:
        data = json.loads(row["data_json"])
    except (TypeError, ValueError):
        data = {}
    return AnalysisRecord(
        id=row["id"],
        user_id=row["user_id"],
        resume_id=row["resume_id"],
        type=row["type"],
        data=data if isinstance(data, dict) else {},
        created_at=row["created_at"],
    )


def save_resume(
    *,
    user_id: str,
    name: str,
    text: str,
    file_type: str,
    uploaded_at: str | None = None,
) -> StoredResume:
    resume = StoredResume(
        id=_new_id(),
        user_id=user_id,
        name=name,
        text=text,
        uploaded_at=uploaded_at or _utc_now(),
        file_type=file_type,
    )
    with _connect() as conn:
        conn.execute(
            """
            INSERT INTO resumes (id, user_id, name, text, uploaded_at, file_type)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (resume.id, resume.user_id, resume.name, resume.text, resume.uploaded_at, resume.file_type),
        )
    return resume


def get_resume(resume_id: str, *, user_id: str | None = None) -> StoredResume | None:
    query = "SELECT * FROM resumes WHERE id = ?"
    params: tuple[Any, ...] = (resume_id,)
    if user_id is not None:
        query += " AND user_id = ?"
        params = (resume_id, user_id)
    with _connect() as conn:
        row = conn.execute(query, params).fetchone()
    return _row_to_resume(row) if row else None


def list_resumes(user_id: str) -> list[StoredResume]:
    with _connect() as conn:
        rows = conn.execute(
            "SELECT * FROM resumes WHERE user_id = ? ORDER BY uploaded_at DESC, rowid DESC",
            (user_id,),
        ).fetchall()
    return [_row_to_resume(row) for row in rows]


def delete_resume(resume_id: str, *, user_id: str) -> bool:
    with _connect() as conn:
        cur = conn.execute(
            "DELETE FROM resumes WHERE id = ? AND user_id = ?",
            (resume_id, user_id),
        )
        conn.execute(
            "DELETE FROM current_resume WHERE user_id = ? AND resume_id = ?",
            (user_id, resume_id),
        )
    return bool(cur.rowcount)


def set_current_resume(user_id: str, resume_id: str) -> None:
    with _connect() as conn:
        conn.execute(
            """
            INSERT INTO current_resume (user_id, resume_id, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                resume_id = excluded.resume_id,
                updated_at = excluded.updated_at
            """,
            (user_id, resume_id, _utc_now()),
        )


def clear_current_resume(user_id: str) -> None:
    with _connect() as conn:
        conn.execute("DELETE FROM current_resume WHERE user_id = ?", (user_id,))


def get_current_resume(user_id: str) -> StoredResume | None:
    with _connect() as conn:
        row = conn.execute(
            """
            SELECT r.*
            FROM current_resume c
            JOIN resumes r ON r.id = c.resume_id
            WHERE c.user_id = ?
            """,
            (user_id,),
        ).fetchone()
    return _row_to_resume(row) if row else None


def _candidate_email(data: dict[str, Any]) -> str | None:
    details = data.get("candidateDetails")
    if not isinstance(details, dict):
        return None
    email = details.get("email")
    if not isinstance(email, str) or not email.strip():
        return None
    return email.strip()


def save_analysis(
    *,
    user_id: str,
    resume_id: str,
    analysis_type: AnalysisType,
    data: dict[str, Any],
) -> AnalysisRecord:
    """Store an analysis, superseding any earlier one for the same candidate email and type."""
    if analysis_type not in ANALYSIS_TYPES:
        raise ValueError(f"analysis_type must be one of: {', '.join(ANALYSIS_TYPES)}")

    record = AnalysisRecord(
        id=_new_id(),
        user_id=user_id,
        resume_id=resume_id,
        type=analysis_type,
        data=data,
        created_at=_utc_now(),
    )
    with _connect() as conn:
        conn.execute(
            """
            INSERT INTO analyses (id, user_id, resume_id, type, data_json, candidate_email, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, candidate_email, type) DO UPDATE SET
                id = excluded.id,
                resume_id = excluded.resume_id,
                data_json = excluded.data_json,
                created_at = excluded.created_at
            """,
            (
                record.id,
                record.user_id,
                record.resume_id,
                record.type,
                json.dumps(data, ensure_ascii=False),
                _candidate_email(data),
                record.created_at,
            ),
        )
    return record


def list_analyses(user_id: str, analysis_type: AnalysisType | None = None) -> list[AnalysisRecord]:
    query = "SELECT * FROM analyses WHERE user_id = ?"
    params: list[Any] = [user_id]
    if analysis_type is not None:
        query += " AND type = ?"
        params.append(analysis_type)
    query += " ORDER BY created_at DESC, rowid DESC"
    with _connect() as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_analysis(row) for row in rows]


def get_analysis_for_resume(
    *,
    user_id: str,
    resume_id: str,
    analysis_type: AnalysisType,
) -> AnalysisRecord | None:
    with _connect() as conn:
        row = conn.execute(
            """
            SELECT * FROM analyses
            WHERE user_id = ? AND resume_id = ? AND type = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """,
            (user_id, resume_id, analysis_type),
        ).fetchone()
    return _row_to_analysis(row) if row else None


def load_candidates(user_id: str) -> list[Candidate]:
    """Candidates from every ATS analysis of the user, newest first, with resume text."""
    with _connect() as conn:
        rows = conn.execute(
            """
            SELECT a.id AS analysis_id, a.resume_id, a.data_json, a.created_at,
                   r.name AS resume_name, r.text AS resume_text
            FROM analyses a
            JOIN resumes r ON r.id = a.resume_id
            WHERE a.user_id = ? AND a.type = 'ats'
            ORDER BY a.created_at DESC, a.rowid DESC
            """,
            (user_id,),
        ).fetchall()

    candidates: list[Candidate] = []
    for row in rows:
        try:
            data = json.loads(row["data_json"])
        except (TypeError, ValueError):
            logger.warning("candidate_analysis_unreadable analysis_id=%s", row["analysis_id"])
            continue
        details = data.get("candidateDetails") if isinstance(data, dict) else None
        if not isinstance(details, dict):
            continue
        candidates.append(
            Candidate(
                analysis_id=row["analysis_id"],
                resume_id=row["resume_id"],
                name=str(details.get("name") or "Unknown"),
                email=str(details.get("email") or "N/A"),
                score=data.get("overallScore") or 0,
                skills=details.get("skills") or [],
                experience=details.get("workExperience") or [],
                education=details.get("education") or [],
                analyzed_at=row["created_at"],
                resume_name=row["resume_name"],
                resume_text=row["resume_text"],
            )
        )
    return candidates


def log_ai_analysis_run(
    *,
    run_id: str,
    tool_slug: str,
    model: str,
    schema_valid: bool,
    status: str,
    error_code: str | None = None,
    latency_ms: int | None = None,
) -> None:
    with _connect() as conn:
        conn.execute(
            """
            INSERT INTO ai_analysis_runs (
                created_at, run_id, tool_slug, model, schema_valid, status, error_code, latency_ms
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                _utc_now(),
                run_id,
                tool_slug,
                model,
                1 if schema_valid else 0,
                status,
                error_code,
                latency_ms,
            ),
        )


def list_ai_analysis_runs(limit: int = 20) -> list[dict[str, Any]]:
    with _connect() as conn:
        rows = conn.execute(
            """
            SELECT created_at, run_id, tool_slug, model, schema_valid, status, error_code, latency_ms
            FROM ai_analysis_runs
            ORDER BY id DESC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()
    return [dict(row) for row in rows]


def purge_old_records() -> dict[str, int]:
    retention = max(1, int(settings.ai_run_retention_days))
    with _connect() as conn:
        cur = conn.execute(
            "DELETE FROM ai_analysis_runs WHERE created_at < ?",
            (_retention_cutoff(retention),),
        )
        deleted = int(cur.rowcount or 0)
    return {"ai_analysis_runs": deleted}


def _retention_cutoff(days: int) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
