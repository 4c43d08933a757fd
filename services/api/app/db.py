"""Database connection layer.

Supports two modes:
- PostgreSQL when DATABASE_URL is set
- In-memory fallback for local development without DB

The stage planner only needs three narrow lookups from here:
stage display names, the project reference (phase code, start date,
estimated days) and the set of completed stages. The remaining helpers
create the records those lookups read.
"""

from __future__ import annotations

import logging
import os
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("DATABASE_URL", "")

# ---------------------------------------------------------------------------
# Connection pool (lazy init)
# ---------------------------------------------------------------------------

_pool = None
_pool_init_done = False  # True once we've attempted to connect (success or failure)


def _get_pool():
    global _pool, _pool_init_done
    if _pool is not None:
        return _pool
    if _pool_init_done:
        return None  # Already tried and failed - don't retry on every request
    _pool_init_done = True
    if not DATABASE_URL:
        logger.info("No DATABASE_URL set - using in-memory fallback")
        return None
    try:
        from psycopg2 import pool as pg_pool

        _pool = pg_pool.ThreadedConnectionPool(
            minconn=1,
            maxconn=3,
            dsn=DATABASE_URL,
            connect_timeout=5,
        )
        logger.info("PostgreSQL connection pool created")
        _run_migrations(_pool)
        return _pool
    except Exception as e:
        logger.warning("Failed to create PostgreSQL pool: %s - using in-memory fallback", e)
        return None


_SCHEMA = (
    """CREATE TABLE IF NOT EXISTS projects (
        id TEXT PRIMARY KEY,
        project_no TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        phase_code TEXT NOT NULL DEFAULT 'waiting',
        start_date DATE,
        estimated_days INTEGER,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )""",
    """CREATE TABLE IF NOT EXISTS stage_completions (
        project_no TEXT NOT NULL,
        stage_no INTEGER NOT NULL,
        file_url TEXT NOT NULL,
        completed_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        PRIMARY KEY (project_no, stage_no)
    )""",
    """CREATE TABLE IF NOT EXISTS stage_names (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL
    )""",
)


def _run_migrations(pool):
    """Create the tables this service reads, if they are missing."""
    try:
        conn = pool.getconn()
        try:
            cur = conn.cursor()
            for ddl in _SCHEMA:
                cur.execute(ddl)
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.warning("Migration failed (non-fatal): %s", e)
        finally:
            pool.putconn(conn)
    except Exception as e:
        logger.warning("Could not run migrations: %s", e)


@contextmanager
def get_conn():
    """Yield a PostgreSQL connection from the pool."""
    pool = _get_pool()
    if pool is None:
        yield None
        return
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)


# ---------------------------------------------------------------------------
# In-memory fallback stores
# ---------------------------------------------------------------------------

_mem_projects: Dict[str, dict] = {}
_mem_completions: Dict[Tuple[str, int], dict] = {}
_mem_stage_names: Dict[int, str] = {}


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _uuid() -> str:
    return str(uuid.uuid4())


def _use_pg() -> bool:
    return _get_pool() is not None


def _iso(value) -> str:
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _due_date(start_date: Optional[date], estimated_days: Optional[int]) -> Optional[date]:
    if not start_date or not estimated_days or estimated_days <= 0:
        return None
    return start_date + timedelta(days=estimated_days)


_PROJ_COLS = "id, project_no, name, phase_code, start_date, estimated_days, created_at, updated_at"


# ===================================================================
# Projects
# ===================================================================

class ProjectNoTaken(Exception):
    """Another project already uses this project number."""

    def __init__(self, project_no: str):
        super().__init__(f"project_no {project_no!r} is already in use")
        self.project_no = project_no


def create_project(
    project_no: str,
    name: str,
    phase_code: str = "waiting",
    start_date: Optional[date] = None,
    estimated_days: Optional[int] = None,
) -> dict:
    if _use_pg():
        from psycopg2 import IntegrityError

        try:
            with get_conn() as conn:
                cur = conn.cursor()
                cur.execute(
                    f"INSERT INTO projects (id, project_no, name, phase_code, start_date, estimated_days) "
                    f"VALUES (%s, %s, %s, %s, %s, %s) RETURNING {_PROJ_COLS}",
                    (_uuid(), project_no, name, phase_code, start_date, estimated_days),
                )
                return _project_row_to_dict(cur.fetchone())
        except IntegrityError as e:
            raise ProjectNoTaken(project_no) from e
    else:
        if any(p["project_no"] == project_no for p in _mem_projects.values()):
            raise ProjectNoTaken(project_no)
        pid = _uuid()
        now = _now_iso()
        p = {
            "id": pid, "project_no": project_no, "name": name,
            "phase_code": phase_code, "start_date": start_date,
            "estimated_days": estimated_days,
            "due_date": _due_date(start_date, estimated_days),
            "created_at": now, "updated_at": now,
        }
        _mem_projects[pid] = p
        return p


_UPDATABLE = ("name", "phase_code", "start_date", "estimated_days")


def update_project(project_id: str, **kwargs) -> Optional[dict]:
    """Set the given fields; ``due_date`` follows start_date/estimated_days."""
    fields = {k: v for k, v in kwargs.items() if k in _UPDATABLE}
    if _use_pg():
        if not fields:
            return get_project(project_id)
        sets = [f"{k} = %s" for k in fields]
        sets.append("updated_at = now()")
        vals = list(fields.values()) + [project_id]
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE projects SET {', '.join(sets)} WHERE id = %s "
                f"RETURNING {_PROJ_COLS}",
                vals,
            )
            row = cur.fetchone()
            return _project_row_to_dict(row) if row else None
    else:
        p = _mem_projects.get(project_id)
        if p:
            p.update(fields)
            p["due_date"] = _due_date(p.get("start_date"), p.get("estimated_days"))
            p["updated_at"] = _now_iso()
        return p


def delete_project(project_id: str) -> bool:
    """Delete a project and its stage completion records."""
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM projects WHERE id = %s RETURNING project_no", (project_id,))
            row = cur.fetchone()
            if not row:
                return False
            cur.execute("DELETE FROM stage_completions WHERE project_no = %s", (row[0],))
            return True
    else:
        p = _mem_projects.pop(project_id, None)
        if p is None:
            return False
        # Clean up completions keyed by the project number
        for key in [k for k in _mem_completions if k[0] == p["project_no"]]:
            del _mem_completions[key]
        return True


def get_project(project_id: str) -> Optional[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {_PROJ_COLS} FROM projects WHERE id = %s", (project_id,))
            row = cur.fetchone()
            return _project_row_to_dict(row) if row else None
    else:
        return _mem_projects.get(project_id)


def list_projects() -> List[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {_PROJ_COLS} FROM projects ORDER BY created_at DESC")
            return [_project_row_to_dict(r) for r in cur.fetchall()]
    else:
        return list(_mem_projects.values())


def get_project_reference(project_id: str) -> Optional[dict]:
    """Resolve a project to what the stage planner needs.

    Returns ``{"project_no", "phase_code", "start_date", "estimated_days"}``
    or ``None`` when the project does not exist.
    """
    project = get_project(project_id)
    if not project:
        return None
    return {
        "project_no": project["project_no"],
        "phase_code": project.get("phase_code") or "waiting",
        "start_date": project.get("start_date"),
        "estimated_days": project.get("estimated_days"),
    }


def _project_row_to_dict(row) -> dict:
    if row is None:
        return {}
    start_date = row[4]
    estimated_days = int(row[5]) if row[5] is not None else None
    return {
        "id": str(row[0]), "project_no": row[1], "name": row[2],
        "phase_code": row[3] or "waiting",
        "start_date": start_date, "estimated_days": estimated_days,
        "due_date": _due_date(start_date, estimated_days),
        "created_at": _iso(row[6]), "updated_at": _iso(row[7]),
    }


# ===================================================================
# Stage completions
# ===================================================================

def record_stage_completion(project_no: str, stage_no: int, file_url: str) -> dict:
    """Upsert the completion artifact for one stage (latest wins)."""
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                """INSERT INTO stage_completions (project_no, stage_no, file_url, completed_at)
                   VALUES (%s, %s, %s, now())
                   ON CONFLICT (project_no, stage_no)
                   DO UPDATE SET file_url = EXCLUDED.file_url, completed_at = now()
                   RETURNING project_no, stage_no, file_url, completed_at""",
                (project_no, stage_no, file_url),
            )
            return _completion_row_to_dict(cur.fetchone())
    else:
        c = {
            "project_no": project_no, "stage_no": stage_no,
            "file_url": file_url, "completed_at": _now_iso(),
        }
        _mem_completions[(project_no, stage_no)] = c
        return c


def get_stage_completion(project_no: str, stage_no: int) -> Optional[dict]:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                """SELECT project_no, stage_no, file_url, completed_at
                   FROM stage_completions WHERE project_no = %s AND stage_no = %s""",
                (project_no, stage_no),
            )
            row = cur.fetchone()
            return _completion_row_to_dict(row) if row else None
    else:
        return _mem_completions.get((project_no, stage_no))


def get_completed_stage_numbers(project_no: str) -> Set[int]:
    """Stage numbers that have at least one completion record."""
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT DISTINCT stage_no FROM stage_completions WHERE project_no = %s",
                (str(project_no),),
            )
            return {int(r[0]) for r in cur.fetchall()}
    else:
        return {no for (pno, no) in _mem_completions if pno == str(project_no)}


def _completion_row_to_dict(row) -> dict:
    if row is None:
        return {}
    return {
        "project_no": row[0], "stage_no": int(row[1]),
        "file_url": row[2], "completed_at": _iso(row[3]),
    }


# ===================================================================
# Stage names
# ===================================================================

def load_stage_names() -> Dict[int, str]:
    """Display names keyed by stage number (may be empty or partial)."""
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute("SELECT id, name FROM stage_names ORDER BY id")
            return {int(r[0]): r[1] for r in cur.fetchall() if r[1]}
    else:
        return dict(_mem_stage_names)


def set_stage_name(stage_no: int, name: str) -> None:
    if _use_pg():
        with get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO stage_names (id, name) VALUES (%s, %s) "
                "ON CONFLICT (id) DO UPDATE SET name = EXCLUDED.name",
                (stage_no, name),
            )
    else:
        _mem_stage_names[stage_no] = name
