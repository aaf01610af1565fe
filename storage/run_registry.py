"""
Run registry - track pipeline execution with status, counts, and timing.
Thin IO layer for run lifecycle management.
"""

import sqlite3
from datetime import datetime
from typing import Dict, Any, List, Optional
from enum import Enum


class RunStatus(str, Enum):
    """Enumeration of run statuses."""
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'


class RunNotFoundError(Exception):
    """Raised when run ID is not found."""
    pass


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value.replace(' ', 'T')) if value else None


def start_run(
    conn: sqlite3.Connection,
    dag_name: str,
    started_at: Optional[datetime] = None
) -> int:
    """
    Start a new pipeline run and return run ID.

    Args:
        conn: SQLite connection
        dag_name: Name of the pipeline being run
        started_at: Start timestamp (defaults to now)

    Returns:
        Run ID for tracking this execution
    """
    if started_at is None:
        started_at = datetime.now()

    cursor = conn.execute("""
        INSERT INTO runs (dag_name, started_at, status)
        VALUES (?, ?, ?)
    """, (dag_name, started_at.isoformat(), RunStatus.RUNNING.value))

    conn.commit()
    return cursor.lastrowid


def finish_run(
    conn: sqlite3.Connection,
    run_id: int,
    status: RunStatus,
    finished_at: Optional[datetime] = None,
    rows_in: Optional[int] = None,
    rows_out: Optional[int] = None,
    error_message: Optional[str] = None
) -> None:
    """
    Mark a run as finished with final status and counts.

    Args:
        conn: SQLite connection
        run_id: Run ID from start_run()
        status: Final status (COMPLETED or FAILED)
        finished_at: End timestamp (defaults to now)
        rows_in: Number of assets fetched
        rows_out: Number of assets stored or analyzed
        error_message: Error message if failed

    Raises:
        RunNotFoundError: If run_id doesn't exist
    """
    if finished_at is None:
        finished_at = datetime.now()

    cursor = conn.execute("SELECT run_id FROM runs WHERE run_id = ?", (run_id,))
    if cursor.fetchone() is None:
        raise RunNotFoundError(f"Run ID {run_id} not found")

    conn.execute("""
        UPDATE runs SET
            status = ?,
            finished_at = ?,
            rows_in = ?,
            rows_out = ?,
            error_message = ?
        WHERE run_id = ?
    """, (RunStatus(status).value, finished_at.isoformat(), rows_in, rows_out, error_message, run_id))

    conn.commit()


def _run_row(row: tuple) -> Dict[str, Any]:
    run_info = {
        'run_id': row[0],
        'dag_name': row[1],
        'started_at': _parse_ts(row[2]),
        'finished_at': _parse_ts(row[3]),
        'status': RunStatus(row[4]),
        'rows_in': row[5],
        'rows_out': row[6],
        'error_message': row[7],
    }

    if run_info['started_at'] and run_info['finished_at']:
        duration = run_info['finished_at'] - run_info['started_at']
        run_info['duration_seconds'] = int(duration.total_seconds())
    else:
        run_info['duration_seconds'] = None

    return run_info


def get_run_status(conn: sqlite3.Connection, run_id: int) -> Dict[str, Any]:
    """
    Get status and counts for a run.

    Raises:
        RunNotFoundError: If run_id doesn't exist
    """
    cursor = conn.execute("""
        SELECT run_id, dag_name, started_at, finished_at, status,
               rows_in, rows_out, error_message
        FROM runs
        WHERE run_id = ?
    """, (run_id,))

    row = cursor.fetchone()
    if row is None:
        raise RunNotFoundError(f"Run ID {run_id} not found")

    return _run_row(row)


def list_recent_runs(
    conn: sqlite3.Connection,
    limit: int = 50,
    dag_name: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    List recent runs, most recent first.

    Args:
        conn: SQLite connection
        limit: Maximum number of runs to return
        dag_name: Filter by pipeline name (optional)
    """
    query = """
        SELECT run_id, dag_name, started_at, finished_at, status,
               rows_in, rows_out, error_message
        FROM runs
    """
    params: tuple = ()

    if dag_name:
        query += " WHERE dag_name = ?"
        params = (dag_name,)

    query += " ORDER BY started_at DESC, run_id DESC LIMIT ?"
    params += (limit,)

    cursor = conn.execute(query, params)
    return [_run_row(row) for row in cursor.fetchall()]
