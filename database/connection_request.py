import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel

from database.orm import execute, get_connection
from utils.database import row_to_model_with_cursor

logger = logging.getLogger(__name__)

ConnectionRequestStatus = Literal["pending", "approved", "rejected"]


class ConnectionRequest(BaseModel):
    id: str
    requester_id: str
    requested_id: str
    approver_id: str
    hangout_id: str
    status: str  # pending|approved|rejected (enforced in code)
    created_at: datetime
    updated_at: datetime


def get_connection_request_by_id(request_id: str) -> Optional[ConnectionRequest]:
    conn = get_connection()
    cur = conn.cursor()
    try:
        execute(
            cur,
            "SELECT * FROM connection_requests WHERE id = %(id)s",
            {"id": request_id},
        )
        row = cur.fetchone()
        return row_to_model_with_cursor(row, ConnectionRequest, cur) if row else None
    finally:
        cur.close()
        conn.close()


def list_connection_requests(
    approver_id: Optional[str] = None,
    hangout_id: Optional[str] = None,
    status: Optional[ConnectionRequestStatus] = None,
) -> List[ConnectionRequest]:
    filters: Dict[str, Any] = {}
    if approver_id is not None:
        filters["approver_id"] = approver_id
    if hangout_id is not None:
        filters["hangout_id"] = hangout_id
    if status is not None:
        filters["status"] = status

    where = " AND ".join(f"{k} = %({k})s" for k in filters) or "1 = 1"

    conn = get_connection()
    cur = conn.cursor()
    try:
        execute(
            cur,
            f"""
            SELECT * FROM connection_requests
            WHERE {where}
            ORDER BY created_at DESC, id ASC
            """,
            filters,
        )
        rows = cur.fetchall()
        return [row_to_model_with_cursor(r, ConnectionRequest, cur) for r in rows]
    finally:
        cur.close()
        conn.close()


def count_pending(cur, hangout_id: str) -> int:
    execute(
        cur,
        """
        SELECT COUNT(*) FROM connection_requests
        WHERE hangout_id = %(hangout_id)s AND status = 'pending'
        """,
        {"hangout_id": hangout_id},
    )
    row = cur.fetchone()
    return int(row[0]) if row else 0


def count_pending_for_hangout(hangout_id: str) -> int:
    conn = get_connection()
    cur = conn.cursor()
    try:
        return count_pending(cur, hangout_id)
    finally:
        cur.close()
        conn.close()


def insert_many(cur, records: Sequence[Dict[str, Any]]) -> List[str]:
    """
    Insert pending requests on an open cursor.

    Runs inside the caller's transaction so that a hangout and its requests
    are committed or rolled back together.
    """
    ids: List[str] = []
    for record in records:
        request_id = str(uuid.uuid4())
        execute(
            cur,
            """
            INSERT INTO connection_requests (
                id, requester_id, requested_id, approver_id, hangout_id, status
            ) VALUES (
                %(id)s, %(requester_id)s, %(requested_id)s, %(approver_id)s,
                %(hangout_id)s, 'pending'
            )
            """,
            {
                "id": request_id,
                "requester_id": record["requester_id"],
                "requested_id": record["requested_id"],
                "approver_id": record["approver_id"],
                "hangout_id": record["hangout_id"],
            },
        )
        ids.append(request_id)
    return ids


def update_status_for_hangout(
    cur,
    hangout_id: str,
    from_status: ConnectionRequestStatus,
    to_status: ConnectionRequestStatus,
) -> int:
    """Bulk status change for one hangout's requests on an open cursor."""
    execute(
        cur,
        """
        UPDATE connection_requests
        SET status = %(to_status)s, updated_at = CURRENT_TIMESTAMP
        WHERE hangout_id = %(hangout_id)s AND status = %(from_status)s
        """,
        {"hangout_id": hangout_id, "from_status": from_status, "to_status": to_status},
    )
    return cur.rowcount


def mark_resolved(
    cur, request_id: str, status: ConnectionRequestStatus
) -> Optional[ConnectionRequest]:
    """
    Move a pending request to a terminal status on an open cursor.

    Returns None when the request was no longer pending, so two racing
    resolutions cannot both succeed.
    """
    execute(
        cur,
        """
        UPDATE connection_requests
        SET status = %(status)s, updated_at = CURRENT_TIMESTAMP
        WHERE id = %(id)s AND status = 'pending'
        RETURNING *
        """,
        {"id": request_id, "status": status},
    )
    rows = cur.fetchall()
    return row_to_model_with_cursor(rows[0], ConnectionRequest, cur) if rows else None
