import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from database import connection_request as connection_request_repo
from database import user as user_repo
from database.connection_request import ConnectionRequest
from database.orm import execute, get_connection
from utils.database import in_clause, row_to_dict

logger = logging.getLogger(__name__)

HangoutStatus = Literal["pending_approval", "pending", "confirmed", "cancelled"]
HangoutResponse = Literal["accepted", "rejected"]


class Hangout(BaseModel):
    id: str
    host_id: str
    activity_description: str
    details: Optional[str] = None
    status: str  # pending_approval|pending|confirmed|cancelled (enforced in code)
    scheduled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    participants: List[str] = Field(default_factory=list)
    participant_degrees: Dict[str, str] = Field(default_factory=dict)
    accepted_by: List[str] = Field(default_factory=list)
    rejected_by: List[str] = Field(default_factory=list)

    @property
    def all_members(self) -> List[str]:
        return [self.host_id, *self.participants]


def _load_hangouts(cur, hangout_rows: List[Dict[str, Any]]) -> List[Hangout]:
    """Attach participants and responses to hangout rows, keeping row order."""
    if not hangout_rows:
        return []

    ids = [row["id"] for row in hangout_rows]
    placeholders, params = in_clause("hid", ids)

    participants: Dict[str, List[Tuple[str, str]]] = {hid: [] for hid in ids}
    execute(
        cur,
        f"""
        SELECT hangout_id, user_id, connection_degree FROM hangout_participants
        WHERE hangout_id IN ({placeholders})
        ORDER BY hangout_id, sort_order ASC
        """,
        params,
    )
    for hangout_id, user_id, degree in cur.fetchall():
        participants[hangout_id].append((user_id, degree))

    accepted: Dict[str, List[str]] = {hid: [] for hid in ids}
    rejected: Dict[str, List[str]] = {hid: [] for hid in ids}
    execute(
        cur,
        f"""
        SELECT hangout_id, user_id, response FROM hangout_responses
        WHERE hangout_id IN ({placeholders})
        ORDER BY hangout_id, responded_at ASC, user_id ASC
        """,
        params,
    )
    for hangout_id, user_id, response in cur.fetchall():
        target = accepted if response == "accepted" else rejected
        target[hangout_id].append(user_id)

    return [
        Hangout(
            **row,
            participants=[user_id for user_id, _ in participants[row["id"]]],
            participant_degrees=dict(participants[row["id"]]),
            accepted_by=accepted[row["id"]],
            rejected_by=rejected[row["id"]],
        )
        for row in hangout_rows
    ]


def _fetch_hangout(cur, hangout_id: str) -> Optional[Hangout]:
    execute(cur, "SELECT * FROM hangouts WHERE id = %(id)s", {"id": hangout_id})
    row = cur.fetchone()
    if not row:
        return None
    return _load_hangouts(cur, [row_to_dict(row, cur)])[0]


def get_hangout_by_id(hangout_id: str) -> Optional[Hangout]:
    conn = get_connection()
    cur = conn.cursor()
    try:
        return _fetch_hangout(cur, hangout_id)
    finally:
        cur.close()
        conn.close()


def list_hangouts_for_member(
    user_id: str, include_cancelled: bool = False
) -> List[Hangout]:
    """Hangouts hosted by or inviting ``user_id``, newest first."""
    conn = get_connection()
    cur = conn.cursor()
    try:
        status_filter = "" if include_cancelled else "AND h.status <> 'cancelled'"
        execute(
            cur,
            f"""
            SELECT h.* FROM hangouts h
            WHERE (
                    h.host_id = %(uid)s
                 OR h.id IN (
                        SELECT hangout_id FROM hangout_participants
                        WHERE user_id = %(uid)s
                    )
              )
              {status_filter}
            ORDER BY h.created_at DESC, h.id DESC
            """,
            {"uid": user_id},
        )
        rows = [row_to_dict(r, cur) for r in cur.fetchall()]
        return _load_hangouts(cur, rows)
    finally:
        cur.close()
        conn.close()


def create_hangout(
    *,
    host_id: str,
    participants: Sequence[Tuple[str, str]],
    activity_description: str,
    details: Optional[str],
    scheduled_at: datetime,
    status: HangoutStatus,
    connection_requests: Sequence[Dict[str, Any]],
) -> Hangout:
    """
    Persist a hangout, its participants, the host's acceptance and the
    approval requests it needs.

    Everything is written in one transaction: a failure leaves neither the
    hangout nor any of its requests behind.

    Args:
        participants: ``(user_id, connection_degree)`` pairs in invite order
        connection_requests: dicts with requester_id, requested_id, approver_id
    """
    hangout_id = str(uuid.uuid4())
    conn = get_connection()
    cur = conn.cursor()
    try:
        execute(
            cur,
            """
            INSERT INTO hangouts (
                id, host_id, activity_description, details, status,
                scheduled_at, created_at, updated_at
            ) VALUES (
                %(id)s, %(host_id)s, %(activity_description)s, %(details)s,
                %(status)s, %(scheduled_at)s, %(now)s, %(now)s
            )
            """,
            {
                "id": hangout_id,
                "host_id": host_id,
                "activity_description": activity_description,
                "details": details,
                "status": status,
                "scheduled_at": scheduled_at.isoformat(sep=" "),
                # microsecond precision keeps newest-first ordering stable on SQLite
                "now": datetime.now(timezone.utc).isoformat(sep=" "),
            },
        )
        for sort_order, (user_id, degree) in enumerate(participants):
            execute(
                cur,
                """
                INSERT INTO hangout_participants (
                    hangout_id, user_id, sort_order, connection_degree
                ) VALUES (
                    %(hangout_id)s, %(user_id)s, %(sort_order)s, %(degree)s
                )
                """,
                {
                    "hangout_id": hangout_id,
                    "user_id": user_id,
                    "sort_order": sort_order,
                    "degree": degree,
                },
            )
        _upsert_response(cur, hangout_id, host_id, "accepted")

        connection_request_repo.insert_many(
            cur,
            [{**request, "hangout_id": hangout_id} for request in connection_requests],
        )

        created = _fetch_hangout(cur, hangout_id)
        conn.commit()
        return created
    except Exception as e:
        conn.rollback()
        logger.error(f"Error creating hangout for host {host_id}: {e}")
        raise
    finally:
        cur.close()
        conn.close()


def _upsert_response(cur, hangout_id: str, user_id: str, response: HangoutResponse):
    # One row per (hangout, user): a new response replaces the previous one.
    execute(
        cur,
        """
        INSERT INTO hangout_responses (hangout_id, user_id, response, responded_at)
        VALUES (%(hangout_id)s, %(user_id)s, %(response)s, CURRENT_TIMESTAMP)
        ON CONFLICT (hangout_id, user_id) DO UPDATE SET
          response = EXCLUDED.response,
          responded_at = EXCLUDED.responded_at
        """,
        {"hangout_id": hangout_id, "user_id": user_id, "response": response},
    )


def record_response(
    hangout_id: str, user_id: str, response: HangoutResponse
) -> Hangout:
    conn = get_connection()
    cur = conn.cursor()
    try:
        _upsert_response(cur, hangout_id, user_id, response)
        execute(
            cur,
            "UPDATE hangouts SET updated_at = CURRENT_TIMESTAMP WHERE id = %(id)s",
            {"id": hangout_id},
        )
        updated = _fetch_hangout(cur, hangout_id)
        if updated is None:
            raise Exception(f"Hangout {hangout_id} not found")
        conn.commit()
        return updated
    except Exception as e:
        conn.rollback()
        logger.error(
            f"Error recording response {response} for user {user_id} on hangout {hangout_id}: {e}"
        )
        raise
    finally:
        cur.close()
        conn.close()


def update_status(
    cur,
    hangout_id: str,
    from_statuses: Sequence[HangoutStatus],
    to_status: HangoutStatus,
) -> bool:
    """
    Conditionally move a hangout to ``to_status`` on an open cursor.

    The current status is checked in the UPDATE itself, so a hangout that
    moved on in the meantime is left untouched. Returns whether a row changed.
    """
    placeholders, params = in_clause("from_status", from_statuses)
    execute(
        cur,
        f"""
        UPDATE hangouts
        SET status = %(to_status)s, updated_at = CURRENT_TIMESTAMP
        WHERE id = %(id)s AND status IN ({placeholders})
        """,
        {**params, "id": hangout_id, "to_status": to_status},
    )
    return cur.rowcount > 0


def transition_status(
    hangout_id: str,
    from_statuses: Sequence[HangoutStatus],
    to_status: HangoutStatus,
) -> bool:
    conn = get_connection()
    cur = conn.cursor()
    try:
        changed = update_status(cur, hangout_id, from_statuses, to_status)
        conn.commit()
        return changed
    except Exception as e:
        conn.rollback()
        logger.error(f"Error moving hangout {hangout_id} to {to_status}: {e}")
        raise
    finally:
        cur.close()
        conn.close()


def cancel_hangout(
    hangout_id: str, from_statuses: Sequence[HangoutStatus]
) -> Optional[int]:
    """
    Cancel a hangout and reject its outstanding approval requests together.

    Returns the number of requests that were rejected, or None if the
    hangout was not in one of ``from_statuses``.
    """
    conn = get_connection()
    cur = conn.cursor()
    try:
        placeholders, params = in_clause("from_status", from_statuses)
        execute(
            cur,
            f"""
            UPDATE hangouts
            SET status = 'cancelled', updated_at = CURRENT_TIMESTAMP
            WHERE id = %(id)s AND status IN ({placeholders})
            """,
            {**params, "id": hangout_id},
        )
        if cur.rowcount == 0:
            conn.rollback()
            return None

        rejected = connection_request_repo.update_status_for_hangout(
            cur, hangout_id, from_status="pending", to_status="rejected"
        )
        conn.commit()
        return rejected
    except Exception as e:
        conn.rollback()
        logger.error(f"Error cancelling hangout {hangout_id}: {e}")
        raise
    finally:
        cur.close()
        conn.close()


def _release_if_cleared(cur, hangout_id: str) -> Tuple[int, bool]:
    # The count is read inside the same transaction as the status change.
    remaining = connection_request_repo.count_pending(cur, hangout_id)
    if remaining > 0:
        return remaining, False
    released = update_status(
        cur, hangout_id, from_statuses=["pending_approval"], to_status="pending"
    )
    return 0, released


def release_approval_gate(hangout_id: str) -> Tuple[int, bool]:
    """
    Move a ``pending_approval`` hangout to ``pending`` once no request is pending.

    Returns the number of requests still pending and whether the hangout moved.
    """
    conn = get_connection()
    cur = conn.cursor()
    try:
        outcome = _release_if_cleared(cur, hangout_id)
        conn.commit()
        return outcome
    except Exception as e:
        conn.rollback()
        logger.error(f"Error releasing approval gate of hangout {hangout_id}: {e}")
        raise
    finally:
        cur.close()
        conn.close()


def apply_connection_decision(
    request_id: str, decision: str
) -> Optional[Tuple[ConnectionRequest, int, bool]]:
    """
    Resolve a pending request and carry out what follows from it.

    In one transaction: the request becomes terminal, an approval grants the
    requester standing toward the requested user, and the owning hangout is
    released if that was its last pending request.

    Returns the resolved request, the requests still pending and whether the
    hangout was released, or None if the request was no longer pending.
    """
    conn = get_connection()
    cur = conn.cursor()
    try:
        resolved = connection_request_repo.mark_resolved(cur, request_id, decision)
        if resolved is None:
            conn.rollback()
            return None

        if decision == "approved":
            user_repo.insert_approved_connection(
                cur, resolved.requester_id, resolved.requested_id
            )

        remaining, released = _release_if_cleared(cur, resolved.hangout_id)
        conn.commit()
        return resolved, remaining, released
    except Exception as e:
        conn.rollback()
        logger.error(f"Error applying {decision} to connection request {request_id}: {e}")
        raise
    finally:
        cur.close()
        conn.close()
