import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from database.orm import execute, get_connection
from utils.database import in_clause, row_to_dict

logger = logging.getLogger(__name__)


class User(BaseModel):
    id: str
    name: str
    bio: str = ""
    profile_image_url: str = ""
    phone_number: Optional[str] = None
    first_degree_friend_ids: List[str] = Field(default_factory=list)
    approved_second_degree_connections: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def _load_users(cur, user_rows: List[Dict]) -> List[User]:
    """Attach ordered friend lists and approved connections to user rows."""
    if not user_rows:
        return []

    ids = [row["id"] for row in user_rows]
    placeholders, params = in_clause("uid", ids)

    friends: Dict[str, List[str]] = {uid: [] for uid in ids}
    execute(
        cur,
        f"""
        SELECT user_id, friend_user_id FROM user_friends
        WHERE user_id IN ({placeholders})
        ORDER BY user_id, sort_order ASC
        """,
        params,
    )
    for user_id, friend_user_id in cur.fetchall():
        friends[user_id].append(friend_user_id)

    approved: Dict[str, List[str]] = {uid: [] for uid in ids}
    execute(
        cur,
        f"""
        SELECT user_id, approved_user_id FROM user_approved_connections
        WHERE user_id IN ({placeholders})
        ORDER BY user_id, created_at ASC, approved_user_id ASC
        """,
        params,
    )
    for user_id, approved_user_id in cur.fetchall():
        approved[user_id].append(approved_user_id)

    return [
        User(
            **row,
            first_degree_friend_ids=friends[row["id"]],
            approved_second_degree_connections=approved[row["id"]],
        )
        for row in user_rows
    ]


def get_user_by_id(user_id: str) -> Optional[User]:
    users = get_users_by_ids([user_id])
    return users[0] if users else None


def get_users_by_ids(user_ids: Iterable[str]) -> List[User]:
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return []

    conn = get_connection()
    cur = conn.cursor()
    try:
        placeholders, params = in_clause("id", ids)
        execute(cur, f"SELECT * FROM users WHERE id IN ({placeholders})", params)
        rows = [row_to_dict(r, cur) for r in cur.fetchall()]
        return _load_users(cur, rows)
    except Exception as e:
        logger.error(f"Error getting users {ids}: {e}")
        raise
    finally:
        cur.close()
        conn.close()


def list_users() -> List[User]:
    conn = get_connection()
    cur = conn.cursor()
    try:
        execute(cur, "SELECT * FROM users ORDER BY created_at ASC, id ASC")
        rows = [row_to_dict(r, cur) for r in cur.fetchall()]
        return _load_users(cur, rows)
    finally:
        cur.close()
        conn.close()


def create_user(
    user_id: str,
    name: str,
    bio: str = "",
    profile_image_url: str = "",
    phone_number: Optional[str] = None,
) -> User:
    conn = get_connection()
    cur = conn.cursor()
    try:
        execute(
            cur,
            """
            INSERT INTO users (id, name, bio, profile_image_url, phone_number)
            VALUES (%(id)s, %(name)s, %(bio)s, %(profile_image_url)s, %(phone_number)s)
            RETURNING *
            """,
            {
                "id": user_id,
                "name": name,
                "bio": bio,
                "profile_image_url": profile_image_url,
                "phone_number": phone_number,
            },
        )
        row = row_to_dict(cur.fetchall()[0], cur)
        conn.commit()
        return User(**row)
    except Exception as e:
        conn.rollback()
        logger.error(f"Error creating user {user_id}: {e}")
        raise
    finally:
        cur.close()
        conn.close()


def _replace_friends(cur, user_id: str, friend_ids: List[str]) -> None:
    execute(
        cur,
        "DELETE FROM user_friends WHERE user_id = %(user_id)s",
        {"user_id": user_id},
    )
    for sort_order, friend_user_id in enumerate(friend_ids):
        execute(
            cur,
            """
            INSERT INTO user_friends (user_id, friend_user_id, sort_order)
            VALUES (%(user_id)s, %(friend_user_id)s, %(sort_order)s)
            """,
            {
                "user_id": user_id,
                "friend_user_id": friend_user_id,
                "sort_order": sort_order,
            },
        )


def update_user_profile(
    user_id: str,
    name: Optional[str] = None,
    bio: Optional[str] = None,
    profile_image_url: Optional[str] = None,
    friend_ids: Optional[List[str]] = None,
) -> None:
    """
    Update profile fields and, when ``friend_ids`` is given, the ordered
    first-degree list. Both are written in one transaction.
    """
    fields: dict = {}
    if name:
        fields["name"] = name
    if bio is not None:
        fields["bio"] = bio
    if profile_image_url:
        fields["profile_image_url"] = profile_image_url

    if not fields and friend_ids is None:
        return

    conn = get_connection()
    cur = conn.cursor()
    try:
        set_clause = "".join([f"{k} = %({k})s, " for k in fields.keys()])
        set_clause += "updated_at = CURRENT_TIMESTAMP"
        execute(
            cur,
            f"UPDATE users SET {set_clause} WHERE id = %(user_id)s",
            {**fields, "user_id": user_id},
        )
        if cur.rowcount == 0:
            raise Exception(f"User {user_id} not found")

        if friend_ids is not None:
            _replace_friends(cur, user_id, friend_ids)
        conn.commit()
    except Exception as e:
        conn.rollback()
        logger.error(f"Error updating user {user_id}: {e}")
        raise
    finally:
        cur.close()
        conn.close()


def replace_first_degree_friends(user_id: str, friend_ids: List[str]) -> None:
    """Overwrite the ordered first-degree list of a user in one transaction."""
    update_user_profile(user_id, friend_ids=friend_ids)


def insert_approved_connection(cur, user_id: str, approved_user_id: str) -> None:
    """Grant ``user_id`` standing toward ``approved_user_id``. Never removed."""
    execute(
        cur,
        """
        INSERT INTO user_approved_connections (user_id, approved_user_id)
        VALUES (%(user_id)s, %(approved_user_id)s)
        ON CONFLICT (user_id, approved_user_id) DO NOTHING
        """,
        {"user_id": user_id, "approved_user_id": approved_user_id},
    )


def add_approved_connection(user_id: str, approved_user_id: str) -> None:
    conn = get_connection()
    cur = conn.cursor()
    try:
        insert_approved_connection(cur, user_id, approved_user_id)
        conn.commit()
    except Exception as e:
        conn.rollback()
        logger.error(
            f"Error adding approved connection ({user_id},{approved_user_id}): {e}"
        )
        raise
    finally:
        cur.close()
        conn.close()
