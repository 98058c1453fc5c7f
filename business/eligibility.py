from database.hangout import Hangout
from database.user import User


def can_respond(user_id: str, hangout: Hangout, host: User) -> bool:
    """
    Whether ``user_id`` may currently accept or reject ``hangout``.

    First-degree friends of the host can answer while approvals for other
    participants are still outstanding; everyone else waits until the
    hangout has left ``pending_approval``. On a confirmed hangout any member
    may change their answer. Nobody responds to a cancelled hangout.
    """
    if user_id not in hangout.all_members:
        return False

    if hangout.status == "cancelled":
        return False

    if hangout.status == "confirmed":
        return True

    if user_id in host.first_degree_friend_ids:
        return hangout.status in ("pending", "pending_approval")

    return hangout.status == "pending"
