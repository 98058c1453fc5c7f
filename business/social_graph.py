"""
Social Graph

Read-only view over users' first-degree friend lists and approved
second-degree connections. Built from already-loaded users and handed to
the approval workflow, so graph queries never reach into the database.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Union

from business.errors import NotFoundError
from database.user import User

logger = logging.getLogger(__name__)


class ConnectionDegree(str, Enum):
    FIRST_DEGREE = "first_degree"
    APPROVED_SECOND_DEGREE = "approved_second_degree"
    # A mutual friend exists; approval has to be requested.
    SECOND_DEGREE = "second_degree"
    # No mutual friend, so there is nobody to ask.
    UNREACHABLE = "unreachable"


class SocialGraph:
    def __init__(self, users: Union[Mapping[str, User], Iterable[User]]):
        if isinstance(users, Mapping):
            self._users: Dict[str, User] = dict(users)
        else:
            self._users = {user.id: user for user in users}

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._users

    def get(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def friends_of(self, user_id: str) -> List[str]:
        return list(self.get(user_id).first_degree_friend_ids)

    def is_first_degree(self, host_id: str, user_id: str) -> bool:
        return user_id in self.get(host_id).first_degree_friend_ids

    def has_approved(self, host_id: str, user_id: str) -> bool:
        return user_id in self.get(host_id).approved_second_degree_connections

    def mutual_friends(self, a_id: str, b_id: str) -> List[str]:
        """Friends listed by both users, in ``a``'s friend-list order."""
        b_friends = set(self.get(b_id).first_degree_friend_ids)
        return [f for f in self.get(a_id).first_degree_friend_ids if f in b_friends]

    def classify(self, host_id: str, candidate_id: str) -> ConnectionDegree:
        if self.is_first_degree(host_id, candidate_id):
            return ConnectionDegree.FIRST_DEGREE
        if self.has_approved(host_id, candidate_id):
            return ConnectionDegree.APPROVED_SECOND_DEGREE
        if self.mutual_friends(host_id, candidate_id):
            return ConnectionDegree.SECOND_DEGREE
        return ConnectionDegree.UNREACHABLE
