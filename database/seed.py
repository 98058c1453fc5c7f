"""
Populate a demo friend graph.

    python -m database.seed

Alice -> Bob -> Dave makes Dave second-degree to Alice with Bob as the
approver; Erin only knows Dave, so she is unreachable from Alice.
"""

import logging

from database import orm
from database import user as user_repo

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {
        "user_id": "alice",
        "name": "Alice",
        "bio": "Always up for brunch",
        "phone_number": "+15550000001",
        "friends": ["bob", "carol"],
    },
    {
        "user_id": "bob",
        "name": "Bob",
        "bio": "Climbing on weekends",
        "phone_number": "+15550000002",
        "friends": ["alice", "dave"],
    },
    {
        "user_id": "carol",
        "name": "Carol",
        "bio": "",
        "phone_number": "+15550000003",
        "friends": ["alice"],
    },
    {
        "user_id": "dave",
        "name": "Dave",
        "bio": "Board game collector",
        "phone_number": "+15550000004",
        "friends": ["bob", "erin"],
    },
    {
        "user_id": "erin",
        "name": "Erin",
        "bio": "New in town",
        "phone_number": "+15550000005",
        "friends": ["dave"],
    },
]


def seed() -> None:
    orm.run_migrations()

    for data in DEMO_USERS:
        if user_repo.get_user_by_id(data["user_id"]):
            logger.info(f"User {data['user_id']} already exists, skipping")
            continue
        user_repo.create_user(
            user_id=data["user_id"],
            name=data["name"],
            bio=data["bio"],
            profile_image_url=f"https://i.pravatar.cc/150?u={data['user_id']}",
            phone_number=data["phone_number"],
        )

    # Friends reference each other, so lists are wired once every user exists.
    for data in DEMO_USERS:
        user_repo.replace_first_degree_friends(data["user_id"], data["friends"])

    logger.info(f"Seeded {len(DEMO_USERS)} users")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
