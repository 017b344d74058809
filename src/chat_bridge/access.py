"""Who may talk to the bot."""

from collections.abc import Iterable


class AccessPolicy:
    """Allow-list of user IDs. Admins are always allowed."""

    def __init__(self, allowed_users: Iterable[int] = (), admin_users: Iterable[int] = ()) -> None:
        self.admin_users = frozenset(admin_users)
        self.allowed_users = frozenset(allowed_users) | self.admin_users

    def is_allowed(self, user_id: int) -> bool:
        return user_id in self.allowed_users

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.admin_users
