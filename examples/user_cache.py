"""Several services sharing one user cache.

Demonstrates:
- One store owning every cached user
- Services holding only ids and a reference to the store
- Conflicts reported as errors and retried under the blocking policy
"""

import threading
from dataclasses import dataclass, field

from ownedstore import (
    AccessPolicy,
    ConflictRetryPolicy,
    EntryId,
    LocalStore,
    StoreConfig,
    retry_on_conflict,
)


@dataclass(slots=True)
class User:
    name: str
    email: str
    orders: list[str] = field(default_factory=list)


class UserService:
    """Profile operations over the shared cache."""

    def __init__(self, cache: LocalStore[User]):
        self._cache = cache

    def register(self, name: str, email: str) -> EntryId:
        return self._cache.create(User(name=name, email=email))

    def change_email(self, user_id: EntryId, email: str) -> None:
        def _set_email(user: User) -> None:
            user.email = email

        self._cache.update_in_place(user_id, _set_email)

    def display_name(self, user_id: EntryId) -> str:
        return self._cache.read(user_id, lambda user: f"{user.name} <{user.email}>")


class OrderService:
    """Order bookkeeping over the same cache, retrying when it loses a race."""

    def __init__(self, cache: LocalStore[User], retry: ConflictRetryPolicy | None = None):
        self._cache = cache
        self._retry = retry or ConflictRetryPolicy(max_attempts=5)

    def place_order(self, user_id: EntryId, order: str) -> None:
        def _append(user: User) -> None:
            user.orders.append(order)

        retry_on_conflict(self._retry, self._cache.update_in_place, user_id, _append)

    def order_count(self, user_id: EntryId) -> int:
        return self._cache.read(user_id, lambda user: len(user.orders))


def main() -> None:
    cache: LocalStore[User] = LocalStore(
        StoreConfig(policy=AccessPolicy.MULTI_THREADED, timeout=1.0)
    )
    users = UserService(cache)
    orders = OrderService(cache)

    alice = users.register("alice", "alice@example.com")
    threads = [
        threading.Thread(target=orders.place_order, args=(alice, f"order-{i}"))
        for i in range(10)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    users.change_email(alice, "alice@example.org")
    print(f"{users.display_name(alice)} has {orders.order_count(alice)} orders")
    cache.close()


if __name__ == "__main__":
    main()
