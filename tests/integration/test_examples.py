"""Journey tests for the example façades."""

import threading

import pytest

from examples import FileLogger, OrderService, TaskManager, UserService
from ownedstore import (
    AccessPolicy,
    ConflictRetryPolicy,
    LocalStore,
    NotFoundError,
    OutOfCapacityError,
    StoreConfig,
)


def test_task_manager_journey():
    manager = TaskManager()
    first = manager.create("Task A")
    second = manager.create("Task B")

    deleted = manager.delete(first)
    assert deleted is not None and deleted.title == "Task A"
    assert manager.get(first) is None
    assert manager.get(second).title == "Task B"

    third = manager.create("Task C")
    assert third != first

    assert manager.mark_done(second)
    assert not manager.mark_done(first)
    assert manager.rename(third, "Task C2")
    assert not manager.rename(first, "nope")

    listed = {task_id: (task.title, task.done) for task_id, task in manager.list()}
    assert listed == {second: ("Task B", True), third: ("Task C2", False)}
    assert manager.delete(first) is None
    assert len(manager) == 2


def test_task_copies_do_not_write_back():
    manager = TaskManager()
    task_id = manager.create("A")
    copy = manager.get(task_id)
    copy.done = True
    assert manager.get(task_id).done is False


def test_services_share_one_cache():
    cache = LocalStore(StoreConfig(policy=AccessPolicy.MULTI_THREADED, timeout=5.0))
    users = UserService(cache)
    orders = OrderService(cache, ConflictRetryPolicy(max_attempts=3, backoff="none"))

    alice = users.register("alice", "alice@example.com")
    threads = [
        threading.Thread(target=orders.place_order, args=(alice, f"order-{i}"))
        for i in range(20)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10)

    users.change_email(alice, "alice@example.org")
    assert orders.order_count(alice) == 20
    assert users.display_name(alice) == "alice <alice@example.org>"

    cache.remove(alice)
    with pytest.raises(NotFoundError):
        orders.place_order(alice, "late")


def test_file_logger_journey(tmp_path):
    path = tmp_path / "app.log"
    logger = FileLogger(path)

    logger.open()
    with pytest.raises(OutOfCapacityError):
        logger.open()
    logger.write("first")
    logger.write("second")
    logger.close()

    assert not logger.is_open
    assert path.read_text(encoding="utf-8") == "first\nsecond\n"

    with pytest.raises(NotFoundError):
        logger.close()
    with pytest.raises(NotFoundError):
        logger.write("late")


def test_file_logger_scope_closes_open_file(tmp_path):
    path = tmp_path / "scoped.log"

    with FileLogger(path) as logger:
        logger.open()
        logger.write("left open")
        handle = logger._handle.read(lambda f: f)

    assert handle.closed
    assert not logger.is_open
    assert path.read_text(encoding="utf-8") == "left open\n"
