"""Task manager façade.

Demonstrates:
- Domain operations translated into store operations
- Focused mutations (mark_done) instead of handing out mutable references
- Deleted ids never answering again, even after their slot is reused
"""

from dataclasses import dataclass

from ownedstore import EntryId, LocalStore, NotFoundError


@dataclass(slots=True)
class Task:
    title: str
    done: bool = False


class TaskManager:
    """Owns tasks through a store; callers only ever hold task ids."""

    def __init__(self, store: LocalStore[Task] | None = None):
        self._store: LocalStore[Task] = store or LocalStore()

    def create(self, title: str) -> EntryId:
        return self._store.create(Task(title=title))

    def get(self, task_id: EntryId) -> Task | None:
        """Copy of the task, or None if it does not exist."""
        try:
            return self._store.get_copy(task_id)
        except NotFoundError:
            return None

    def list(self) -> list[tuple[EntryId, Task]]:
        return self._store.items_copy()

    def mark_done(self, task_id: EntryId) -> bool:
        """Mark a task done. Returns False if the task does not exist."""

        def _done(task: Task) -> None:
            task.done = True

        try:
            self._store.update_in_place(task_id, _done)
        except NotFoundError:
            return False
        return True

    def rename(self, task_id: EntryId, title: str) -> bool:
        try:
            with self._store.borrow_mut(task_id) as task:
                task.value.title = title
        except NotFoundError:
            return False
        return True

    def delete(self, task_id: EntryId) -> Task | None:
        """Remove a task and return it, or None if it does not exist."""
        try:
            return self._store.remove(task_id)
        except NotFoundError:
            return None

    def __len__(self) -> int:
        return len(self._store)


def main() -> None:
    manager = TaskManager()
    first = manager.create("Task A")
    second = manager.create("Task B")

    # Deleting shifts nothing: the other id keeps pointing at its own task.
    manager.delete(first)
    print(f"After delete, first -> {manager.get(first)}")
    print(f"After delete, second -> {manager.get(second)}")

    # The freed slot is reused, the id is not.
    third = manager.create("Task C")
    print(f"New task id {third} != {first}: {third != first}")

    manager.mark_done(second)
    for task_id, task in manager.list():
        print(f"{task_id}: {task.title} [{'x' if task.done else ' '}]")

    print(f"Second delete of {first}: {manager.delete(first)}")


if __name__ == "__main__":
    main()
