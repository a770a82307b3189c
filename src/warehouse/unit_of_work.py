"""
Unit of work: stage output tables and publish them together or not at all.
"""

from collections.abc import Sequence

from pydantic import BaseModel

from .store import TARGETS, TargetStore


class UnitOfWork:
    """
    Collects the tables produced by a run and commits them in one step.

    Usage:
        with UnitOfWork(store) as uow:
            uow.stage("customers", customers)
            ...
            uow.commit()

    Leaving the block without commit() (or with an exception) discards
    everything staged; the store keeps its previous state.
    """

    def __init__(self, store: TargetStore):
        self.store = store
        self._staged: dict[str, list[BaseModel]] = {}
        self.committed = False

    @property
    def staged(self) -> dict[str, list[BaseModel]]:
        return dict(self._staged)

    def stage(self, target: str, rows: Sequence[BaseModel]) -> None:
        if self.committed:
            raise RuntimeError("Unit of work already committed")
        if target not in TARGETS:
            raise ValueError(f"Unknown target table: {target}")
        self._staged[target] = list(rows)

    def commit(self) -> dict[str, int]:
        """
        Publish every staged table.

        Returns:
            Rows committed per target
        """
        if self.committed:
            raise RuntimeError("Unit of work already committed")
        self.store.replace_all(self._staged)
        self.committed = True
        return {target: len(rows) for target, rows in self._staged.items()}

    def discard(self) -> None:
        self._staged.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self.committed:
            self.discard()
        return False
