"""Committed row store.

Holds the committed version of every products row. It is only written at
COMMIT time or by an autocommit UPDATE.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from isolation_lab.domain.entities import INITIAL_PRODUCTS, Row
from isolation_lab.domain.errors import UnknownRow
from isolation_lab.domain.value_objects import RowId


class RowStore:
    """The committed products table, ordered by seed order."""

    def __init__(self, seed: Iterable[Row] = INITIAL_PRODUCTS) -> None:
        self._seed = tuple(seed)
        self._rows: dict[RowId, Row] = {}
        self.reset()

    def reset(self) -> None:
        """Restore the seeded contents."""
        self._rows = {row.id: row for row in self._seed}

    def get(self, row_id: RowId) -> Row:
        """Return the committed version of a row.

        Raises:
            UnknownRow: If no such row exists.
        """
        try:
            return self._rows[row_id]
        except KeyError:
            raise UnknownRow(row_id) from None

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._rows

    def apply(self, writes: Mapping[RowId, Row]) -> None:
        """Install a set of new row versions."""
        for row_id, row in writes.items():
            if row_id not in self._rows:
                raise UnknownRow(row_id)
            self._rows[row_id] = row

    def snapshot(self) -> tuple[Row, ...]:
        """Copy of the committed rows, for a REPEATABLE-READ snapshot.

        Rows are immutable, so copying the sequence detaches the snapshot
        from later commits.
        """
        return tuple(self._rows.values())

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)
