"""Row entity for the products table."""

from __future__ import annotations

from dataclasses import dataclass, replace

from isolation_lab.domain.value_objects import RowId


@dataclass(frozen=True, slots=True)
class Row:
    """A row of the products table.

    Rows are immutable values. The committed table and every session's
    write buffer hold their own versions; a new stock level is a new Row.

    Attributes:
        id: Primary key.
        name: Product name.
        stock: Units in stock.

    Example:
        >>> row = Row(RowId(1), "iPhone 15 Pro", 100)
        >>> row.with_stock(99).stock
        99
    """

    id: RowId
    name: str
    stock: int

    def with_stock(self, stock: int) -> Row:
        """Return a copy of this row with a different stock level."""
        return replace(self, stock=stock)

    def to_dict(self) -> dict[str, int | str]:
        """Serialize to a plain dict for renderers."""
        return {"id": self.id, "name": self.name, "stock": self.stock}


INITIAL_PRODUCTS: tuple[Row, ...] = (
    Row(RowId(1), "iPhone 15 Pro", 100),
    Row(RowId(2), "MacBook M3", 1),
    Row(RowId(3), "AirPods Pro", 200),
)
"""Seed contents of the products table."""
