"""
================================================================================
Row Extraction
================================================================================

Named field reads from table rows and list items.

Rather than reading "the third cell" at each call site, a page object
declares a RowSchema once: every field is either a ``Column`` (position among
the row's cells, with the header label expected at that position) or an
``Anchor`` (a locator relative to the row). ``verify_headers`` checks the
declared column order against the rendered headers, so a reordered layout
fails loudly instead of silently returning the wrong field.

Usage:
    class CustomerField(Enum):
        ID = "id"
        NAME = "name"

    schema = RowSchema({
        CustomerField.ID: Column(1, "ID"),
        CustomerField.NAME: Column(2, "Name"),
    })
    await schema.verify_headers(session, table.locator("thead th"))
    name = await RowReader(session, rows.nth(0), schema).field(CustomerField.NAME)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Union

import allure
from loguru import logger

from .errors import ConfigurationError, TimeoutFailure
from .locator import Locator, locate

if TYPE_CHECKING:
    from .session import Session


@dataclass(frozen=True)
class Column:
    """Field read from the cell at ``index`` (zero-based) of the row."""
    index: int
    header: Optional[str] = None


@dataclass(frozen=True)
class Anchor:
    """Field read from a locator relative to the row."""
    locator: Locator


FieldSource = Union[Column, Anchor]


@dataclass(frozen=True)
class RowSchema:
    """
    Declared field layout of a row.

    Attributes:
        fields: Field name -> Column or Anchor
        cell: Locator of a row's cells, relative to the row
    """

    fields: Mapping[Enum, FieldSource]
    cell: Locator = field(default_factory=lambda: locate("td"))

    def source(self, name: Enum) -> FieldSource:
        try:
            return self.fields[name]
        except KeyError:
            raise ConfigurationError(f"Field {name} is not declared in this row schema") from None

    def locator_for(self, row: Locator, name: Enum) -> Locator:
        source = self.source(name)
        if isinstance(source, Column):
            return row.chain(self.cell).nth(source.index)
        return row.chain(source.locator)

    def declared_headers(self) -> Dict[int, str]:
        return {
            source.index: source.header
            for source in self.fields.values()
            if isinstance(source, Column) and source.header
        }

    async def verify_headers(
        self,
        session: "Session",
        headers: Locator,
        timeout_ms: Optional[int] = None,
    ) -> None:
        """
        Check every declared header label sits at its declared position.

        Raises:
            TimeoutFailure: A header cell never showed the declared label
        """
        with allure.step("Verify column headers"):
            for index, label in sorted(self.declared_headers().items()):
                try:
                    await session.expect(headers.nth(index), timeout_ms).to_contain_text(label)
                except TimeoutFailure:
                    logger.warning(
                        f"⚠️ Column header mismatch at position {index}: expected '{label}'"
                    )
                    raise


class RowReader:
    """Reads declared fields of one row."""

    def __init__(self, session: "Session", row: Locator, schema: RowSchema):
        self.session = session
        self.row = row
        self.schema = schema

    def locator(self, name: Enum) -> Locator:
        return self.schema.locator_for(self.row, name)

    async def field(self, name: Enum, timeout_ms: Optional[int] = None) -> str:
        return await self.session.text_content(self.locator(name), timeout_ms)

    async def fields(self, timeout_ms: Optional[int] = None) -> Dict[Enum, str]:
        return {name: await self.field(name, timeout_ms) for name in self.schema.fields}


__all__ = [
    "Anchor",
    "Column",
    "FieldSource",
    "RowReader",
    "RowSchema",
]
