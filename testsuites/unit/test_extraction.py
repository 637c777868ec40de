from enum import Enum

import pytest

from testsuites.ui_testing.framework.errors import ConfigurationError, TimeoutFailure
from testsuites.ui_testing.framework.extraction import Anchor, Column, RowReader, RowSchema
from testsuites.ui_testing.framework.locator import locate
from testsuites.unit.markup import page


class Field(Enum):
    ID = "id"
    NAME = "name"
    EMAIL = "email"
    STATUS = "status"
    ACTIONS = "actions"


TABLE = page(
    """
    <table>
      <thead><tr><th></th><th>ID</th><th>Name</th><th>Email</th><th>Status</th></tr></thead>
      <tbody>
        <tr><td><input type="checkbox" aria-label="Select row"></td><td>1</td><td>Alex Smith</td>
            <td>alex.smith@example.com</td><td><span class="badge">subscribed</span></td></tr>
        <tr><td><input type="checkbox" aria-label="Select row"></td><td>2</td><td>Jordan Brown</td>
            <td>jordan.brown@example.com</td><td><span class="badge">unsubscribed</span></td></tr>
      </tbody>
    </table>
    """
)

SCHEMA = RowSchema({
    Field.ID: Column(1, "ID"),
    Field.NAME: Column(2, "Name"),
    Field.EMAIL: Column(3, "Email"),
    Field.STATUS: Anchor(locate("span", {"class": "badge"})),
})

ROWS = locate("tbody tr")
HEADERS = locate("thead th")


def test_declared_headers_skip_anchors():
    assert SCHEMA.declared_headers() == {1: "ID", 2: "Name", 3: "Email"}


def test_locator_for_column_and_anchor():
    row = ROWS.nth(0)

    assert SCHEMA.locator_for(row, Field.ID) == row.chain(locate("td")).nth(1)
    assert SCHEMA.locator_for(row, Field.STATUS) == row.chain(locate("span", {"class": "badge"}))


def test_undeclared_field_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        SCHEMA.source(Field.ACTIONS)


@pytest.mark.asyncio
async def test_read_fields_by_name(session, load):
    await load(TABLE)
    reader = RowReader(session, ROWS.nth(1), SCHEMA)

    assert await reader.field(Field.NAME) == "Jordan Brown"
    assert await reader.fields() == {
        Field.ID: "2",
        Field.NAME: "Jordan Brown",
        Field.EMAIL: "jordan.brown@example.com",
        Field.STATUS: "unsubscribed",
    }


@pytest.mark.asyncio
async def test_reader_locator_supports_assertions(session, load):
    await load(TABLE)
    reader = RowReader(session, ROWS.filter(has_text="alex.smith"), SCHEMA)

    await session.expect(reader.locator(Field.ID)).to_have_text("1")
    await session.expect(reader.locator(Field.STATUS)).to_contain_text("subscribed")


@pytest.mark.asyncio
async def test_verify_headers_accepts_matching_layout(session, load, clock):
    await load(TABLE)

    await SCHEMA.verify_headers(session, HEADERS)

    assert clock.now_ms() == 0


@pytest.mark.asyncio
async def test_verify_headers_rejects_reordered_layout(session, load):
    await load(TABLE.replace("<th>Name</th><th>Email</th>", "<th>Email</th><th>Name</th>"))

    with pytest.raises(TimeoutFailure) as info:
        await SCHEMA.verify_headers(session, HEADERS, timeout_ms=200)

    assert "Name" in info.value.expected


@pytest.mark.asyncio
async def test_custom_cell_locator(session, load):
    await load(page(
        '<ul><li data-testid="email-item-1"><b>Alex Smith</b><i>Meeting today</i></li></ul>'
    ))
    schema = RowSchema(
        {Field.NAME: Column(0), Field.STATUS: Anchor(locate("i"))},
        cell=locate("b"),
    )
    reader = RowReader(session, locate("li"), schema)

    assert await reader.field(Field.NAME) == "Alex Smith"
    assert await reader.field(Field.STATUS) == "Meeting today"
    assert schema.declared_headers() == {}
