"""Small HTML builders shared by the framework unit tests."""


def page(body: str, title: str = "Test Page") -> str:
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


def names_list(names) -> str:
    items = "\n".join(f"<li>{name}</li>" for name in names)
    return page(f"<ul>\n{items}\n</ul>")


NAMES = [
    "Alex Smith", "Jordan Brown", "Casey Gray", "Taylor Green", "Morgan White",
    "Jamie Johnson", "Riley Davis", "Kelly Wilson", "Drew Moore", "Jordan Taylor",
    "Morgan Anderson", "Casey Thomas", "Jamie Jackson", "Riley White", "Kelly Harris",
    "Drew Martin", "Avery Thompson", "Jordan Garcia", "Quinn Rodriguez", "Morgan Lopez",
]


def checkbox_rows(ids) -> str:
    """Table of selectable rows, rendered with no whitespace between cells."""
    rows = "".join(
        f'<tr><td><input type="checkbox" aria-label="Select row"></td><td>{row_id}</td></tr>'
        for row_id in ids
    )
    return page(f"<table><tbody>{rows}</tbody></table>")
