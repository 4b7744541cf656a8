"""Callback functions for the extractor's on_record parameter.

Each callback receives one record as a plain field-keyed dict, in activation
order, as soon as the record is extracted. This module also renders a
finished ResultSet as a human-readable table.

Example::

    from panelscrape.driver.callbacks import save_to_jsonl_file

    with open("icons.jsonl", "w") as f:
        async with PlaywrightDriver.open(
            IconCatalog, on_record=save_to_jsonl_file(f)
        ) as driver:
            result = await driver.run()
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from panelscrape.data_types import ResultSet


def save_to_jsonl_file(file_handle: TextIO) -> Callable[[dict], None]:
    """Create a callback that writes each record as a JSON line.

    Args:
        file_handle: An open file handle to write JSON lines to.
            The caller is responsible for opening and closing the file.

    Returns:
        A callback function for the on_record parameter.
    """

    def callback(record: dict) -> None:
        json.dump(record, file_handle, ensure_ascii=False)
        file_handle.write("\n")
        file_handle.flush()

    return callback


def save_to_jsonl_path(file_path: Path | str) -> Callable[[dict], None]:
    """Create a callback that appends each record to a JSONL file.

    Warning:
        The file is opened in append mode ("a") and kept open for the life
        of the process. Prefer save_to_jsonl_file() with a context manager in
        long-running processes.

    Args:
        file_path: Path to the JSONL file to append to.

    Returns:
        A callback function for the on_record parameter.
    """
    path = Path(file_path) if isinstance(file_path, str) else file_path
    file_handle = path.open("a", encoding="utf-8")
    return save_to_jsonl_file(file_handle)


def print_record(prefix: str = "") -> Callable[[dict], None]:
    """Create a callback that prints each record to stdout.

    Example::

        extractor = InteractiveExtractor(..., on_record=print_record("ICON: "))
        # Prints: ICON: {"Icon name": "home", "Code point": "e88a"}
    """

    def callback(record: dict) -> None:
        print(f"{prefix}{json.dumps(record, ensure_ascii=False)}")

    return callback


def count_records(counter: list[int] | None = None) -> Callable[[dict], None]:
    """Create a callback that counts records.

    The count is stored at index 0 of a mutable list so it can be read after
    the run finishes.
    """
    if counter is None:
        counter = [0]

    def callback(record: dict) -> None:
        counter[0] += 1

    return callback


def combine_callbacks(
    *callbacks: Callable[[dict], None],
) -> Callable[[dict], None]:
    """Combine multiple callbacks into a single callback.

    Example::

        on_record = combine_callbacks(
            save_to_jsonl_path("icons.jsonl"),
            count_records(my_counter),
        )
    """

    def callback(record: dict) -> None:
        for cb in callbacks:
            cb(record)

    return callback


def render_table(result: ResultSet, show_skipped: bool = False) -> str:
    """Render a result set as a plain-text table.

    Columns follow the field locator order. A field absent from a record is
    shown as a blank cell.

    Args:
        result: The finished result set.
        show_skipped: Append one line per skipped element.

    Returns:
        The table as a string (no trailing newline).
    """
    headers = list(result.field_names)
    if not headers:
        seen: dict[str, None] = {}
        for record in result:
            seen.update(dict.fromkeys(record.keys()))
        headers = list(seen)

    rows = [[record.values.get(name, "") for name in headers] for record in result]
    widths = [
        max([len(header)] + [len(row[i]) for row in rows])
        for i, header in enumerate(headers)
    ]

    def line(cells: list[str]) -> str:
        return "  ".join(
            cell.ljust(width) for cell, width in zip(cells, widths)
        ).rstrip()

    lines = [line(headers), line(["-" * width for width in widths])]
    lines.extend(line(row) for row in rows)
    lines.append(
        f"{len(result)} record(s), {len(result.skipped)} skipped"
    )

    if show_skipped:
        for skipped in result.skipped:
            first_line = skipped.error.splitlines()[0] if skipped.error else ""
            lines.append(
                f"  skipped #{skipped.index} {skipped.element}: "
                f"{skipped.reason.value} {first_line}".rstrip()
            )

    return "\n".join(lines)
