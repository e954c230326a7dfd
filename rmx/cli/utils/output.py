"""Shared output handlers for CLI commands."""

import csv
import io
import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from rich.console import Console

from rmx.core.constants import FormattingConstants

console = Console()


def _to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, list | tuple):
        return [_to_jsonable(item) for item in data]
    return data


def _write(content: str, output_path: Path | None) -> None:
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        console.print(f"[bold green]✓ Saved to:[/bold green] {output_path}")
    else:
        print(content)


def handle_json_output(data: Any, output_path: Path | None) -> None:
    """Handle JSON format output.

    Args:
        data: Model, list of models, or plain JSON-compatible data
        output_path: Optional file path to save output
    """
    json_content = json.dumps(_to_jsonable(data), indent=FormattingConstants.JSON_INDENT, default=str)
    _write(json_content, output_path)


def handle_csv_output(
    items: Sequence[Any],
    output_path: Path | None,
    row_transformer: Callable[[Any], dict[str, str]],
) -> None:
    """Handle CSV format output.

    Args:
        items: Items to output, one row each
        output_path: Optional file path to save output
        row_transformer: Turns an item into a flat row; its keys become the header
    """
    string_buffer = io.StringIO()

    if items:
        rows = [row_transformer(item) for item in items]
        writer = csv.DictWriter(string_buffer, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)

    _write(string_buffer.getvalue(), output_path)
