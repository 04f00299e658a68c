import json
from collections.abc import Iterable

import yaml
from tabulate import tabulate


def format_output(
    output: str,
    content: list[dict],
    columns: Iterable[str] = (),
) -> str:
    if output == "json":
        return json.dumps(content, indent=2)
    if output == "yaml":
        return yaml.safe_dump(content, sort_keys=False)
    return format_table(content, columns)


def _format_cell(cell: dict, column: str) -> str:
    # example: for column 'commit.short_id'
    # cell = item['commit']['short_id']
    raw_data = cell
    for token in column.split("."):
        raw_data = raw_data.get(token) or {}
    if raw_data == {}:
        return ""
    if isinstance(raw_data, list):
        return "\n".join(str(d) for d in raw_data)
    return str(raw_data)


def format_table(
    content: Iterable[dict], columns: Iterable[str], table_format: str = "simple"
) -> str:
    columns = list(columns)
    headers = [column.upper() for column in columns]
    table_data = [[_format_cell(item, column) for column in columns] for item in content]
    return tabulate(table_data, headers=headers, tablefmt=table_format)
