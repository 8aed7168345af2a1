from __future__ import annotations

import json
import textwrap
from typing import Any, Iterable, Sequence

from .client import ReleaseDockError
from .models import AccessKey, App, Deployment, DeploymentKey, Package

FORMATS = ("json", "table")
WRAP_WIDTH = 30


class InvalidFormatError(ReleaseDockError):
    pass


def validate_format(fmt: str) -> None:
    if fmt not in FORMATS:
        raise InvalidFormatError(f"Invalid format: {fmt}.")


def _dumps(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"))


def _wrap(text: str) -> str:
    return "\n".join(textwrap.wrap(text, WRAP_WIDTH)) or text


def format_table(columns: Sequence[str], rows: Iterable[Sequence[str]], *, separate_rows: bool = False) -> str:
    """
    Render a bordered table. Cells may span several lines; with ``separate_rows``
    a rule is drawn between body rows as well.
    """
    body = [[str(c).split("\n") for c in r] for r in rows]
    header = [[c] for c in columns]

    widths = [len(c) for c in columns]
    for r in body:
        for i, cell in enumerate(r):
            widths[i] = max(widths[i], *(len(line) for line in cell))

    rule = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def _render(row: list[list[str]]) -> list[str]:
        height = max(len(cell) for cell in row)
        lines = []
        for n in range(height):
            parts = []
            for i, cell in enumerate(row):
                text = cell[n] if n < len(cell) else ""
                parts.append(" " + text.ljust(widths[i]) + " ")
            lines.append("|" + "|".join(parts) + "|")
        return lines

    out = [rule, *_render(header), rule]
    for idx, r in enumerate(body):
        if separate_rows and idx > 0:
            out.append(rule)
        out.extend(_render(r))
    out.append(rule)
    return "\n".join(out)


def format_list(fmt: str, items: Sequence[App | Deployment | AccessKey]) -> str:
    if fmt == "json":
        return _dumps([{"name": x.name, "id": x.id} for x in items])
    return format_table(["Name", "ID"], [[x.name, x.id] for x in items])


def format_deployment_key_list(fmt: str, keys: Sequence[DeploymentKey]) -> str:
    if fmt == "json":
        return _dumps([{"name": k.name, "id": k.id, "key": k.key} for k in keys])
    return format_table(["Name", "ID", "Key"], [[k.name, k.id, k.key] for k in keys])


def _package_record(pkg: Package) -> dict[str, Any]:
    out: dict[str, Any] = {
        "appVersion": pkg.app_version,
        "isMandatory": pkg.is_mandatory,
        "packageHash": pkg.package_hash,
    }
    if pkg.description:
        out["description"] = pkg.description
    return out


def _package_summary(pkg: Package | None) -> str:
    if pkg is None:
        return ""
    lines = []
    if pkg.description:
        lines.append(_wrap(f"Description: {pkg.description}"))
    lines.append(f"Version: {pkg.app_version}")
    lines.append(f"Mandatory: {'Yes' if pkg.is_mandatory else 'No'}")
    lines.append(f"Hash: {pkg.package_hash}")
    return "\n".join(lines)


def format_deployment_list(fmt: str, deployments: Sequence[Deployment], *, verbose: bool = False) -> str:
    if not verbose:
        return format_list(fmt, deployments)

    if fmt == "json":
        records = []
        for d in deployments:
            record: dict[str, Any] = {"name": d.name, "id": d.id}
            if d.description:
                record["description"] = d.description
            if d.package is not None:
                record["package"] = _package_record(d.package)
            records.append(record)
        return _dumps(records)

    rows = [
        [d.name, d.id, _wrap(d.description) if d.description else "", _package_summary(d.package)]
        for d in deployments
    ]
    return format_table(["Name", "ID", "Deployment Description", "Package Metadata"], rows, separate_rows=True)
