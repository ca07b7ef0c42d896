from __future__ import annotations

from pathlib import Path

from .errors import SerializationError
from .schema import FieldKind, FieldValue, ModeProfile, check_value


def quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_value(kind: FieldKind, value: FieldValue) -> str:
    if kind is FieldKind.STRING:
        return quote(value)
    if kind is FieldKind.BOOLEAN:
        return "true" if value else "false"
    if kind is FieldKind.INTEGER:
        return str(value)
    return "[" + ",".join(quote(port) for port in value) + "]"


def render_document(profile: ModeProfile, resolved: dict[str, FieldValue]) -> str:
    """Serialize one resolved profile as a single ``[server]``/``[client]`` section.

    ``transport`` always follows the header; every other key follows the
    profile's field order, so identical answers give byte-identical output.
    """
    lines = [f"[{profile.mode}]", f"transport = {quote(profile.transport)}"]

    for spec in profile.fields:
        if spec.key not in resolved:
            raise SerializationError(f"No value resolved for {spec.key} ({profile.mode}/{profile.transport})")
        value = resolved[spec.key]
        if not check_value(spec.kind, value):
            raise SerializationError(f"Value {value!r} for {spec.key} is not a valid {spec.kind.value}")
        lines.append(f"{spec.key} = {render_value(spec.kind, value)}")

    return "\n".join(lines) + "\n"


def write_document(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
