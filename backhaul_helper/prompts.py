"""Walk a ModeProfile and turn answers into concrete setting values.

Answers come from a ``LineSource``: the interactive terminal in normal runs,
or a scripted list of lines in tests. An empty answer keeps the default.
Bad answers print a message and the same question is asked again.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Iterable, Protocol

from .errors import InputClosed, ValidationError
from .schema import FieldKind, FieldSpec, FieldValue, ModeProfile, is_port

AFFIRMATIVE = {"y", "yes"}

Notify = Callable[[str], None]


class LineSource(Protocol):
    def ask(self, prompt: str) -> str: ...


class TerminalInput:
    def ask(self, prompt: str) -> str:
        try:
            return input(prompt)
        except EOFError as exc:
            raise InputClosed("Input closed before all settings were answered") from exc


class ScriptedInput:
    """Replays pre-recorded answers and keeps the questions it was asked."""

    def __init__(self, answers: Iterable[str]):
        self._answers = deque(answers)
        self.prompts: list[str] = []

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise InputClosed("Input closed before all settings were answered")
        return self._answers.popleft()

    @property
    def remaining(self) -> int:
        return len(self._answers)


def format_default(value: FieldValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(value)
    return str(value)


def format_prompt(text: str, default: FieldValue) -> str:
    shown = format_default(default)
    if not shown:
        return f"{text}: "
    return f"{text} (Default: {shown}): "


def parse_answer(kind: FieldKind, raw: str) -> FieldValue:
    if kind is FieldKind.STRING:
        return raw
    if kind is FieldKind.INTEGER:
        if not raw.isdigit() or not raw.isascii():
            raise ValidationError("Invalid input. Please enter a whole number.")
        return int(raw)
    if kind is FieldKind.BOOLEAN:
        if raw == "true":
            return True
        if raw == "false":
            return False
        raise ValidationError("Invalid input. Please enter true or false.")
    raise ValidationError(f"Cannot parse a single answer for {kind.value} settings")


def ask_value(spec: FieldSpec, source: LineSource, notify: Notify = print) -> FieldValue:
    prompt = format_prompt(spec.prompt, spec.default)
    while True:
        raw = source.ask(prompt).strip()
        if not raw:
            return spec.default
        try:
            return parse_answer(spec.kind, raw)
        except ValidationError as exc:
            notify(f"[!] {exc}")


def ask_ports(spec: FieldSpec, source: LineSource, notify: Notify = print) -> list[str]:
    prompt = format_prompt(spec.prompt, spec.default)
    another = format_prompt("Do you want to add another port? (y/n)", "n")
    ports: list[str] = []

    while True:
        raw = source.ask(prompt).strip()
        if not raw:
            break
        if not is_port(raw):
            notify("[!] Invalid input. Please enter a valid port number (1-65535) or leave empty to finish.")
            continue

        ports.append(raw)
        if source.ask(another).strip().lower() not in AFFIRMATIVE:
            break

    if not ports:
        return list(spec.default)
    return ports


def resolve_profile(profile: ModeProfile, source: LineSource, notify: Notify = print) -> dict[str, FieldValue]:
    resolved: dict[str, FieldValue] = {}
    for spec in profile.fields:
        if spec.kind is FieldKind.PORT_LIST:
            resolved[spec.key] = ask_ports(spec, source, notify)
        else:
            resolved[spec.key] = ask_value(spec, source, notify)
    return resolved
