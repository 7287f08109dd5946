"""
Date input component.

Renders a text input plus an error slot. The handle exposes the parsed
``datetime.date`` (or ``None``) and the current error message (or ``None``).
"""

from datetime import date, datetime
from typing import Optional, Tuple

from fasthtml.common import Div, Label

from ..core.component import Component, ComponentHandle, UIScope
from ..core.host import ScopedHost
from ..reactive.signals import ReadableSignal
from ..ui import bound_input, output_slot

DATE_FORMAT = "%Y-%m-%d"

date_input = Component("date_input")


class DateInputHandle(ComponentHandle):
    value: ReadableSignal
    error: ReadableSignal


def parse_date(raw: Optional[str], required: bool = False) -> Tuple[Optional[date], Optional[str]]:
    if raw is None or not str(raw).strip():
        return None, ("A date is required" if required else None)
    text = str(raw).strip()
    try:
        return datetime.strptime(text, DATE_FORMAT).date(), None
    except ValueError:
        return None, f"'{text}' is not a valid date (expected YYYY-MM-DD)"


@date_input.ui
def date_input_ui(ns: UIScope, label: str = "Date", placeholder: str = "YYYY-MM-DD"):
    return Div(
        Label(label, fr=ns.id("date")),
        bound_input(ns, "date", type="text", placeholder=placeholder),
        output_slot(ns, "error", cls="error"),
    )


@date_input.behavior
def date_input_behavior(host: ScopedHost, required: bool = False) -> DateInputHandle:
    raw = host.declare_input("date", "")
    parsed = host.derive(lambda: parse_date(raw(), required), name="parsed")
    value = host.derive(lambda: parsed()[0], name="value")
    error = host.derive(lambda: parsed()[1], name="error")
    host.declare_output("error", lambda: error() or "")
    return DateInputHandle(value=value, error=error)
