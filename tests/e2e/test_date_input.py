"""
End-to-end: one date-input component placed twice on a page.

Only the instance the user typed into reports an error, and only through
its own handle.
"""

from datetime import date

from fasthtml.common import Div, to_xml

from starscope import UIScope
from starscope.components import DateInputHandle, date_input
from starscope.components.date_input import parse_date


def build_page(host):
    page = UIScope.root()
    fragment = Div(
        date_input("birthday").render(parent=page, label="Birthday"),
        date_input("anniversary").render(parent=page, label="Anniversary"),
    )
    handles = {
        "birthday": date_input("birthday").mount(host),
        "anniversary": date_input("anniversary").mount(host),
    }
    return fragment, handles


def test_page_renders_both_instances_without_collisions(host):
    fragment, _ = build_page(host)
    html = to_xml(fragment)
    assert 'id="birthday-date"' in html
    assert 'id="anniversary-date"' in html
    assert 'data-text="$birthday.error"' in html
    assert 'data-text="$anniversary.error"' in html


def test_invalid_date_only_affects_its_own_instance(host):
    _, handles = build_page(host)
    birthday, anniversary = handles["birthday"], handles["anniversary"]
    assert isinstance(birthday, DateInputHandle)

    host.set_input("birthday.date", "2020-02-30")

    assert birthday.error() is not None
    assert "2020-02-30" in birthday.error()
    assert birthday.value() is None
    assert anniversary.error() is None
    assert anniversary.value() is None
    assert host.output_value("anniversary.error") == ""


def test_valid_date_parses_and_clears_error(host):
    _, handles = build_page(host)
    birthday = handles["birthday"]
    host.set_input("birthday.date", "2020-02-30")
    host.set_input("birthday.date", "2020-02-29")
    assert birthday.value() == date(2020, 2, 29)
    assert birthday.error() is None
    assert host.output_value("birthday.error") == ""


def test_datastar_payload_drives_the_right_instance(host):
    _, handles = build_page(host)
    host.apply_signals({"birthday": {"date": "2021-13-01"}, "anniversary": {"date": "2010-06-15"}})
    assert handles["birthday"].error() is not None
    assert handles["anniversary"].value() == date(2010, 6, 15)
    signals = host.signals(include_inputs=False)
    assert signals["anniversary"]["error"] == ""
    assert signals["birthday"]["error"].startswith("'2021-13-01'")


def test_required_date():
    assert parse_date("", required=True) == (None, "A date is required")
    assert parse_date("  ", required=False) == (None, None)
    assert parse_date(" 1999-12-31 ") == (date(1999, 12, 31), None)
