"""
Date form example

Two instances of the same date-input component on one page. Typing an
invalid date into one shows an error under that field only.

Run with:  python examples/date-form/main.py
"""

from fasthtml.common import H1, Div, P, Request, fast_app, serve

from starscope import configure_logging, datastar_script
from starscope.adapters.fasthtml import SessionHosts, include_component, render_component
from starscope.components import date_input

app, rt = fast_app(pico=True, hdrs=(datastar_script,))
configure_logging()

birthday = date_input("birthday")
anniversary = date_input("anniversary")

hosts = SessionHosts()
include_component(rt, birthday, hosts=hosts, ui_kwargs={"label": "Birthday"})
include_component(rt, anniversary, hosts=hosts, behavior_kwargs={"required": True})


@rt("/")
def index(request: Request):
    return Div(
        H1("Dates"),
        P("Each field below is the same component mounted under its own scope."),
        render_component(request, birthday, hosts, ui_kwargs={"label": "Birthday"}),
        render_component(request, anniversary, hosts, ui_kwargs={"label": "Anniversary"}),
    )


if __name__ == "__main__":
    serve()
