"""
Thin FastHTML helpers that render Datastar-bound elements from a UIScope.

Each helper declares the identifier it renders on the scope, so a UI built
from them reports its inputs and outputs without extra bookkeeping.
"""

import json
from typing import Any, Dict, Optional, Union

from fasthtml.common import FT, Div, Input, Script, Span

from ..core.component import UIScope
from ..core.namespace import ID_SEP, SEP, Namespace

datastar_script = Script(src="https://cdn.jsdelivr.net/gh/starfederation/datastar@v1.0.0-beta.11/bundles/datastar.js", type="module")


def bound_input(ns: UIScope, local: str, *children, **attrs) -> FT:
    """``<input>`` two-way bound to the input signal ``local``."""
    name = ns.input(local)
    return Input(*children, {"data-bind": name}, id=ns.id(local), name=name, **attrs)


def output_slot(ns: UIScope, local: str, *children, tag=Span, **attrs) -> FT:
    """Placeholder whose text follows the output signal ``local``."""
    ns.output(local)
    return tag(*children, {"data-text": ns.signal(local)}, id=ns.id(local), **attrs)


def scope_container(
    ns: Union[UIScope, Namespace],
    *children,
    signals: Optional[Dict[str, Any]] = None,
    sync_url: Optional[str] = None,
    debounce: str = "250ms",
    **attrs,
) -> FT:
    """Wrap a component's UI; optionally seed its signals and post them on input."""
    datastar: Dict[str, Any] = {}
    if signals is not None:
        datastar["data-signals"] = json.dumps(signals)
    if sync_url:
        datastar[f"data-on-input__debounce.{debounce}"] = f"@post('{sync_url}')"
    element_id = (ns.scope or "root").replace(SEP, ID_SEP)
    return Div(*children, datastar, id=element_id, **attrs)


__all__ = ["datastar_script", "bound_input", "output_slot", "scope_container"]
