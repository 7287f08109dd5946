"""
StarScope Adapters

Web framework integrations for serving components.
"""

from .fasthtml import SessionHosts, include_component, render_component, extract_datastar_payload, get_session_id

__all__ = ["SessionHosts", "include_component", "render_component", "extract_datastar_payload", "get_session_id"]
