"""
FastHTML Web Adapter

Serves bound components over FastHTML with Datastar:

- GET  /{base}        renders the component seeded with the session's signals
- POST /{base}/sync   applies the Datastar payload and streams merge-signals back
- POST /{base}/close  tears the session's component tree down

Each browser session gets its own AppHost, so two visitors never share state.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from datastar_py import SSE_HEADERS
from datastar_py import ServerSentEventGenerator as SSE
from fasthtml.common import JSONResponse, Request, StreamingResponse

from ..config import StarScopeConfig, get_config
from ..core.component import BoundComponent, UIScope
from ..core.errors import DuplicateScope
from ..core.host import AppHost
from ..core.namespace import Namespace
from ..ui import scope_container

logger = logging.getLogger(__name__)

SESSION_KEY = "starscope_session"


class SessionHosts:
    """
    One AppHost per session id, each with every registered component mounted.

    Hosts idle for longer than ``config.session_timeout`` seconds are disposed,
    either when their session comes back or when a new session is opened.
    """

    def __init__(self, config: Optional[StarScopeConfig] = None, clock: Callable[[], float] = time.time):
        self.config = config or get_config()
        self._clock = clock
        self._mounts: List[Tuple[BoundComponent, Dict[str, Any]]] = []
        self._hosts: Dict[str, AppHost] = {}
        self._handles: Dict[str, Dict[str, Any]] = {}
        self._last_seen: Dict[str, float] = {}

    def register(self, bound: BoundComponent, **behavior_kwargs) -> None:
        """Mount ``bound`` in every current and future session host."""
        if any(mounted.scope == bound.scope for mounted, _ in self._mounts):
            raise DuplicateScope(bound.scope, reason="already registered with these session hosts")

        mounted_in: List[str] = []
        try:
            for session_id, host in self._hosts.items():
                self._handles[session_id][bound.scope] = bound.mount(host, **behavior_kwargs)
                mounted_in.append(session_id)
        except Exception:
            for session_id in mounted_in:
                self._hosts[session_id].unmount(bound.scope)
                self._handles[session_id].pop(bound.scope, None)
            raise
        self._mounts.append((bound, behavior_kwargs))

    def get(self, session_id: str) -> AppHost:
        now = self._clock()
        if self._expired(session_id, now):
            logger.debug("Session %s expired", session_id)
            self.close(session_id)

        host = self._hosts.get(session_id)
        if host is None:
            self.cleanup_expired(now)
            host = self._create(session_id)
        self._last_seen[session_id] = now
        return host

    def _create(self, session_id: str) -> AppHost:
        host = AppHost(self.config)
        handles = {}
        try:
            for bound, kwargs in self._mounts:
                handles[bound.scope] = bound.mount(host, **kwargs)
        except Exception:
            host.dispose()
            raise
        self._hosts[session_id] = host
        self._handles[session_id] = handles
        logger.debug("Created host for session %s", session_id)
        return host

    def _expired(self, session_id: str, now: float) -> bool:
        timeout = self.config.session_timeout
        seen = self._last_seen.get(session_id)
        return timeout > 0 and seen is not None and now - seen > timeout

    def cleanup_expired(self, now: Optional[float] = None) -> int:
        """Dispose every host idle past the session timeout; returns how many went."""
        now = self._clock() if now is None else now
        expired = [session_id for session_id in self._hosts if self._expired(session_id, now)]
        for session_id in expired:
            self.close(session_id)
        if expired:
            logger.info("Released %d idle session hosts", len(expired))
        return len(expired)

    def handle(self, session_id: str, scope: str):
        self.get(session_id)
        return self._handles[session_id][scope]

    def close(self, session_id: str) -> bool:
        host = self._hosts.pop(session_id, None)
        self._handles.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if host is None:
            return False
        host.dispose()
        logger.debug("Closed host for session %s", session_id)
        return True

    def close_all(self) -> None:
        for session_id in list(self._hosts):
            self.close(session_id)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._hosts

    def __len__(self) -> int:
        return len(self._hosts)


def get_session_id(request: Request) -> str:
    """Stable id for the caller's session, created on first use."""
    session = request.session
    if SESSION_KEY not in session:
        session[SESSION_KEY] = uuid4().hex
    return session[SESSION_KEY]


async def extract_datastar_payload(request: Request) -> Dict[str, Any]:
    """Datastar signals from the ``datastar`` query param (GET) or the JSON body."""
    raw = request.query_params.get("datastar")
    if raw:
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Malformed datastar query parameter")
            return {}

    body = await request.body()
    if not body:
        return {}
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        logger.warning("Malformed datastar request body")
        return {}
    return data if isinstance(data, dict) else {}


def scoped_signals(host: AppHost, scope: str, include_inputs: bool = True) -> Dict[str, Any]:
    """The part of ``host.signals()`` under ``scope``, still nested under it."""
    return {scope: host.signals(include_inputs=include_inputs).get(scope, {})}


def component_path(hosts: SessionHosts, bound: BoundComponent, base_path: Optional[str] = None) -> str:
    return (base_path or f"{hosts.config.base_path}/{bound.scope}").rstrip("/")


def render_component(
    request: Request,
    bound: BoundComponent,
    hosts: SessionHosts,
    base_path: Optional[str] = None,
    ui_kwargs: Optional[Dict[str, Any]] = None,
):
    """The component's fragment for this session, seeded with its current signals."""
    host = hosts.get(get_session_id(request))
    fragment = bound.render(parent=UIScope.root(), **(ui_kwargs or {}))
    return scope_container(
        Namespace(bound.scope),
        fragment,
        signals=scoped_signals(host, bound.scope),
        sync_url=f"{component_path(hosts, bound, base_path)}/sync",
    )


def include_component(
    router,
    bound: BoundComponent,
    hosts: Optional[SessionHosts] = None,
    base_path: Optional[str] = None,
    ui_kwargs: Optional[Dict[str, Any]] = None,
    behavior_kwargs: Optional[Dict[str, Any]] = None,
) -> SessionHosts:
    """
    Register the routes serving ``bound``.

    Args:
        router: FastHTML router function (``app.route`` or ``rt``)
        bound: Component bound to its scope
        hosts: Session hosts to mount into; a new SessionHosts when omitted
        base_path: URL prefix (defaults to ``{config.base_path}/{scope}``)
        ui_kwargs: Extra arguments for the UI builder
        behavior_kwargs: Extra arguments for the behavior builder

    Returns:
        The SessionHosts the component was mounted into
    """
    hosts = hosts if hosts is not None else SessionHosts()
    base = component_path(hosts, bound, base_path)
    sync_url = f"{base}/sync"
    hosts.register(bound, **(behavior_kwargs or {}))

    async def render(request: Request):
        return render_component(request, bound, hosts, base_path=base, ui_kwargs=ui_kwargs)

    async def sync(request: Request):
        host = hosts.get(get_session_id(request))
        payload = await extract_datastar_payload(request)
        changed = host.apply_signals(payload)
        logger.debug("Applied %d changed inputs for %s", len(changed), bound.scope)

        async def sse_stream():
            yield SSE.merge_signals(scoped_signals(host, bound.scope, include_inputs=False))

        return StreamingResponse(sse_stream(), media_type="text/event-stream", headers=SSE_HEADERS)

    async def close(request: Request):
        closed = hosts.close(get_session_id(request))
        return JSONResponse({"closed": closed})

    router(base, methods=["GET"])(render)
    router(sync_url, methods=["POST"])(sync)
    router(f"{base}/close", methods=["POST"])(close)
    return hosts


__all__ = [
    "SessionHosts",
    "get_session_id",
    "extract_datastar_payload",
    "scoped_signals",
    "component_path",
    "render_component",
    "include_component",
]
