"""
Network Monitor

Tracks connectivity as a single boolean consumed by the data access
facade and the sync engine.

A transition to online awaits every registered online listener (the sync
engine's drain is one). A transition to offline raises a warning
notification. There is no debounce: flapping triggers redundant drains,
which are harmless because the engine ignores reentrant calls.
"""

from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog

from comptara.audit import AuditLogger
from comptara.sync.notifications import LogNotifier, NotificationVariant, Notifier


logger = structlog.get_logger(__name__)

OnlineListener = Callable[[], Awaitable[Any]]


class NetworkMonitor:
    """Boolean connectivity flag with transition side effects."""

    def __init__(
        self,
        is_online: bool = True,
        notifier: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
        connectivity_url: Optional[str] = None,
        connectivity_timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._is_online = is_online
        self._notifier = notifier or LogNotifier()
        self._audit_logger = audit_logger
        self._connectivity_url = connectivity_url
        self._connectivity_timeout = connectivity_timeout
        self._transport = transport
        self._online_listeners: list[OnlineListener] = []

    @property
    def is_online(self) -> bool:
        return self._is_online

    def add_online_listener(self, listener: OnlineListener) -> None:
        """Register a coroutine function awaited on every offline -> online transition."""
        self._online_listeners.append(listener)

    async def set_online(self, value: bool) -> None:
        """
        Record the platform's connectivity state.

        Setting the current value again is not a transition and does nothing.
        """
        if value == self._is_online:
            return
        self._is_online = value

        if self._audit_logger:
            await self._audit_logger.log_network_changed(value)

        if not value:
            self._notifier.notify(
                "Offline mode",
                "Changes are saved locally and will sync when the connection returns.",
                NotificationVariant.WARNING,
            )
            return

        logger.info("network_online", listeners=len(self._online_listeners))
        for listener in self._online_listeners:
            try:
                await listener()
            except Exception as e:
                logger.exception("online_listener_failed")
                if self._audit_logger:
                    await self._audit_logger.log_error("online_listener_failed", str(e))

    async def check_connectivity(self) -> bool:
        """
        Check connectivity with an HTTP request to the configured URL.

        Any HTTP response counts as online; a transport error counts as
        offline. Without a connectivity URL the current state is returned as is.
        """
        if not self._connectivity_url:
            return self._is_online

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._connectivity_timeout,
            ) as client:
                await client.head(self._connectivity_url)
            online = True
        except httpx.TransportError as e:
            logger.debug("connectivity_check_failed", url=self._connectivity_url, error=str(e))
            online = False

        await self.set_online(online)
        return online
