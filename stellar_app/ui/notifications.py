"""User-facing notifications: toasts plus the single-line status message."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ..utils.log import log
from .state import SessionState

NotificationLevel = Literal["success", "error", "info"]

TOAST_ICONS: dict[str, str] = {
    "success": "✅",
    "error": "⚠️",
    "info": "ℹ️",
}

_LOG_SEVERITY = {"success": "info", "info": "info", "error": "warning"}


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str
    link_url: str | None = None
    link_label: str | None = None

    @property
    def icon(self) -> str:
        return TOAST_ICONS.get(self.level, TOAST_ICONS["info"])

    def markdown(self) -> str:
        if not self.link_url:
            return self.message
        label = self.link_label or self.link_url
        return f"{self.message} [{label}]({self.link_url})"


class Notifier:
    def __init__(self, state: SessionState) -> None:
        self.state = state

    def notify(
        self,
        level: NotificationLevel,
        message: str,
        *,
        link_url: str | None = None,
        link_label: str | None = None,
    ) -> Notification:
        notification = Notification(level, message, link_url, link_label)
        self.state.status_message = notification.markdown()
        self.state.push_notification(notification)
        log(
            "ui.notify",
            severity=_LOG_SEVERITY.get(level, "info"),
            level=level,
            message=message,
            link=link_url,
        )
        return notification

    def success(self, message: str, **kwargs: str | None) -> Notification:
        return self.notify("success", message, **kwargs)

    def error(self, message: str, **kwargs: str | None) -> Notification:
        return self.notify("error", message, **kwargs)

    def info(self, message: str, **kwargs: str | None) -> Notification:
        return self.notify("info", message, **kwargs)

    def drain(self) -> list[Notification]:
        return [item for item in self.state.pop_notifications() if isinstance(item, Notification)]
