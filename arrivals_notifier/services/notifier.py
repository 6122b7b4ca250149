"""Host notification capability"""
from enum import Enum
from typing import Optional, Protocol


class NotificationPermission(Enum):
    """Permission state of the notification host"""
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class Notifier(Protocol):
    """Anything that can show a (title, body, icon) notification"""

    @property
    def permission(self) -> NotificationPermission:
        ...

    async def request_permission(self) -> NotificationPermission:
        ...

    async def send_notification(self, title: str, body: str, icon: Optional[str] = None) -> bool:
        ...
