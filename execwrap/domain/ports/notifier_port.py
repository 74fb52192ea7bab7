from typing import Protocol


class NotifierPort(Protocol):
    async def send(self, recipient: str, subject: str, body: str) -> None:
        """Deliver a failure notification. Raises NotificationError on failure."""
        ...
