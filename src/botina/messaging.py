"""Outbound messaging contract."""

from typing import Protocol


class Messenger(Protocol):
    """Sends text to a user over the chat transport."""

    async def send_text(self, user_id: str, text: str) -> bool:
        """Send a message. Returns False if it could not be delivered."""
        ...
