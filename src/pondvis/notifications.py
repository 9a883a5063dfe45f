import logging

logger = logging.getLogger(__name__)


class Notifier:
    """Fire-and-forget toast messages. Remembers the latest one for the overlay."""

    def __init__(self):
        self.message = None
        self.shown_at = None

    def show(self, message, now=None):
        self.message = message
        self.shown_at = now
        logger.info(f"[i] {message}")
