"""Command cooldown per conversation.

Mass mentions are noisy, so accepted tag-all commands are limited per
group with a sliding window. Limits come from settings.
"""

import logging
import time
from collections import defaultdict

logger = logging.getLogger("tagger.ratelimit")


class RateLimiter:
    """Rate limiter with sliding window per conversation.

    Default: 3 commands per 60 seconds per conversation.
    """

    def __init__(
        self,
        max_requests: int = 3,
        window_seconds: int = 60,
    ):
        """Initialize rate limiter.

        Args:
            max_requests: Maximum commands allowed per window
            window_seconds: Time window in seconds
        """
        self.max_requests = max(1, max_requests)
        self.window = max(1, window_seconds)
        self._requests: dict[int, list[float]] = defaultdict(list)

    def _prune(self, conversation: int, now: float) -> list[float]:
        self._requests[conversation] = [
            t for t in self._requests[conversation]
            if now - t < self.window
        ]
        return self._requests[conversation]

    def check(self, conversation: int) -> tuple[bool, str]:
        """Check if the conversation is within its limit and record the command.

        Args:
            conversation: Conversation identifier

        Returns:
            Tuple of (allowed: bool, message: str)
            - If allowed, message is empty
            - If rate limited, message contains wait time info
        """
        now = time.monotonic()
        recent = self._prune(conversation, now)

        if len(recent) >= self.max_requests:
            oldest = recent[0]
            remaining = max(1, int(self.window - (now - oldest)))
            message = (
                f"Too many tag-all commands. Please wait {remaining}s. "
                f"(Max {self.max_requests} per {self.window}s)"
            )
            logger.info(f"[{conversation}] Command cooldown hit: {remaining}s remaining")
            return False, message

        recent.append(now)
        return True, ""

    def reset(self, conversation: int):
        """Reset the cooldown for one conversation."""
        self._requests.pop(conversation, None)
