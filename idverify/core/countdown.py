import math
from typing import Callable, Optional

from idverify.utils.time import monotonic


class Countdown:
    """
    Resend timer for the OTP step.

    Purely cosmetic: it only gates the resend action. Remaining time is derived
    from the clock instead of a background tick, so there is no scheduled
    callback to leak when the owning step goes away; `cancel()` drops it to 0.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock
        self._started_at: Optional[float] = None
        self._duration = 0

    def _now(self) -> float:
        # default clock resolved per call, not at definition time
        return (self._clock or monotonic)()

    def start(self, seconds: int) -> None:
        self._started_at = self._now()
        self._duration = int(seconds)

    def cancel(self) -> None:
        self._started_at = None
        self._duration = 0

    @property
    def remaining(self) -> int:
        if self._started_at is None:
            return 0
        elapsed = math.floor(self._now() - self._started_at)
        left = self._duration - elapsed
        if left <= 0:
            # finished; release the start mark like a timer that fired its last tick
            self.cancel()
            return 0
        return left

    @property
    def running(self) -> bool:
        return self.remaining > 0
