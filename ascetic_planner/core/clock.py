"""Wall clock abstraction; every derived flag is computed from a clock reading."""

import time


class SystemClock:
    """Clock backed by the system time, in epoch milliseconds."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)
