"""Progress monitor: turn on-disk growth of a clone into percent and ETA.

The monitor only observes. It never signals, throttles or waits on the
clone process; closing its generator early leaves the clone running.
"""

import time
from datetime import timedelta
from typing import Callable, Iterator, Optional

from .models import CloneJob, ProgressSample
from .sizing import DirectorySizer

POLL_INTERVAL = 3.0
ETA_WARMUP = 5.0
MAX_RUNNING_PERCENT = 99


def compute_progress(
    elapsed_seconds: float,
    current_bytes: int,
    total_bytes: int,
    warmup_seconds: float = ETA_WARMUP,
) -> ProgressSample:
    """Build one sample from raw measurements.

    Percent stays within [0, 99] while running, even when the destination
    briefly measures larger than the source did. ETA is only estimated after
    the warm-up period and with positive throughput.
    """
    current_bytes = max(int(current_bytes), 0)
    total_bytes = max(int(total_bytes), 0)
    elapsed_seconds = max(float(elapsed_seconds), 0.0)

    percent = 0
    if total_bytes > 0:
        percent = min(current_bytes * 100 // total_bytes, MAX_RUNNING_PERCENT)

    eta: Optional[timedelta] = None
    if elapsed_seconds >= warmup_seconds and elapsed_seconds > 0:
        throughput = current_bytes / elapsed_seconds
        if throughput > 0:
            remaining = max(total_bytes - current_bytes, 0)
            eta = timedelta(seconds=round(remaining / throughput))

    return ProgressSample(
        elapsed=timedelta(seconds=elapsed_seconds),
        current_bytes=current_bytes,
        total_bytes=total_bytes,
        percent=percent,
        eta=eta,
    )


def format_eta(eta: Optional[timedelta]) -> str:
    """HH:MM:SS or MM:SS; "unknown" when no estimate exists."""
    if eta is None:
        return "unknown"
    seconds = max(int(eta.total_seconds()), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours:d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


class ProgressMonitor:
    """Poll the clone destination at a fixed interval."""

    def __init__(
        self,
        sizer: DirectorySizer,
        interval: float = POLL_INTERVAL,
        warmup: float = ETA_WARMUP,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.sizer = sizer
        self.interval = interval
        self.warmup = warmup
        self._sleep = sleep
        self._clock = clock

    def samples(self, job: CloneJob, total_bytes: int) -> Iterator[ProgressSample]:
        """Yield one sample per interval until the clone process exits.

        The sequence belongs to ``job`` and cannot be restarted. Reporting
        100% is left to the caller, after it has confirmed the clone on disk.
        """
        while job.is_running():
            self._sleep(self.interval)
            if not job.is_running():
                break
            elapsed = self._clock() - job.started_monotonic
            current = self.sizer.size(job.destination_dir)
            yield compute_progress(elapsed, current, total_bytes, self.warmup)
