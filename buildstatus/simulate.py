"""Synthetic concurrent workload for exercising the status line.

Worker threads download sources, build packages, copy outputs and
optimise the store, reporting everything through one ``Logger``. Used by
``build-status demo`` and by the concurrency tests.
"""

from __future__ import annotations

import itertools
import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from buildstatus.logger import Logger
from buildstatus.models import ActivityType, ResultType, Verbosity

logger = logging.getLogger(__name__)

PACKAGE_NAMES = [
    "zlib",
    "openssl",
    "curl",
    "bash",
    "coreutils",
    "python3",
    "perl",
    "gcc",
    "glibc",
    "sqlite",
    "libffi",
    "ncurses",
]

BUILD_PHASES = ["unpacking sources", "configuring", "building", "installing"]


@dataclass
class SimulationSummary:
    """Totals reported by a finished simulation."""

    built: int = 0
    failed: int = 0
    bytes_downloaded: int = 0
    bytes_copied: int = 0
    files_linked: int = 0


class ActivityIds:
    """Thread-safe source of fresh activity ids."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


class Simulation:
    """Drive a fixed number of package builds across worker threads."""

    def __init__(
        self,
        target: Logger,
        *,
        workers: int = 4,
        builds: int = 12,
        seed: int | None = None,
        delay: float = 0.05,
        failure_rate: float = 0.1,
    ) -> None:
        self.target = target
        self.workers = workers
        self.builds = builds
        self.delay = delay
        self.failure_rate = failure_rate
        self.ids = ActivityIds()
        self._seed = seed
        self._summary = SimulationSummary()
        self._summary_lock = threading.Lock()
        self._running = 0
        self._builds_id = 0

    def run(self) -> SimulationSummary:
        """Run every build to completion and return the totals."""
        master = random.Random(self._seed)
        jobs = [
            (f"{PACKAGE_NAMES[i % len(PACKAGE_NAMES)]}-{i}", master.randrange(2**32))
            for i in range(self.builds)
        ]

        realise_id = self.ids.next()
        self.target.start_activity(realise_id, ActivityType.REALISE)
        self.target.set_expected(realise_id, ActivityType.BUILDS, self.builds)

        self._builds_id = self.ids.next()
        self.target.start_activity(self._builds_id, ActivityType.BUILDS)

        copy_id = self.ids.next()
        self.target.start_activity(copy_id, ActivityType.COPY_PATHS)
        self.target.progress(copy_id, 0, self.builds)

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(self._build_package, name, random.Random(seed)): name
                for name, seed in jobs
            }
            for finished, future in enumerate(as_completed(futures), start=1):
                future.result()
                self.target.progress(copy_id, finished, self.builds)

        self.target.stop_activity(self._builds_id)
        self.target.stop_activity(copy_id)
        self.target.stop_activity(realise_id)
        self._optimise_store(random.Random(master.randrange(2**32)))
        return self._summary

    # ------------------------------------------------------------------
    # Worker steps
    # ------------------------------------------------------------------

    def _pause(self, rng: random.Random) -> None:
        if self.delay > 0:
            time.sleep(rng.uniform(0, self.delay))

    def _download(self, name: str, rng: random.Random) -> None:
        act = self.ids.next()
        size = rng.randint(1, 64) * 256 * 1024
        self.target.start_activity(act, ActivityType.DOWNLOAD, f"downloading {name}")
        self.target.set_expected(act, ActivityType.DOWNLOAD, size)
        received = 0
        while received < size:
            received = min(size, received + rng.randint(1, 16) * 256 * 1024)
            self.target.progress(act, received, size, 1)
            self._pause(rng)
        self.target.progress(act, size, size)
        self.target.stop_activity(act)
        with self._summary_lock:
            self._summary.bytes_downloaded += size

    def _report_builds(self) -> None:
        # Caller holds _summary_lock so reports reach the target in order
        self.target.progress(
            self._builds_id,
            self._summary.built,
            self.builds,
            self._running,
            self._summary.failed,
        )

    def _build(self, name: str, rng: random.Random) -> bool:
        act = self.ids.next()
        self.target.start_activity(act, ActivityType.BUILD, f"building {name}")
        with self._summary_lock:
            self._running += 1
            self._report_builds()

        for phase in BUILD_PHASES:
            self.target.result(act, ResultType.BUILD_LOG_LINE, [f"{phase} {name}"])
            self._pause(rng)

        ok = rng.random() >= self.failure_rate
        if not ok:
            self.target.log(Verbosity.ERROR, f"error: build of '{name}' failed")
        self.target.stop_activity(act)

        with self._summary_lock:
            self._running -= 1
            if ok:
                self._summary.built += 1
            else:
                self._summary.failed += 1
            self._report_builds()
        return ok

    def _copy(self, name: str, rng: random.Random) -> None:
        act = self.ids.next()
        size = rng.randint(1, 32) * 128 * 1024
        self.target.start_activity(act, ActivityType.COPY_PATH, f"copying {name}")
        self.target.progress(act, size // 2, size, 1)
        self._pause(rng)
        self.target.progress(act, size, size)
        self.target.stop_activity(act)
        with self._summary_lock:
            self._summary.bytes_copied += size

    def _build_package(self, name: str, rng: random.Random) -> None:
        self._download(name, rng)
        if self._build(name, rng):
            self._copy(name, rng)
        logger.debug("Finished %s", name)

    def _optimise_store(self, rng: random.Random) -> None:
        act = self.ids.next()
        paths = max(1, self.builds // 2)
        self.target.start_activity(
            act, ActivityType.OPTIMISE_STORE, "optimising store"
        )
        for done in range(1, paths + 1):
            linked = rng.randint(1, 512) * 1024
            self.target.result(act, ResultType.FILE_LINKED, [linked])
            self.target.progress(act, done, paths)
            self._summary.files_linked += 1
            self._pause(rng)
        self.target.stop_activity(act)
