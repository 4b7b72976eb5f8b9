"""
Device detector: immediate queries plus an optional watch mode.

The detector owns the last known snapshot. While watching, a background
thread samples the attached devices once per poll interval, diffs the
sample against the stored snapshot and notifies subscribers:

- DEVICES_ADDED with the added devices (if any)
- DEVICES_CHANGED with the changed devices (if any)
- ERROR with the DetectionError when a sample fails

Removed devices produce no notification; they only update the stored
snapshot, so a device that reconnects is reported as added again.

Usage:
    detector = DeviceDetector(client, executor=executor, poll_interval=1.0)
    detector.subscribe(DeviceEvent.DEVICES_ADDED, on_added)
    detector.watch()
    ...
    detector.unwatch()
"""

import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple

from adb_multiplexer.core.errors import DetectionError

from .adb import AdbClient
from .diff import diff_snapshots
from .models import ChangeSet, Device

if TYPE_CHECKING:
    from adb_multiplexer.execution.executor import CommandExecutor

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class DetectorState(str, Enum):
    """Watch state of the detector."""

    IDLE = "idle"
    WATCHING = "watching"


class DeviceEvent(str, Enum):
    """Notifications raised by a watching detector."""

    DEVICES_ADDED = "devicesAdded"
    DEVICES_CHANGED = "devicesChanged"
    ERROR = "error"


class DeviceDetector:
    """
    Samples attached devices and reports what changed between samples.

    At most one tick runs at a time. The watch thread waits a full poll
    interval after each tick returns, so the effective period is the poll
    interval plus the time spent in the tick, including any command
    executions triggered by subscribers.
    """

    def __init__(
        self,
        client: AdbClient,
        executor: Optional["CommandExecutor"] = None,
        poll_interval: float = 1.0,
    ):
        """
        Initialize device detector.

        Args:
            client: Backend used to list the attached devices
            executor: Executor bound to every sampled device (optional)
            poll_interval: Seconds to wait between two ticks
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")

        self.client = client
        self.executor = executor
        self.poll_interval = poll_interval

        self._listeners: Dict[DeviceEvent, List[Listener]] = {
            event: [] for event in DeviceEvent
        }
        self._lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._state = DetectorState.IDLE
        self._stop_event = threading.Event()
        self._idle_event = threading.Event()
        self._idle_event.set()
        self._thread: Optional[threading.Thread] = None
        self._last_snapshot: Tuple[Device, ...] = ()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> DetectorState:
        with self._lock:
            return self._state

    @property
    def is_watching(self) -> bool:
        return self.state is DetectorState.WATCHING

    @property
    def last_snapshot(self) -> List[Device]:
        """Copy of the snapshot stored by the last successful tick."""
        with self._lock:
            return list(self._last_snapshot)

    def get_devices(self) -> List[Device]:
        """
        Query the attached devices right now.

        Does not touch the watch state or the stored snapshot.

        Raises:
            DetectionError: If the devices cannot be enumerated
        """
        devices = self.client.list_devices()
        if self.executor is not None:
            devices = [device.bind(self.executor) for device in devices]
        return devices

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, event: DeviceEvent, listener: Listener) -> None:
        """Register a listener. Listeners only see ticks after this call."""
        with self._lock:
            self._listeners[event].append(listener)

    def unsubscribe(self, event: DeviceEvent, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

    def _notify(self, event: DeviceEvent, payload) -> bool:
        with self._lock:
            listeners = list(self._listeners[event])

        for listener in listeners:
            try:
                listener(payload)
            except Exception as e:
                logger.error(f"{event.value} listener failed: {e}", exc_info=True)
        return bool(listeners)

    # ------------------------------------------------------------------
    # Watch state machine
    # ------------------------------------------------------------------

    def watch(self, baseline: Optional[Sequence[Device]] = None) -> None:
        """
        Start watching (IDLE -> WATCHING). No-op if already watching.

        Args:
            baseline: Snapshot the first tick is diffed against. Devices in
                the baseline are not reported as added. Without a baseline
                the first tick reports every attached device as added.
        """
        with self._lock:
            if self._state is DetectorState.WATCHING:
                return
            self._state = DetectorState.WATCHING
            self._last_snapshot = tuple(baseline or ())
            # each watch session gets its own stop flag so a thread left over
            # from a previous session never runs another tick
            self._stop_event = threading.Event()
            self._idle_event.clear()
            thread = threading.Thread(
                target=self._run_loop,
                args=(self._stop_event,),
                name="DeviceDetector",
                daemon=True,
            )
            self._thread = thread

        thread.start()
        logger.info(f"Watching for devices (poll interval: {self.poll_interval}s)")

    def unwatch(self) -> None:
        """
        Stop watching (WATCHING -> IDLE). No-op if already idle.

        Only future ticks are prevented; a tick in progress is not
        interrupted, but a sample it takes after this call is discarded.
        Safe to call from inside a listener.
        """
        with self._lock:
            if self._state is DetectorState.IDLE:
                return
            self._state = DetectorState.IDLE
            self._stop_event.set()
            self._idle_event.set()
        logger.info("Stopped watching for devices")

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until the detector is idle. Returns False on timeout."""
        return self._idle_event.wait(timeout)

    def _run_loop(self, stop_event: threading.Event) -> None:
        """Background thread loop."""
        while not stop_event.wait(self.poll_interval):
            try:
                self.tick(stop_event)
            except Exception as e:
                logger.error(f"Tick failed: {e}", exc_info=True)

    def tick(self, stop_event: Optional[threading.Event] = None) -> ChangeSet:
        """
        Sample, diff and notify once.

        Can be called manually or runs from the watch thread. If another
        tick is still running this call is skipped and returns an empty
        ChangeSet.

        Args:
            stop_event: Stop flag of the watch session running this tick.
                Once it is set the sample is discarded: the session ended
                while sampling and its result must not overwrite the
                baseline of a newer session.

        Returns:
            The ChangeSet of this tick
        """
        if not self._tick_lock.acquire(blocking=False):
            logger.debug("Tick skipped: previous tick still running")
            return ChangeSet()

        try:
            try:
                current = tuple(self.get_devices())
            except DetectionError as e:
                logger.warning(f"Device detection failed: {e}")
                if not self._notify(DeviceEvent.ERROR, e):
                    logger.error(f"Unhandled detection error: {e}")
                return ChangeSet()

            with self._lock:
                if stop_event is not None and stop_event.is_set():
                    logger.debug("Tick discarded: watch session ended")
                    return ChangeSet()
                previous = self._last_snapshot
                self._last_snapshot = current

            changes = diff_snapshots(previous, current)
            logger.debug(
                f"Tick: {len(current)} devices, {len(changes.added)} added, "
                f"{len(changes.removed)} removed, {len(changes.changed)} changed"
            )

            for device in changes.removed:
                logger.info(f"Device removed: {device.to_status_string()}")

            if changes.added:
                self._notify(DeviceEvent.DEVICES_ADDED, list(changes.added))
            if changes.changed:
                self._notify(DeviceEvent.DEVICES_CHANGED, list(changes.changed))

            return changes
        finally:
            self._tick_lock.release()
