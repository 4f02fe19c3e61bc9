"""
Single-instance arbitration.

The first process to take the lock file becomes the primary instance and
opens a local socket server.  Later launches fail to take the lock, send
their command line to the primary over that socket and exit.

Wire format: one UTF-8 JSON line ``{"args": [...]}`` from the secondary,
answered by ``ok`` once the primary has read it.
"""
import getpass
import json
import time
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import QLockFile, QStandardPaths, QThread
from PySide6.QtNetwork import QLocalServer, QLocalSocket

from config.settings import settings
from core.process_mode import ProcessMode
from utils.logger import logger


_ACK = b"ok\n"


class InstanceRole(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


def wait_for_ready(probe: Callable[[], bool], timeout_ms: int, poll_ms: int) -> bool:
    """Poll ``probe`` every ``poll_ms`` until it returns True or ``timeout_ms`` elapses."""
    deadline = time.monotonic() + timeout_ms / 1000.0
    while time.monotonic() < deadline:
        if probe():
            return True
        time.sleep(poll_ms / 1000.0)
    return False


class WindowReadyProbe:
    """True once ``window`` is set and reports itself ready.  The window is attached after listening starts."""

    def __init__(self):
        self.window = None

    def __call__(self) -> bool:
        window = self.window
        return window is not None and bool(window.is_ready)


def _user_name() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "user"


def encode_batch(args: Sequence[str]) -> bytes:
    return (json.dumps({'args': list(args)}) + "\n").encode('utf-8')


def decode_batch(data: bytes) -> Optional[List[str]]:
    try:
        payload = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, ValueError):
        return None
    args = payload.get('args') if isinstance(payload, dict) else None
    if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
        return None
    return args


class ForwardingListener(QThread):
    """
    Primary-side endpoint.  Accepts argument batches on a QLocalServer owned
    by this thread and hands each one to ``on_batch``.
    """

    def __init__(self, server_name: str, on_batch: Callable[[List[str]], None],
                 io_timeout_ms: int = settings.FORWARD_IO_TIMEOUT_MS,
                 poll_ms: int = settings.LISTENER_POLL_MS):
        super().__init__()
        self.setObjectName("instance-listener")
        self.server_name = server_name
        self._on_batch = on_batch
        self._io_timeout_ms = io_timeout_ms
        self._poll_ms = poll_ms
        self._started = threading.Event()
        self.listening = False

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        self._started.wait(timeout)
        return self.listening

    def run(self):
        server = QLocalServer()
        server.setSocketOptions(QLocalServer.SocketOption.UserAccessOption)
        # We hold the instance lock, so any existing endpoint is left over from a crash
        QLocalServer.removeServer(self.server_name)
        self.listening = server.listen(self.server_name)
        self._started.set()

        if not self.listening:
            logger.error(f"Instance listener failed to start: {server.errorString()}")
            return

        logger.debug(f"Instance listener on {server.fullServerName()}")
        try:
            while not self.isInterruptionRequested():
                server.waitForNewConnection(self._poll_ms)
                while server.hasPendingConnections():
                    self._serve(server.nextPendingConnection())
        finally:
            server.close()

    def _serve(self, sock: QLocalSocket):
        data = b""
        while b"\n" not in data:
            if not sock.bytesAvailable() and not sock.waitForReadyRead(self._io_timeout_ms):
                break
            data += bytes(sock.readAll())

        args = decode_batch(data.split(b"\n", 1)[0]) if b"\n" in data else None
        if args is None:
            logger.warning("Ignoring malformed instance message")
        else:
            sock.write(_ACK)
            sock.waitForBytesWritten(self._io_timeout_ms)
        sock.disconnectFromServer()
        sock.close()

        if args is not None:
            try:
                self._on_batch(args)
            except Exception:
                logger.exception("Forwarded argument handler failed")


class InstanceArbiter:
    """
    Decides whether this process is the primary instance.

    Args:
        instance_id: Application-unique name for the lock and the socket
        lock_dir: Directory for the lock file (defaults to the temp location)
    """

    def __init__(self, instance_id: str = settings.INSTANCE_ID, lock_dir: Optional[Path] = None):
        self.name = f"{instance_id}-{_user_name()}"
        lock_dir = lock_dir or QStandardPaths.writableLocation(QStandardPaths.StandardLocation.TempLocation)
        self.lock_path = Path(lock_dir) / f"{self.name}.lock"
        self.role: Optional[InstanceRole] = None
        self._lock: Optional[QLockFile] = None
        self._listener: Optional[ForwardingListener] = None

    @property
    def holds_lock(self) -> bool:
        return self._lock is not None

    def acquire(self, mode: ProcessMode) -> InstanceRole:
        """Take the instance lock once; later calls return the decided role."""
        if self.role is not None:
            return self.role

        if mode.multi_instance:
            logger.info("Multi-instance run, skipping single instance check")
            self.role = InstanceRole.PRIMARY
            return self.role

        lock = QLockFile(str(self.lock_path))
        # Only a dead owner makes the lock stale; the primary holds it for its whole life
        lock.setStaleLockTime(0)
        if lock.tryLock(0):
            self._lock = lock
            self.role = InstanceRole.PRIMARY
        else:
            logger.info(f"Another instance holds {self.lock_path}")
            self.role = InstanceRole.SECONDARY
        return self.role

    def listen(self, on_arguments: Callable[[List[str]], None], ready_probe: Callable[[], bool],
               ready_timeout_ms: int = settings.FORWARD_READY_TIMEOUT_MS,
               ready_poll_ms: int = settings.FORWARD_READY_POLL_MS) -> bool:
        """
        Start receiving batches from later launches (primary holding the lock only).

        Each batch is delivered to ``on_arguments`` once ``ready_probe`` reports
        the UI ready.  If it is not ready within ``ready_timeout_ms`` the batch
        is dropped.
        """
        if not self.holds_lock or self._listener is not None:
            return False

        def on_batch(args: List[str]):
            if wait_for_ready(ready_probe, ready_timeout_ms, ready_poll_ms):
                logger.info(f"Received forwarded arguments: {args}")
                on_arguments(args)
            else:
                logger.debug(f"Main window not ready after {ready_timeout_ms} ms, dropping {args}")

        self._listener = ForwardingListener(self.name, on_batch)
        self._listener.start()
        return self._listener.wait_until_listening(settings.FORWARD_IO_TIMEOUT_MS / 1000.0)

    def forward(self, args: Sequence[str], timeout_ms: int = settings.FORWARD_IO_TIMEOUT_MS) -> bool:
        """
        Send ``args`` to the primary instance.  Returns True once it acknowledged them.

        The primary may hold the lock without listening yet, so connecting is
        retried until ``timeout_ms`` elapses.
        """
        deadline = time.monotonic() + timeout_ms / 1000.0
        sock = QLocalSocket()
        while True:
            sock.connectToServer(self.name)
            remaining_ms = max(0, int((deadline - time.monotonic()) * 1000))
            if sock.waitForConnected(remaining_ms):
                break
            error = sock.errorString()
            sock.abort()
            if time.monotonic() >= deadline:
                logger.warning(f"Could not reach the running instance: {error}")
                return False
            time.sleep(settings.FORWARD_CONNECT_RETRY_MS / 1000.0)

        sock.write(encode_batch(args))
        sock.waitForBytesWritten(timeout_ms)

        reply = b""
        while not reply.endswith(b"\n") and sock.waitForReadyRead(timeout_ms):
            reply += bytes(sock.readAll())
        sock.disconnectFromServer()

        if reply != _ACK:
            logger.warning("Running instance did not acknowledge forwarded arguments")
            return False
        logger.info(f"Forwarded {list(args)} to the running instance")
        return True

    def release(self) -> None:
        """Stop listening and give up the lock (process exit)."""
        if self._listener is not None:
            self._listener.requestInterruption()
            self._listener.wait()
            self._listener = None
        if self._lock is not None:
            self._lock.unlock()
            self._lock = None
