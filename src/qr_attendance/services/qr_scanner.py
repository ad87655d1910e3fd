from __future__ import annotations

import logging
import threading
import time
from contextlib import suppress
from typing import Any, Callable, Optional

from qr_attendance.services.qr_codec import decode_image

logger = logging.getLogger(__name__)

SCAN_INTERVAL_SECONDS = 0.1
REPEAT_SUPPRESS_SECONDS = 1.0
PREVIEW_INTERVAL_SECONDS = 0.07
PREVIEW_MAX_WIDTH = 480

PayloadCallback = Callable[[str], None]
ErrorCallback = Callable[[str], None]
FrameCallback = Callable[[Any], None]


class QRScanner:
    """Reads camera frames on a worker thread and reports decoded QR payloads.

    Only one scanning session runs at a time; calling :meth:`start` while a
    session is active is a no-op. Frames without a readable code are ignored.
    """

    def __init__(self, camera_index: int = 0) -> None:
        self._camera_index = camera_index
        self._running = False
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    def start(
        self,
        on_payload: PayloadCallback,
        *,
        on_error: Optional[ErrorCallback] = None,
        on_frame: Optional[FrameCallback] = None,
    ) -> bool:
        with self._lock:
            if self._running:
                return True

            try:
                import cv2  # type: ignore[import-not-found]
                import zxingcpp  # type: ignore[import-not-found]  # noqa: F401
            except ImportError:
                logger.error("QR scanner dependencies missing (opencv-python, zxing-cpp)")
                if on_error:
                    on_error("Missing QR scanner dependencies. Install opencv-python and zxing-cpp to enable scanning.")
                return False

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop,
                args=(cv2, on_payload, on_error, on_frame),
                name="qr-scanner",
                daemon=True,
            )
            self._running = True
            self._thread.start()
            logger.info("QR scanner started on camera %d", self._camera_index)
            return True

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=1.5)
        self._thread = None
        logger.info("QR scanner stopped")

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------
    def _run_loop(
        self,
        cv2_module,
        on_payload: PayloadCallback,
        on_error: Optional[ErrorCallback],
        on_frame: Optional[FrameCallback],
    ) -> None:
        capture = None
        last_payload: Optional[str] = None
        last_payload_at = 0.0
        last_preview_at = 0.0

        try:
            capture = self._open_capture(cv2_module)
            if capture is None:
                with self._lock:
                    self._running = False
                if on_error:
                    on_error("Unable to access the camera. Check that it is connected and not used by another app.")
                return

            while not self._stop_event.is_set():
                ok, frame = capture.read()
                if not ok:
                    time.sleep(SCAN_INTERVAL_SECONDS)
                    continue

                now = time.monotonic()
                if on_frame and (now - last_preview_at) >= PREVIEW_INTERVAL_SECONDS:
                    self._emit_preview(cv2_module, frame, on_frame)
                    last_preview_at = now

                try:
                    payloads = decode_image(frame)
                except Exception as exc:
                    logger.debug("Frame decode failed: %s", exc)
                    payloads = []

                for payload in payloads:
                    # The same code stays in view for several frames.
                    if payload == last_payload and (now - last_payload_at) < REPEAT_SUPPRESS_SECONDS:
                        continue
                    last_payload = payload
                    last_payload_at = now
                    try:
                        on_payload(payload)
                    except Exception:
                        logger.exception("QR payload callback failed")

                time.sleep(SCAN_INTERVAL_SECONDS)
        finally:
            if capture is not None:
                with suppress(Exception):
                    capture.release()
            self._stop_event.clear()
            with self._lock:
                self._running = False

    def _emit_preview(self, cv2_module, frame: Any, on_frame: FrameCallback) -> None:
        preview = frame
        try:
            preview = cv2_module.flip(preview, 1)
            if PREVIEW_MAX_WIDTH and preview.shape[1] > PREVIEW_MAX_WIDTH:
                scale = PREVIEW_MAX_WIDTH / float(preview.shape[1])
                height = int(preview.shape[0] * scale)
                preview = cv2_module.resize(preview, (PREVIEW_MAX_WIDTH, height))
            on_frame(preview.copy())
        except Exception as exc:
            logger.debug("Preview frame dropped: %s", exc)

    def _open_capture(self, cv2_module):
        backend_preferences = [getattr(cv2_module, "CAP_DSHOW", None), getattr(cv2_module, "CAP_ANY", None)]

        for backend in backend_preferences:
            if backend is None:
                capture = cv2_module.VideoCapture(self._camera_index)
            else:
                capture = cv2_module.VideoCapture(self._camera_index, backend)

            if capture.isOpened():
                return capture
            capture.release()

        logger.warning("Camera %d could not be opened", self._camera_index)
        return None
