from types import SimpleNamespace

from qr_attendance.services import QRScanner


class _ClosedCapture:
    def __init__(self) -> None:
        self.released = False

    def isOpened(self) -> bool:
        return False

    def release(self) -> None:
        self.released = True


def _fake_cv2(captures: list) -> SimpleNamespace:
    def video_capture(*args):
        capture = _ClosedCapture()
        captures.append(capture)
        return capture

    return SimpleNamespace(CAP_ANY=0, VideoCapture=video_capture)


def test_unopenable_camera_reports_error_and_stops():
    captures: list = []
    scanner = QRScanner(camera_index=0)
    scanner._running = True
    running_at_error: list[bool] = []
    errors: list[str] = []

    def on_error(message: str) -> None:
        running_at_error.append(scanner.is_running)
        errors.append(message)

    scanner._run_loop(_fake_cv2(captures), lambda payload: None, on_error, None)

    assert len(errors) == 1
    assert errors[0].startswith("Unable to access the camera")
    assert running_at_error == [False]
    assert scanner.is_running is False
    assert captures and all(capture.released for capture in captures)


def test_stop_without_session_is_noop():
    scanner = QRScanner()

    scanner.stop()

    assert scanner.is_running is False
