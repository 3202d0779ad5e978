"""
PHOTO ALIGN - Skew Detection Worker

Runs skew detection on a QThread so a host UI can stay responsive and show a
"detecting..." state while the edge histogram is built.
"""

from typing import Optional

from loguru import logger
from PySide6.QtCore import QObject, Signal, QThread

from auto_align import detect_skew_angle
from pixel_buffer import PixelBuffer


class SkewDetectionWorker(QObject):
    """
    Worker that detects the skew angle of a single buffer.

    Detection is one pass over a <=1000 px copy; there is no point at which it
    could be interrupted, so the worker has no cancel of its own.
    """

    # Signals
    finished = Signal(object)   # angle in degrees, or None
    error = Signal(str)         # error message

    def __init__(self, buffer: PixelBuffer):
        super().__init__()
        self._buffer = buffer

    def run(self):
        """Detect and emit the result."""
        try:
            angle = detect_skew_angle(self._buffer)
        except Exception as e:
            logger.exception("[SkewWorker] Detection failed")
            self.error.emit(str(e))
            return
        self.finished.emit(angle)


class SkewDetectionService(QObject):
    """
    Service for background skew detection with Qt integration.

    Only one detection runs at a time; starting a new one discards the result
    of any detection still in flight.
    """

    # Public signals
    detectionStarted = Signal()
    angleDetected = Signal(object)     # angle in degrees, or None
    error = Signal(str)                # error message

    def __init__(self, parent: QObject = None):
        super().__init__(parent)
        self._worker: Optional[SkewDetectionWorker] = None
        self._thread: Optional[QThread] = None

    def detect_async(self, buffer: PixelBuffer):
        """
        Start background skew detection.

        Args:
            buffer: Image to analyse
        """
        self.cancel()

        self._thread = QThread()
        self._worker = SkewDetectionWorker(buffer)
        self._worker.moveToThread(self._thread)

        # Connect thread lifecycle
        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self._on_finished)
        self._worker.error.connect(self._on_error)

        self.detectionStarted.emit()
        self._thread.start()

    def _on_finished(self, angle):
        """Handle completion."""
        self.angleDetected.emit(angle)
        self._cleanup()

    def _on_error(self, message: str):
        self.error.emit(message)
        self._cleanup()

    def _cleanup(self):
        """Clean up thread and worker."""
        if self._thread:
            self._thread.quit()
            if not self._thread.wait(2000):  # 2 second timeout
                self._thread.terminate()
            self._thread = None
        self._worker = None

    def cancel(self):
        """Drop the current detection, if any. Its result is never emitted."""
        if self._worker:
            self._worker.finished.disconnect(self._on_finished)
            self._worker.error.disconnect(self._on_error)
        self._cleanup()

    @property
    def is_running(self) -> bool:
        """Check if detection is running."""
        return self._thread is not None and self._thread.isRunning()
