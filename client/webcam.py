# =============================================================================
# Scan to Markdown - Webcam Capture
# =============================================================================
# Provides the WebcamCapture class, a thin lifecycle wrapper around an OpenCV
# camera stream, and run_preview(), which shows a live preview window and
# grabs a single still frame as a JPEG data URL.  The camera is the only
# resource in the client that needs explicit release.
# =============================================================================

import io
import logging
from typing import Optional

import cv2
from PIL import Image

from client.errors import CameraUnavailableError
from shared.data_url import encode_data_url

logger = logging.getLogger(__name__)

CAPTURE_MIME_TYPE = "image/jpeg"

_KEY_ESC = 27
_KEY_ENTER = 13
_KEY_SPACE = 32


class WebcamCapture:
    """
    Single-camera capture session backed by ``cv2.VideoCapture``.

    The camera is acquired by ``open()`` (or on entering the context
    manager) and released by ``release()`` (or on leaving it). A requested
    resolution is a hint; the driver may pick the closest it supports.

    Args:
        camera_index: OpenCV device index (0 = default camera).
        width:        Ideal frame width in pixels.
        height:       Ideal frame height in pixels.
        jpeg_quality: JPEG quality (1-95) for captured stills.
    """

    def __init__(
        self,
        camera_index: int = 0,
        width: int = 1280,
        height: int = 720,
        jpeg_quality: int = 92,
    ):
        self._camera_index = camera_index
        self._width = width
        self._height = height
        self._jpeg_quality = jpeg_quality
        self._stream = None

    @property
    def is_active(self) -> bool:
        """True while a camera stream is held open."""
        return self._stream is not None and self._stream.isOpened()

    def open(self) -> None:
        """
        Acquire the camera stream.

        Raises:
            CameraUnavailableError: If the device cannot be opened.
        """
        if self.is_active:
            logger.warning("Camera %d is already open.", self._camera_index)
            return

        logger.info("Requesting webcam access (device=%d)...", self._camera_index)
        try:
            stream = cv2.VideoCapture(self._camera_index)
        except cv2.error as exc:
            raise CameraUnavailableError(f"Error accessing webcam: {exc}") from exc
        if not stream.isOpened():
            stream.release()
            raise CameraUnavailableError(
                "Error accessing webcam. Please ensure a camera is connected "
                "and camera permissions are granted."
            )

        stream.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        stream.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        self._stream = stream

        logger.info(
            "Webcam stream open: %dx%d",
            int(stream.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(stream.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    def read_raw(self):
        """
        Read the next frame as OpenCV returns it (BGR ``numpy.ndarray``).

        Raises:
            CameraUnavailableError: If the stream is closed or yields no frame.
        """
        if not self.is_active:
            raise CameraUnavailableError("Webcam is not active")
        try:
            ok, frame = self._stream.read()
        except cv2.error as exc:
            raise CameraUnavailableError(f"Failed to read a frame from the webcam: {exc}") from exc
        if not ok or frame is None:
            raise CameraUnavailableError("Failed to read a frame from the webcam")
        return frame

    def read_frame(self) -> Image.Image:
        """Read the next frame as a PIL RGB image."""
        return to_image(self.read_raw())

    def encode_frame(self, frame) -> str:
        """
        Encode a BGR frame as a JPEG data URL.

        Args:
            frame: ``numpy.ndarray`` frame from ``read_raw()``.

        Returns:
            str: ``data:image/jpeg;base64,...``.

        Raises:
            CameraUnavailableError: If the frame cannot be converted or encoded.
        """
        buffer = io.BytesIO()
        try:
            to_image(frame).save(buffer, format="JPEG", quality=self._jpeg_quality)
        except (cv2.error, OSError, ValueError) as exc:
            raise CameraUnavailableError(f"Failed to encode the captured frame: {exc}") from exc
        return encode_data_url(buffer.getvalue(), CAPTURE_MIME_TYPE)

    def capture(self) -> str:
        """Grab a single still frame and return it as a JPEG data URL."""
        return self.encode_frame(self.read_raw())

    def release(self) -> None:
        """Release the camera stream. Safe to call more than once."""
        if self._stream is not None:
            logger.info("Releasing webcam stream...")
            self._stream.release()
            self._stream = None

    def __enter__(self) -> "WebcamCapture":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()


def to_image(frame) -> Image.Image:
    # OpenCV frames are BGR; PIL expects RGB
    return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))


def run_preview(capture: WebcamCapture, window_name: str = "Capture Photo") -> Optional[str]:
    """
    Show a live preview until the user captures or cancels.

    Space or Enter captures the frame on screen; Esc, ``q``, or closing the
    window cancels. The camera is released on every exit path.

    Args:
        capture:     An opened (or openable) WebcamCapture.
        window_name: Title of the preview window.

    Returns:
        The captured frame as a JPEG data URL, or None if cancelled.

    Raises:
        CameraUnavailableError: If the camera fails or no display is available.
    """
    if not capture.is_active:
        capture.open()

    try:
        cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
        while True:
            frame = capture.read_raw()
            overlay = frame.copy()
            cv2.putText(
                overlay,
                "Space: capture   Esc: cancel",
                (12, 28),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.7,
                (255, 255, 255),
                2,
                cv2.LINE_AA,
            )
            cv2.imshow(window_name, overlay)

            key = cv2.waitKey(30) & 0xFF
            if key in (_KEY_SPACE, _KEY_ENTER):
                logger.info("Frame captured.")
                return capture.encode_frame(frame)
            if key in (_KEY_ESC, ord("q")):
                logger.info("Capture cancelled.")
                return None
            if cv2.getWindowProperty(window_name, cv2.WND_PROP_VISIBLE) < 1:
                logger.info("Preview window closed.")
                return None
    except cv2.error as exc:
        raise CameraUnavailableError(f"Could not show the preview window: {exc}") from exc
    finally:
        _close_window(window_name)
        capture.release()


def _close_window(window_name: str) -> None:
    try:
        cv2.destroyWindow(window_name)
    except cv2.error as exc:
        # Never created, e.g. on a headless OpenCV build
        logger.debug("Could not destroy window %r: %s", window_name, exc)
