"""
Camera loop that drives both recognition pipelines.
"""

import cv2
import logging
import time
from typing import List, Optional, Tuple

from ..utils.command_router import CommandRouter
from ..utils.config import Config, config
from ..utils.feedback import HapticFeedback, ResponseDisplay, SpeechFeedback
from .dispatcher import CommandDispatcher
from .hand_tracking import HandTracker
from .pipeline import GesturePipeline, VoicePipeline
from .voice import READY_PROMPT

logger = logging.getLogger(__name__)

WINDOW_NAME = "HandsFree Banking"


class AssistantController:
    """Owns the camera, the sensing collaborators and both pipelines."""

    def __init__(self, cfg: Config = config, enable_voice: bool = True):
        self.cfg = cfg
        self.router = CommandRouter()
        self.gesture_menu = self.router.gesture_menu()
        self.display = ResponseDisplay(cfg.RESPONSE_CLEAR_S, clock=time.monotonic)
        self.speech_feedback = SpeechFeedback()
        self.dispatcher = CommandDispatcher([
            HapticFeedback(),
            self.speech_feedback,
            self.display,
        ])

        self.tracker = HandTracker(cfg)
        self.gestures = GesturePipeline(
            self.dispatcher, self.router, cfg, model_ready=self.tracker.model_ready
        )

        self.speech_recognizer = None
        speech_supported = False
        if enable_voice:
            try:
                from .audio import SpeechRecognizer
                self.speech_recognizer = SpeechRecognizer(cfg)
                speech_supported = self.speech_recognizer.speech_supported
            except Exception as e:
                logger.error(f"✗ Speech engine unavailable: {e}", exc_info=True)
        self.voice = VoicePipeline(
            self.dispatcher,
            self.router,
            cfg,
            speech_supported=speech_supported,
            start_engine=self.speech_recognizer.start if self.speech_recognizer else None,
        )

        self.cap: Optional[cv2.VideoCapture] = None

    def _try_open_camera(self) -> Tuple[Optional[cv2.VideoCapture], str]:
        """Try to open the configured camera with the available backends."""
        backend_options = [
            (cv2.CAP_ANY, "ANY"),
            (cv2.CAP_DSHOW, "DSHOW"),
            (cv2.CAP_MSMF, "MSMF"),
        ]
        index, width, height = self.cfg.get_camera_settings()
        for backend, name in backend_options:
            logger.info(f"… Trying camera backend={name}, index={index}")
            cap = cv2.VideoCapture(index, backend)
            if cap.isOpened():
                ret, _ = cap.read()
                if ret:
                    logger.info(f"✅ Camera opened using backend={name}")
                    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
                    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
                    return cap, name
                cap.release()
        return None, ""

    def _wrap_text(self, text: str, max_width: int, max_lines: int = 3) -> List[str]:
        """Wrap text to fit within width."""
        if not text:
            return []

        font = cv2.FONT_HERSHEY_SIMPLEX
        font_scale = 0.7
        thickness = 2

        words = text.encode('ascii', 'ignore').decode().split()
        lines = []
        current = ""
        for word in words:
            candidate = word if current == "" else current + " " + word
            (w, _), _ = cv2.getTextSize(candidate, font, font_scale, thickness)
            if w <= max_width:
                current = candidate
            else:
                if current:
                    lines.append(current)
                current = word
                if len(lines) >= max_lines:
                    break

        if current and len(lines) < max_lines:
            lines.append(current)
        return lines

    def _draw_overlay(self, frame) -> None:
        font = cv2.FONT_HERSHEY_SIMPLEX
        session = self.gestures.session
        label = session.current_label.display_name if session.current_label.value != "none" else "-"
        status = (f"Gesture: {label}  conf {session.current_confidence:.2f}  "
                  f"fingers {self.gestures.last_features.finger_count}")
        cv2.putText(frame, status, (10, 28), font, 0.6, (0, 255, 0), 2, cv2.LINE_AA)

        voice_line = f"Voice: {self.voice.state.value}"
        if self.voice.raw_transcript:
            voice_line += f"  \"{self.voice.raw_transcript}\""
        cv2.putText(frame, voice_line, (10, 54), font, 0.6, (255, 200, 0), 2, cv2.LINE_AA)

        if self.dispatcher.busy:
            cv2.putText(frame, "Processing...", (10, 80), font, 0.6, (0, 200, 255), 2, cv2.LINE_AA)

        self._draw_gesture_menu(frame)

        lines = self._wrap_text(self.display.text, frame.shape[1] - 40)
        if lines:
            (_, line_h), _ = cv2.getTextSize("Ag", font, 0.7, 2)
            total_height = len(lines) * (line_h + 6) + 14
            overlay = frame.copy()
            cv2.rectangle(overlay, (0, frame.shape[0] - total_height),
                          (frame.shape[1], frame.shape[0]), (0, 0, 0), -1)
            cv2.addWeighted(overlay, 0.6, frame, 0.4, 0, frame)
            color = (0, 0, 255) if self.display.urgent else (0, 255, 0)
            base_y = frame.shape[0] - 20 - (len(lines) - 1) * (line_h + 6)
            for i, line in enumerate(lines):
                cv2.putText(frame, line, (20, base_y + i * (line_h + 6)),
                            font, 0.7, color, 2, cv2.LINE_AA)

    def _draw_gesture_menu(self, frame) -> None:
        """List the gesture bindings under the status lines."""
        font = cv2.FONT_HERSHEY_SIMPLEX
        for i, (gesture, description) in enumerate(self.gesture_menu):
            cv2.putText(frame, f"{gesture}: {description}", (10, 110 + i * 18),
                        font, 0.4, (255, 255, 255), 1, cv2.LINE_AA)

    def _handle_speech_events(self, now: float) -> None:
        if self.speech_recognizer is None:
            return
        for event in self.speech_recognizer.drain():
            if event.kind == "transcript":
                self.voice.on_transcript(event.text, event.is_final, now)
            elif event.kind == "end":
                self.voice.on_engine_end(now)
            elif event.kind == "error":
                self.voice.on_engine_error(now, event.text)

    def start(self):
        """Start the camera loop; returns when the user presses 'q'."""
        now = time.monotonic()
        gestures_on = self.gestures.start()
        voice_on = self.voice.start(now)
        if not gestures_on and not voice_on:
            logger.error("❌ Neither hand tracking nor speech recognition is available")
            return
        if voice_on:
            self.speech_feedback.on_command(None, READY_PROMPT, False)

        logger.info("📹 Opening camera...")
        self.cap, _ = self._try_open_camera()
        if self.cap is None:
            logger.error("❌ Cannot access camera")
            self._cleanup()
            return

        logger.info("✅ Camera started. Press 'q' to quit.")
        try:
            cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
        except cv2.error:
            logger.debug("Could not create a resizable window")

        while True:
            ret, frame = self.cap.read()
            if not ret:
                logger.error("❌ Camera read failed")
                break
            if self.cfg.MIRRORED:
                frame = cv2.flip(frame, 1)

            now = time.monotonic()
            if self.gestures.running:
                try:
                    sample = self.tracker.process(frame, now)
                except Exception as e:
                    self.gestures.on_engine_error(str(e))
                else:
                    self.gestures.on_frame(sample)
                    self.tracker.draw(frame)

            self._handle_speech_events(now)
            self.voice.tick(now)
            self.dispatcher.poll(now)
            self.display.tick(now)

            self._draw_overlay(frame)
            cv2.imshow(WINDOW_NAME, frame)
            if cv2.waitKey(1) & 0xFF == ord('q'):
                break

        self._cleanup()

    def _cleanup(self):
        """Stop pipelines and release resources."""
        self.gestures.stop()
        self.voice.stop()
        if self.speech_recognizer is not None:
            self.speech_recognizer.stop()
        self.tracker.close()
        if self.cap:
            self.cap.release()
            self.cap = None
        cv2.destroyAllWindows()
        self.display.clear()
        logger.info("✅ Assistant stopped.")
