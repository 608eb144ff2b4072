"""
Audio capture and speech recognition for HandsFree banking.

The recognizer runs on its own thread and only enqueues SpeechEvents; the
camera loop drains them so the voice session is mutated from one thread.
"""

import sounddevice as sd
import os
import queue
import vosk
import json
import logging
import numpy as np
import threading
from dataclasses import dataclass
from scipy import signal
from typing import List, Optional

from ..utils.config import Config, config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeechEvent:
    """kind is one of "transcript", "end" or "error"."""

    kind: str
    text: str = ""
    is_final: bool = False


class AudioProcessor:
    """Handles audio input buffering."""

    def __init__(self):
        self.q = queue.Queue()

    def audio_callback(self, indata, frames, time, status):
        """Callback for audio input stream."""
        if status:
            logger.debug(f"Audio status: {status}")
        self.q.put(indata.copy())

    def clear(self) -> None:
        while True:
            try:
                self.q.get_nowait()
            except queue.Empty:
                return


class SpeechRecognizer:
    """Handles speech recognition using Vosk."""

    def __init__(self, cfg: Config = config, audio_processor: Optional[AudioProcessor] = None):
        self.cfg = cfg
        self.model_path = cfg.get_model_path()
        self.audio_processor = audio_processor or AudioProcessor()
        self.events: "queue.Queue[SpeechEvent]" = queue.Queue()
        self.model: Optional[vosk.Model] = None
        self.is_running = False
        self._thread: Optional[threading.Thread] = None
        self.speech_supported = self._load_model()

    def _load_model(self) -> bool:
        """Load the Vosk model once; failure disables voice input."""
        if not os.path.exists(self.model_path):
            logger.warning(f"✗ Vosk model not found at {self.model_path}")
            return False
        logger.info("📂 Loading Vosk model...")
        try:
            self.model = vosk.Model(self.model_path)
        except Exception as e:
            logger.error(f"✗ Failed to load model: {e}", exc_info=True)
            return False
        try:
            device_info = sd.query_devices(self.cfg.AUDIO_DEVICE_ID, 'input')
            logger.info(f"✓ Using device {self.cfg.AUDIO_DEVICE_ID}: {device_info['name']}")
        except Exception as e:
            logger.error(f"✗ Device error: {e}", exc_info=True)
            return False
        logger.info("✓ Model loaded")
        return True

    def start(self) -> None:
        """Start a recognition session in a background thread."""
        if not self.speech_supported:
            raise RuntimeError("model-missing")
        if self._thread is not None and self._thread.is_alive():
            return
        self.audio_processor.clear()
        # stop() may run before the worker thread is scheduled
        self.is_running = True
        self._thread = threading.Thread(target=self._recognition_loop, daemon=True)
        self._thread.start()

    def drain(self) -> List[SpeechEvent]:
        """Take every event queued since the last call."""
        events = []
        while True:
            try:
                events.append(self.events.get_nowait())
            except queue.Empty:
                return events

    def _recognition_loop(self):
        """Main recognition loop running in separate thread."""
        recognizer = vosk.KaldiRecognizer(self.model, self.cfg.VOSK_SAMPLERATE)
        recognizer.SetWords(True)

        resample_ratio = self.cfg.VOSK_SAMPLERATE / self.cfg.MIC_SAMPLERATE
        last_partial = ""

        logger.info("🎙️  Starting audio recognition...")
        try:
            with sd.InputStream(
                samplerate=self.cfg.MIC_SAMPLERATE,
                blocksize=self.cfg.BLOCKSIZE,
                dtype='float32',
                channels=1,
                device=self.cfg.AUDIO_DEVICE_ID,
                callback=self.audio_processor.audio_callback
            ):
                while self.is_running:
                    try:
                        data = self.audio_processor.q.get(timeout=0.1)
                    except queue.Empty:
                        continue

                    # Resample audio
                    audio_data = data[:, 0]
                    num_output_samples = int(len(audio_data) * resample_ratio)
                    resampled = signal.resample(audio_data, num_output_samples)

                    # Scale to int16 range
                    resampled_scaled = np.clip(resampled * 32767, -32768, 32767)
                    resampled_int16 = np.int16(resampled_scaled)

                    if recognizer.AcceptWaveform(resampled_int16.tobytes()):
                        result = json.loads(recognizer.Result())
                        text = result.get("text", "")
                        last_partial = ""
                        if text:
                            logger.info(f"🗣️  Recognized: {text}")
                            self.events.put(SpeechEvent("transcript", text, True))
                    else:
                        partial = json.loads(recognizer.PartialResult())
                        partial_text = partial.get("partial", "")
                        if partial_text and partial_text != last_partial:
                            last_partial = partial_text
                            self.events.put(SpeechEvent("transcript", partial_text, False))

        except Exception as e:
            logger.error(f"✗ Audio stream error: {e}", exc_info=True)
            self.events.put(SpeechEvent("error", str(e)))
            return
        finally:
            self.is_running = False

        self.events.put(SpeechEvent("end"))

    def stop(self):
        """Stop speech recognition."""
        self.is_running = False
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None
