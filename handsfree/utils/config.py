"""
Configuration management for HandsFree banking.
"""

import os
from typing import Dict


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration settings for the HandsFree recognition core.

    Values are read once when the instance is created. Nothing in the core
    mutates them afterwards.
    """

    def __init__(self):
        # Paths
        self.MODEL_PATH = os.getenv("VOSK_MODEL_PATH", "./model")

        # Audio settings
        self.AUDIO_DEVICE_ID = int(os.getenv("HANDSFREE_AUDIO_DEVICE", "1"))
        self.MIC_SAMPLERATE = 44100
        self.VOSK_SAMPLERATE = 16000
        self.BLOCKSIZE = 11025

        # Camera settings
        self.CAMERA_INDEX = int(os.getenv("HANDSFREE_CAMERA_INDEX", "0"))
        self.FRAME_WIDTH = 640
        self.FRAME_HEIGHT = 480
        # Selfie view: frames are flipped horizontally before tracking
        self.MIRRORED = _env_flag("HANDSFREE_MIRRORED", True)
        self.DEFAULT_HANDEDNESS = "Right"

        # MediaPipe settings
        self.MAX_NUM_HANDS = 1
        self.MIN_DETECTION_CONFIDENCE = 0.55
        self.MIN_TRACKING_CONFIDENCE = 0.55

        # Gesture confidences per classifier rule
        self.GESTURE_CONFIDENCE: Dict[str, float] = {
            "thumbs_up": 0.92,
            "closed_fist": 0.9,
            "open_palm": 0.9,
            "one_finger": 0.8,
            "two_fingers": 0.8,
            "three_fingers": 0.8,
            "four_fingers": 0.8,
        }

        # Debouncer thresholds
        self.DETECT_THRESHOLD = 0.7
        self.DISPATCH_THRESHOLD = 0.85
        self.DECAY_STEP = 0.1
        self.RELEASE_THRESHOLD = 0.3
        self.CONFIDENCE_RISE_STEP = 0.05

        # Voice session
        self.WAKE_WINDOW_S = 15.0
        self.LISTEN_RESTART_DELAY_S = 0.1
        self.LISTEN_ERROR_DELAY_S = 1.0
        self.LISTEN_MAX_BACKOFF_S = 8.0
        self.LISTEN_MAX_RETRIES = 5

        # Dispatcher settle delays (seconds)
        self.GESTURE_SETTLE_S = 1.0
        self.VOICE_SETTLE_S = 0.8

        # Feedback
        self.RESPONSE_CLEAR_S = 5.0

        self.LOG_LEVEL = os.getenv("HANDSFREE_LOG_LEVEL", "INFO")

    def get_model_path(self) -> str:
        """Get the path to the Vosk model directory."""
        return self.MODEL_PATH

    def get_audio_device_id(self) -> int:
        """Get the audio device ID."""
        return self.AUDIO_DEVICE_ID

    def get_camera_settings(self) -> tuple:
        """Get camera index and frame size."""
        return self.CAMERA_INDEX, self.FRAME_WIDTH, self.FRAME_HEIGHT


# Global config instance
config = Config()
