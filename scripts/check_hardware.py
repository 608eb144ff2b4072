#!/usr/bin/env python3
"""
Hardware check for HandsFree banking components.
"""

import os
import sys
from pathlib import Path

# Add the parent directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from handsfree.utils.config import config


def check_camera():
    """Check that a camera can be opened and read."""
    print("📹 Checking camera...")

    try:
        import cv2

        cap = cv2.VideoCapture(config.CAMERA_INDEX)
        if not cap.isOpened():
            print(f"❌ Camera check failed - cannot open index {config.CAMERA_INDEX}")
            return False

        ret, frame = cap.read()
        cap.release()
        if not ret:
            print("❌ Frame capture failed")
            return False

        print(f"✅ Frame capture successful ({frame.shape[1]}x{frame.shape[0]})")
        return True

    except Exception as e:
        print(f"❌ Camera check error: {e}")
        return False


def check_audio():
    """Check the configured microphone."""
    print("🎙️ Checking audio...")

    try:
        import sounddevice as sd

        devices = sd.query_devices()
        print(f"✅ Found {len(devices)} audio devices")

        device_id = config.get_audio_device_id()
        device_info = sd.query_devices(device_id, 'input')
        print(f"✅ Using device {device_id}: {device_info['name']}")
        return True

    except Exception as e:
        print(f"❌ Audio check error: {e}")
        return False


def check_speech_model():
    """Check that the Vosk model loads."""
    print("🗣️ Checking speech model...")

    model_path = config.get_model_path()
    if not os.path.exists(model_path):
        print(f"❌ Model not found at {model_path}")
        print("   Run: handsfree-setup")
        return False

    try:
        import vosk

        vosk.Model(model_path)
        print(f"✅ Vosk model loaded from {model_path}")
        return True

    except Exception as e:
        print(f"❌ Speech model error: {e}")
        return False


def check_hand_tracking():
    """Check that MediaPipe Hands initializes."""
    print("✋ Checking hand tracking...")

    from handsfree.core.hand_tracking import HandTracker

    tracker = HandTracker(config)
    if not tracker.model_ready:
        print("❌ MediaPipe hands could not be initialized")
        return False

    tracker.close()
    print("✅ MediaPipe hands initialized")
    return True


def main():
    """Run all hardware checks."""
    print("🔧 HandsFree Banking - Hardware Check")
    print("=" * 50)

    checks = [
        ("Camera", check_camera),
        ("Audio", check_audio),
        ("Speech Model", check_speech_model),
        ("Hand Tracking", check_hand_tracking),
    ]

    results = {}
    for name, check in checks:
        print(f"\n--- {name} ---")
        try:
            results[name] = check()
        except Exception as e:
            print(f"❌ {name} check crashed: {e}")
            results[name] = False

    print("\n" + "=" * 50)
    print("📊 Results:")
    passed = 0
    for name, result in results.items():
        status = "✅ PASS" if result else "❌ FAIL"
        print(f"   {name}: {status}")
        if result:
            passed += 1

    print(f"\n🎯 Overall: {passed}/{len(checks)} checks passed")
    if passed == len(checks):
        print("🎉 Everything is ready.")
        sys.exit(0)
    print("⚠️  Some checks failed. Voice or gesture input will run degraded.")
    sys.exit(1)


if __name__ == "__main__":
    main()
