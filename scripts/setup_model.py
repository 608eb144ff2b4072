#!/usr/bin/env python3
"""
Install the Vosk speech model where HandsFree banking looks for it.

The archive's top-level folder is unpacked straight into the configured
model path (``VOSK_MODEL_PATH``, default ``./model``), so the assistant
finds it without further setup.
"""

import argparse
import os
import shutil
import sys
import tempfile
import urllib.request
import zipfile
from pathlib import Path

# Add the parent directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from handsfree.utils.config import config

DEFAULT_MODEL = "vosk-model-small-en-us-0.15"
MODEL_BASE_URL = "https://alphacephei.com/vosk/models"
# Files every Vosk model directory carries
REQUIRED_FILES = ("am/final.mdl", "conf/model.conf")


def model_url(model_name: str) -> str:
    return f"{MODEL_BASE_URL}/{model_name}.zip"


def is_installed(target: Path) -> bool:
    return all((target / name).exists() for name in REQUIRED_FILES)


def install_archive(archive: Path, target: Path) -> bool:
    """Unpack a model archive so its single top folder becomes ``target``."""
    with tempfile.TemporaryDirectory() as tmp:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(tmp)

        roots = [p for p in Path(tmp).iterdir() if p.is_dir()]
        if len(roots) != 1 or not is_installed(roots[0]):
            print(f"❌ {archive.name} does not contain a Vosk model")
            return False

        if target.exists():
            shutil.rmtree(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(roots[0]), str(target))

    print(f"✅ Model installed at {target}")
    return True


def fetch_model(model_name: str, target: Path) -> bool:
    url = model_url(model_name)
    print(f"📥 Downloading {url}")
    with tempfile.TemporaryDirectory() as tmp:
        archive = Path(tmp) / f"{model_name}.zip"
        try:
            urllib.request.urlretrieve(url, archive)
        except OSError as e:
            print(f"❌ Download failed: {e}")
            return False
        return install_archive(archive, target)


def verify_model(target: Path) -> bool:
    """Load the installed model the same way the recognizer does."""
    try:
        import vosk

        vosk.Model(str(target))
    except Exception as e:
        print(f"❌ Vosk could not load {target}: {e}")
        return False
    print("✅ Vosk loads the model")
    return True


def print_environment(target: Path) -> None:
    print("\nEnvironment used by `handsfree`:")
    if target.resolve() != Path(config.MODEL_PATH).resolve():
        print(f"   VOSK_MODEL_PATH={target}")
    else:
        print(f"   VOSK_MODEL_PATH={config.MODEL_PATH} (current)")
    print(f"   HANDSFREE_AUDIO_DEVICE={config.AUDIO_DEVICE_ID}")
    print(f"   HANDSFREE_CAMERA_INDEX={config.CAMERA_INDEX}")
    print(f"   HANDSFREE_MIRRORED={'1' if config.MIRRORED else '0'}")


def main(argv=None):
    """Download, install and verify the speech model."""
    parser = argparse.ArgumentParser(description="Install the Vosk model for HandsFree banking")
    parser.add_argument("--model", default=DEFAULT_MODEL,
                        help=f"Model name to download (default: {DEFAULT_MODEL})")
    parser.add_argument("--path", default=config.MODEL_PATH,
                        help=f"Install location (default: {config.MODEL_PATH})")
    parser.add_argument("--force", action="store_true",
                        help="Replace an existing model")
    args = parser.parse_args(argv)

    print("🎤 HandsFree Banking - Model Setup")
    print("=" * 50)

    target = Path(args.path)
    if is_installed(target) and not args.force:
        print(f"✅ Model already present at {target} (use --force to replace)")
    elif not fetch_model(args.model, target):
        print("\n❌ Model setup failed!")
        sys.exit(1)

    ok = verify_model(target)
    print_environment(target)
    if not ok:
        sys.exit(1)
    print("\n🎉 Model setup complete!")


if __name__ == "__main__":
    main()
