"""
HandsFree Banking - gesture and voice command recognition.

An accessibility-oriented command interface featuring:
- Hand landmark feature extraction and rule-based gesture classification
- Debounced, confidence-gated command dispatch
- Wake-phrase voice commands with a timed awake window
"""

__version__ = "1.0.0"
__author__ = "HandsFree Team"

from . import core
from . import utils

__all__ = ["core", "utils"]
