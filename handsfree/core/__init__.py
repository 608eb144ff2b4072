"""
Core functionality for HandsFree banking.

This module contains the recognition components:
- Landmark feature extraction and gesture classification
- Temporal debouncing of gesture candidates
- Voice wake-phrase and keyword matching
- Command dispatch
- Hand tracking, speech recognition and the camera loop adapters
"""

__all__ = []
