"""
Student ID scanning.
"""

from .adapter import BrowserCamera, CameraDevice, ScannerAdapter, ScannerState, ScanSession

__all__ = [
    "BrowserCamera",
    "CameraDevice",
    "ScannerAdapter",
    "ScannerState",
    "ScanSession",
]
