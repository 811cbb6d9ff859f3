"""Booking, scheduling and messaging core for a mobile car-detailing business."""

__version__ = "1.0.0"
