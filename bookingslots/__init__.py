"""
Appointment booking core: roster windows, booking validation and free slots.
"""

__version__ = "0.1.0"
