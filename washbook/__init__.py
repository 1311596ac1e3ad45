"""
washbook - scheduling core for car-wash booking: working-hours windows,
time slots and reservation change history.
"""

__version__ = "0.1.0"
