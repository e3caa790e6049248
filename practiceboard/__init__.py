"""
Practiceboard assessment engine.

Assignment, lifecycle tracking, score attachment and synchronization of
clinical assessment instances for a therapist practice dashboard.
"""

__version__ = "0.1.0"
