"""
Hospital Scheduling System

Appointment scheduling and authorization engine for a hospital: doctors,
patients and appointments held in an in-memory directory, role-scoped
sessions, emergency-duty cascade cancellation and an append-only audit trail.
"""

__version__ = "1.0.0"
