"""
Appointments bounded context: booking, conflict detection and slot proposals.
"""
