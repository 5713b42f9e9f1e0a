"""Appointment scheduling and availability engine for veterinary clinics."""

__version__ = "0.1.0"
