"""
Appointments Application Layer

Ports, DTOs and the services that orchestrate the domain.
"""
