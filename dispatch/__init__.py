"""Dispatch application for the PulseRide backend.

This package contains models, services, serializers, views and route
registrations implementing the API contract expected by the ambulance
booking front end.
"""
