"""Endpoint modules for the CAN health API.

Internal to canhealth and may change at any time.
"""
