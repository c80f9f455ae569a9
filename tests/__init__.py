"""
Test suite for the clinic scheduler.

Unit tests live in tests/unit; tests/e2e runs against a live server.
"""
