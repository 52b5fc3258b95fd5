"""Shared fixtures and payload builders for the test suite."""
