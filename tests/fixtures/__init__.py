"""Shared test fixtures for convselect tests."""
