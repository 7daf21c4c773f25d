"""
Tests for package arbiter
"""
