"""
Integration tests.

These tests exercise CacheStore against the real filesystem (pytest tmp_path)
and the settings-driven factory. They run slower than unit tests.
"""
