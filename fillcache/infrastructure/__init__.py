"""
Infrastructure Module

Concrete storage, compression and the cache store built on them.
"""
