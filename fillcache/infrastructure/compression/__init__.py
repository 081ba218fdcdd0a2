"""
Compression Module

Codecs applied between produced payloads and stored bytes.
"""

from .gzip_codec import GzipCodec

__all__ = [
    "GzipCodec",
]
