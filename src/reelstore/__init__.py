"""reelstore: chunked media blob store with range-addressable streaming."""

__version__ = "0.1.0"
