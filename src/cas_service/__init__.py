"""
Content-addressable object store service.

Maps (namespace, key) pairs to sharded files under a local storage root
and serves them over HTTP.
"""

__version__ = "0.1.0"
