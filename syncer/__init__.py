"""
Syncer: one-directional mirroring between local directories and S3.

Builds an in-memory manifest of a source and a destination location,
reconciles the two once, then keeps the destination current by
replaying filesystem change notifications from the source.
"""

__version__ = "0.3.0"
