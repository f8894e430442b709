"""
Subcommand handlers for Syncer.
"""
from .base_handler import ModeHandler
from .sync_handler import SyncHandler
from .list_handler import ListHandler

__all__ = ['ModeHandler', 'SyncHandler', 'ListHandler']
