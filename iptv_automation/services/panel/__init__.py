"""HTTP access to the panel: authenticated sessions and subscriber lookups"""

from .lookup_client import LookupClient
from .session_manager import SessionManager

__all__ = ['LookupClient', 'SessionManager']
