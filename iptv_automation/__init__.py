"""IPTV panel automation: panel sessions, subscriber lookup and UI provisioning"""

__version__ = "1.0.0"
