"""
Personal Data Vault - security core
Copyright (c) 2025

NOTICE:
This package keeps sessions, login throttling state, encrypted notes and the
security event log on the local device only. Nothing is transmitted off the
device by this package.
"""

from pdvault.service import SecurityService

__all__ = ["SecurityService"]
