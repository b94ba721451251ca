"""
Storage Package

Read-only access to the data the account service needs from outside:
- The tracked account address
- The user's local currency preference

The account service only depends on the AccountStore / PreferencesStore
interfaces, so these can be swapped for a database or keychain without
touching the service.
"""

from storage.stores import (
    InMemoryAccountStore,
    InMemoryPreferences,
    SettingsAccountStore,
    SettingsPreferences,
)

__all__ = [
    "InMemoryAccountStore",
    "InMemoryPreferences",
    "SettingsAccountStore",
    "SettingsPreferences",
]
