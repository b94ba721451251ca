"""
Account & Preference Stores

Concrete AccountStore / PreferencesStore implementations.

    - SettingsAccountStore / SettingsPreferences: read from core.config settings
      (ACCOUNT_ADDRESS and LOCAL_CURRENCY in .env)
    - InMemoryAccountStore / InMemoryPreferences: plain values, for embedding
      the service in another program and for tests
"""

from typing import Optional

from core.config import Settings, settings
from core.interfaces import AccountStore, PreferencesStore


class SettingsAccountStore(AccountStore):
    """Account address taken from the ACCOUNT_ADDRESS setting."""

    def __init__(self, config: Optional[Settings] = None):
        self._config = config or settings

    def get_address(self) -> Optional[str]:
        address = self._config.account_address.strip()
        return address or None


class SettingsPreferences(PreferencesStore):
    """Local currency taken from the LOCAL_CURRENCY setting."""

    def __init__(self, config: Optional[Settings] = None):
        self._config = config or settings

    def get_local_currency(self) -> str:
        return self._config.local_currency.upper()


class InMemoryAccountStore(AccountStore):
    def __init__(self, address: Optional[str] = None):
        self.address = address

    def get_address(self) -> Optional[str]:
        return self.address


class InMemoryPreferences(PreferencesStore):
    def __init__(self, local_currency: str = "USD"):
        self.local_currency = local_currency

    def get_local_currency(self) -> str:
        return self.local_currency
