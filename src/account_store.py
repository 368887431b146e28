from typing import Dict, Optional

from models import ClientAccount


class AccountStore:
    """
    Client accounts, created lazily on first reference.
    Only the transaction processor mutates the accounts it hands out.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts ordered by client id (for final output)."""
        return {client_id: self._accounts[client_id] for client_id in sorted(self._accounts)}
