"""
Visibility rules.

Administrators see every condominium. Everyone else sees only the
condominiums they own, and anything else behaves as if it did not exist.
"""

from condo_ledger.models.ledger import Condominium, User
from condo_ledger.services.storage import LedgerStore


def can_access(identity: User, condominium: Condominium) -> bool:
    if identity.is_admin:
        return True
    return condominium.owner_user_id == identity.id


def visible_condominiums(store: LedgerStore, identity: User) -> list[Condominium]:
    """Condominiums `identity` may see, in storage order."""
    if identity.is_admin:
        return store.list_condominiums()
    return store.list_condominiums(owner_user_id=identity.id)
