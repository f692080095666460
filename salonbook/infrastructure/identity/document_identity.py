from __future__ import annotations

import logging

from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.application.ports.identity import IdentityPort
from salonbook.domain.entities.session import Role, Session


class DocumentIdentity(IdentityPort):
    """
    Resolves a bearer token to a principal by looking the uid up in the
    `users` collection first and `salonOwners` second.

    The token is taken to be the uid issued by the upstream identity
    provider; verifying it is the provider's job.
    """

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def resolve(self, token: str) -> Session | None:
        uid = (token or "").strip()
        if not uid:
            return None

        doc = self._store.get("users", uid) or self._store.get("salonOwners", uid)
        if doc is None or not doc.get("isActive", True):
            return None

        try:
            role = Role(doc.get("role", Role.USER.value))
        except ValueError:
            self._logger.warning("Unknown role claim", extra={"user_id": uid, "reason": doc.get("role")})
            return None
        return Session(user_id=uid, role=role, email=doc.get("email"))
