from __future__ import annotations

import logging
from datetime import datetime, timezone

from salonbook.application.exceptions import NotAuthorizedError, NotFoundError
from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.domain.entities.account import Account
from salonbook.domain.entities.salon import ApprovalStatus, Salon
from salonbook.domain.entities.session import Session

SALONS = "salons"
ACCOUNT_COLLECTIONS = ("users", "salonOwners")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AdminUseCase:
    """Salon approval and account moderation. Every operation needs an admin session."""

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def list_salons(self, session: Session, status: ApprovalStatus | None = None) -> list[Salon]:
        self._require_admin(session)
        salons = [Salon.from_document(doc) for doc in self._store.get_all(SALONS)]
        if status is not None:
            salons = [s for s in salons if s.approval_status is status]
        return sorted(salons, key=lambda s: s.name.lower())

    def set_salon_approval(self, session: Session, salon_id: str, status: ApprovalStatus) -> Salon:
        self._require_admin(session)
        if self._store.get(SALONS, salon_id) is None:
            raise NotFoundError(f"Salon {salon_id} not found")
        stored = self._store.update(SALONS, salon_id, {"approvalStatus": status.value, "updatedAt": _now()})
        self._logger.info(
            "Salon approval changed",
            extra={"user_id": session.user_id, "status": status.value, "reason": f"salon={salon_id}"},
        )
        return Salon.from_document(stored)

    def delete_salon(self, session: Session, salon_id: str) -> None:
        self._require_admin(session)
        if not self._store.delete(SALONS, salon_id):
            raise NotFoundError(f"Salon {salon_id} not found")
        self._logger.info("Salon deleted", extra={"user_id": session.user_id, "reason": f"salon={salon_id}"})

    def list_accounts(self, session: Session) -> list[Account]:
        self._require_admin(session)
        return [
            Account.from_document(collection, doc)
            for collection in ACCOUNT_COLLECTIONS
            for doc in self._store.get_all(collection)
        ]

    def set_account_active(self, session: Session, user_id: str, active: bool) -> Account:
        self._require_admin(session)
        if user_id == session.user_id and not active:
            raise NotAuthorizedError("Admins cannot deactivate their own account")
        account = self._find_account(user_id)
        stored = self._store.update(account.collection, user_id, {"isActive": active, "updatedAt": _now()})
        self._logger.info(
            "Account activation changed",
            extra={"user_id": user_id, "status": "active" if active else "inactive"},
        )
        return Account.from_document(account.collection, stored)

    def delete_account(self, session: Session, user_id: str) -> None:
        self._require_admin(session)
        if user_id == session.user_id:
            raise NotAuthorizedError("Admins cannot delete their own account")
        account = self._find_account(user_id)
        self._store.delete(account.collection, user_id)
        self._logger.info("Account deleted", extra={"user_id": user_id, "reason": f"by={session.user_id}"})

    def _find_account(self, user_id: str) -> Account:
        for collection in ACCOUNT_COLLECTIONS:
            doc = self._store.get(collection, user_id)
            if doc is not None:
                return Account.from_document(collection, doc)
        raise NotFoundError(f"Account {user_id} not found")

    @staticmethod
    def _require_admin(session: Session) -> None:
        if not session.is_admin:
            raise NotAuthorizedError("Admin access required")
