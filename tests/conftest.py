from __future__ import annotations

from datetime import date

import pytest

from salonbook.application.use_cases.settlement import SettlementUseCase
from salonbook.application.use_cases.wallet import WalletService
from salonbook.domain.entities.service_item import ServiceItem, StaffMember
from salonbook.domain.entities.session import Role, Session
from salonbook.domain.entities.settlement import BookingRequest
from salonbook.infrastructure.payments.mock_gateway import MockPaymentGateway
from salonbook.infrastructure.promotions.promo_registry import StaticPromoRegistry
from salonbook.infrastructure.store.memory_store import MemoryDocumentStore

HAIRCUT = {"id": "svc_cut", "name": "Haircut", "price": 599, "discountedPrice": 499, "duration": 45, "category": "Hair"}
MANICURE = {"id": "svc_mani", "name": "Manicure", "price": 300, "duration": 30, "category": "Nails"}
FACIAL = {"id": "svc_facial", "name": "Facial", "price": 500, "duration": 60, "category": "Skin"}

PRIYA = {"id": "staff_priya", "name": "Priya", "designation": "Senior Stylist", "specializations": ["hair", "nails"]}
RAHUL = {"id": "staff_rahul", "name": "Rahul", "designation": "Stylist", "specializations": ["hair"]}


def seed_documents() -> dict[str, list[dict]]:
    return {
        "users": [
            {"id": "cust_1", "role": "user", "email": "asha@example.com", "wallet": {"balance": "500.00", "currency": "INR", "transactions": []}},
            {"id": "cust_2", "role": "user", "email": "ravi@example.com"},
            {"id": "admin_1", "role": "admin", "email": "ops@example.com"},
            {"id": "cust_off", "role": "user", "isActive": False},
        ],
        "salonOwners": [
            {"id": "owner_1", "role": "salon_owner", "email": "owner@example.com"},
            {"id": "owner_2", "role": "salon_owner", "email": "other@example.com"},
        ],
        "salons": [
            {
                "id": "salon_1",
                "name": "Glow Studio",
                "ownerId": "owner_1",
                "services": [HAIRCUT, MANICURE, FACIAL],
                "staff": [PRIYA, RAHUL],
            },
        ],
    }


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore(seed=seed_documents())


@pytest.fixture
def gateway() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest.fixture
def wallet(store) -> WalletService:
    return WalletService(store=store)


@pytest.fixture
def settlement(store, gateway, wallet) -> SettlementUseCase:
    return SettlementUseCase(store=store, gateway=gateway, wallet=wallet, promos=StaticPromoRegistry())


@pytest.fixture
def customer() -> Session:
    return Session(user_id="cust_1", role=Role.USER)


@pytest.fixture
def other_customer() -> Session:
    return Session(user_id="cust_2", role=Role.USER)


@pytest.fixture
def owner() -> Session:
    return Session(user_id="owner_1", role=Role.SALON_OWNER)


@pytest.fixture
def other_owner() -> Session:
    return Session(user_id="owner_2", role=Role.SALON_OWNER)


@pytest.fixture
def admin() -> Session:
    return Session(user_id="admin_1", role=Role.ADMIN)


@pytest.fixture
def haircut() -> ServiceItem:
    return ServiceItem.from_document(HAIRCUT)


@pytest.fixture
def manicure() -> ServiceItem:
    return ServiceItem.from_document(MANICURE)


@pytest.fixture
def facial() -> ServiceItem:
    return ServiceItem.from_document(FACIAL)


@pytest.fixture
def priya() -> StaffMember:
    return StaffMember.from_document(PRIYA)


@pytest.fixture
def rahul() -> StaffMember:
    return StaffMember.from_document(RAHUL)


@pytest.fixture
def make_request():
    def _make(*services: ServiceItem, staff_id: str | None = "staff_priya", time_slot: str = "10:00") -> BookingRequest:
        return BookingRequest(
            salon_id="salon_1",
            services=tuple(services),
            staff_id=staff_id,
            appointment_date=date(2024, 6, 14),
            time_slot=time_slot,
        )

    return _make
