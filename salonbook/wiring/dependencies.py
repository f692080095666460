from functools import lru_cache
import logging

from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.application.ports.identity import IdentityPort
from salonbook.application.ports.payment_gateway import PaymentGatewayPort
from salonbook.application.ports.promo_registry import PromoRegistryPort
from salonbook.application.ports.salon_catalog import SalonCatalogPort
from salonbook.application.use_cases.admin import AdminUseCase
from salonbook.application.use_cases.availability import AvailabilityUseCase
from salonbook.application.use_cases.earnings import EarningsUseCase
from salonbook.application.use_cases.lifecycle import BookingLifecycleUseCase
from salonbook.application.use_cases.recharge import WalletRechargeUseCase
from salonbook.application.use_cases.salon_directory import SalonDirectoryUseCase
from salonbook.application.use_cases.settlement import SettlementUseCase
from salonbook.application.use_cases.wallet import WalletService
from salonbook.core.config import settings
from salonbook.infrastructure.identity.document_identity import DocumentIdentity
from salonbook.infrastructure.payments.mock_gateway import MockPaymentGateway
from salonbook.infrastructure.payments.razorpay_client import RazorpayGateway
from salonbook.infrastructure.promotions.promo_registry import StaticPromoRegistry
from salonbook.infrastructure.store.json_store import JsonDocumentStore
from salonbook.infrastructure.store.memory_store import MemoryDocumentStore
from salonbook.infrastructure.store.salon_catalog_store import SalonCatalogStore


_document_store: DocumentStorePort | None = None
_payment_gateway: PaymentGatewayPort | None = None


def get_document_store() -> DocumentStorePort:
    global _document_store
    if _document_store is None:
        if settings.STORE_PROVIDER.lower() == "json":
            _document_store = JsonDocumentStore(data_dir=settings.STORE_DATA_DIR)
        else:
            _document_store = MemoryDocumentStore()
    return _document_store


def get_payment_gateway() -> PaymentGatewayPort:
    global _payment_gateway
    if _payment_gateway is None:
        logger = logging.getLogger(__name__)
        has_keys = bool(settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET)
        if not has_keys:
            if settings.ENV.lower() not in {"dev", "local", "test"}:
                raise ValueError("RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required outside dev")
            logger.info("Using MockPaymentGateway (keys missing, ENV=%s)", settings.ENV)
            _payment_gateway = MockPaymentGateway()
        else:
            logger.info("Using RazorpayGateway")
            _payment_gateway = RazorpayGateway()
    return _payment_gateway


@lru_cache
def get_promo_registry() -> PromoRegistryPort:
    return StaticPromoRegistry()


def get_identity() -> IdentityPort:
    return DocumentIdentity(store=get_document_store())


def get_salon_catalog() -> SalonCatalogPort:
    return SalonCatalogStore(store=get_document_store())


def get_wallet_service() -> WalletService:
    return WalletService(store=get_document_store())


def get_settlement_use_case() -> SettlementUseCase:
    return SettlementUseCase(
        store=get_document_store(),
        gateway=get_payment_gateway(),
        wallet=get_wallet_service(),
        promos=get_promo_registry(),
        currency=settings.CURRENCY,
        enforce_promo_expiry=settings.PROMO_ENFORCE_EXPIRY,
    )


def get_lifecycle_use_case() -> BookingLifecycleUseCase:
    return BookingLifecycleUseCase(
        store=get_document_store(),
        gateway=get_payment_gateway(),
        wallet=get_wallet_service(),
    )


def get_availability_use_case() -> AvailabilityUseCase:
    return AvailabilityUseCase(
        store=get_document_store(),
        open_hour=settings.SALON_OPEN_HOUR,
        close_hour=settings.SALON_CLOSE_HOUR,
        interval_minutes=settings.SLOT_INTERVAL_MINUTES,
    )


def get_earnings_use_case() -> EarningsUseCase:
    return EarningsUseCase(store=get_document_store(), commission_rate=settings.COMMISSION_RATE)


def get_recharge_use_case() -> WalletRechargeUseCase:
    return WalletRechargeUseCase(
        store=get_document_store(),
        gateway=get_payment_gateway(),
        wallet=get_wallet_service(),
        currency=settings.CURRENCY,
    )


def get_salon_directory_use_case() -> SalonDirectoryUseCase:
    return SalonDirectoryUseCase(store=get_document_store())


def get_admin_use_case() -> AdminUseCase:
    return AdminUseCase(store=get_document_store())
