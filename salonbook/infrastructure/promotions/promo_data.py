from datetime import date
from decimal import Decimal

from salonbook.domain.entities.promo import DiscountKind, PromoCode

PROMO_CODES: dict[str, PromoCode] = {
    "FIRST20": PromoCode(
        code="FIRST20",
        magnitude=Decimal("20"),
        kind=DiscountKind.PERCENTAGE,
        description="20% off on first booking",
    ),
    "SAVE100": PromoCode(
        code="SAVE100",
        magnitude=Decimal("100"),
        kind=DiscountKind.FLAT,
        description="₹100 off on bookings above ₹500",
    ),
    "WEEKEND": PromoCode(
        code="WEEKEND",
        magnitude=Decimal("15"),
        kind=DiscountKind.PERCENTAGE,
        description="15% off on weekend bookings",
    ),
    "PREMIUM15": PromoCode(
        code="PREMIUM15",
        magnitude=Decimal("15"),
        kind=DiscountKind.PERCENTAGE,
        description="15% off for premium members",
        valid_until=date(2024, 3, 31),
    ),
}
