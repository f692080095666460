from datetime import date
from decimal import Decimal

import pytest

from salonbook.application.exceptions import InvalidPromoCodeError
from salonbook.application.use_cases.promotion import PromotionEngine, compute_discount
from salonbook.domain.entities.promo import DiscountKind, PromoCode
from salonbook.infrastructure.promotions.promo_registry import StaticPromoRegistry


def test_percentage_promo_discount():
    engine = PromotionEngine(StaticPromoRegistry())

    assert engine.apply("FIRST20", Decimal("499")) == Decimal("99.80")
    assert engine.is_applied
    assert engine.applied.code == "FIRST20"


def test_lowercase_code_matches():
    engine = PromotionEngine(StaticPromoRegistry())

    assert engine.apply("save100", Decimal("500")) == Decimal("100.00")


def test_unknown_code_is_rejected_and_state_untouched():
    engine = PromotionEngine(StaticPromoRegistry())

    with pytest.raises(InvalidPromoCodeError):
        engine.apply("BADCODE", Decimal("500"))

    assert engine.discount == 0
    assert not engine.is_applied


def test_unknown_code_keeps_previous_promo():
    engine = PromotionEngine(StaticPromoRegistry())
    engine.apply("WEEKEND", Decimal("200"))

    with pytest.raises(InvalidPromoCodeError):
        engine.apply("NOPE", Decimal("200"))

    assert engine.applied.code == "WEEKEND"
    assert engine.discount == Decimal("30.00")


def test_remove_then_apply_gives_same_discount():
    engine = PromotionEngine(StaticPromoRegistry())
    first = engine.apply("FIRST20", Decimal("750"))

    engine.remove()
    assert not engine.is_applied

    assert engine.apply("FIRST20", Decimal("750")) == first


def test_flat_discount_never_exceeds_subtotal():
    promo = PromoCode(code="SAVE100", magnitude=Decimal("100"), kind=DiscountKind.FLAT)

    assert compute_discount(promo, Decimal("60")) == Decimal("60.00")
    assert compute_discount(promo, Decimal("0")) == 0


def test_expiry_ignored_by_default():
    engine = PromotionEngine(StaticPromoRegistry())

    assert engine.apply("PREMIUM15", Decimal("100"), today=date(2025, 1, 1)) == Decimal("15.00")


def test_expiry_enforced_when_enabled():
    engine = PromotionEngine(StaticPromoRegistry(), enforce_expiry=True)

    with pytest.raises(InvalidPromoCodeError):
        engine.apply("PREMIUM15", Decimal("100"), today=date(2025, 1, 1))

    assert engine.apply("PREMIUM15", Decimal("100"), today=date(2024, 3, 31)) == Decimal("15.00")
