"""
Pricing engine.

Recomputes an order's money from catalog prices and applies discounts in a
fixed precedence: automatic discounts on the catalog subtotal, then a
single coupon or gift card on what remains, then store credit. Client
figures are never used.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from apps.discounts.models import Discount, GiftCard
from apps.discounts.services import AutomaticDiscountService, CouponService, GiftCardService

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
CENT = Decimal('0.01')


def money(value) -> Decimal:
    return Decimal(str(value if value is not None else 0)).quantize(CENT)


@dataclass
class PriceBreakdown:
    subtotal: Decimal
    shipping: Decimal = ZERO
    auto_discount_total: Decimal = ZERO
    auto_discounts: List[dict] = field(default_factory=list)
    coupon: Optional[Discount] = None
    coupon_discount: Decimal = ZERO
    shipping_discount: Decimal = ZERO
    gift_card: Optional[GiftCard] = None
    gift_card_amount: Decimal = ZERO
    credit_used: Decimal = ZERO

    @property
    def after_auto_discounts(self) -> Decimal:
        return max(self.subtotal - self.auto_discount_total, ZERO)

    @property
    def discount_total(self) -> Decimal:
        return self.auto_discount_total + self.coupon_discount + self.gift_card_amount

    @property
    def shipping_charged(self) -> Decimal:
        return max(self.shipping - self.shipping_discount, ZERO)

    @property
    def payable_before_credit(self) -> Decimal:
        return max(self.subtotal - self.discount_total + self.shipping_charged, ZERO)

    @property
    def total(self) -> Decimal:
        return max(self.payable_before_credit - self.credit_used, ZERO)

    @property
    def code(self) -> str:
        if self.coupon is not None:
            return self.coupon.code
        if self.gift_card is not None:
            return self.gift_card.code
        return ''

    def drop_coupon(self):
        self.coupon = None
        self.coupon_discount = ZERO
        self.shipping_discount = ZERO

    def drop_gift_card(self):
        self.gift_card = None
        self.gift_card_amount = ZERO

    def drop_credit(self):
        self.credit_used = ZERO

    def details(self) -> List[dict]:
        """JSON-safe itemized breakdown, in application order"""
        rows = [
            dict(entry, amount=str(entry['amount']))
            for entry in self.auto_discounts
        ]
        if self.coupon is not None:
            rows.append({
                'type': 'coupon',
                'id': self.coupon.id,
                'code': self.coupon.code,
                'discount_type': self.coupon.discount_type,
                'value': str(self.coupon.value),
                'amount': str(self.coupon_discount),
                'shipping_discount': str(self.shipping_discount),
            })
        if self.gift_card is not None:
            rows.append({
                'type': 'gift_card',
                'id': self.gift_card.id,
                'code': self.gift_card.code,
                'amount': str(self.gift_card_amount),
            })
        return rows


class PricingService:
    """Server-side price calculation for checkout"""

    @staticmethod
    def calculate(store, lines, coupon_code=None, shipping=ZERO, now=None) -> PriceBreakdown:
        """
        Price ``lines`` (bound CartLine objects) for ``store``.

        Discounts that do not apply contribute zero rather than failing.
        Credit is applied separately once the customer is known.
        """
        subtotal = money(sum((line.line_total for line in lines), ZERO))
        breakdown = PriceBreakdown(subtotal=subtotal, shipping=max(money(shipping), ZERO))

        total_quantity = sum(line.quantity for line in lines)
        auto_total, applied = AutomaticDiscountService.apply(store, subtotal, total_quantity, now=now)
        breakdown.auto_discount_total = money(auto_total)
        breakdown.auto_discounts = applied

        if coupon_code:
            PricingService.apply_code(breakdown, store, coupon_code, now=now)

        return breakdown

    @staticmethod
    def apply_code(breakdown, store, code, now=None):
        """
        Apply a coupon, or failing that a gift card, to the post-automatic
        remainder. Coupon minimums are checked against the catalog subtotal.
        """
        remaining = breakdown.after_auto_discounts

        if Discount.objects.filter(store=store, code=CouponService.normalize_code(code)).exists():
            coupon = CouponService.find_valid(store, code, breakdown.subtotal, now=now)
            if coupon is None:
                return breakdown
            amount, shipping_discount = CouponService.calculate(coupon, remaining, breakdown.shipping)
            breakdown.coupon = coupon
            breakdown.coupon_discount = money(amount)
            breakdown.shipping_discount = money(shipping_discount)
            return breakdown

        card = GiftCardService.find_redeemable(store, code)
        if card is not None:
            breakdown.gift_card = card
            breakdown.gift_card_amount = money(min(card.current_balance, remaining))
        else:
            logger.info(f"Unknown discount code {code!r} for store {store.id}")
        return breakdown

    @staticmethod
    def apply_credit(breakdown, requested, customer) -> PriceBreakdown:
        """Clamp requested store credit to the customer's balance and the amount payable"""
        requested = max(money(requested), ZERO)
        if requested <= 0 or customer is None:
            breakdown.credit_used = ZERO
            return breakdown
        breakdown.credit_used = min(requested, money(customer.credit_balance), breakdown.payable_before_credit)
        return breakdown
