"""
Cart line resolution against the catalog.
"""
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple

from django.utils.translation import gettext_lazy as _

from apps.common.exceptions import ValidationFailed
from ..models import Product, ProductVariant

# Canonical UUID string length; legacy cart ids append the variant id to it
PRODUCT_ID_LENGTH = 36


@dataclass
class CartLine:
    """A cart line bound to authoritative catalog rows"""

    product: Product
    variant: Optional[ProductVariant]
    quantity: int
    client_price: Optional[Decimal] = None
    client_name: str = ''
    properties: dict = field(default_factory=dict)

    @property
    def unit_price(self) -> Decimal:
        if self.variant is not None:
            return self.variant.effective_price
        return self.product.price

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def name(self) -> str:
        return self.client_name or self.product.name

    @property
    def variant_title(self) -> str:
        return self.variant.title if self.variant is not None else ''


class CatalogService:
    """Service for binding client cart items to catalog products"""

    @staticmethod
    def resolve_product_id(raw_id, variant_id=None) -> Tuple[str, Optional[str]]:
        """
        Split a legacy composite id into (product_id, variant_id).

        Old carts stored ``<product uuid>-<variant uuid>`` in the product id
        slot; anything past the first 36 characters is the variant id.
        """
        raw = str(raw_id or '').strip()
        if len(raw) > PRODUCT_ID_LENGTH and '-' in raw:
            suffix = raw[PRODUCT_ID_LENGTH:].lstrip('-')
            return raw[:PRODUCT_ID_LENGTH], variant_id or suffix or None
        return raw, variant_id or None

    @staticmethod
    def _parse_uuid(value):
        try:
            return uuid.UUID(str(value))
        except (TypeError, ValueError):
            return None

    @staticmethod
    def resolve_lines(store, items) -> List[CartLine]:
        """
        Bind every cart item to its product (and variant) in ``store``.

        Unknown or inactive products reject the whole cart.
        """
        lines = []
        for item in items:
            product_id, variant_id = CatalogService.resolve_product_id(
                item.get('product_id'), item.get('variant_id')
            )
            product_uuid = CatalogService._parse_uuid(product_id)
            product = None
            if product_uuid is not None:
                product = Product.objects.filter(store=store, pk=product_uuid, status='active').first()
            if product is None:
                raise ValidationFailed(
                    _('Product "%(name)s" is no longer available') % {'name': item.get('name') or product_id},
                    code='product_not_found',
                )

            variant = None
            if variant_id:
                variant_uuid = CatalogService._parse_uuid(variant_id)
                if variant_uuid is not None:
                    variant = product.variants.filter(pk=variant_uuid, is_active=True).first()
                if variant is None:
                    raise ValidationFailed(
                        _('Option for "%(name)s" is no longer available') % {'name': product.name},
                        code='variant_not_found',
                    )

            quantity = int(item.get('quantity') or 0)
            if quantity < 1:
                raise ValidationFailed(_('Invalid quantity'), code='invalid_quantity')

            client_price = item.get('price')
            lines.append(CartLine(
                product=product,
                variant=variant,
                quantity=quantity,
                client_price=Decimal(str(client_price)) if client_price is not None else None,
                client_name=item.get('name') or '',
                properties=item.get('properties') or {},
            ))
        return lines
