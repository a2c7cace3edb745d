"""
Inventory guard: availability pre-check, floor-clamped decrement and
low-stock detection.
"""
import logging
from collections import OrderedDict
from typing import List, Optional

from django.conf import settings
from django.db import transaction

from apps.common.db import clamped_decrement
from apps.common.exceptions import InsufficientInventory
from ..models import InventoryLog, Product, ProductVariant, StockAlert

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for stock checks and stock movements"""

    @staticmethod
    def stock_target(product, variant=None):
        """
        Return the (model, pk, current inventory) that holds stock for a line,
        or None when the line is exempt from inventory tracking.
        """
        if not product.track_inventory:
            return None
        if variant is not None and variant.inventory is not None:
            return ProductVariant, variant.pk, variant.inventory
        if product.inventory is None:
            return None
        return Product, product.pk, product.inventory

    @staticmethod
    def check_availability(lines) -> None:
        """
        Reject the cart if any tracked item is requested beyond its stock.

        Quantities for the same product/variant across lines are summed.
        This is advisory; it does not reserve stock.
        """
        requested = OrderedDict()
        for line in lines:
            target = InventoryService.stock_target(line.product, line.variant)
            if target is None:
                continue
            model, pk, available = target
            key = (model, pk)
            if key in requested:
                requested[key]['quantity'] += line.quantity
            else:
                requested[key] = {'quantity': line.quantity, 'available': available, 'line': line}

        for entry in requested.values():
            if entry['quantity'] > entry['available']:
                line = entry['line']
                name = line.product.name
                if line.variant_title:
                    name = f"{name} ({line.variant_title})"
                raise InsufficientInventory(name, max(entry['available'], 0), entry['quantity'])

    @staticmethod
    @transaction.atomic
    def decrement(product, variant, quantity, order=None) -> Optional[InventoryLog]:
        """
        Subtract ``quantity`` from tracked stock, clamped at zero.

        Not a second availability check: concurrent checkouts may both pass
        the pre-check, in which case the later one stops at zero.
        """
        target = InventoryService.stock_target(product, variant)
        if target is None:
            return None
        model, pk, _ = target

        queryset = model.objects.select_for_update().filter(pk=pk, inventory__isnull=False)
        previous = queryset.values_list('inventory', flat=True).first()
        if previous is None:
            return None

        clamped_decrement(queryset, 'inventory', quantity)
        new_quantity = queryset.values_list('inventory', flat=True).get()

        return InventoryLog.objects.create(
            store_id=product.store_id,
            product=product,
            variant=variant if model is ProductVariant else None,
            order=order,
            previous_quantity=previous,
            new_quantity=new_quantity,
            change_amount=new_quantity - previous,
            reason='order',
        )

    @staticmethod
    def current_level(product, variant=None) -> Optional[int]:
        if variant is not None:
            level = ProductVariant.objects.filter(pk=variant.pk).values_list('inventory', flat=True).first()
            if level is not None:
                return level
        if not product.track_inventory:
            return None
        return Product.objects.filter(pk=product.pk).values_list('inventory', flat=True).first()

    @staticmethod
    def check_low_stock(order) -> List[StockAlert]:
        """Record alerts for order lines whose stock is now low or depleted"""
        threshold = settings.LOW_STOCK_THRESHOLD
        alerts = []
        for item in order.items.select_related('product', 'variant'):
            if item.product is None or not item.product.track_inventory:
                continue
            level = InventoryService.current_level(item.product, item.variant)
            if level is None:
                continue
            if level <= 0:
                alert_type = 'out_of_stock'
            elif level <= threshold:
                alert_type = 'low_stock'
            else:
                continue

            logger.warning(
                f"{alert_type}: store={order.store_id} product={item.product_id} "
                f"variant={item.variant_id} inventory={level}"
            )
            alerts.append(StockAlert.objects.create(
                store_id=order.store_id,
                product=item.product,
                variant=item.variant,
                order=order,
                alert_type=alert_type,
                inventory=level,
                threshold=threshold,
            ))
        return alerts
