"""
Checkout service - turns a buyer's cart into an order.

The row store commits every write on its own, so the three writes of a
checkout (order, order items, cart clear) run as a saga: when a later step
fails, the rows written by the earlier steps are deleted again and the
cart is left as it was.
"""
import logging
import threading
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from app.exceptions import (
    CheckoutInProgressError, EmptyCartError, NotFoundError, PartialCheckoutError,
    RemoteReadError, RemoteWriteError, UnauthorizedError, ValidationError,
)
from app.models import Order, OrderStatus, Profile
from app.services import cart_service
from app.services.row_store import RowStore

logger = logging.getLogger(__name__)

DEFAULT_MARGIN_RATE = Decimal('0.20')
CENT = Decimal('0.01')


class InFlightRegistry:
    """Buyer ids with a checkout currently running."""

    def __init__(self):
        self._lock = threading.Lock()
        self._buyers = set()

    @contextmanager
    def acquire(self, buyer_id: str):
        with self._lock:
            if buyer_id in self._buyers:
                raise CheckoutInProgressError(buyer_id)
            self._buyers.add(buyer_id)
        try:
            yield
        finally:
            with self._lock:
                self._buyers.discard(buyer_id)

    def is_in_flight(self, buyer_id: str) -> bool:
        with self._lock:
            return buyer_id in self._buyers


in_flight = InFlightRegistry()


def normalize_margin_rate(rate) -> Decimal:
    """Coerce a margin rate to Decimal and check it lies in [0, 1]."""
    try:
        value = Decimal(str(rate))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f'Taux de marge invalide : {rate}')
    if not value.is_finite() or value < 0 or value > 1:
        raise ValidationError(f'Taux de marge invalide : {rate}')
    return value


def resolve_margin_rate(store: RowStore, campaign_id: Optional[str],
                        default_rate=DEFAULT_MARGIN_RATE) -> Decimal:
    """
    Margin rate of a campaign (margin_percentage / 100).

    Falls back to ``default_rate`` when there is no campaign, the campaign
    is unknown or it carries no percentage.
    """
    if campaign_id:
        campaign = store.get('campaigns', campaign_id)
        if campaign is not None and campaign.margin_percentage is not None:
            return normalize_margin_rate(Decimal(campaign.margin_percentage) / 100)
        logger.info(f"[CHECKOUT] No margin for campaign {campaign_id}, using default {default_rate}")
    return normalize_margin_rate(default_rate)


def checkout(
    store: RowStore,
    buyer: Profile,
    margin_rate=None,
    default_margin_rate=DEFAULT_MARGIN_RATE,
    registry: InFlightRegistry = in_flight,
) -> Order:
    """
    Create an order (plus its items) from the buyer's cart, then empty the cart.

    ``margin_rate`` overrides the campaign's rate when given. Only one
    checkout per buyer may run at a time.
    """
    if buyer is None or not buyer.is_parent():
        raise UnauthorizedError('Cette page est réservée aux parents.')
    if margin_rate is not None:
        margin_rate = normalize_margin_rate(margin_rate)

    with registry.acquire(buyer.id):
        # 1. Snapshot cart lines with fresh prices
        lines = _snapshot_lines(store, buyer.id)

        # 2. Totals
        total = sum((line['line_total'] for line in lines), Decimal('0')).quantize(CENT)
        # Multi-campaign carts are attributed to the first line's campaign
        campaign_id = lines[0]['campaign_id']
        if margin_rate is None:
            margin_rate = resolve_margin_rate(store, campaign_id, default_margin_rate)
        margin = (total * margin_rate).quantize(CENT)

        # 3. Order (nothing to undo if this fails)
        order = store.insert('orders', [{
            'school_id': buyer.school_id,
            'parent_id': buyer.id,
            'parent_name': buyer.name,
            'parent_email': buyer.email,
            'total_amount': total,
            'margin_amount': margin,
            'status': OrderStatus.PENDING.value,
            'campaign_id': campaign_id,
        }])[0]
        order_id = order.id
        logger.info(f"[CHECKOUT] Order {order_id} created for {buyer.id}: total={total} margin={margin}")

        # 4. Order items
        try:
            store.insert('order_items', [{
                'order_id': order_id,
                'product_id': line['product_id'],
                'quantity': line['quantity'],
                'unit_price': line['unit_price'],
                'line_total': line['line_total'],
            } for line in lines])
        except RemoteWriteError:
            logger.error(f"[CHECKOUT] Items of order {order_id} could not be created, compensating")
            compensated = _compensate(store, order_id)
            raise PartialCheckoutError(order_id, 'order_items', compensated)

        # 5. Clear the snapshotted lines
        try:
            cart_service.clear(store, buyer.id, [line['line_id'] for line in lines])
        except RemoteWriteError:
            logger.error(f"[CHECKOUT] Cart of {buyer.id} could not be cleared, compensating order {order_id}")
            compensated = _compensate(store, order_id)
            raise PartialCheckoutError(order_id, 'cart_items', compensated)

        logger.info(f"[CHECKOUT] Order {order_id} completed ({len(lines)} lines)")
        return store.get('orders', order_id)


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _snapshot_lines(store: RowStore, buyer_id: str) -> List[Dict[str, Any]]:
    """Cart lines priced from the products table, validated for checkout."""
    cart_lines = store.query('cart_items', {'user_id': buyer_id}, order_by='created_at')
    if not cart_lines:
        raise EmptyCartError()

    products = store.query('products', {'id': [line.product_id for line in cart_lines]})
    products_dict = {p.id: p for p in products}

    lines = []
    for line in cart_lines:
        product = products_dict.get(line.product_id)
        if product is None:
            raise NotFoundError(
                "Un produit du panier n'existe plus.",
                payload={'product_id': line.product_id}
            )
        if not product.is_available:
            raise ValidationError(f'Le produit "{product.name}" n\'est plus disponible.')

        unit_price = Decimal(product.price).quantize(CENT)
        lines.append({
            'line_id': line.id,
            'product_id': product.id,
            'campaign_id': product.campaign_id,
            'quantity': line.quantity,
            'unit_price': unit_price,
            'line_total': (unit_price * line.quantity).quantize(CENT),
        })
    return lines


def _compensate(store: RowStore, order_id: str) -> bool:
    """Delete the rows a failed checkout already wrote. Returns False if that fails too."""
    try:
        store.delete('order_items', {'order_id': order_id})
        store.delete('orders', {'id': order_id})
    except (RemoteWriteError, RemoteReadError) as e:
        logger.critical(f"[CHECKOUT] Compensation failed, order {order_id} is orphaned: {e}")
        return False
    logger.info(f"[CHECKOUT] Order {order_id} rolled back")
    return True
