"""Cart service - persisted cart lines of a buyer (one row per product)."""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.exceptions import InvalidQuantityError, NotFoundError, RemoteWriteError
from app.models import CartItem
from app.services.row_store import RowStore

logger = logging.getLogger(__name__)

MISSING_PRODUCT_NAME = 'Produit non trouvé'


def add_item(store: RowStore, buyer_id: str, product_id: str) -> CartItem:
    """
    Add one unit of a product to the buyer's cart.

    Increments the existing (buyer, product) line, or creates it with
    quantity 1. Availability is not checked here: the catalog only lists
    available products and checkout re-validates every line.
    """
    if not store.get('products', product_id):
        raise NotFoundError('Produit non trouvé.')

    line = _find_line(store, buyer_id, product_id)
    if line:
        return _increment(store, line)

    try:
        return store.insert('cart_items', [{
            'user_id': buyer_id,
            'product_id': product_id,
            'quantity': 1,
        }])[0]
    except RemoteWriteError:
        # Lost the race against a concurrent add of the same product
        line = _find_line(store, buyer_id, product_id)
        if not line:
            raise
        return _increment(store, line)


def set_quantity(store: RowStore, buyer_id: str, line_id: str, new_quantity: int) -> None:
    """Set a line's quantity; 0 deletes the line, negative values are rejected."""
    if isinstance(new_quantity, bool) or not isinstance(new_quantity, int) or new_quantity < 0:
        raise InvalidQuantityError(new_quantity)

    filters = {'id': line_id, 'user_id': buyer_id}
    if new_quantity == 0:
        store.delete('cart_items', filters)
        return

    if not store.update('cart_items', filters, {'quantity': new_quantity}):
        raise NotFoundError("L'article n'est pas dans le panier.")


def remove_item(store: RowStore, buyer_id: str, line_id: str) -> None:
    set_quantity(store, buyer_id, line_id, 0)


def list_items(store: RowStore, buyer_id: str) -> List[Dict[str, Any]]:
    """
    Cart lines of the buyer joined with the current product data.

    A line whose product no longer exists is listed with a placeholder
    product priced at 0 instead of failing the whole listing.
    """
    lines = store.query('cart_items', {'user_id': buyer_id}, order_by='created_at')
    if not lines:
        return []

    products = store.query('products', {'id': [line.product_id for line in lines]})
    products_dict = {p.id: p for p in products}

    items = []
    for line in lines:
        product = products_dict.get(line.product_id)
        if product is None:
            logger.warning(f"[CART] Line {line.id} references missing product {line.product_id}")
            price = Decimal('0.00')
            snapshot = {
                'name': MISSING_PRODUCT_NAME,
                'description': '',
                'image_url': '',
                'campaign_id': None,
                'is_available': False,
            }
        else:
            price = Decimal(product.price)
            snapshot = {
                'name': product.name,
                'description': product.description or '',
                'image_url': product.image_url or '',
                'campaign_id': product.campaign_id,
                'is_available': product.is_available,
            }

        items.append({
            'id': line.id,
            'product_id': line.product_id,
            'quantity': line.quantity,
            'price': price,
            'line_total': (price * line.quantity).quantize(Decimal('0.01')),
            'product_missing': product is None,
            **snapshot,
        })
    return items


def clear(store: RowStore, buyer_id: str, line_ids: Optional[List[str]] = None) -> int:
    """
    Delete cart lines of the buyer. Only checkout calls this.

    With ``line_ids`` only those lines go, so a line added while a checkout
    runs stays in the cart.
    """
    filters: Dict[str, Any] = {'user_id': buyer_id}
    if line_ids is not None:
        if not line_ids:
            return 0
        filters['id'] = list(line_ids)
    return store.delete('cart_items', filters)


def cart_totals(items: List[Dict[str, Any]], margin_rate: Decimal) -> Dict[str, Any]:
    """Summary shown next to the cart: subtotal, school contribution and item count."""
    subtotal = sum((item['line_total'] for item in items), Decimal('0'))
    return {
        'subtotal': subtotal.quantize(Decimal('0.01')),
        'margin': (subtotal * Decimal(margin_rate)).quantize(Decimal('0.01')),
        'item_count': sum(item['quantity'] for item in items),
    }


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _find_line(store: RowStore, buyer_id: str, product_id: str):
    rows = store.query('cart_items', {'user_id': buyer_id, 'product_id': product_id})
    return rows[0] if rows else None


def _increment(store: RowStore, line: CartItem) -> CartItem:
    store.update('cart_items', {'id': line.id}, {'quantity': CartItem.quantity + 1})
    return store.get('cart_items', line.id)
