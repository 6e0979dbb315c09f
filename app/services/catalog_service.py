"""Catalog service - products and school shop info shown to buyers."""
from typing import List, Optional

from app.exceptions import NotFoundError
from app.models import Product, School
from app.services.row_store import RowStore


def list_available_products(store: RowStore, campaign_id: Optional[str] = None) -> List[Product]:
    """Products currently offered, optionally restricted to one campaign."""
    filters = {'is_available': True}
    if campaign_id:
        filters['campaign_id'] = campaign_id
    return store.query('products', filters, order_by='name')


def get_product(store: RowStore, product_id: str) -> Product:
    product = store.get('products', product_id)
    if not product:
        raise NotFoundError('Produit non trouvé.')
    return product


def get_school_info(store: RowStore, school_id: Optional[str]) -> School:
    """School shown on the shop and cart pages (message, margin explanation)."""
    if not school_id:
        raise NotFoundError('Aucune école associée à ce compte.')
    school = store.get('schools', school_id)
    if not school:
        raise NotFoundError('École non trouvée.')
    return school
