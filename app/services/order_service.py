"""
Order service - role-scoped, read-only views over orders.

parent  -> own orders
ecole   -> orders of the school
magasin -> orders of every school managed by the store
siege   -> every order
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.exceptions import (
    FilterResolutionError, NotFoundError, RemoteReadError, UnauthorizedError, ValidationError,
)
from app.models import Order, OrderItem, OrderStatus, Profile, UserRole
from app.services.row_store import RowStore

TIMEFRAMES = {'7d': 7, '30d': 30, 'all': None}
RECENT_ORDERS_LIMIT = 5


def order_filters_for(store: RowStore, profile: Profile) -> Optional[Dict[str, Any]]:
    """
    Build the orders filter for a profile.

    Returns None when nothing is visible (a store without schools), an
    empty dict when everything is visible.
    """
    role = profile.role
    if role == UserRole.PARENT.value:
        return {'parent_id': profile.id}

    if role == UserRole.ECOLE.value:
        if not profile.school_id:
            raise FilterResolutionError('Aucune école associée à ce compte.')
        return {'school_id': profile.school_id}

    if role == UserRole.MAGASIN.value:
        if not profile.store_id:
            raise FilterResolutionError('Aucun magasin associé à ce compte.')
        try:
            schools = store.query('schools', {'store_id': profile.store_id})
        except RemoteReadError as e:
            raise FilterResolutionError(payload={'store_id': profile.store_id}) from e
        if not schools:
            return None
        return {'school_id': [s.id for s in schools]}

    if role == UserRole.SIEGE.value:
        return {}

    raise UnauthorizedError(f'Rôle inconnu : {role}')


def list_orders_for(store: RowStore, profile: Profile) -> List[Order]:
    """Orders visible to the profile, newest first. No match is an empty list."""
    filters = order_filters_for(store, profile)
    if filters is None:
        return []
    return store.query('orders', filters, order_by='-created_at')


def get_order_items(store: RowStore, profile: Profile, order_id: str) -> List[OrderItem]:
    """Items of one order, provided the order is visible to the profile."""
    filters = order_filters_for(store, profile)
    if filters is None:
        raise NotFoundError('Commande non trouvée.')

    if not store.query('orders', {**filters, 'id': order_id}):
        raise NotFoundError('Commande non trouvée.')
    return store.query('order_items', {'order_id': order_id})


def orders_overview(orders: List[Order]) -> Dict[str, Any]:
    """Header figures of the orders page."""
    return {
        'count': len(orders),
        'pending_count': sum(1 for o in orders if o.status == OrderStatus.PENDING.value),
        'margin_total': sum((Decimal(o.margin_amount) for o in orders), Decimal('0.00')),
    }


def sales_summary(
    store: RowStore,
    school_id: str,
    timeframe: str = 'all',
    goal_amount: Decimal = Decimal('1000'),
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Sales figures of a school over a timeframe ('7d', '30d' or 'all').

    Includes the fundraising goal progress, measured on the margin collected.
    """
    if not school_id:
        raise FilterResolutionError('Aucune école associée à ce compte.')
    if timeframe not in TIMEFRAMES:
        raise ValidationError(f'Période invalide : {timeframe}')

    filters: Dict[str, Any] = {'school_id': school_id}
    days = TIMEFRAMES[timeframe]
    if days is not None:
        now = now or datetime.now(timezone.utc)
        filters['created_at__gte'] = now - timedelta(days=days)

    orders = store.query('orders', filters, order_by='-created_at')

    total_revenue = sum((Decimal(o.total_amount) for o in orders), Decimal('0.00'))
    margin_collected = sum((Decimal(o.margin_amount) for o in orders), Decimal('0.00'))
    order_count = len(orders)
    average_order = (
        (total_revenue / order_count).quantize(Decimal('0.01')) if order_count else Decimal('0.00')
    )

    goal_amount = Decimal(goal_amount)
    if goal_amount > 0:
        progress = min(margin_collected / goal_amount * 100, Decimal('100'))
    else:
        progress = Decimal('100')

    return {
        'timeframe': timeframe,
        'total_revenue': total_revenue,
        'margin_collected': margin_collected,
        'order_count': order_count,
        'average_order': average_order,
        'recent_orders': orders[:RECENT_ORDERS_LIMIT],
        'goal_amount': goal_amount,
        'goal_progress': progress.quantize(Decimal('0.1')),
    }
