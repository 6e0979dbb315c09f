"""Orders blueprint - role-scoped order listings and school sales summary."""
from flask import Blueprint, request, jsonify, g, current_app
from app.decorators.permissions import require_role, school_only
from app.models import UserRole
from app.services import order_service
from app.utils.formatters import amount
from app.utils.serializers import order_to_dict, order_item_to_dict

orders_bp = Blueprint('orders', __name__)

ALL_ROLES = tuple(role.value for role in UserRole)

PAGE_TITLES = {
    UserRole.PARENT.value: 'Mes commandes',
    UserRole.ECOLE.value: 'Commandes reçues',
    UserRole.MAGASIN.value: 'Commandes de mes écoles',
    UserRole.SIEGE.value: 'Toutes les commandes',
}


@orders_bp.route('/orders')
@require_role(*ALL_ROLES)
def list_orders():
    """Orders visible to the current profile, newest first."""
    role = g.user_role
    orders = order_service.list_orders_for(g.store, g.profile)
    overview = order_service.orders_overview(orders)

    # Only the school and the head office see the margin figures
    show_margin = role in (UserRole.ECOLE.value, UserRole.SIEGE.value)
    payload = {
        'title': PAGE_TITLES.get(role, 'Commandes'),
        'orders': [
            order_to_dict(o, with_buyer=role != UserRole.PARENT.value, with_margin=show_margin)
            for o in orders
        ],
        'count': overview['count'],
        'pending_count': overview['pending_count'],
    }
    if show_margin:
        payload['margin_total'] = amount(overview['margin_total'])
    return jsonify(payload)


@orders_bp.route('/orders/<order_id>/items')
@require_role(*ALL_ROLES)
def order_items(order_id):
    items = order_service.get_order_items(g.store, g.profile, order_id)
    return jsonify({'order_id': order_id, 'items': [order_item_to_dict(i) for i in items]})


@orders_bp.route('/sales/summary')
@school_only
def sales_summary():
    """Sales figures of the school (?timeframe=7d|30d|all)."""
    timeframe = request.args.get('timeframe', 'all')
    summary = order_service.sales_summary(
        g.store,
        g.profile.school_id,
        timeframe,
        goal_amount=current_app.config['SALES_GOAL_AMOUNT'],
    )
    return jsonify({
        'timeframe': summary['timeframe'],
        'total_revenue': amount(summary['total_revenue']),
        'margin_collected': amount(summary['margin_collected']),
        'order_count': summary['order_count'],
        'average_order': amount(summary['average_order']),
        'goal_amount': amount(summary['goal_amount']),
        'goal_progress': str(summary['goal_progress']),
        'recent_orders': [order_to_dict(o) for o in summary['recent_orders']],
    })
