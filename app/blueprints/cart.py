"""Cart blueprint - persisted cart and checkout for parents."""
from flask import Blueprint, request, jsonify, g, current_app
from app.decorators.permissions import parent_only
from app.exceptions import ValidationError, ShopError, CheckoutInProgressError, PartialCheckoutError, EmptyCartError
from app.services import cart_service, checkout_service, catalog_service
from app.services.email_service import send_order_confirmation
from app.blueprints.metrics import checkout_total
from app.utils.formatters import amount
from app.utils.serializers import cart_line_to_dict, order_to_dict

cart_bp = Blueprint('cart', __name__, url_prefix='/cart')


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Requête invalide.')
    return data


@cart_bp.route('', methods=['GET'])
@parent_only
def view_cart():
    """Cart lines with subtotal and school contribution."""
    items = cart_service.list_items(g.store, g.profile.id)
    rate = current_app.config['DEFAULT_MARGIN_RATE']
    if items and items[0]['campaign_id']:
        rate = checkout_service.resolve_margin_rate(g.store, items[0]['campaign_id'], rate)
    totals = cart_service.cart_totals(items, rate)

    return jsonify({
        'items': [cart_line_to_dict(line) for line in items],
        'subtotal': amount(totals['subtotal']),
        'margin': amount(totals['margin']),
        'item_count': totals['item_count'],
    })


@cart_bp.route('/items', methods=['POST'])
@parent_only
def add_item():
    """Add one unit of a product ({"product_id": ...})."""
    product_id = str(_json_body().get('product_id') or '').strip()
    if not product_id:
        raise ValidationError('Produit manquant.')

    line = cart_service.add_item(g.store, g.profile.id, product_id)
    product = catalog_service.get_product(g.store, product_id)
    return jsonify({
        'status': 'success',
        'message': f'{product.name} ajouté au panier',
        'line_id': line.id,
        'quantity': line.quantity,
    }), 201


@cart_bp.route('/items/<line_id>', methods=['PATCH'])
@parent_only
def update_item(line_id):
    """Set a line quantity ({"quantity": n}); 0 removes the line."""
    quantity = _json_body().get('quantity')
    cart_service.set_quantity(g.store, g.profile.id, line_id, quantity)
    return jsonify({'status': 'success'})


@cart_bp.route('/items/<line_id>', methods=['DELETE'])
@parent_only
def remove_item(line_id):
    cart_service.remove_item(g.store, g.profile.id, line_id)
    return jsonify({'status': 'success'})


@cart_bp.route('/checkout', methods=['POST'])
@parent_only
def checkout():
    """Turn the cart into a pending order and send the confirmation email."""
    # Names/prices for the email, read before the cart is cleared
    items = cart_service.list_items(g.store, g.profile.id)

    try:
        order = checkout_service.checkout(
            g.store,
            g.profile,
            default_margin_rate=current_app.config['DEFAULT_MARGIN_RATE'],
        )
    except EmptyCartError:
        checkout_total.labels(outcome='empty').inc()
        raise
    except CheckoutInProgressError:
        checkout_total.labels(outcome='conflict').inc()
        raise
    except PartialCheckoutError as e:
        checkout_total.labels(outcome='compensated' if e.compensated else 'failed').inc()
        raise
    except ShopError:
        checkout_total.labels(outcome='failed').inc()
        raise

    checkout_total.labels(outcome='success').inc()

    school_name = None
    try:
        school_name = catalog_service.get_school_info(g.store, order.school_id).name
    except ShopError as e:
        current_app.logger.warning(f"School of order {order.id} unavailable for the confirmation email: {e.message}")
    send_order_confirmation(order, items, school_name)

    return jsonify({
        'status': 'success',
        'message': 'Votre commande a été enregistrée.',
        'order': order_to_dict(order, with_buyer=False),
    }), 201
