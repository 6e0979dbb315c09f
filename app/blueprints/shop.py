"""Shop blueprint - catalog and school page shown to parents."""
from flask import Blueprint, request, jsonify, g
from app.decorators.permissions import shop_visitor
from app.services import catalog_service
from app.utils.serializers import product_to_dict, school_to_dict

shop_bp = Blueprint('shop', __name__, url_prefix='/shop')


@shop_bp.route('/products')
@shop_visitor
def products():
    """Available products, optionally for one campaign (?campaign_id=)."""
    campaign_id = request.args.get('campaign_id', '').strip() or None
    items = catalog_service.list_available_products(g.store, campaign_id)
    return jsonify({'products': [product_to_dict(p) for p in items]})


@shop_bp.route('/school')
@shop_visitor
def school():
    """School of the current profile (custom message, margin explanation)."""
    info = catalog_service.get_school_info(g.store, g.profile.school_id)
    return jsonify(school_to_dict(info))
