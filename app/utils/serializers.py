"""JSON representations of shop rows."""
from typing import Any, Dict

from app.utils.formatters import amount


def product_to_dict(product) -> Dict[str, Any]:
    return {
        'id': product.id,
        'name': product.name,
        'description': product.description or '',
        'price': amount(product.price),
        'image_url': product.image_url or '',
        'campaign_id': product.campaign_id,
        'is_available': product.is_available,
    }


def school_to_dict(school) -> Dict[str, Any]:
    return {
        'id': school.id,
        'name': school.name,
        'custom_message': school.custom_message or '',
        'margin_explanation': school.margin_explanation or '',
    }


def cart_line_to_dict(line: Dict[str, Any]) -> Dict[str, Any]:
    """Cart line as returned by cart_service.list_items (amounts as strings)."""
    return {
        **line,
        'price': amount(line['price']),
        'line_total': amount(line['line_total']),
    }


def order_to_dict(order, with_buyer: bool = True, with_margin: bool = True) -> Dict[str, Any]:
    """
    Order summary.

    Buyer details are hidden from the buyer's own listing and the margin
    is only shown to the school and the head office.
    """
    data = {
        'id': order.id,
        'school_id': order.school_id,
        'campaign_id': order.campaign_id,
        'total_amount': amount(order.total_amount),
        'status': order.status,
        'status_label': order.status_label,
        'created_at': order.created_at.isoformat() if order.created_at else None,
    }
    if with_buyer:
        data.update(parent_name=order.parent_name, parent_email=order.parent_email)
    if with_margin:
        data['margin_amount'] = amount(order.margin_amount)
    return data


def order_item_to_dict(item) -> Dict[str, Any]:
    return {
        'id': item.id,
        'order_id': item.order_id,
        'product_id': item.product_id,
        'quantity': item.quantity,
        'unit_price': amount(item.unit_price),
        'line_total': amount(item.line_total),
    }


def invitation_to_dict(invitation) -> Dict[str, Any]:
    return {
        'id': invitation.id,
        'school_id': invitation.school_id,
        'parent_name': invitation.parent_name,
        'parent_email': invitation.parent_email,
        'invitation_code': invitation.invitation_code,
        'status': invitation.status,
        'status_label': invitation.status_label,
        'created_at': invitation.created_at.isoformat() if invitation.created_at else None,
    }
