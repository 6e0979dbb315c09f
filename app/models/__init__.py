"""Models package - exports all SQLAlchemy models."""
# Network
from app.models.campaign import Campaign
from app.models.store import Store
from app.models.school import School
from app.models.profile import Profile, UserRole
from app.models.parent_invitation import ParentInvitation, InvitationStatus, INVITATION_LABELS

# Shop
from app.models.product import Product
from app.models.cart_item import CartItem
from app.models.order import Order, OrderStatus, STATUS_LABELS
from app.models.order_item import OrderItem

__all__ = [
    # Network
    'Campaign', 'Store', 'School', 'Profile', 'UserRole',
    'ParentInvitation', 'InvitationStatus', 'INVITATION_LABELS',
    # Shop
    'Product', 'CartItem', 'Order', 'OrderStatus', 'STATUS_LABELS', 'OrderItem',
]
