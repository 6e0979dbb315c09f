"""Custom exceptions for the school shop application."""

class ShopError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="Une erreur interne est survenue", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class ValidationError(ShopError):
    """Malformed input, detected before any remote call."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class InvalidQuantityError(ValidationError):
    """Raised when a cart quantity is negative or not an integer."""
    def __init__(self, quantity):
        super().__init__(
            f"Quantité invalide : {quantity}",
            payload={'quantity': str(quantity)}
        )

class EmptyCartError(ValidationError):
    """Raised when checkout is attempted on an empty cart."""
    def __init__(self):
        super().__init__("Le panier est vide")

class DuplicateInvitationError(ShopError):
    """Raised when the school already has a pending invitation for this email."""
    def __init__(self, email):
        super().__init__(
            "Une invitation est déjà en cours pour cette adresse email.",
            409,
            payload={'parent_email': email}
        )

class NotFoundError(ShopError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Ressource introuvable", payload=None):
        super().__init__(message, 404, payload)

class UnauthorizedError(ShopError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Accès refusé"):
        super().__init__(message, 403)

class CheckoutInProgressError(ShopError):
    """Raised when the buyer already has a checkout running."""
    def __init__(self, buyer_id):
        super().__init__(
            "Une commande est déjà en cours de traitement",
            409,
            payload={'buyer_id': buyer_id}
        )

class RemoteReadError(ShopError):
    """A read against the row store failed after its retries."""
    def __init__(self, message="Impossible de charger les données", payload=None):
        super().__init__(message, 503, payload)

class FilterResolutionError(RemoteReadError):
    """The rows needed to build a role filter could not be read."""
    def __init__(self, message="Impossible de déterminer les commandes visibles", payload=None):
        super().__init__(message, payload)

class RemoteWriteError(ShopError):
    """An insert, update or delete against the row store failed."""
    def __init__(self, message="Impossible d'enregistrer les modifications", payload=None):
        super().__init__(message, 502, payload)

class PartialCheckoutError(RemoteWriteError):
    """
    The order row was created but a later checkout step failed.

    ``compensated`` tells whether the orphan order was removed again.
    """
    def __init__(self, order_id, step, compensated=True):
        self.order_id = order_id
        self.step = step
        self.compensated = compensated
        super().__init__(
            "Impossible de finaliser la commande",
            payload={'order_id': order_id, 'step': step, 'compensated': compensated}
        )
