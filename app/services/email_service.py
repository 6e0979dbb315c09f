"""
Email service for order confirmations sent to parents.
Uses Flask-Mail for SMTP integration with UTF-8 support.
"""
import logging
from flask import current_app
from flask_mail import Mail, Message

from app.utils.formatters import money_eur, datetime_fr

logger = logging.getLogger(__name__)

mail = Mail()


def init_mail(app):
    """Initialize Flask-Mail with app."""
    mail.init_app(app)


def _mail_enabled() -> bool:
    """
    Check if mail is properly configured and enabled.
    Prevents 500 errors in dev or misconfigured environments.
    """
    cfg = current_app.config
    return bool(
        not cfg.get("MAIL_SUPPRESS_SEND", False)
        and cfg.get("MAIL_SERVER")
        and cfg.get("MAIL_USERNAME")
    )


def build_order_confirmation(order, items, school_name: str = None) -> str:
    """Plain-text body of the order confirmation."""
    lines = [
        f"Bonjour {order.parent_name}," if order.parent_name else "Bonjour,",
        "",
        "Votre commande a été enregistrée. Vous serez notifié quand elle sera prête pour récupération.",
        "",
        f"Commande n° {order.id} du {datetime_fr(order.created_at)}",
    ]
    for item in items:
        lines.append(
            f"  - {item['name']} x{item['quantity']} : {money_eur(item['line_total'])}"
        )
    lines += [
        "",
        f"Total : {money_eur(order.total_amount)}",
        f"Contribution école : {money_eur(order.margin_amount)}",
        "",
        f"Click & Collect - {school_name or 'École'}",
    ]
    return "\n".join(lines)


def send_order_confirmation(order, items, school_name: str = None) -> bool:
    """
    Send the order confirmation to the buyer.

    Never raises: the order is already recorded, a mail failure is only logged.

    Returns:
        True if sent (or mail disabled), False otherwise
    """
    to_email = order.parent_email
    if not to_email:
        logger.warning(f"[EMAIL] Order {order.id} has no parent email, confirmation skipped")
        return False

    try:
        if not _mail_enabled():
            logger.info(f"[MAIL DISABLED] Order confirmation skipped for {to_email}")
            return True

        msg = Message(
            subject="Commande confirmée !",
            recipients=[to_email],
            body=build_order_confirmation(order, items, school_name),
        )
        mail.send(msg)
        logger.info(f"[EMAIL] Order confirmation sent to {to_email}")
        return True

    except Exception as e:
        logger.exception(f"[EMAIL] Error sending order confirmation for {order.id}: {e}")
        return False


def send_parent_invitation(invitation, school_name: str = None) -> bool:
    """
    Send the invitation code to the parent.

    Returns:
        True if sent (or mail disabled), False otherwise
    """
    to_email = invitation.parent_email
    try:
        if not _mail_enabled():
            logger.info(f"[MAIL DISABLED] Invitation email skipped for {to_email}")
            return True

        school = school_name or 'votre école'
        body = "\n".join([
            f"Bonjour {invitation.parent_name},",
            "",
            f"{school} vous invite à rejoindre sa boutique Click & Collect.",
            f"Votre code d'invitation : {invitation.invitation_code}",
            "",
            "Chaque commande reverse une partie de son montant à l'école.",
        ])
        msg = Message(
            subject=f"Invitation de {school}",
            recipients=[to_email],
            body=body,
        )
        mail.send(msg)
        logger.info(f"[EMAIL] Invitation sent to {to_email}")
        return True

    except Exception as e:
        logger.exception(f"[EMAIL] Error sending invitation {invitation.id}: {e}")
        return False
