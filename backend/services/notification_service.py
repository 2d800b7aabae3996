"""
Notification service — order lifecycle emails.

Events:
    order created   → confirmation to the customer, alert to ADMIN_EMAIL (if set)
    status changed  → payment-confirmed email, only on the pending→done edge

Both entry points take an OrderSnapshot (never a live ORM row) and are meant
to be handed to async_executor.submit(). They never raise: rendering or
transport problems are logged and swallowed.
"""
import logging
from html import escape

from config import settings
from domain.constants import SUBJECT_ORDER_RECEIVED, SUBJECT_PAYMENT_CONFIRMED
from domain.enums import OrderStatus
from models import OrderSnapshot
from services import email_service

logger = logging.getLogger(__name__)


def _price(order: OrderSnapshot) -> str:
    return f"৳{order.final_price:.2f}"


def _row(label: str, value) -> str:
    return f"<tr><td><strong>{escape(label)}:</strong></td><td>{escape(str(value))}</td></tr>"


def _optional_row(label: str, value) -> str:
    return _row(label, value) if value else ""


def _optional_line(label: str, value) -> str:
    return f"- {label}: {value}\n" if value else ""


# ── Templates ───────────────────────────────────────────────────────

def render_order_confirmation(order: OrderSnapshot) -> tuple[str, str, str]:
    """Customer confirmation → (subject, html, text)."""
    rows = "".join([
        _row("Order ID", order.order_code),
        _row("Name", order.name),
        _row("Student ID", order.student_id),
        _row("Jersey Number", order.jersey_number),
        _optional_row("Batch", order.batch),
        _row("Size", order.size),
        _row("Collar Type", order.collar_type),
        _row("Sleeve Type", order.sleeve_type),
        _optional_row("Transaction ID", order.transaction_id),
        _row("Total Price", _price(order)),
    ])
    notes_html = (
        f"<p><strong>Special Instructions:</strong> {escape(order.notes)}</p>" if order.notes else ""
    )
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background: #667eea; padding: 20px; text-align: center;">
    <h1 style="color: white; margin: 0;">Order Confirmation</h1>
    <p style="color: white; margin: 5px 0;">{escape(settings.department_name)}</p>
  </div>
  <div style="padding: 20px; background: #f8f9fa;">
    <h2>Hello {escape(order.name)}!</h2>
    <p>Thank you for ordering your department jersey. Your order has been received successfully.</p>
    <table style="width: 100%; border-collapse: collapse;">{rows}</table>
    {notes_html}
    <h4>What's Next?</h4>
    <ul>
      <li>Our team will verify your payment details</li>
      <li>You'll receive another email once your order is confirmed</li>
      <li>Production will begin within 2-3 business days</li>
      <li>Expected delivery: 7-10 business days</li>
    </ul>
  </div>
</div>
"""
    text = (
        "Jersey Order Confirmation\n\n"
        f"Hello {order.name}!\n\n"
        "Thank you for ordering your department jersey. Your order has been received successfully.\n\n"
        "Order Details:\n"
        f"- Order ID: {order.order_code}\n"
        f"- Name: {order.name}\n"
        f"- Student ID: {order.student_id}\n"
        f"- Jersey Number: {order.jersey_number}\n"
        f"{_optional_line('Batch', order.batch)}"
        f"- Size: {order.size}\n"
        f"- Collar Type: {order.collar_type}\n"
        f"- Sleeve Type: {order.sleeve_type}\n"
        f"{_optional_line('Transaction ID', order.transaction_id)}"
        f"- Total Price: {_price(order)}\n"
        f"{_optional_line('Special Instructions', order.notes)}"
        "\nWhat's Next?\n"
        "- Our team will verify your payment details\n"
        "- You'll receive another email once your order is confirmed\n"
        "- Production will begin within 2-3 business days\n"
        "- Expected delivery: 7-10 business days\n"
    )
    return SUBJECT_ORDER_RECEIVED, html, text


def render_admin_alert(order: OrderSnapshot) -> tuple[str, str, str]:
    """New-order alert for staff → (subject, html, text)."""
    subject = f"New Jersey Order - {order.name} (#{order.jersey_number})"
    customer_rows = "".join([
        _row("Student Name", order.name),
        _row("Student ID", order.student_id),
        _row("Email", order.email),
        _optional_row("Batch", order.batch),
    ])
    jersey_rows = "".join([
        _row("Jersey Number", order.jersey_number),
        _row("Size", order.size),
        _row("Collar Type", order.collar_type),
        _row("Sleeve Type", order.sleeve_type),
        _row("Price", _price(order)),
    ])
    if order.transaction_id:
        payment_html = f"<p><strong>Transaction ID:</strong> {escape(order.transaction_id)}</p>"
    else:
        payment_html = "<p><em>No transaction ID provided</em></p>"
    if order.notes:
        payment_html += f"<p><strong>Special Instructions:</strong> {escape(order.notes)}</p>"

    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background: #dc3545; padding: 20px; text-align: center;">
    <h1 style="color: white; margin: 0;">New Jersey Order {escape(order.order_code)}</h1>
  </div>
  <div style="padding: 20px; background: #f8f9fa;">
    <p>A new jersey order has been placed. Please review and process:</p>
    <h3>Customer Information:</h3>
    <table style="width: 100%; border-collapse: collapse;">{customer_rows}</table>
    <h3>Jersey Details:</h3>
    <table style="width: 100%; border-collapse: collapse;">{jersey_rows}</table>
    <h3>Payment Information:</h3>
    {payment_html}
  </div>
</div>
"""
    payment_text = _optional_line("Transaction ID", order.transaction_id) or "- No transaction ID provided\n"
    text = (
        f"NEW JERSEY ORDER {order.order_code}\n\n"
        "Customer Information:\n"
        f"- Student Name: {order.name}\n"
        f"- Student ID: {order.student_id}\n"
        f"- Email: {order.email}\n"
        f"{_optional_line('Batch', order.batch)}"
        "\nJersey Details:\n"
        f"- Jersey Number: #{order.jersey_number}\n"
        f"- Size: {order.size}\n"
        f"- Collar Type: {order.collar_type}\n"
        f"- Sleeve Type: {order.sleeve_type}\n"
        f"- Price: {_price(order)}\n"
        "\nPayment Information:\n"
        f"{payment_text}"
        f"{_optional_line('Special Instructions', order.notes)}"
    )
    return subject, html, text


def render_payment_confirmed(order: OrderSnapshot) -> tuple[str, str, str]:
    """Customer email for the pending→done transition → (subject, html, text)."""
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background: #10b981; padding: 20px; text-align: center;">
    <h1 style="color: white; margin: 0;">Payment Confirmed!</h1>
  </div>
  <div style="padding: 20px;">
    <h2>Hello {escape(order.name)}!</h2>
    <p>Great news! Your payment has been confirmed and your jersey order is now complete.</p>
    <p><strong>Order ID:</strong> {escape(order.order_code)}</p>
    <p><strong>Jersey Number:</strong> #{order.jersey_number}</p>
    <p><strong>Status:</strong> Confirmed &amp; Processing</p>
    <ul>
      <li>Your jersey will be manufactured</li>
      <li>Expected delivery: 7-10 business days</li>
      <li>You'll be contacted for pickup/delivery details</li>
    </ul>
    <p>Thank you for your order!</p>
  </div>
</div>
"""
    text = (
        f"Hello {order.name}!\n\n"
        f"Your payment has been confirmed for Jersey #{order.jersey_number}. "
        f"Order ID: {order.order_code}\n"
        "Expected delivery: 7-10 business days.\n"
    )
    return SUBJECT_PAYMENT_CONFIRMED, html, text


# ── Dispatch ────────────────────────────────────────────────────────

async def notify_order_created(order: OrderSnapshot) -> int:
    """
    Send the customer confirmation and, if ADMIN_EMAIL is set, the staff alert.

    Returns:
        Number of emails the provider accepted.
    """
    sent = 0
    try:
        subject, html, text = render_order_confirmation(order)
        if await email_service.send_email(order.email, subject, html, text):
            sent += 1

        if settings.admin_email:
            subject, html, text = render_admin_alert(order)
            if await email_service.send_email(settings.admin_email, subject, html, text):
                sent += 1
    except Exception as e:
        logger.error(f"Order-created notification for {order.order_code} failed: {e}", exc_info=True)
    return sent


def is_completion(previous_status: str, new_status: str) -> bool:
    """True only on the pending→done edge (done→done is a no-op)."""
    return previous_status != OrderStatus.DONE.value and new_status == OrderStatus.DONE.value


async def notify_status_changed(order: OrderSnapshot, previous_status: str, new_status: str) -> bool:
    """
    Send the payment-confirmed email when an order becomes done.

    Returns:
        True if an email was sent and accepted.
    """
    if not is_completion(previous_status, new_status):
        logger.debug(
            f"No notification for {order.order_code}: {previous_status} -> {new_status}"
        )
        return False
    try:
        subject, html, text = render_payment_confirmed(order)
        return await email_service.send_email(order.email, subject, html, text)
    except Exception as e:
        logger.error(f"Status notification for {order.order_code} failed: {e}", exc_info=True)
        return False
