"""Transactional email message builders

Plain text plus a minimal HTML rendering of the same content.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from html import escape
from typing import List, Optional, Sequence, Tuple
from src.domain.booking import Booking, BookingFrequency
from src.domain.customer import Customer
from src.domain.inventory_item import InventoryItem
from src.domain.invoice import Invoice

# Stable subject of the reminder communication log entry
REMINDER_LOG_SUBJECT = "Booking Reminder"


@dataclass
class EmailMessage:
    subject: str
    text_body: str
    html_body: str


def format_money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def format_day(value: date) -> str:
    return value.strftime("%A, %B %d").replace(" 0", " ")


def _render(title: str, greeting: str, intro: str, rows: Sequence[Tuple[str, str]], closing: str) -> str:
    rows_html = "".join(
        f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(value)}</td></tr>"
        for label, value in rows
    )
    return (
        f"<h2>{escape(title)}</h2>"
        f"<p>{escape(greeting)}</p>"
        f"<p>{escape(intro)}</p>"
        f"<table>{rows_html}</table>"
        f"<p>{escape(closing)}</p>"
    )


def _text(greeting: str, intro: str, rows: Sequence[Tuple[str, str]], closing: str) -> str:
    lines = [greeting, "", intro, ""]
    lines.extend(f"{label}: {value}" for label, value in rows)
    lines.extend(["", closing])
    return "\n".join(lines)


def _booking_rows(booking: Booking, service_name: str) -> List[Tuple[str, str]]:
    return [
        ("Service", service_name),
        ("Date", format_day(booking.scheduled_date)),
        ("Time", booking.scheduled_time),
        ("Address", booking.address),
    ]


def booking_confirmation(
    customer: Customer, booking: Booking, service_name: str, company_name: str
) -> EmailMessage:
    rows = _booking_rows(booking, service_name) + [("Total", format_money(booking.total_price))]
    greeting = f"Hi {customer.full_name},"
    intro = "Your cleaning has been booked. Here are the details:"
    closing = f"We'll see you soon!\n- The {company_name} Team"
    return EmailMessage(
        subject=f"Booking Confirmed - {format_day(booking.scheduled_date)}",
        text_body=_text(greeting, intro, rows, closing),
        html_body=_render("Booking Confirmed", greeting, intro, rows, closing),
    )


def business_booking_notice(
    customer: Customer, booking: Booking, service_name: str
) -> EmailMessage:
    rows = [
        ("Customer", customer.full_name),
        ("Email", customer.email or "-"),
        ("Phone", customer.phone or "-"),
    ] + _booking_rows(booking, service_name) + [
        ("Frequency", BookingFrequency(booking.frequency).value),
        ("Total", format_money(booking.total_price)),
    ]
    intro = "A new booking was submitted."
    return EmailMessage(
        subject=f"NEW BOOKING - {customer.full_name} - {format_day(booking.scheduled_date)}",
        text_body=_text("New booking", intro, rows, f"Booking id: {booking.id}"),
        html_body=_render("New Booking", "New booking", intro, rows, f"Booking id: {booking.id}"),
    )


def booking_reminder(
    customer: Customer, booking: Booking, service_name: str, company_name: str
) -> EmailMessage:
    rows = _booking_rows(booking, service_name)
    greeting = f"Hi {customer.full_name},"
    intro = "Just a friendly reminder that your cleaning is scheduled for tomorrow!"
    closing = (
        "Please ensure someone is available to let our team in, or leave access instructions.\n"
        f"- The {company_name} Team"
    )
    return EmailMessage(
        subject=f"Reminder: Cleaning Tomorrow at {booking.scheduled_time}",
        text_body=_text(greeting, intro, rows, closing),
        html_body=_render("Tomorrow's the Day!", greeting, intro, rows, closing),
    )


def invoice_message(
    customer: Customer, invoice: Invoice, company_name: str, pay_url: Optional[str] = None
) -> EmailMessage:
    rows = [
        ("Invoice #", invoice.invoice_number),
        ("Amount Due", format_money(invoice.amount_due)),
        ("Due Date", invoice.due_date.isoformat() if invoice.due_date else "On receipt"),
    ]
    if pay_url:
        rows.append(("Pay online", pay_url))
    greeting = f"Hi {customer.full_name},"
    intro = "Here's your invoice for cleaning services."
    closing = f"Thank you for choosing {company_name}!"
    return EmailMessage(
        subject=f"Invoice {invoice.invoice_number} - {format_money(invoice.amount_due)} Due",
        text_body=_text(greeting, intro, rows, closing),
        html_body=_render(f"Invoice {invoice.invoice_number}", greeting, intro, rows, closing),
    )


def overdue_notice(customer: Customer, invoice: Invoice) -> EmailMessage:
    rows = [
        ("Invoice #", invoice.invoice_number),
        ("Amount Due", format_money(invoice.amount_due)),
        ("Due Date", invoice.due_date.isoformat() if invoice.due_date else "-"),
    ]
    greeting = f"Hi {customer.first_name},"
    intro = f"Your invoice {invoice.invoice_number} is now overdue."
    closing = "Please pay at your earliest convenience."
    return EmailMessage(
        subject=f"Overdue Invoice {invoice.invoice_number}",
        text_body=_text(greeting, intro, rows, closing),
        html_body=_render("Invoice Overdue", greeting, intro, rows, closing),
    )


def low_inventory_alert(items: Sequence[InventoryItem]) -> EmailMessage:
    rows = [
        (item.name, f"{item.current_stock} {item.unit} (min: {item.min_stock})")
        for item in items
    ]
    intro = "The following items are running low:"
    return EmailMessage(
        subject="Low Inventory Alert",
        text_body=_text("Inventory check", intro, rows, "Please reorder soon."),
        html_body=_render("Low Inventory Alert", "Inventory check", intro, rows, "Please reorder soon."),
    )
