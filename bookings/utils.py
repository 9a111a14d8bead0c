# bookings/utils.py
import logging
from io import BytesIO

from django.conf import settings
from django.core.files.base import ContentFile
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def render_invoice_html(booking):
    context = {
        'booking': booking,
        'items': booking.items.all(),
        'platform_fees': booking.platform_fees.all(),
        'currency': settings.CURRENCY_SYMBOL,
    }
    return render_to_string('bookings/invoice.html', context)


def generate_invoice(booking):
    """Renders the booking invoice to PDF and stores it on ``booking.invoice``."""
    from weasyprint import HTML

    html_string = render_invoice_html(booking)

    # Create a PDF file in memory
    pdf_file = BytesIO()
    HTML(string=html_string).write_pdf(target=pdf_file)

    filename = f"invoice_{booking.booking_id}.pdf"
    booking.invoice.save(filename, ContentFile(pdf_file.getvalue()))
    logger.info("Invoice generated for booking %s", booking.booking_id)
    return booking.invoice
