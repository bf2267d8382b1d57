"""
Coterie Nominations - FastAPI service for nomination form submissions.

This package accepts nominations for The Coterie, renders the admin notice and
acknowledgment emails, and sends them through the Resend API or SMTP.
"""

__version__ = "1.0.0"
__description__ = "FastAPI service for Coterie nomination emails"
