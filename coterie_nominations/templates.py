"""
Email Template Repository

This module contains the fixed subject and HTML body templates for the
nomination emails: the admin notice (self or peer) and the acknowledgments
sent back to the nominee and, for peer nominations, the nominator.
"""

from enum import Enum
from typing import Optional

from jinja2 import Environment


class NominationType(str, Enum):
    """Kinds of nomination accepted by the form"""
    SELF = "self"
    PEER = "peer"


class TemplateType(str, Enum):
    """Available email template types"""
    ADMIN_SELF = "admin_self"
    ADMIN_PEER = "admin_peer"
    NOMINEE_SELF = "nominee_self"
    NOMINEE_PEER = "nominee_peer"
    NOMINATOR = "nominator"


_NOMINEE_DETAILS = """<h3 style="font-family: Arial, sans-serif;">Nominee Details:</h3>
<ul style="font-family: Arial, sans-serif; line-height: 1.6;">
    <li><strong>Name:</strong> {{ name }}</li>
    <li><strong>Email:</strong> {{ email }}</li>
    <li><strong>Title:</strong> {{ title }}</li>
    <li><strong>Company:</strong> {{ company }}</li>
    <li><strong>LinkedIn:</strong> <a href="{{ linkedin }}">{{ linkedin }}</a></li>
    <li><strong>Community of Interest:</strong> {{ community }}</li>
</ul>
<h3 style="font-family: Arial, sans-serif;">Reason for Fit:</h3>
<p style="font-family: Arial, sans-serif; white-space: pre-wrap;">{{ qualification }}</p>"""


# Template Repository: (subject, html body) per template type
TEMPLATE_REPOSITORY = {
    TemplateType.ADMIN_SELF: (
        "New Coterie Nomination (Self): {{ name }}",
        """<p style="font-family: Arial, sans-serif;">A new <strong>self-nomination</strong> has been submitted for The Coterie.</p>
""" + _NOMINEE_DETAILS,
    ),

    TemplateType.ADMIN_PEER: (
        "New Coterie Nomination (Peer): {{ name }} by {{ nominator_name }}",
        """<p style="font-family: Arial, sans-serif;">A new <strong>peer nomination</strong> has been submitted for The Coterie.</p>
""" + _NOMINEE_DETAILS + """
<hr>
<h3 style="font-family: Arial, sans-serif;">Nominator Details:</h3>
<ul style="font-family: Arial, sans-serif; line-height: 1.6;">
    <li><strong>Name:</strong> {{ nominator_name }}</li>
    <li><strong>Email:</strong> {{ nominator_email }}</li>
</ul>""",
    ),

    TemplateType.NOMINEE_SELF: (
        "We received your nomination for The Coterie",
        """<p style="font-family: Arial, sans-serif;">Hi {{ name }},</p>
<p style="font-family: Arial, sans-serif;">Thank you for nominating yourself for <strong>The Coterie</strong>. Your submission has been received and will be reviewed by our team.</p>
<p style="font-family: Arial, sans-serif;">We will be in touch once the review is complete.</p>
<p style="font-family: Arial, sans-serif;">Best regards,<br>The Coterie</p>""",
    ),

    TemplateType.NOMINEE_PEER: (
        "You have been nominated for The Coterie",
        """<p style="font-family: Arial, sans-serif;">Hi {{ name }},</p>
<p style="font-family: Arial, sans-serif;"><strong>{{ nominator_name }}</strong> has nominated you for <strong>The Coterie</strong>. The nomination has been received and will be reviewed by our team.</p>
<p style="font-family: Arial, sans-serif;">We will be in touch once the review is complete.</p>
<p style="font-family: Arial, sans-serif;">Best regards,<br>The Coterie</p>""",
    ),

    TemplateType.NOMINATOR: (
        "Thank you for your Coterie nomination",
        """<p style="font-family: Arial, sans-serif;">Hi {{ nominator_name }},</p>
<p style="font-family: Arial, sans-serif;">Thank you for nominating <strong>{{ name }}</strong> for <strong>The Coterie</strong>. The nomination has been received and will be reviewed by our team.</p>
<p style="font-family: Arial, sans-serif;">Best regards,<br>The Coterie</p>""",
    ),
}


def admin_template_for(nomination_type: Optional[str]) -> TemplateType:
    """Pick the admin template; anything other than a self-nomination is treated as peer"""
    if nomination_type == NominationType.SELF.value:
        return TemplateType.ADMIN_SELF
    return TemplateType.ADMIN_PEER


def render_template(template_type: TemplateType, context: dict, autoescape: bool = False) -> tuple[str, str]:
    """
    Render the subject and HTML body of a template

    Args:
        template_type: Which template to render
        context: Template variables (submission fields in snake_case)
        autoescape: HTML-escape interpolated values. Off by default, so
            submitted text is interpolated verbatim.

    Returns:
        Tuple of (subject, html_body)
    """
    subject_str, body_str = TEMPLATE_REPOSITORY[template_type]

    # Subjects are plain text headers, never escaped
    subject = Environment(autoescape=False).from_string(subject_str).render(**context)
    body = Environment(autoescape=autoescape).from_string(body_str).render(**context)
    return subject.strip(), body.strip()
