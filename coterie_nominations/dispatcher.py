"""
Notification Dispatcher Module

Builds the dispatch batch for one nomination (admin notice plus
acknowledgments) and submits every message to the mail transport
concurrently. The batch is all-or-nothing from the caller's point of view:
a single rejected send fails the whole dispatch, with no retry and no
rollback of the sends that went through.
"""

import asyncio
import logging
import os
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .models import EmailMessage, NominationSubmission
from .templates import NominationType, TemplateType, admin_template_for, render_template
from .transport import MailTransport, UnconfiguredTransport, build_transport

logger = logging.getLogger(__name__)


# Defaults, overridden by NOMINATION_ADMIN_EMAIL, EMAIL_FROM and ESCAPE_SUBMISSION_HTML
DEFAULT_ADMIN_EMAIL = "thecoterie@promontoryai.com"
DEFAULT_EMAIL_FROM = "The Coterie <onboarding@resend.dev>"


class DeliveryStatus(Enum):
    """Outcome of a single send within a batch"""
    SENT = "sent"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    """Container for one send outcome"""
    recipient: str
    subject: str
    status: DeliveryStatus
    message_id: Optional[str] = None
    error_message: Optional[str] = None


class DispatchError(Exception):
    """At least one message in the batch was not accepted by the transport"""

    def __init__(self, results: List[DeliveryResult], cause: Optional[BaseException] = None):
        self.results = results
        self.cause = cause
        failed = [r for r in results if r.status == DeliveryStatus.FAILED]
        detail = "; ".join(f"{r.recipient}: {r.error_message}" for r in failed)
        super().__init__(f"{len(failed)}/{len(results)} emails failed to send: {detail}")


class NotificationDispatcher:
    """
    Turns a nomination into email messages and sends them as one batch

    The transport is injected so it can be swapped for a test double.
    """

    def __init__(
        self,
        transport: MailTransport,
        admin_email: Optional[str] = None,
        from_address: Optional[str] = None,
        escape_html: Optional[bool] = None,
    ):
        # Unset arguments fall back to the environment at construction time
        self.transport = transport
        self.admin_email = admin_email or os.getenv("NOMINATION_ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
        self.from_address = from_address or os.getenv("EMAIL_FROM", DEFAULT_EMAIL_FROM)
        if escape_html is None:
            escape_html = os.getenv("ESCAPE_SUBMISSION_HTML", "false").lower() == "true"
        self.escape_html = escape_html

    def _message(self, template_type: TemplateType, context: dict, to: str, reply_to: Optional[str]) -> EmailMessage:
        subject, html_body = render_template(template_type, context, autoescape=self.escape_html)
        return EmailMessage(
            from_address=self.from_address,
            to=to,
            subject=subject,
            html_body=html_body,
            reply_to=reply_to or None,
        )

    def build_admin_message(self, submission: NominationSubmission) -> EmailMessage:
        """Build the operator notice; replies go to the nominator if there is one"""
        context = submission.template_context()
        reply_to = submission.nominator_email or submission.email
        return self._message(admin_template_for(submission.nomination_type), context, self.admin_email, reply_to)

    def build_acknowledgments(self, submission: NominationSubmission) -> List[EmailMessage]:
        """
        Build the acknowledgment emails

        One to the nominee for self-nominations; one to the nominee and one
        to the nominator for peer nominations. Recipients without an address
        are skipped, which only happens when validation is disabled.
        """
        context = submission.template_context()

        if submission.nomination_type == NominationType.SELF.value:
            planned = [(TemplateType.NOMINEE_SELF, submission.email)]
        else:
            planned = [
                (TemplateType.NOMINEE_PEER, submission.email),
                (TemplateType.NOMINATOR, submission.nominator_email),
            ]

        messages = []
        for template_type, recipient in planned:
            if not recipient or not recipient.strip():
                logger.warning(f"Skipping {template_type.value} acknowledgment: no recipient address")
                continue
            messages.append(self._message(template_type, context, recipient.strip(), self.admin_email))
        return messages

    def build_messages(self, submission: NominationSubmission) -> List[EmailMessage]:
        """Build the full dispatch batch, admin notice first"""
        return [self.build_admin_message(submission)] + self.build_acknowledgments(submission)

    async def _send_one(self, message: EmailMessage) -> str:
        # Transport clients block, so each send runs on a worker thread
        return await asyncio.to_thread(self.transport.send, message)

    async def dispatch(self, submission: NominationSubmission) -> List[DeliveryResult]:
        """
        Send every message for a submission concurrently

        Args:
            submission: A nomination that has passed validation

        Returns:
            One DeliveryResult per message, all SENT

        Raises:
            DispatchError: If any send in the batch failed
        """
        messages = self.build_messages(submission)
        start_time = time.time()

        outcomes = await asyncio.gather(
            *[self._send_one(message) for message in messages],
            return_exceptions=True
        )

        results = []
        first_error = None
        for message, outcome in zip(messages, outcomes):
            if isinstance(outcome, BaseException):
                first_error = first_error or outcome
                logger.error(f"Email to {message.to} ({message.subject!r}) failed: {outcome}")
                results.append(DeliveryResult(
                    recipient=message.to,
                    subject=message.subject,
                    status=DeliveryStatus.FAILED,
                    error_message=str(outcome),
                ))
            else:
                logger.info(f"Email to {message.to} ({message.subject!r}) sent via {self.transport.name}: {outcome}")
                results.append(DeliveryResult(
                    recipient=message.to,
                    subject=message.subject,
                    status=DeliveryStatus.SENT,
                    message_id=outcome,
                ))

        elapsed = time.time() - start_time
        if first_error is not None:
            raise DispatchError(results, cause=first_error) from first_error

        logger.info(f"Dispatched {len(results)} emails in {elapsed:.2f}s")
        return results


# Global dispatcher instance
_dispatcher: Optional[NotificationDispatcher] = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> NotificationDispatcher:
    """Get or create the global dispatcher; also used as a FastAPI dependency"""
    global _dispatcher
    # FastAPI runs sync dependencies on its threadpool, so first use is guarded
    with _dispatcher_lock:
        if _dispatcher is None:
            try:
                transport = build_transport()
            except ValueError as e:
                logger.error(f"{e}; nominations will fail until the transport is configured")
                transport = UnconfiguredTransport(str(e))
            _dispatcher = NotificationDispatcher(transport)
        return _dispatcher


def reset_dispatcher():
    """Drop the global dispatcher so the next call rebuilds it from the environment"""
    global _dispatcher
    with _dispatcher_lock:
        _dispatcher = None
