#!/usr/bin/env python3
"""
Notification Channels

Every channel implements the same NotificationChannel interface, so the
announcement flow can fan out a selection result to any configured
combination of them.

Usage:
    from notification.channels import NotificationChannelFactory

    channel = NotificationChannelFactory.get_channel('email')
    channel.send(recipient, subject, body, metadata)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, List, Optional
import logging
import os
import ipaddress
import socket
import smtplib
import urllib.parse
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

import requests

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT_SECONDS = 30


def _blocked_address(url: str) -> Optional[str]:
    """Return why ``url`` may not receive webhooks, or None when it is safe.

    Only http(s) URLs whose host resolves exclusively to public addresses are
    allowed; anything else could be used to reach the internal network.
    """
    try:
        parsed = urllib.parse.urlparse(url)
    except ValueError as e:
        return f"unparseable URL ({e})"

    if parsed.scheme not in ('http', 'https'):
        return f"scheme {parsed.scheme!r} not allowed"
    if not parsed.hostname:
        return "missing hostname"

    try:
        resolved = {info[4][0] for info in socket.getaddrinfo(parsed.hostname, None)}
    except socket.gaierror:
        return f"hostname {parsed.hostname} does not resolve"

    for address in resolved:
        ip = ipaddress.ip_address(address)
        if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local:
            return f"{parsed.hostname} resolves to non-public address {ip}"
    return None


def _validate_webhook_url(url: str) -> bool:
    reason = _blocked_address(url)
    if reason:
        logger.error(f"Refusing webhook URL: {reason}")
        return False
    return True


def _is_dry_run_mode() -> bool:
    """Channels only log when NOTIFICATION_DRY_RUN is set (local runs, rehearsals)."""
    return os.environ.get('NOTIFICATION_DRY_RUN', '').lower() in ('true', '1', 'yes')


def _mask_email(email: str) -> str:
    """Student addresses never reach the logs; keep only the domain."""
    local, sep, domain = email.rpartition('@')
    if not sep or not local:
        return "***"
    return f"***@{domain}"


@dataclass(frozen=True)
class SmtpSettings:
    """SMTP connection settings, read from the environment."""
    server: str
    port: int
    username: str
    password: str
    from_email: str

    REQUIRED = ('SMTP_SERVER', 'SMTP_PORT', 'SMTP_USERNAME', 'SMTP_PASSWORD')

    @classmethod
    def from_env(cls) -> Optional["SmtpSettings"]:
        if not all(os.environ.get(var) for var in cls.REQUIRED):
            return None
        try:
            port = int(os.environ['SMTP_PORT'])
        except ValueError:
            logger.error(f"SMTP_PORT is not a number: {os.environ['SMTP_PORT']!r}")
            return None
        return cls(
            server=os.environ['SMTP_SERVER'],
            port=port,
            username=os.environ['SMTP_USERNAME'],
            password=os.environ['SMTP_PASSWORD'],
            from_email=os.environ.get('FROM_EMAIL', 'noreply@ppdb.local'),
        )


class NotificationChannel(ABC):
    """Abstract base class for all notification channels."""

    @property
    @abstractmethod
    def channel_type(self) -> str:
        """Return the channel type identifier."""
        pass

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        """
        Deliver one selection result.

        Args:
            recipient: Address for this channel (email, webhook URL, user id)
            subject: Short title of the result
            body: Plain-text body
            metadata: Channel-specific extras ('html_body', 'payload', ...)

        Returns:
            True when delivered; False on any delivery failure
        """
        pass

    def validate_config(self) -> bool:
        return True


class EmailChannel(NotificationChannel):
    """Selection results by email, plain text with an optional HTML part."""

    @property
    def channel_type(self) -> str:
        return 'email'

    def validate_config(self) -> bool:
        return SmtpSettings.from_env() is not None

    def _build_message(self, settings: SmtpSettings, recipient: str, subject: str,
                       body: str, html_body: Optional[str]) -> MIMEMultipart:
        msg = MIMEMultipart('alternative')
        msg['From'] = settings.from_email
        msg['To'] = recipient
        msg['Subject'] = subject
        msg.attach(MIMEText(body, 'plain', 'utf-8'))
        if html_body:
            msg.attach(MIMEText(html_body, 'html', 'utf-8'))
        return msg

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        if _is_dry_run_mode():
            logger.info(f"[DRY RUN] Email to {_mask_email(recipient)}: {subject}")
            return True

        settings = SmtpSettings.from_env()
        if settings is None:
            logger.error("Email not configured - SMTP environment variables not set")
            return False

        msg = self._build_message(settings, recipient, subject, body, metadata.get('html_body'))
        try:
            with smtplib.SMTP(settings.server, settings.port) as server:
                server.starttls()
                server.login(settings.username, settings.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {_mask_email(recipient)}: {e}")
            return False

        logger.info(f"Email sent to {_mask_email(recipient)}")
        return True


class WebhookChannel(NotificationChannel):
    """POSTs the selection result as JSON to a school-configured endpoint."""

    @property
    def channel_type(self) -> str:
        return 'webhook'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        if not _validate_webhook_url(recipient):
            return False

        payload = metadata.get('payload') or {'subject': subject, 'body': body}

        if _is_dry_run_mode():
            logger.info(f"[DRY RUN] Webhook {payload.get('type', 'message')}: {subject}")
            return True

        try:
            response = requests.post(
                recipient,
                json=payload,
                headers={'User-Agent': 'PPDB-Notification-Service/1.0'},
                timeout=WEBHOOK_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Webhook delivery failed: {e}")
            return False

        parsed = urllib.parse.urlparse(recipient)
        logger.info(f"Webhook delivered to {parsed.scheme}://{parsed.hostname}{parsed.path}")
        return True


class InAppChannel(NotificationChannel):
    """In-app notification channel; the notification_log row is the inbox entry."""

    @property
    def channel_type(self) -> str:
        return 'in_app'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        logger.info(f"[IN_APP] User: {recipient}, Title: {subject}")
        return True


class NotificationChannelFactory:
    """
    Registry of notification channels.

    New channels are added with register_channel without touching the
    announcement code.
    """

    _channels: Dict[str, type] = {
        'email': EmailChannel,
        'webhook': WebhookChannel,
        'in_app': InAppChannel,
    }

    @classmethod
    def get_channel(cls, channel_type: str) -> NotificationChannel:
        """
        Get a notification channel instance by type.

        Raises:
            ValueError: If channel type is not registered
        """
        channel_class = cls._channels.get(channel_type.lower())
        if not channel_class:
            raise ValueError(f"Unknown channel type: {channel_type}. "
                             f"Available: {', '.join(cls._channels.keys())}")

        return channel_class()

    @classmethod
    def register_channel(cls, channel_type: str, channel_class: type):
        if not issubclass(channel_class, NotificationChannel):
            raise ValueError("Channel class must extend NotificationChannel")

        cls._channels[channel_type.lower()] = channel_class
        logger.info(f"Registered new channel type: {channel_type}")

    @classmethod
    def list_channels(cls) -> List[str]:
        return list(cls._channels.keys())
