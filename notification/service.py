#!/usr/bin/env python3
"""
Notification Service - selection result delivery.

Fans one applicant's selection outcome out to every configured channel,
either synchronously or through a Redis Queue worker.

Usage:
    from notification.service import NotificationService

    service = NotificationService.from_config(config.notifications)
    dispatches = service.notify_selection_result(
        registration, path_name="Zonasi", outcome=SelectionOutcome.ACCEPTED, period=period
    )
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue, Retry

from core.config_loader import NotificationConfig
from core.enums import SelectionOutcome
from notification.channels import NotificationChannelFactory
from notification.message_builder import NotificationMessageBuilder

logger = logging.getLogger(__name__)


@dataclass
class ChannelDispatch:
    """Outcome of handing one notification to one channel."""
    channel_type: str
    recipient: Optional[str]
    subject: str
    success: bool
    notification_id: Optional[str] = None
    error: Optional[str] = None


class NotificationService:
    """
    Main notification service.

    This service coordinates:
    1. Message building (via NotificationMessageBuilder)
    2. Channel selection (via NotificationChannelFactory)
    3. Queueing for async processing (via RQ) or sending inline
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        channels: Optional[List[str]] = None,
        channel_recipients: Optional[Dict[str, str]] = None,
        redis_url: Optional[str] = None,
        use_async_queue: bool = False,
        queue_name: str = "notifications"
    ):
        """
        Args:
            base_url: Base URL for the result-check link in messages
            channels: Channel types to notify (default: ['in_app'])
            channel_recipients: Fixed recipient per channel (webhook URL etc.)
            redis_url: Redis connection URL, required for async mode
            use_async_queue: Whether to enqueue on RQ instead of sending inline
            queue_name: RQ queue name
        """
        self.base_url = base_url
        self.channels = channels if channels is not None else ['in_app']
        self.channel_recipients = channel_recipients or {}
        self.redis_url = redis_url or 'redis://localhost:6379/0'

        self.redis_conn = None
        self.queue = None
        self.async_mode = False

        if not use_async_queue:
            logger.info("Async queue disabled via config. Using sync mode.")
            return

        try:
            self.redis_conn = Redis.from_url(self.redis_url)
            # Validate connection with ping before using
            self.redis_conn.ping()
            self.queue = Queue(queue_name, connection=self.redis_conn)
            self.async_mode = True
            logger.info("Notification service connected to Redis")
        except RedisError as e:
            logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
            self.redis_conn = None
            self.queue = None

    @classmethod
    def from_config(cls, config: NotificationConfig) -> "NotificationService":
        channels = config.enabled_channels()
        recipients = {
            name: ch.recipient for name, ch in config.channels.items() if ch.enabled and ch.recipient
        }
        return cls(
            base_url=config.base_url,
            channels=channels,
            channel_recipients=recipients,
            redis_url=config.redis_url,
            use_async_queue=config.use_async_queue,
            queue_name=config.queue_name,
        )

    def send_notification(
        self,
        channel_type: str,
        recipient: str,
        subject: str,
        body: str,
        event_type: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Send or enqueue one notification.

        Returns:
            {'notification_id', 'success', 'error'}; in async mode success
            means the job was queued.
        """
        notification_data = {
            'channel_type': channel_type,
            'recipient': recipient,
            'subject': subject,
            'body': body,
            'event_type': event_type,
            'metadata': metadata or {},
        }

        if self.async_mode:
            retry_policy = Retry(max=3, interval=[30, 60, 120])
            job = self.queue.enqueue(
                process_notification_task,
                notification_data,
                job_timeout='5m',
                result_ttl=86400,
                retry=retry_policy
            )
            logger.info(f"Queued notification as job {job.id}")
            return {'notification_id': job.id, 'success': True, 'error': None}

        return process_notification_task(notification_data)

    def notify_selection_result(
        self,
        registration,
        path_name: str,
        outcome: SelectionOutcome,
        period
    ) -> List[ChannelDispatch]:
        """
        Notify one applicant of their selection outcome on every channel.

        A failing channel never stops the others; its failure is reported in
        the returned dispatch list.
        """
        content = NotificationMessageBuilder.build_from_orm(
            registration, path_name, outcome, period, self.base_url
        )
        subject = NotificationMessageBuilder.build_subject(content)
        body = NotificationMessageBuilder.to_text(content)
        event_type = f"selection_{outcome.value}"

        dispatches = []
        for channel in self.channels:
            recipient = self._get_recipient_for_channel(registration, channel)
            if not recipient:
                logger.warning(f"No {channel} recipient for registration {registration.id}")
                dispatches.append(ChannelDispatch(
                    channel_type=channel,
                    recipient=None,
                    subject=subject,
                    success=False,
                    error=f"No recipient for channel {channel}",
                ))
                continue

            metadata = {
                'registration_id': registration.id,
                'outcome': outcome.value,
            }
            if channel == 'email':
                metadata['html_body'] = NotificationMessageBuilder.to_html(content)
            elif channel == 'webhook':
                metadata['payload'] = NotificationMessageBuilder.to_webhook_payload(content)

            try:
                result = self.send_notification(
                    channel_type=channel,
                    recipient=recipient,
                    subject=subject,
                    body=body,
                    event_type=event_type,
                    metadata=metadata,
                )
                dispatches.append(ChannelDispatch(
                    channel_type=channel,
                    recipient=recipient,
                    subject=subject,
                    success=result['success'],
                    notification_id=result['notification_id'],
                    error=result.get('error'),
                ))
            except (RedisError, ValueError) as e:
                logger.error(f"Failed to send {channel} notification: {e}")
                dispatches.append(ChannelDispatch(
                    channel_type=channel,
                    recipient=recipient,
                    subject=subject,
                    success=False,
                    error=str(e),
                ))

        return dispatches

    def _get_recipient_for_channel(self, registration, channel: str) -> Optional[str]:
        """
        Resolve the recipient address for a channel.

        A fixed recipient from config wins; otherwise email goes to the
        student's address and in_app to the owning user.
        """
        if channel in self.channel_recipients:
            return self.channel_recipients[channel]
        if channel == 'email':
            return registration.student_email
        if channel == 'in_app':
            return str(registration.user_id) if registration.user_id is not None else None
        return None

    def get_queue_status(self) -> Dict[str, Any]:
        if not self.async_mode:
            return {'status': 'sync_mode', 'queue_length': 0}

        try:
            return {
                'status': 'active',
                'queue_length': len(self.queue),
                'redis_connected': self.redis_conn.ping()
            }
        except RedisError as e:
            return {'status': 'error', 'error': str(e)}


# Worker task - must be at module level for RQ
def process_notification_task(notification_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Send one notification through its channel (inline or from an RQ worker).
    """
    notification_id = str(uuid.uuid4())
    channel_type = notification_data['channel_type']

    logger.info(f"Processing notification {notification_id} via {channel_type}")

    channel = NotificationChannelFactory.get_channel(channel_type)
    success = channel.send(
        notification_data['recipient'],
        notification_data['subject'],
        notification_data['body'],
        notification_data.get('metadata', {})
    )

    if success:
        logger.info(f"Notification {notification_id} sent successfully")
    else:
        logger.error(f"Notification {notification_id} failed to send")

    return {
        'notification_id': notification_id,
        'success': success,
        'error': None if success else "Send failed",
    }
