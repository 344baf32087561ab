"""
Notification Module

Delivers selection results to applicants over pluggable channels, inline or
through a Redis Queue worker.

Usage:
    from notification import NotificationService, NotificationChannelFactory

    service = NotificationService(channels=['email', 'in_app'])
    service.notify_selection_result(registration, path_name, outcome, period)

    channel = NotificationChannelFactory.get_channel('email')
    channel.send('student@example.com', 'Subject', 'Body', {})
"""

from notification.channels import (
    NotificationChannel,
    EmailChannel,
    WebhookChannel,
    InAppChannel,
    NotificationChannelFactory,
)

from notification.message_builder import (
    NotificationMessageBuilder,
    SelectionNotificationContent,
)

from notification.service import (
    NotificationService,
    ChannelDispatch,
    process_notification_task,
)

__all__ = [
    # Channels
    'NotificationChannel',
    'EmailChannel',
    'WebhookChannel',
    'InAppChannel',
    'NotificationChannelFactory',
    # Messages
    'NotificationMessageBuilder',
    'SelectionNotificationContent',
    # Service
    'NotificationService',
    'ChannelDispatch',
    'process_notification_task',
]
