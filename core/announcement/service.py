#!/usr/bin/env python3
"""
Announcement Service - publish selection results and serve lookups.

announce() is the irreversible step: it stamps the period's
announcement_date, after which scores, ranks and statuses are frozen and the
public check_result lookup opens. The stamp is committed before any
notification leaves, so applicants are only told results that check_result
already serves. Notifications are a fire-and-forget side effect; a failed
dispatch is logged and recorded in notification_log but never fails the
announcement. The caller commits those log entries.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from core.announcement.models import (
    AnnouncementResult,
    PathSelectionSummary,
    ResultCheck,
    SelectionSummary,
)
from core.enums import RegistrationStatus, SelectionOutcome
from core.exceptions import NotFoundException, ValidationException
from database.models import Period
from database.uow import UnitOfWork

logger = logging.getLogger(__name__)


class AnnouncementService:
    """
    Usage:
        with selection_uow() as uow:
            notifier = NotificationService.from_config(config.notifications)
            result = AnnouncementService(uow, notifier).announce(period_id, actor_id)
    """

    def __init__(self, uow: UnitOfWork, notifier=None):
        """
        Args:
            uow: Unit of work for the request
            notifier: Object with notify_selection_result(registration, path_name,
                outcome, period); None disables dispatch
        """
        self.uow = uow
        self.notifier = notifier

    def announce(self, period_id: int, actor_id: Optional[int] = None) -> AnnouncementResult:
        """Publish results for a period and notify every decided applicant.

        Raises:
            NotFoundException: unknown period
            ValidationException: already announced, or nobody accepted yet
        """
        period = self.uow.periods.get_for_update(period_id)
        if period is None:
            raise NotFoundException(f"Period {period_id} not found")
        if period.is_announced:
            raise ValidationException(f"Results for period {period_id} have already been announced")

        accepted_count = self.uow.registrations.count_by_status(period_id, RegistrationStatus.ACCEPTED)
        if accepted_count == 0:
            raise ValidationException("No accepted registrations found. Please run selection first.")

        now = datetime.now(timezone.utc)
        self.uow.periods.set_announcement_date(period, now)
        # Results are public from here on; notify only what is durable
        self.uow.session.commit()

        accepted = self.uow.registrations.find_by_status(period_id, RegistrationStatus.ACCEPTED)
        rejected = self.uow.registrations.find_by_status(period_id, RegistrationStatus.REJECTED)
        path_names = {p.id: p.name for p in self.uow.periods.find_paths_by_period(period_id)}

        result = AnnouncementResult(
            period_id=period_id,
            announcement_date=now,
            total_notified=len(accepted) + len(rejected),
            accepted_notified=len(accepted),
            rejected_notified=len(rejected),
        )

        if self.notifier is None:
            logger.info(f"Notifications disabled; announced period {period_id} without dispatch")
        else:
            for registration in accepted:
                if not self._dispatch(period, registration, SelectionOutcome.ACCEPTED, path_names):
                    result.failed_notifications += 1
            for registration in rejected:
                if not self._dispatch(period, registration, SelectionOutcome.REJECTED, path_names):
                    result.failed_notifications += 1

        logger.info(
            f"Results announced for period {period_id} by admin {actor_id}. "
            f"Notifications sent: {result.accepted_notified} accepted, "
            f"{result.rejected_notified} rejected, {result.failed_notifications} failed"
        )
        return result

    def get_summary(self, period_id: int) -> SelectionSummary:
        period = self._get_period(period_id)
        registrations = self.uow.registrations

        summary = SelectionSummary(
            period_id=period_id,
            verified=registrations.count_by_status(period_id, RegistrationStatus.VERIFIED),
            accepted=registrations.count_by_status(period_id, RegistrationStatus.ACCEPTED),
            rejected=registrations.count_by_status(period_id, RegistrationStatus.REJECTED),
            announcement_date=period.announcement_date,
        )

        for path in self.uow.periods.find_paths_by_period(period_id):
            path_accepted = registrations.count_by_status(period_id, RegistrationStatus.ACCEPTED, path.id)
            summary.paths.append(PathSelectionSummary(
                path_id=path.id,
                path_name=path.name,
                quota=path.quota,
                verified=registrations.count_by_status(period_id, RegistrationStatus.VERIFIED, path.id),
                accepted=path_accepted,
                rejected=registrations.count_by_status(period_id, RegistrationStatus.REJECTED, path.id),
                remaining_quota=max(0, path.quota - path_accepted),
            ))

        return summary

    def check_result(self, registration_number: str, student_nisn: str) -> ResultCheck:
        """Public lookup; only available once the owning period is announced."""
        matches = self.uow.registrations.find_by_number_and_nisn(registration_number, student_nisn)
        if len(matches) != 1:
            raise NotFoundException("Registration not found or NISN does not match")
        registration = matches[0]

        period = self._get_period(registration.period_id)
        if not period.is_announced:
            raise ValidationException("Results have not been announced yet")

        path = self.uow.periods.get_path_by_id(registration.path_id)
        if path is None:
            raise NotFoundException("Registration path not found")

        return ResultCheck(
            registration_number=registration.registration_number or "",
            student_name=registration.student_name,
            student_nisn=registration.student_nisn,
            path_name=path.name,
            selection_score=registration.selection_score,
            ranking=registration.ranking,
            status=registration.status,
            rejection_reason=registration.rejection_reason,
            announcement_date=period.announcement_date,
            reenrollment_deadline=period.reenrollment_deadline,
        )

    def _get_period(self, period_id: int) -> Period:
        period = self.uow.periods.get_by_id(period_id)
        if period is None:
            raise NotFoundException(f"Period {period_id} not found")
        return period

    def _dispatch(
        self,
        period: Period,
        registration,
        outcome: SelectionOutcome,
        path_names: Dict[int, str]
    ) -> bool:
        """Notify one applicant; returns False if any channel failed."""
        event_type = f"selection_{outcome.value}"
        path_name = path_names.get(registration.path_id, "")
        logger.info(f"Sending {outcome.value} notification to registration {registration.id}")

        try:
            dispatches = self.notifier.notify_selection_result(registration, path_name, outcome, period)
        except Exception as e:
            # Delivery is best effort; the announcement itself must stand
            logger.error(f"Notification for registration {registration.id} failed: {e}", exc_info=True)
            self.uow.notifications.record(
                registration_id=registration.id,
                period_id=period.id,
                event_type=event_type,
                channel_type='dispatcher',
                recipient=None,
                subject=None,
                success=False,
                error_message=str(e),
            )
            return False

        all_sent = True
        for dispatch in dispatches:
            self.uow.notifications.record(
                registration_id=registration.id,
                period_id=period.id,
                event_type=event_type,
                channel_type=dispatch.channel_type,
                recipient=dispatch.recipient,
                subject=dispatch.subject,
                success=dispatch.success,
                notification_id=dispatch.notification_id,
                error_message=dispatch.error,
                event_data={'path_id': registration.path_id, 'ranking': registration.ranking},
            )
            if not dispatch.success:
                all_sent = False
                logger.warning(
                    f"{dispatch.channel_type} notification for registration {registration.id} "
                    f"failed: {dispatch.error}"
                )
        return all_sent
