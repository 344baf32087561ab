import html
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from pydantic import BaseModel

from core.enums import SelectionOutcome


class SelectionNotificationContent(BaseModel):
    registration_id: int
    registration_number: Optional[str] = None
    student_name: str
    student_nisn: str
    path_name: str
    outcome: SelectionOutcome
    selection_score: Optional[float] = None
    ranking: Optional[int] = None
    rejection_reason: Optional[str] = None
    academic_year: Optional[str] = None
    announcement_date: Optional[datetime] = None
    reenrollment_deadline: Optional[datetime] = None
    check_result_url: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.outcome is SelectionOutcome.ACCEPTED


class NotificationMessageBuilder:
    @staticmethod
    def build_check_result_url(base_url: str, registration_number: Optional[str], nisn: str) -> Optional[str]:
        """Link to the public result lookup for this applicant."""
        if not registration_number:
            return None
        query = urlencode({'registration_number': registration_number, 'student_nisn': nisn})
        return f"{base_url.rstrip('/')}/api/check-result?{query}"

    @staticmethod
    def build_from_orm(
        registration,
        path_name: str,
        outcome: SelectionOutcome,
        period,
        base_url: str
    ) -> SelectionNotificationContent:
        """Build notification content from ORM objects.

        Score and rank are read as-is; they are frozen once the period is
        announced, so the message and the public lookup always agree.
        """
        score = getattr(registration, 'selection_score', None)
        return SelectionNotificationContent(
            registration_id=registration.id,
            registration_number=registration.registration_number,
            student_name=registration.student_name,
            student_nisn=registration.student_nisn,
            path_name=path_name,
            outcome=outcome,
            selection_score=float(score) if score is not None else None,
            ranking=getattr(registration, 'ranking', None),
            rejection_reason=getattr(registration, 'rejection_reason', None),
            academic_year=getattr(period, 'academic_year', None),
            announcement_date=getattr(period, 'announcement_date', None),
            reenrollment_deadline=getattr(period, 'reenrollment_deadline', None),
            check_result_url=NotificationMessageBuilder.build_check_result_url(
                base_url, registration.registration_number, registration.student_nisn
            ),
        )

    @staticmethod
    def build_subject(content: SelectionNotificationContent) -> str:
        if content.accepted:
            return f"Congratulations! You have been accepted via {content.path_name}"
        return f"PPDB selection result for {content.student_name}"

    @staticmethod
    def _format_score(content: SelectionNotificationContent) -> str:
        if content.selection_score is None:
            return "-"
        return f"{content.selection_score:.2f}"

    @staticmethod
    def to_text(content: SelectionNotificationContent) -> str:
        """Plain-text body used by email fallbacks and in-app messages."""
        lines = [f"Dear {content.student_name},", ""]

        if content.accepted:
            lines.append(f"You have been ACCEPTED through the {content.path_name} path.")
        else:
            lines.append(f"You were not accepted through the {content.path_name} path.")
            if content.rejection_reason:
                lines.append(f"Reason: {content.rejection_reason}")

        lines.append("")
        if content.registration_number:
            lines.append(f"Registration number: {content.registration_number}")
        if content.academic_year:
            lines.append(f"Academic year: {content.academic_year}")
        lines.append(f"Selection score: {NotificationMessageBuilder._format_score(content)}")
        if content.ranking is not None:
            lines.append(f"Ranking: {content.ranking}")

        if content.accepted and content.reenrollment_deadline:
            lines.append("")
            lines.append(
                "Please complete re-enrollment before "
                f"{content.reenrollment_deadline.strftime('%Y-%m-%d %H:%M')}."
            )

        if content.check_result_url:
            lines.append("")
            lines.append(f"Check your result: {content.check_result_url}")

        lines.append("")
        lines.append("---")
        lines.append("PPDB Committee")
        return "\n".join(lines)

    @staticmethod
    def to_html(content: SelectionNotificationContent) -> str:
        """HTML body for email."""
        subject = html.escape(NotificationMessageBuilder.build_subject(content))
        name = html.escape(content.student_name)
        path_name = html.escape(content.path_name)
        color = "#28A745" if content.accepted else "#DC3545"
        verdict = "ACCEPTED" if content.accepted else "NOT ACCEPTED"

        rows = []
        if content.registration_number:
            rows.append(("Registration number", html.escape(content.registration_number)))
        rows.append(("Path", path_name))
        rows.append(("Selection score", NotificationMessageBuilder._format_score(content)))
        if content.ranking is not None:
            rows.append(("Ranking", str(content.ranking)))
        if not content.accepted and content.rejection_reason:
            rows.append(("Reason", html.escape(content.rejection_reason)))
        if content.accepted and content.reenrollment_deadline:
            rows.append(("Re-enrollment deadline", content.reenrollment_deadline.strftime('%Y-%m-%d %H:%M')))

        table = "\n".join(
            f'            <tr><td class="label">{label}</td><td>{value}</td></tr>' for label, value in rows
        )

        link = ""
        if content.check_result_url:
            safe_url = html.escape(content.check_result_url, quote=True)
            link = f'        <p><a href="{safe_url}">Check your result</a></p>\n'

        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
        .header {{ background: {color}; color: white; padding: 20px; border-radius: 8px 8px 0 0; }}
        .content {{ padding: 20px; background: #f9f9f9; }}
        .label {{ font-weight: bold; padding-right: 12px; }}
        .footer {{ text-align: center; padding: 15px; color: #666; font-size: 12px; }}
    </style>
</head>
<body>
    <div class="header">
        <h1>{subject}</h1>
    </div>
    <div class="content">
        <p>Dear {name}, your selection result is: <strong>{verdict}</strong></p>
        <table>
{table}
        </table>
{link}    </div>
    <div class="footer">
        <p>PPDB Committee</p>
    </div>
</body>
</html>"""

    @staticmethod
    def to_webhook_payload(content: SelectionNotificationContent) -> Dict[str, Any]:
        return {
            'type': 'selection_result',
            'subject': NotificationMessageBuilder.build_subject(content),
            'registration': content.model_dump(mode='json'),
        }
