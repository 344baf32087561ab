import sys
import time
import logging
import argparse

from core.announcement import AnnouncementService
from core.config_loader import load_config
from core.exceptions import ServiceException
from core.selection import SelectionService
from database.database import build_engine, build_session_factory
from database.init_db import init_db
from database.uow import selection_uow
from notification.service import NotificationService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_calculate_scores(config, session_factory, period_id: int) -> None:
    with selection_uow(session_factory) as uow:
        total = SelectionService(uow, config=config.selection).calculate_scores(period_id)
    logger.info(f"Calculated scores for {total} registrations")


def run_update_rankings(config, session_factory, period_id: int) -> None:
    with selection_uow(session_factory) as uow:
        total = SelectionService(uow, config=config.selection).update_rankings(period_id)
    logger.info(f"Updated rankings for {total} registrations")


def run_selection(config, session_factory, period_id: int, actor_id: int) -> None:
    """Rank and allocate a period in one transaction."""
    step_start = time.time()
    with selection_uow(session_factory) as uow:
        result = SelectionService(uow, config=config.selection).run_selection(period_id, actor_id=actor_id)

    for path in result.paths:
        logger.info(
            f"  {path.path_name}: quota {path.quota}, accepted {path.accepted}, "
            f"rejected {path.rejected}, unscored {path.unscored}"
        )
    logger.info(
        f"Selection completed in {time.time() - step_start:.2f}s. "
        f"Accepted: {result.total_accepted}, Rejected: {result.total_rejected}"
    )


def run_announce(config, session_factory, period_id: int, actor_id: int) -> None:
    notifier = None
    if config.notifications.enabled:
        notifier = NotificationService.from_config(config.notifications)

    with selection_uow(session_factory) as uow:
        result = AnnouncementService(uow, notifier).announce(period_id, actor_id=actor_id)

    logger.info(
        f"Results announced. {result.total_notified} notifications "
        f"({result.accepted_notified} accepted, {result.rejected_notified} rejected, "
        f"{result.failed_notifications} failed)"
    )


def show_summary(config, session_factory, period_id: int) -> None:
    with selection_uow(session_factory) as uow:
        summary = AnnouncementService(uow).get_summary(period_id)

    announced = summary.announcement_date.isoformat() if summary.announcement_date else "not announced"
    print(f"Period {summary.period_id} ({announced})")
    print(f"  verified={summary.verified} accepted={summary.accepted} rejected={summary.rejected}")
    for path in summary.paths:
        print(
            f"  - {path.path_name}: quota={path.quota} accepted={path.accepted} "
            f"rejected={path.rejected} remaining={path.remaining_quota}"
        )


def show_stats(config, session_factory, period_id: int) -> None:
    with selection_uow(session_factory) as uow:
        stats = SelectionService(uow, config=config.selection).get_ranking_stats(period_id)

    for s in stats:
        print(
            f"{s.path_name} [{s.path_type}] quota={s.quota} count={s.total_registrations} "
            f"min={s.lowest_score} max={s.highest_score} avg={s.average_score}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PPDB selection engine")
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('init-db', help='Create database tables')

    for name, help_text in [
        ('calculate-scores', 'Score every verified registration of a period'),
        ('update-rankings', 'Recompute per-path rankings'),
        ('summary', 'Show selection summary'),
        ('stats', 'Show per-path score statistics'),
    ]:
        p = sub.add_parser(name, help=help_text)
        p.add_argument('period_id', type=int)

    for name, help_text in [
        ('run-selection', 'Rank and allocate quota for a period'),
        ('announce', 'Publish results and notify applicants'),
    ]:
        p = sub.add_parser(name, help=help_text)
        p.add_argument('period_id', type=int)
        p.add_argument('--actor-id', type=int, required=True, help='Administrator performing the action')

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    # Engine follows --config, not the import-time default
    engine = build_engine(config.database)
    session_factory = build_session_factory(engine)

    try:
        if args.command == 'init-db':
            init_db(bind=engine)
        elif args.command == 'calculate-scores':
            run_calculate_scores(config, session_factory, args.period_id)
        elif args.command == 'update-rankings':
            run_update_rankings(config, session_factory, args.period_id)
        elif args.command == 'run-selection':
            run_selection(config, session_factory, args.period_id, args.actor_id)
        elif args.command == 'announce':
            run_announce(config, session_factory, args.period_id, args.actor_id)
        elif args.command == 'summary':
            show_summary(config, session_factory, args.period_id)
        elif args.command == 'stats':
            show_stats(config, session_factory, args.period_id)
    except ServiceException as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 1
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
