from core.periods.service import PeriodService

__all__ = ['PeriodService']
