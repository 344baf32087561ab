from core.registrations.service import RegistrationService, VerificationStats

__all__ = ['RegistrationService', 'VerificationStats']
