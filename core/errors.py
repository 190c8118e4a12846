"""
Exceptions métier de l'application
"""


class LifeFlowError(Exception):
    """Erreur de base de l'application"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            'error': self.__class__.__name__,
            'message': self.message
        }


class PlanGenerationError(LifeFlowError):
    """Paramètres de plan invalides (dates, kilométrage...)"""


class WorkoutStateError(LifeFlowError):
    """Opération impossible dans l'état courant de la séance"""


class ServiceUnavailableError(LifeFlowError):
    """Service externe non configuré ou injoignable"""
