from models.enums import ActorRole, LoanAction, LoanStatus
from models.loan import LoanApplication

__all__ = [
    "ActorRole",
    "LoanAction",
    "LoanApplication",
    "LoanStatus",
]
