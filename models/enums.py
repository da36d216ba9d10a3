"""
Loan lifecycle enums shared by the SQLAlchemy model, the approval engine
and the Pydantic schemas.
"""
import enum


class LoanStatus(str, enum.Enum):
    PENDING_STAFF_APPROVAL = "PENDING_STAFF_APPROVAL"
    PENDING_MANAGER_APPROVAL = "PENDING_MANAGER_APPROVAL"
    PENDING_BENDAHARA_APPROVAL = "PENDING_BENDAHARA_APPROVAL"
    PENDING_KETUA_APPROVAL = "PENDING_KETUA_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LoanAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ActorRole(str, enum.Enum):
    ANGGOTA = "anggota"  # member
    PENGURUS = "pengurus"  # board / administrator
