from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String, Text, func

from database import Base
from models.enums import LoanStatus


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(String(64), primary_key=True, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    # Snapshot of the member's name at submission time
    member_name = Column(String(256), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    tenure_months = Column(Integer, nullable=False)
    status = Column(
        Enum(LoanStatus, native_enum=False, length=32, name="loan_status"),
        nullable=False,
        default=LoanStatus.PENDING_STAFF_APPROVAL,
        index=True,
    )
    approver_level_1_id = Column(Integer, nullable=True)
    approver_level_2_id = Column(Integer, nullable=True)
    approver_level_3_id = Column(Integer, nullable=True)
    approver_level_4_id = Column(Integer, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    # Accurate journal voucher created on final approval
    ledger_voucher_id = Column(String(64), nullable=True)
    ledger_synced_at = Column(DateTime(timezone=True), nullable=True)
    # Set while one request owns the voucher post; cleared only if the post fails
    ledger_sync_started_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
