from .base import Base
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Numeric
from sqlalchemy.orm import Mapped, mapped_column

from payments.money import Money


class Payment(Base):
    __tablename__ = 'payment'

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(index=True)
    created_at: Mapped[datetime] = mapped_column()

    amount: Mapped[Decimal] = mapped_column(Numeric(19, 2), index=True)
    currency: Mapped[str] = mapped_column()
    debtor_iban: Mapped[str] = mapped_column()
    creditor_iban: Mapped[str] = mapped_column()

    # TYPE1, TYPE2
    details: Mapped[str | None] = mapped_column(nullable=True)
    # TYPE3
    creditor_bank_bic: Mapped[str | None] = mapped_column(nullable=True)

    cancelled: Mapped[bool] = mapped_column(default=False, index=True)
    cancellation_fee_amount: Mapped[Decimal | None] = mapped_column(Numeric(19, 2), nullable=True)
    cancellation_fee_currency: Mapped[str | None] = mapped_column(nullable=True)
    cancellation_time: Mapped[datetime | None] = mapped_column(nullable=True)

    notification_status: Mapped[str | None] = mapped_column(nullable=True)

    @property
    def money(self) -> Money:
        return Money(self.amount, self.currency)

    @property
    def cancellation_fee(self) -> Money | None:
        if self.cancellation_fee_amount is None and self.cancellation_fee_currency is None:
            return None
        return Money(self.cancellation_fee_amount, self.cancellation_fee_currency)  # type: ignore[arg-type]
