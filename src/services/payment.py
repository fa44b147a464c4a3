import logging
from fastapi import Depends
from datetime import datetime
from decimal import Decimal
from typing import Annotated
from dataclasses import dataclass
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy import select, update

import db.postgres
import tables
import worker
from payments.cancellation import CancellationEngine
from payments.errors import (
    PaymentValidationError,
    PaymentDoesntExistError,
    CREATION_REQUEST_NULL,
    already_cancelled,
    cancelled_with_fee,
)
from payments.factory import create_new_payment
from payments.validation import validate_payment_type
from payments.policy import PaymentPolicy, get_payment_policy
from payments.schemas import (
    PaymentBody,
    PaymentInfo,
    MoneyInfo,
    CreatePaymentResult,
    CancelPaymentResult,
    NotCancelledPaymentsQuery,
    PaymentCancellationInfo,
)
from services.notification import (
    NotificationProcessor,
    NotificationService,
    NotificationStatus,
    get_notification_processor,
)
from worker.pool import TaskPool


logger = logging.getLogger('payment-service')


@dataclass(frozen=True)
class PaymentService:
    session_maker: async_sessionmaker[AsyncSession]
    notification_processor: NotificationProcessor
    notification_pool: TaskPool
    policy: PaymentPolicy

    @property
    def cancellation_engine(self) -> CancellationEngine:
        return CancellationEngine(self.policy)

    async def get_all_payments(self) -> list[PaymentInfo]:
        async with self.session_maker() as session:
            payments = (await session.execute(
                select(tables.Payment)
                .order_by(tables.Payment.id)
            )).scalars().all()

        return [PaymentInfo.model_validate(payment) for payment in payments]

    async def create_payment(self, body: PaymentBody | None) -> CreatePaymentResult:
        result = CreatePaymentResult()

        try:
            payment = self._validate_and_create(body)
        except PaymentValidationError as e:
            result.validation_errors.append(e.message)
            return result

        async with self.session_maker() as session:
            session.add(payment)
            await session.commit()

        logger.info(f'payment {payment.id} of type {payment.type} is created')
        result.payment = PaymentInfo.model_validate(payment)

        self._schedule_notification(payment)
        return result

    def _validate_and_create(self, body: PaymentBody | None) -> tables.Payment:
        if body is None:
            raise PaymentValidationError(CREATION_REQUEST_NULL)
        # Неизвестный тип отсекается до фабрики
        validate_payment_type(body)

        return create_new_payment(body, self.policy, created_at=datetime.now())

    def _schedule_notification(self, payment: tables.Payment):
        try:
            service = self.notification_processor.service_for(payment.type)
        except PaymentValidationError:
            logger.warning(f'Failed to send out notification for payment type: {payment.type}')
            return

        self.notification_pool.submit(self._notify_and_update_status, service, payment.id)

    async def _notify_and_update_status(self, service: NotificationService, payment_id: int):
        status = await service.notify()
        status = NotificationStatus.SUCCESS if status == NotificationStatus.SUCCESS else NotificationStatus.FAILURE

        # Обновляется только notification_status, параллельная отмена не затирается
        async with self.session_maker() as session, session.begin():
            await session.execute(
                update(tables.Payment)
                .where(tables.Payment.id == payment_id)
                .values({tables.Payment.notification_status: status.value})
            )

        logger.info(f'notification status of payment {payment_id} is {status}')

    async def cancel_payment(self, payment_id: int) -> CancelPaymentResult:
        now = datetime.now()
        result = CancelPaymentResult()

        async with self.session_maker() as session, session.begin():
            payment = await session.scalar(
                select(tables.Payment)
                .where(tables.Payment.id == payment_id)
                .with_for_update()
            )
            if payment is None:
                raise PaymentDoesntExistError()
            # Поля отмены пишутся условным UPDATE ниже, а не через unit of work
            session.expunge(payment)

            try:
                self.cancellation_engine.prepare_payment_for_cancellation(payment, now.date(), now)
            except PaymentValidationError as e:
                result.validation_errors.append(e.message)
                return result

            cancelled = await session.execute(
                update(tables.Payment)
                .where(tables.Payment.id == payment_id, tables.Payment.cancelled.is_(False))
                .values({
                    tables.Payment.cancelled: True,
                    tables.Payment.cancellation_fee_amount: payment.cancellation_fee_amount,
                    tables.Payment.cancellation_fee_currency: payment.cancellation_fee_currency,
                    tables.Payment.cancellation_time: payment.cancellation_time
                })
            )
            if cancelled.rowcount == 0:
                # Параллельная отмена успела раньше
                result.validation_errors.append(already_cancelled(payment_id))
                return result

        fee = self.cancellation_engine.fee_of(payment)
        logger.info(f'payment {payment_id} is cancelled, fee {fee}')

        result.payment = PaymentInfo.model_validate(payment)
        result.cancellation_fee = MoneyInfo(amount=fee.amount, currency=fee.currency)
        result.message = cancelled_with_fee(payment_id, fee)
        return result

    async def get_not_cancelled_payment_ids(self, query: NotCancelledPaymentsQuery) -> list[int]:
        min_amount, max_amount = query.min_amount, query.max_amount
        if not query.filter:
            min_amount = max_amount = None

        return await self.get_not_cancelled_payment_ids_within_range(min_amount, max_amount)

    async def get_not_cancelled_payment_ids_within_range(
        self,
        min_amount: Decimal | None,
        max_amount: Decimal | None
    ) -> list[int]:
        statement = (
            select(tables.Payment.id)
            .where(tables.Payment.cancelled.is_(False))
            .order_by(tables.Payment.id)
        )
        if min_amount is not None:
            statement = statement.where(tables.Payment.amount >= min_amount)
        if max_amount is not None:
            statement = statement.where(tables.Payment.amount <= max_amount)

        async with self.session_maker() as session:
            return list((await session.execute(statement)).scalars().all())

    async def get_payment_cancellation_details(self, payment_id: int) -> PaymentCancellationInfo | None:
        async with self.session_maker() as session:
            row = (await session.execute(
                select(
                    tables.Payment.id,
                    tables.Payment.cancellation_fee_amount,
                    tables.Payment.cancellation_fee_currency
                )
                .where(tables.Payment.id == payment_id)
            )).one_or_none()

        if row is None:
            return None

        row_id, fee_amount, fee_currency = row.tuple()
        return PaymentCancellationInfo(
            id=row_id,
            cancellation_fee=MoneyInfo(amount=fee_amount, currency=fee_currency) if fee_amount is not None else None
        )


def get_payment_service(
    session_maker: Annotated[async_sessionmaker[AsyncSession], Depends(db.postgres.get_session_maker)],
    notification_processor: Annotated[NotificationProcessor, Depends(get_notification_processor)],
    notification_pool: Annotated[TaskPool, Depends(worker.get_notification_pool)],
    policy: Annotated[PaymentPolicy, Depends(get_payment_policy)]
) -> PaymentService:
    return PaymentService(
        session_maker=session_maker,
        notification_processor=notification_processor,
        notification_pool=notification_pool,
        policy=policy
    )
