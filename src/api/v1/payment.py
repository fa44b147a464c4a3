from typing import Annotated
from fastapi import APIRouter, Body, Depends, Path, Request, Response, HTTPException
from starlette import status

from payments.errors import PaymentDoesntExistError, PAYMENT_DOES_NOT_EXIST
from payments.schemas import (
    PaymentBody,
    PaymentInfo,
    CreatePaymentResult,
    CancelPaymentResult,
    NotCancelledPaymentsQuery,
    PaymentCancellationInfo,
)
from services.payment import PaymentService, get_payment_service
from services.geolocation import GeolocationService, get_geolocation_service, get_client_ip
from worker import get_geolocation_pool
from worker.pool import TaskPool


router = APIRouter()


def log_client_country(context: str):
    async def dependency(
        request: Request,
        geolocation_service: Annotated[GeolocationService, Depends(get_geolocation_service)],
        geolocation_pool: Annotated[TaskPool, Depends(get_geolocation_pool)]
    ):
        geolocation_pool.submit(geolocation_service.log_country, get_client_ip(request), context)

    return Depends(dependency)


@router.get(
    path='',
    description='Возвращает все платежи'
)
async def get_all_payments(
    payments_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> list[PaymentInfo]:
    return await payments_service.get_all_payments()


@router.post(
    path='',
    status_code=status.HTTP_201_CREATED,
    dependencies=[log_client_country('<Payment creation>')],
    description=
    'Создает платеж одного из типов TYPE1, TYPE2, TYPE3<br>'
    'TYPE1: только EUR, обязательны details<br>'
    'TYPE2: только USD<br>'
    'TYPE3: EUR или USD, обязателен creditor_bank_bic<br>'
    'После создания внешний сервис уведомляется асинхронно, результат попадает в notification_status'
)
async def create_payment(
    response: Response,
    payments_service: Annotated[PaymentService, Depends(get_payment_service)],
    body: Annotated[PaymentBody | None, Body()] = None
) -> CreatePaymentResult:
    result = await payments_service.create_payment(body)
    if result.validation_errors:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return result


@router.delete(
    path='/{payment_id}',
    dependencies=[log_client_country('<Payment cancellation>')],
    description=
    'Отменяет платеж<br>'
    'Отменить можно только в день создания, комиссия зависит от количества прошедших часов'
)
async def cancel_payment(
    payment_id: Annotated[int, Path()],
    response: Response,
    payments_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> CancelPaymentResult:
    try:
        result = await payments_service.cancel_payment(payment_id)
    except PaymentDoesntExistError as e:
        response.status_code = status.HTTP_404_NOT_FOUND
        return CancelPaymentResult(validation_errors=[e.message])

    if result.validation_errors:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return result


@router.post(
    path='/querying/not-cancelled',
    description=
    'Возвращает id неотмененных платежей<br>'
    'Если filter == true, сумма ограничивается [min_amount, max_amount], каждая граница необязательна'
)
async def get_not_cancelled_payment_ids(
    query: Annotated[NotCancelledPaymentsQuery, Body()],
    payments_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> list[int]:
    return await payments_service.get_not_cancelled_payment_ids(query)


@router.get(
    path='/{payment_id}/cancellation-details',
    description='Возвращает комиссию за отмену платежа'
)
async def get_payment_cancellation_details(
    payment_id: Annotated[int, Path()],
    payments_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> PaymentCancellationInfo:
    info = await payments_service.get_payment_cancellation_details(payment_id)
    if info is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PAYMENT_DOES_NOT_EXIST)
    return info
