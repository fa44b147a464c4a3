import httpx
import asyncio
from datetime import datetime, timedelta
from decimal import Decimal
from pytest_httpx import HTTPXMock
from sqlalchemy import update
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from starlette import status

import tables
from settings import settings
from helpers import payment_json, mock_notifications, create_payment, wait_for_notification_status


async def test_successful_payment(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    notified = asyncio.Event()

    async def on_notification(request: httpx.Request):
        # Ответ клиенту уже отправлен, уведомление не должно его задерживать
        await notified.wait()
        return httpx.Response(status_code=status.HTTP_200_OK, json={'login': 'github'})

    httpx_mock.add_callback(
        callback=on_notification,
        url=settings.notification_service_one_url + settings.notification_path
    )

    try:
        response = await api_client.post('/api/payments', json=payment_json(
            type='TYPE1',
            amount='100.00',
            currency='EUR',
            details='Invoice 42'
        ))

        assert response.status_code == status.HTTP_201_CREATED, response.text
        response_json = response.json()
        assert response_json['validation_errors'] == []

        payment = response_json['payment']
        assert payment['type'] == 'TYPE1'
        assert payment['money'] == {'amount': '100.00', 'currency': 'EUR'}
        assert payment['debtor_iban'] == 'LT601010012345678901'
        assert payment['creditor_iban'] == 'LT601010098765432109'
        assert payment['details'] == 'Invoice 42'
        assert payment['cancelled'] is False
        assert payment['notification_status'] is None
    finally:
        notified.set()
    assert await wait_for_notification_status(session_maker, payment['id']) == 'SUCCESS'


async def test_notification_failure_is_recorded(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    httpx_mock.add_exception(
        httpx.ConnectTimeout('timed out'),
        url=settings.notification_service_two_url + settings.notification_path
    )

    payment = await create_payment(api_client, type='TYPE2', currency='USD')

    assert await wait_for_notification_status(session_maker, payment['id']) == 'FAILURE'


async def test_notification_non_2xx_is_failure(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    mock_notifications(httpx_mock, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    payment = await create_payment(api_client, type='TYPE1')

    assert await wait_for_notification_status(session_maker, payment['id']) == 'FAILURE'


async def test_type3_payment_is_not_notified(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    payment = await create_payment(api_client, type='TYPE3', currency='USD')
    assert payment['creditor_bank_bic'] == 'HABALT22'

    await asyncio.sleep(0.1)
    response = await api_client.get('/api/payments')
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()[0]['notification_status'] is None
    assert httpx_mock.get_requests() == []


async def test_validation_errors(api_client: httpx.AsyncClient):
    cases = [
        (payment_json(type='TYPE9'), 'Unsupported payment type: TYPE9'),
        (payment_json(type=''), 'Type is required'),
        (payment_json(money=None), 'Please check your request structure, currency and amount should go as money'),
        (payment_json(amount='0'), 'Amount is required and must be more than 0'),
        (payment_json(amount='-5.00'), 'Amount is required and must be more than 0'),
        (payment_json(amount='10.123'), 'Please provide an amount with no more than 2 decimal places'),
        (payment_json(currency=None), 'Currency is required'),
        (payment_json(currency='GBP'), 'Unsupported currency code: GBP'),
        (payment_json(type='TYPE1', currency='USD'), 'TYPE1 payment is not allowed to be used with currency USD'),
        (payment_json(type='TYPE2', currency='EUR'), 'TYPE2 payment is not allowed to be used with currency EUR'),
        (payment_json(debtor_iban=''), 'Debtor IBAN is required'),
        (payment_json(creditor_iban=None), 'Creditor IBAN is required'),
        (payment_json(type='TYPE1', details='   '), 'TYPE1 payment requires details to be provided'),
        (payment_json(type='TYPE3', creditor_bank_bic=None), 'TYPE3 payment requires creditor bank BIC to be provided'),
    ]

    for body, message in cases:
        response = await api_client.post('/api/payments', json=body)
        assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text
        assert response.json() == {'validation_errors': [message], 'payment': None}, body

    response = await api_client.get('/api/payments')
    assert response.json() == []


async def test_null_request(api_client: httpx.AsyncClient):
    response = await api_client.post(
        '/api/payments',
        content='null',
        headers={'Content-Type': 'application/json'}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text
    assert response.json()['validation_errors'] == ['Payment creation request cannot be null']


async def test_list_payments(api_client: httpx.AsyncClient, httpx_mock: HTTPXMock):
    mock_notifications(httpx_mock)

    first = await create_payment(api_client, type='TYPE1')
    second = await create_payment(api_client, type='TYPE2', currency='USD', details=None)
    third = await create_payment(api_client, type='TYPE3', currency='EUR')

    response = await api_client.get('/api/payments')
    assert response.status_code == status.HTTP_200_OK, response.text
    assert [payment['id'] for payment in response.json()] == [first['id'], second['id'], third['id']]
    assert [payment['type'] for payment in response.json()] == ['TYPE1', 'TYPE2', 'TYPE3']


async def test_cancel_payment(api_client: httpx.AsyncClient, httpx_mock: HTTPXMock):
    mock_notifications(httpx_mock)
    payment = await create_payment(api_client, type='TYPE2', currency='USD')

    response = await api_client.delete(f'/api/payments/{payment['id']}')
    assert response.status_code == status.HTTP_200_OK, response.text
    response_json = response.json()

    # Отменено сразу после создания: 0 часов
    assert response_json['validation_errors'] == []
    assert response_json['cancellation_fee'] == {'amount': '0.00', 'currency': 'EUR'}
    assert response_json['message'] == (
        f'Payment with id {payment['id']} was successfully cancelled. Cancellation fee is: 0.00 EUR'
    )
    assert response_json['payment']['cancelled'] is True

    response = await api_client.get(f'/api/payments/{payment['id']}/cancellation-details')
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json() == {'id': payment['id'], 'cancellation_fee': {'amount': '0.00', 'currency': 'EUR'}}


async def test_cancel_charges_fee_for_elapsed_hours(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    mock_notifications(httpx_mock)
    payment = await create_payment(api_client, type='TYPE3', currency='USD')

    now = datetime.now()
    created_at = now - timedelta(hours=2, minutes=10)
    if created_at.date() != now.date():
        created_at = now.replace(hour=0, minute=0, second=0, microsecond=0)
    hours = int((now - created_at).total_seconds() // 3600)

    async with session_maker() as session, session.begin():
        await session.execute(
            update(tables.Payment)
            .where(tables.Payment.id == payment['id'])
            .values({tables.Payment.created_at: created_at})
        )

    response = await api_client.delete(f'/api/payments/{payment['id']}')
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()['cancellation_fee'] == {'amount': str(Decimal(hours) * Decimal('0.15')), 'currency': 'EUR'}


async def test_cancel_twice(api_client: httpx.AsyncClient, httpx_mock: HTTPXMock):
    mock_notifications(httpx_mock)
    payment = await create_payment(api_client, type='TYPE1')

    response = await api_client.delete(f'/api/payments/{payment['id']}')
    assert response.status_code == status.HTTP_200_OK, response.text

    for _ in range(3):
        response = await api_client.delete(f'/api/payments/{payment['id']}')
        assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text
        assert response.json()['validation_errors'] == [f'Payment with id {payment['id']} is already canceled']
        assert response.json()['payment'] is None


async def test_concurrent_cancels(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    mock_notifications(httpx_mock)
    payment = await create_payment(api_client, type='TYPE1')

    responses = await asyncio.gather(*(
        api_client.delete(f'/api/payments/{payment['id']}')
        for _ in range(2)
    ))

    codes = sorted(response.status_code for response in responses)
    assert codes == [status.HTTP_200_OK, status.HTTP_400_BAD_REQUEST], [r.text for r in responses]

    cancelled = next(r for r in responses if r.status_code == status.HTTP_200_OK).json()
    rejected = next(r for r in responses if r.status_code == status.HTTP_400_BAD_REQUEST).json()
    assert rejected['validation_errors'] == [f'Payment with id {payment['id']} is already canceled']
    assert rejected['payment'] is None

    async with session_maker() as session:
        stored = await session.get(tables.Payment, payment['id'])
    assert stored is not None
    assert stored.cancelled is True
    assert cancelled['cancellation_fee'] == {'amount': str(stored.cancellation_fee_amount), 'currency': 'EUR'}


async def test_cancel_while_notification_is_pending(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    notified = asyncio.Event()

    async def on_notification(request: httpx.Request):
        await notified.wait()
        return httpx.Response(status_code=status.HTTP_200_OK, json={'login': 'github'})

    httpx_mock.add_callback(
        callback=on_notification,
        url=settings.notification_service_one_url + settings.notification_path
    )

    try:
        payment = await create_payment(api_client, type='TYPE1')

        response = await api_client.delete(f'/api/payments/{payment['id']}')
        assert response.status_code == status.HTTP_200_OK, response.text
    finally:
        notified.set()

    # Запись статуса уведомления не затирает отмену
    assert await wait_for_notification_status(session_maker, payment['id']) == 'SUCCESS'

    response = await api_client.get('/api/payments')
    assert response.status_code == status.HTTP_200_OK, response.text
    [stored] = response.json()
    assert stored['cancelled'] is True
    assert stored['notification_status'] == 'SUCCESS'

    response = await api_client.get(f'/api/payments/{payment['id']}/cancellation-details')
    assert response.json() == {'id': payment['id'], 'cancellation_fee': {'amount': '0.00', 'currency': 'EUR'}}


async def test_cancel_after_notification_keeps_status(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    mock_notifications(httpx_mock)
    payment = await create_payment(api_client, type='TYPE2', currency='USD')
    assert await wait_for_notification_status(session_maker, payment['id']) == 'SUCCESS'

    response = await api_client.delete(f'/api/payments/{payment['id']}')
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()['payment']['cancelled'] is True

    response = await api_client.get('/api/payments')
    [stored] = response.json()
    assert stored['cancelled'] is True
    assert stored['notification_status'] == 'SUCCESS'


async def test_amount_is_returned_with_two_decimals(api_client: httpx.AsyncClient, httpx_mock: HTTPXMock):
    mock_notifications(httpx_mock)

    created = await create_payment(api_client, type='TYPE1', amount='100.0')
    assert created['money'] == {'amount': '100.00', 'currency': 'EUR'}

    response = await api_client.get('/api/payments')
    assert response.json()[0]['money'] == created['money']


async def test_cancel_on_another_day(
    api_client: httpx.AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    httpx_mock: HTTPXMock
):
    mock_notifications(httpx_mock)
    payment = await create_payment(api_client, type='TYPE1')

    async with session_maker() as session, session.begin():
        await session.execute(
            update(tables.Payment)
            .where(tables.Payment.id == payment['id'])
            .values({tables.Payment.created_at: datetime.now() - timedelta(days=1)})
        )

    response = await api_client.delete(f'/api/payments/{payment['id']}')
    assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text
    assert response.json()['validation_errors'] == ['Payment can be cancelled only on the day of its creation']

    response = await api_client.get(f'/api/payments/{payment['id']}/cancellation-details')
    assert response.json() == {'id': payment['id'], 'cancellation_fee': None}


async def test_cancel_non_existent_payment(api_client: httpx.AsyncClient):
    response = await api_client.delete('/api/payments/404')
    assert response.status_code == status.HTTP_404_NOT_FOUND, response.text
    assert response.json()['validation_errors'] == ['Provided payment id does not exist']

    response = await api_client.get('/api/payments/404/cancellation-details')
    assert response.status_code == status.HTTP_404_NOT_FOUND, response.text
