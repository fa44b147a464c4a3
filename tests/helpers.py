import re
import asyncio
import httpx
from typing import Any
from pytest_httpx import HTTPXMock
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

import tables
from settings import settings


# Не фикстуры, так как не хочется разбираться с typing'ом

def payment_json(
    type: str = 'TYPE1',
    amount: str | None = '100.00',
    currency: str | None = 'EUR',
    **overrides: Any
) -> dict[str, Any]:
    body: dict[str, Any] = {
        'type': type,
        'money': {
            'amount': amount,
            'currency': currency
        },
        'debtor_iban': 'LT601010012345678901',
        'creditor_iban': 'LT601010098765432109',
    }
    if type == 'TYPE1':
        body['details'] = 'Invoice 42'
    if type == 'TYPE3':
        body['creditor_bank_bic'] = 'HABALT22'

    body.update(overrides)
    return body


def mock_notifications(httpx_mock: HTTPXMock, status_code: int = 200):
    httpx_mock.add_response(
        url=re.compile(
            f'({re.escape(settings.notification_service_one_url)}|{re.escape(settings.notification_service_two_url)})'
            f'{re.escape(settings.notification_path)}'
        ),
        status_code=status_code,
        json={},
        is_optional=True,
        is_reusable=True
    )


async def create_payment(api_client: httpx.AsyncClient, **kwargs: Any) -> dict[str, Any]:
    response = await api_client.post('/api/payments', json=payment_json(**kwargs))
    assert response.status_code == 201, response.text
    return response.json()['payment']


async def wait_for_notification_status(
    session_maker: async_sessionmaker[AsyncSession],
    payment_id: int,
    timeout: float = 10.0
) -> str:
    async with asyncio.timeout(timeout):
        while True:
            async with session_maker() as session:
                status = await session.scalar(
                    select(tables.Payment.notification_status)
                    .where(tables.Payment.id == payment_id)
                )
            if status is not None:
                return status
            await asyncio.sleep(0.05)
