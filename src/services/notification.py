import httpx
import logging
from enum import StrEnum
from dataclasses import dataclass

from payments.errors import PaymentValidationError, UNSUPPORTED_TYPE
from payments.policy import PaymentType


logger = logging.getLogger('payment-service-notification')


class NotificationStatus(StrEnum):
    SUCCESS = 'SUCCESS'
    FAILURE = 'FAILURE'


@dataclass(frozen=True)
class NotificationService:
    name: str
    client: httpx.AsyncClient
    url: str

    async def notify(self) -> NotificationStatus | None:
        logger.debug(f'calling notification service "{self.name}": {self.url}')

        try:
            response = await self.client.get(self.url)
        except httpx.HTTPError as e:
            logger.error(f'error notifying service "{self.name}" - {e!r}')
            return NotificationStatus.FAILURE

        if response.is_success:
            return NotificationStatus.SUCCESS

        logger.warning(f'got status {response.status_code} from notification service "{self.name}"')
        return None


@dataclass(frozen=True)
class NotificationProcessor:
    service_one: NotificationService
    service_two: NotificationService

    def service_for(self, payment_type: str) -> NotificationService:
        match payment_type:
            case PaymentType.TYPE1:
                return self.service_one
            case PaymentType.TYPE2:
                return self.service_two
            case _:
                raise PaymentValidationError(UNSUPPORTED_TYPE + payment_type)


notification_processor: NotificationProcessor | None = None


def create_notification_processor(
    client: httpx.AsyncClient,
    service_one_url: str,
    service_two_url: str,
    path: str
) -> NotificationProcessor:
    return NotificationProcessor(
        service_one=NotificationService(name='one', client=client, url=service_one_url + path),
        service_two=NotificationService(name='two', client=client, url=service_two_url + path)
    )


def get_notification_processor() -> NotificationProcessor:
    assert notification_processor is not None
    return notification_processor
