import httpx
import anyio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

import db.postgres
import worker
import services.notification
import services.geolocation
from api.v1.payment import router as payment_router
from settings import settings, get_database_url
from worker.pool import TaskPool


logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s %(name)s %(levelname)s: %(message)s'
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.postgres.connect(get_database_url())

    timeout = httpx.Timeout(settings.read_timeout, connect=settings.connect_timeout)
    notification_client = httpx.AsyncClient(timeout=timeout)
    geolocation_client = httpx.AsyncClient(timeout=timeout)

    services.notification.notification_processor = services.notification.create_notification_processor(
        client=notification_client,
        service_one_url=settings.notification_service_one_url,
        service_two_url=settings.notification_service_two_url,
        path=settings.notification_path
    )
    services.geolocation.geolocation_service = services.geolocation.GeolocationService(
        client=geolocation_client,
        base_url=settings.geolocation_url
    )

    worker.notification_pool = TaskPool(
        'notification',
        workers=settings.notification_pool_workers,
        queue_size=settings.notification_pool_queue_size
    )
    worker.geolocation_pool = TaskPool(
        'geolocation',
        workers=settings.geolocation_pool_workers,
        queue_size=settings.geolocation_pool_queue_size
    )

    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(worker.notification_pool.run)
            tg.start_soon(worker.geolocation_pool.run)

            try:
                yield
            finally:
                # Дожидаемся уже принятых задач, они пишут в БД
                await worker.notification_pool.aclose()
                await worker.geolocation_pool.aclose()
    finally:
        await notification_client.aclose()
        await geolocation_client.aclose()
        await db.postgres.disconnect()


app = FastAPI(
    title='Payment Service',
    lifespan=lifespan,
    docs_url='/api/openapi',
    openapi_url='/api/openapi.json',
    default_response_class=ORJSONResponse
)

app.include_router(payment_router, prefix='/api/payments', tags=['payments'])


if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host='0.0.0.0', port=8000)
