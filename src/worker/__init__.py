from .pool import TaskPool


notification_pool: TaskPool | None = None
geolocation_pool: TaskPool | None = None


def get_notification_pool() -> TaskPool:
    assert notification_pool is not None
    return notification_pool


def get_geolocation_pool() -> TaskPool:
    assert geolocation_pool is not None
    return geolocation_pool
