from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='allow', env_prefix='payment_service_')

    # Если задан, используется вместо PostgresSettings (например, SQLite в тестах)
    database_url: str | None = Field(default=None)
    log_level: str = Field(default='INFO')

    notification_service_one_url: str = Field(default='https://api.github.com/users/')
    notification_service_two_url: str = Field(default='https://api.github.com/orgs/')
    notification_path: str = Field(default='github')
    geolocation_url: str = Field(default='https://get.geojs.io/v1/ip/geo/')

    connect_timeout: float = Field(default=3.0)
    read_timeout: float = Field(default=5.0)

    notification_pool_workers: int = Field(default=5)
    notification_pool_queue_size: int = Field(default=100)
    geolocation_pool_workers: int = Field(default=5)
    geolocation_pool_queue_size: int = Field(default=100)


class PostgresSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='allow', env_prefix='payment_service_postgres_')

    host: str = Field(default='127.0.0.1')
    port: int = Field(default=5432)
    user: str = Field(default='postgres')
    password: str = Field(default='postgres')
    db: str = Field(default='payments')

    def get_url(self, driver: str | None, db: str | None = None):
        scheme = f'postgresql{f'+{driver}' if driver else ''}'
        return f'{scheme}://{self.user}:{self.password}@{self.host}:{self.port}/{db or self.db}'


settings = Settings()
pg_settings = PostgresSettings()


def get_database_url() -> str:
    return settings.database_url or pg_settings.get_url('psycopg')
