from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


engine: AsyncEngine | None = None
session_maker: async_sessionmaker[AsyncSession] | None = None


def connect(url: str):
    global engine, session_maker

    engine = create_async_engine(url)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def disconnect():
    global engine, session_maker

    if engine is not None:
        await engine.dispose()
    engine = None
    session_maker = None


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    assert session_maker is not None
    return session_maker
