from tests.mocks.database import MockConnection, MockPool, route_fetchrow

__all__ = [
    "MockConnection",
    "MockPool",
    "route_fetchrow",
]
