import pytest

from notehub.core.services.health_service import HealthService


class FakeRedisClient:
    def __init__(self, connected=True, error=None):
        self.connected = connected
        self.error = error

    async def ping(self):
        if self.error:
            raise self.error
        return True


class FailingSession:
    async def execute(self, stmt):
        raise RuntimeError("db down")


@pytest.mark.asyncio
async def test_all_healthy(test_session):
    svc = HealthService(test_session, redis_client=FakeRedisClient())

    status = await svc.get_health_status()

    assert status.status == "healthy"
    assert status.checks["database"]["connected"] is True
    assert status.checks["redis"]["connected"] is True
    assert status.version == "1.0.0"


@pytest.mark.asyncio
async def test_redis_down_degrades(test_session):
    svc = HealthService(test_session, redis_client=FakeRedisClient(connected=False))

    status = await svc.get_health_status()

    assert status.status == "degraded"
    assert status.checks["redis"]["error"] == "Redis client not connected"


@pytest.mark.asyncio
async def test_redis_ping_error_is_reported(test_session):
    svc = HealthService(test_session, redis_client=FakeRedisClient(error=ConnectionError("refused")))

    redis_health = await svc.check_redis_health()

    assert redis_health["connected"] is False
    assert "refused" in redis_health["error"]


@pytest.mark.asyncio
async def test_database_down_is_unhealthy():
    svc = HealthService(FailingSession(), redis_client=FakeRedisClient())

    status = await svc.get_health_status()

    assert status.status == "unhealthy"
    assert status.checks["database"]["error"] == "db down"
