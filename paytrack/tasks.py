from arq.connections import RedisSettings

from paytrack.core.config import settings

# Redis connection settings shared by the worker
redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)
