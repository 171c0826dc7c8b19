from slowapi import Limiter
from slowapi.util import get_remote_address

from config import settings

# En tests no limitamos (TestClient comparte IP)
limiter = Limiter(key_func=get_remote_address, enabled=settings.ENV != "test")
