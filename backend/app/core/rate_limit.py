from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from app.core.config import settings
from app.core.redis_client import get_redis
from app.core.security import get_current_user
from app.models.user import User


@dataclass(frozen=True)
class RateLimit:
    key: str
    limit: int
    window_seconds: int
    remaining: int


def client_ip(request: Request) -> str | None:
    if bool(settings.trust_proxy_headers):
        xri = str(request.headers.get("x-real-ip") or "").strip()
        if xri:
            return xri
        xff = request.headers.get("x-forwarded-for")
        if xff:
            ip = xff.split(",")[0].strip()
            if ip:
                return ip
    if request.client and request.client.host:
        return request.client.host
    return None


def _route_template(request: Request) -> str:
    # "/api/quizzes/{quiz_id}" rather than the concrete path, so hopping
    # between quiz ids does not reset the window.
    route = request.scope.get("route")
    return str(getattr(route, "path", None) or request.url.path)


def _hit(key: str, *, limit: int, window_seconds: int) -> RateLimit:
    r = get_redis()
    try:
        current = int(r.incr(key))
        if current == 1:
            r.expire(key, int(window_seconds))
    except Exception:
        # Fail open when redis is unavailable.
        return RateLimit(key=key, limit=limit, window_seconds=window_seconds, remaining=limit)

    if current > limit:
        ttl = r.ttl(key)
        retry_after = int(ttl) if ttl and ttl > 0 else int(window_seconds)
        raise HTTPException(
            status_code=429,
            detail="Too Many Requests",
            headers={"Retry-After": str(retry_after)},
        )
    return RateLimit(key=key, limit=limit, window_seconds=window_seconds, remaining=limit - current)


def rate_limit(*, key_prefix: str, limit: int, window_seconds: int):
    """Anonymous endpoints (register, login): one window per client ip and path."""

    async def _dep(request: Request) -> RateLimit:
        ip = client_ip(request) or "unknown"
        key = f"rl:{key_prefix}:{request.method}:{request.url.path}:{ip}"
        return _hit(key, limit=int(limit), window_seconds=int(window_seconds))

    return Depends(_dep)


def mutation_rate_limit(action: str):
    """Quiz mutations: one window per authenticated caller, action and route.

    Limits are read from settings on every request.
    """

    def _dep(request: Request, user: User = Depends(get_current_user)) -> RateLimit:
        key = f"rl:quiz_{action}:{user.id}:{request.method}:{_route_template(request)}"
        return _hit(
            key,
            limit=int(settings.mutation_rate_limit),
            window_seconds=int(settings.mutation_rate_window_seconds),
        )

    return Depends(_dep)
