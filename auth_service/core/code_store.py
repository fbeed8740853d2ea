"""基于Redis的验证码过期存储"""
from enum import Enum
from typing import Any, Dict, Optional

import redis

from auth_service.core.exceptions import StoreUnavailableError

# KEYS[1] = 验证码键, ARGV[1] = 提交的验证码, ARGV[2] = 最大尝试次数
CONSUME_SCRIPT = """
local stored = redis.call('HGET', KEYS[1], 'code')
if not stored then
    return 'missing'
end
if stored == ARGV[1] then
    redis.call('DEL', KEYS[1])
    return 'consumed'
end
local attempts = redis.call('HINCRBY', KEYS[1], 'attempts', 1)
if attempts >= tonumber(ARGV[2]) then
    redis.call('DEL', KEYS[1])
    return 'locked'
end
return 'mismatch'
"""


class VerificationOutcome(str, Enum):
    consumed = "consumed"
    missing = "missing"
    mismatch = "mismatch"
    locked = "locked"


class RedisCodeStore:
    """验证码以哈希 {code, attempts} 存储，键带过期时间

    Redis 故障统一抛出 StoreUnavailableError；键不存在返回 None 或
    VerificationOutcome.missing，不视为错误
    """

    def __init__(self, client: redis.Redis):
        self.redis = client
        self._consume = self.redis.register_script(CONSUME_SCRIPT)

    def set(self, key: str, code: str, ttl_seconds: int) -> None:
        """保存验证码，覆盖旧验证码并重置尝试次数"""
        try:
            pipe = self.redis.pipeline()
            pipe.delete(key)
            pipe.hset(key, mapping={"code": code, "attempts": 0})
            pipe.expire(key, ttl_seconds)
            pipe.execute()
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Could not store verification code: {e}") from e

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            data = self.redis.hgetall(key)
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Could not read verification code: {e}") from e
        if not data:
            return None
        return {"code": data.get("code"), "attempts": int(data.get("attempts", 0))}

    def ttl(self, key: str) -> int:
        try:
            remaining = self.redis.ttl(key)
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Could not read verification code TTL: {e}") from e
        return max(int(remaining or 0), 0)

    def delete(self, key: str) -> None:
        try:
            self.redis.delete(key)
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Could not delete verification code: {e}") from e

    def consume(self, key: str, code: str, max_attempts: int) -> VerificationOutcome:
        """原子地比较并删除验证码"""
        try:
            result = self._consume(keys=[key], args=[code, max_attempts])
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Could not verify code: {e}") from e
        if isinstance(result, bytes):
            result = result.decode()
        return VerificationOutcome(result)
