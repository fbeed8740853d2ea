"""Redis 验证码数据管理工具"""
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

import redis

from auth_service.config import settings
from auth_service.core.redis import create_redis
from auth_service.utils.verification_utils import KEY_PREFIX


class RedisVerificationManager:
    """查看和清理待验证的验证码，不输出验证码本身"""

    def __init__(self, client: redis.Redis):
        self.redis = client

    def list_all_verification_codes(self) -> List[Dict[str, Any]]:
        codes = []
        for key in self.redis.keys(f"{KEY_PREFIX}:*"):
            data = self.redis.hgetall(key)
            if not data:
                # KEYS 和 HGETALL 之间已过期
                continue
            _, purpose, email = str(key).split(":", 2)
            ttl = self.redis.ttl(key)
            codes.append({
                "key": str(key),
                "email": email,
                "purpose": purpose,
                "attempts": int(data.get("attempts", 0)),
                "ttl": int(ttl) if ttl is not None and int(ttl) > 0 else 0
            })
        return codes

    def cleanup_all_verification_data(self) -> Dict[str, int]:
        keys = list(self.redis.keys(f"{KEY_PREFIX}:*"))
        deleted_count = int(self.redis.delete(*keys)) if keys else 0
        return {"deleted_count": deleted_count}

    def get_stats(self) -> Dict[str, Any]:
        keys = list(self.redis.keys(f"{KEY_PREFIX}:*"))
        by_purpose: Dict[str, int] = {}
        for key in keys:
            purpose = str(key).split(":", 2)[1]
            by_purpose[purpose] = by_purpose.get(purpose, 0) + 1
        return {
            "total_codes": len(keys),
            "by_purpose": by_purpose,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }


def main(argv: List[str]) -> int:
    if len(argv) < 2:
        print("Usage:")
        print("  python -m auth_service.tools.redis_verification_manager stats")
        print("  python -m auth_service.tools.redis_verification_manager list-codes")
        print("  python -m auth_service.tools.redis_verification_manager cleanup")
        return 1

    manager = RedisVerificationManager(create_redis(settings.redis_url))
    command = argv[1]

    try:
        if command == "stats":
            for key, value in manager.get_stats().items():
                print(f"  {key}: {value}")

        elif command == "list-codes":
            codes = manager.list_all_verification_codes()
            print(f"Found {len(codes)} pending codes:")
            for code in codes:
                print(
                    f"  email: {code['email']}, purpose: {code['purpose']}, attempts: {code['attempts']}, TTL: {code['ttl']}s")

        elif command == "cleanup":
            result = manager.cleanup_all_verification_data()
            print(f"Cleanup finished, deleted {result['deleted_count']} keys")

        else:
            print(f"Unknown command: {command}")
            return 1
    except redis.RedisError as e:
        print(f"Redis error: {e}")
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
