"""Redis连接管理"""
import redis


def create_redis(url: str) -> redis.Redis:
    """创建Redis客户端，每个进程一个，通过依赖注入使用"""
    return redis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True
    )


def close_redis(client: redis.Redis) -> None:
    client.close()
