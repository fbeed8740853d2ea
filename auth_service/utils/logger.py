"""
日志系统配置
为整个服务提供统一的日志记录功能
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from auth_service.config import settings

# ANSI 颜色码


class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    MAGENTA = '\033[95m'
    CYAN = '\033[96m'


class ColoredFormatter(logging.Formatter):
    """带颜色的日志格式化器"""

    FORMATS = {
        logging.DEBUG: f"{Colors.CYAN}%(levelname)-8s{Colors.RESET} | %(asctime)s | %(name)s | %(message)s",
        logging.INFO: f"{Colors.GREEN}%(levelname)-8s{Colors.RESET} | %(asctime)s | %(name)s | %(message)s",
        logging.WARNING: f"{Colors.YELLOW}%(levelname)-8s{Colors.RESET} | %(asctime)s | %(name)s | %(message)s",
        logging.ERROR: f"{Colors.RED}%(levelname)-8s{Colors.RESET} | %(asctime)s | %(name)s | %(message)s",
        logging.CRITICAL: f"{Colors.MAGENTA}{Colors.BOLD}%(levelname)-8s{Colors.RESET} | %(asctime)s | %(name)s | %(message)s",
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt, datefmt='%Y-%m-%d %H:%M:%S')
        return formatter.format(record)


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    设置并返回日志记录器

    参数:
        name: 日志记录器名称
        level: 日志级别
        log_file: 日志文件路径（可选）

    返回:
        配置好的 Logger 对象
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 避免重复添加处理器
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter())
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_formatter = logging.Formatter(
            '%(levelname)-8s | %(asctime)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    return logger


# 预定义的日志记录器
app_logger = setup_logger('app', level=logging.INFO, log_file=settings.log_file)
api_logger = setup_logger('api', level=logging.INFO, log_file=settings.log_file)
db_logger = setup_logger('database', level=logging.WARNING, log_file=settings.log_file)
verification_logger = setup_logger(
    'verification', level=logging.INFO, log_file=settings.log_file)


def get_logger(name: str) -> logging.Logger:
    """获取日志记录器"""
    return setup_logger(name, log_file=settings.log_file)
