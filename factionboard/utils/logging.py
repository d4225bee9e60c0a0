"""loguru 日志配置"""
import sys
from loguru import logger

from factionboard.config.settings import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging():
    """根据配置重新设置日志输出"""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper(), format=LOG_FORMAT)

    if settings.is_file_logging_enabled:
        logger.add(
            settings.log_file,
            level=settings.log_level.upper(),
            format=LOG_FORMAT,
            rotation=settings.log_rotation,
            encoding="utf-8",
        )
        logger.info(f"日志同时写入文件: {settings.log_file}")
