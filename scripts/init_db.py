"""初始化本地快照库"""
import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import DatabaseManager
from config.business_config import business_config
from loguru import logger


def init_database(database_url=None, with_seed=True):
    """初始化数据库和种子数据。

    种子数据只在对应表为空时写入，重复运行不会产生重复记录。

    Args:
        database_url: 数据库连接URL，默认使用 settings 配置。
        with_seed: 是否写入服务项目和员工种子数据。

    Returns:
        DatabaseManager 实例（调用方负责 close）。
    """
    logger.info("Initializing database...")

    db = DatabaseManager(database_url)

    logger.info("Creating tables...")
    db.create_tables()

    if not with_seed:
        return db

    logger.info("Inserting seed data...")

    # 插入服务项目（从 business_config 获取）
    if not db.services.list_all():
        for service in business_config.get_service_catalog():
            db.services.add_service(
                name=service["name"],
                price=service["price"],
                description=service.get("description"),
            )
            logger.info(f"Created service: {service['name']}")

    # 插入员工
    if not db.staff.list_all():
        for member in business_config.get_staff_roster():
            db.staff.add_staff(
                name=member["name"],
                commission_rate=member["commission_rate"],
            )
            logger.info(f"Created staff member: {member['name']}")

    logger.info("Database initialization completed!")
    return db


if __name__ == "__main__":
    init_database().close()
