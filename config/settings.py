"""全局配置管理

所有用户可配置项均通过 .env 文件或环境变量设置，在导入时一次性加载到
模块级的 ``settings`` 实例中。该实例不可变：只能在启动时覆盖，运行期间
不会被修改。

使用方式：
    1. 运行 python scripts/setup_env.py 生成 .env 文件
    2. 或手动创建 .env 文件（参考 .env.example）
"""
from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置 - 所有字段均可通过 .env 或环境变量覆盖"""

    # ========== 提成 ==========
    # 每笔预约价格中归店铺所有的固定百分比
    house_commission_rate: Decimal = Field(default=Decimal("45"), ge=0, le=100)

    # ========== 远程 API ==========
    api_base_url: str = "http://localhost:5000/api"
    api_email: str = ""
    api_password: str = ""
    api_timeout: float = 15.0

    # ========== 本地快照库 ==========
    database_url: str = "sqlite:///data/snapshot.db"

    # ========== 报表 ==========
    report_prefix: str = "report"
    business_name: str = "Barbershop"
    removed_label: str = "(removed)"
    walk_in_label: str = "Walk-in"

    # ========== 日志 ==========
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
        frozen = True


# 全局配置实例
settings = Settings()
