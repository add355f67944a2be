#!/usr/bin/env python3
"""交互式生成 .env 配置文件

使用方式：
    python scripts/setup_env.py

会引导用户填写必要的配置项，生成 .env 文件。
"""
import os
from typing import Dict

# 项目根目录
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_FILE = os.path.join(PROJECT_ROOT, ".env")


# 配置项定义：(env_key, 描述, 默认值, 是否必填)
CONFIG_ITEMS = [
    # === 远程 API ===
    ("API_BASE_URL", "Remote API root", "http://localhost:5000/api", False),
    ("API_EMAIL", "Account email used for login", "", True),
    ("API_PASSWORD", "Account password", "", True),
    ("API_TIMEOUT", "Request timeout in seconds", "15", False),

    # === 数据库 ===
    ("DATABASE_URL", "Local snapshot store", "sqlite:///data/snapshot.db", False),

    # === 报表 ===
    ("HOUSE_COMMISSION_RATE", "House commission percentage", "45", False),
    ("REPORT_PREFIX", "Export file name prefix", "report", False),
    ("BUSINESS_NAME", "Business name printed on reports", "Barbershop", False),

    # === 其他 ===
    ("LOG_LEVEL", "Log level", "INFO", False),
]

SECTION_HEADERS = {
    "API": "# === Remote API ===",
    "DATABASE": "# === Local store ===",
    "HOUSE": "# === Reports ===",
    "REPORT": "# === Reports ===",
    "BUSINESS": "# === Reports ===",
    "LOG": "# === Other ===",
}


def render_env(values: Dict[str, str]) -> str:
    """把收集到的配置渲染成 .env 文本。

    未提供的项使用默认值；必填项缺失时抛出 ValueError。
    """
    env_lines = [
        "# Commission reports configuration",
        "# Generated by scripts/setup_env.py",
    ]
    current_header = None
    for key, _desc, default, required in CONFIG_ITEMS:
        header = SECTION_HEADERS.get(key.split("_")[0], "# === Other ===")
        if header != current_header:
            current_header = header
            env_lines += ["", header]

        value = values.get(key) or default
        if required and not value:
            raise ValueError(f"{key} is required")
        env_lines.append(f"{key}={value}")
    return "\n".join(env_lines) + "\n"


def main():
    print()
    print("=" * 60)
    print("  Commission reports setup")
    print("  Generates the .env file")
    print("=" * 60)
    print()

    # 检查是否已存在 .env
    if os.path.exists(ENV_FILE):
        print(f"An .env file already exists: {ENV_FILE}")
        choice = input("Overwrite? (y/N): ").strip().lower()
        if choice != "y":
            print("Cancelled.")
            return
        print()

    values = {}
    for key, desc, default, required in CONFIG_ITEMS:
        req_tag = " [required]" if required else ""
        default_hint = f" (default: {default})" if default else ""
        print(f"{desc}{req_tag}")

        while True:
            value = input(f"  {key}{default_hint}: ").strip() or default
            if required and not value:
                print(f"  {key} is required.")
                continue
            break
        values[key] = value
        print()

    with open(ENV_FILE, "w", encoding="utf-8") as f:
        f.write(render_env(values))

    print("=" * 60)
    print(f"  Wrote {ENV_FILE}")
    print()
    print("  Next steps:")
    print("    python scripts/init_db.py")
    print("    python app.py sync")
    print("    python app.py export")
    print("=" * 60)


if __name__ == "__main__":
    main()
