#!/usr/bin/env python3
"""提成报表 - 命令行入口

子命令：
    sync      从远程 API 拉取全部数据写入本地库
    summary   输出总计与按员工汇总
    export    渲染 PDF 文档和/或 XLSX 工作簿

使用方式::

    python app.py sync
    python app.py summary --staff-id 2 --from 2024-03-01 --to 2024-03-31
    python app.py summary --json
    python app.py export --format all --out exports/

    # 直接从 API 读取，不经过本地库
    python app.py export --source remote --format pdf

环境变量（``.env``，由 ``python scripts/setup_env.py`` 生成）::

    API_BASE_URL, API_EMAIL, API_PASSWORD   远程 API 地址与账号
    DATABASE_URL                            本地快照库
    HOUSE_COMMISSION_RATE                   店铺提成比例（默认 45）

退出码：0 成功，1 没有可导出的数据，2 配置/远程错误。
"""
import argparse
import json
import sys
from dataclasses import asdict
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from config.business_config import business_config
from config.settings import settings
from database import DatabaseManager
from remote import ApiSession, RemoteError, SnapshotLoader
from reports import (
    ExportError, FilterCriteria, NothingToExportError, Snapshot,
    ValidationError, aggregate, export_document, export_workbook,
    filter_appointments, overview, save_artifact,
)
from reports.exporters import format_rate, money

EXIT_OK = 0
EXIT_NOTHING_TO_EXPORT = 1
EXIT_ERROR = 2

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


def setup_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())


def open_session() -> ApiSession:
    """打开 API 会话并用配置的账号登录"""
    session = ApiSession()
    try:
        session.login()
    except RemoteError:
        session.close()
        raise
    return session


def fetch_remote_snapshot() -> Snapshot:
    with open_session() as session:
        return SnapshotLoader(session).load()


def load_snapshot(args: argparse.Namespace) -> Snapshot:
    if args.source == "remote":
        return fetch_remote_snapshot()
    db = DatabaseManager(args.db)
    try:
        db.create_tables()
        return db.load_snapshot()
    finally:
        db.close()


def criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria.from_mapping({
        "staff_id": args.staff_id,
        "client_id": args.client_id,
        "date_from": args.date_from,
        "date_to": args.date_to,
    })


# ================================================================
# 子命令
# ================================================================

def cmd_sync(args: argparse.Namespace) -> int:
    snapshot = fetch_remote_snapshot()
    db = DatabaseManager(args.db)
    try:
        db.create_tables()
        counts = db.replace_snapshot(snapshot)
    finally:
        db.close()
    if snapshot.rejected:
        logger.warning(f"{len(snapshot.rejected)} malformed records were skipped")
    print(", ".join(f"{name}: {n}" for name, n in counts.items()))
    return EXIT_OK


def cmd_summary(args: argparse.Namespace) -> int:
    criteria = criteria_from_args(args)
    snapshot = load_snapshot(args)
    appointments = filter_appointments(snapshot.appointments, criteria)
    result = aggregate(appointments, snapshot.staff_members, snapshot.services)
    staff_names = {s.id: s.name for s in snapshot.staff_members}
    client_names = {c.id: c.name for c in snapshot.clients}
    filters = criteria.describe(staff_names, client_names)

    if args.json:
        payload = result.to_dict()
        payload["filters"] = filters
        payload["overview"] = asdict(overview(snapshot, result.house_rate))
        print(json.dumps(payload, indent=2, default=str, ensure_ascii=False))
        return EXIT_OK

    totals = result.totals
    lines = [
        business_config.get_report_title(),
        f"Filters: {filters}",
        "",
        f"Appointments:        {totals.count}",
        f"Gross revenue:       {money(totals.gross_revenue)}",
        f"Staff commission:    {money(totals.total_staff_share)}",
        f"House commission:    {money(totals.total_house_share)} "
        f"({format_rate(result.house_rate)}%)",
        f"Net owner profit:    {money(totals.total_net_owner_profit)}",
        f"Average price:       {money(totals.average_price)}",
    ]
    if result.by_staff:
        lines += ["", "By staff:"]
        for name, b in result.by_staff.items():
            lines.append(
                f"  {name:<20} {b.count:>4}  {money(b.gross_revenue):>12}  "
                f"{money(b.staff_share):>12}  {money(b.net_owner_profit):>12}"
            )
    if result.by_service:
        lines += ["", "By service:"]
        for name, n in result.by_service.items():
            lines.append(f"  {name:<20} {n:>4}")
    print("\n".join(lines))
    return EXIT_OK


def cmd_export(args: argparse.Namespace) -> int:
    criteria = criteria_from_args(args)
    snapshot = load_snapshot(args)
    appointments = filter_appointments(snapshot.appointments, criteria)
    result = aggregate(appointments, snapshot.staff_members, snapshot.services)

    exporters = {"pdf": [export_document], "xlsx": [export_workbook],
                 "all": [export_document, export_workbook]}[args.format]
    try:
        for export in exporters:
            artifact = export(
                appointments, result, snapshot.staff_members,
                snapshot.services, snapshot.clients, criteria=criteria,
            )
            print(save_artifact(artifact, args.out))
    except NothingToExportError as e:
        logger.warning(str(e))
        return EXIT_NOTHING_TO_EXPORT
    return EXIT_OK


# ================================================================
# 参数解析
# ================================================================

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--source", choices=["local", "remote"], default="local",
                        help="Read from the local store or the remote API (default: local)")
    common.add_argument("--db", default=None,
                        help="Local store URL (default: DATABASE_URL)")
    common.add_argument("--staff-id", default=None, help="Only this staff member")
    common.add_argument("--client-id", default=None, help="Only this client")
    common.add_argument("--from", dest="date_from", default=None,
                        help="First day, YYYY-MM-DD (inclusive)")
    common.add_argument("--to", dest="date_to", default=None,
                        help="Last day, YYYY-MM-DD (inclusive)")
    common.add_argument("--log-level", default=settings.log_level,
                        help="Log level (default: LOG_LEVEL or INFO)")

    parser = argparse.ArgumentParser(description="Appointment commission reports")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", parents=[common],
                                 help="Copy the remote API into the local store")
    sync.set_defaults(handler=cmd_sync)

    summary = subparsers.add_parser("summary", parents=[common],
                                    help="Print totals and breakdowns")
    summary.add_argument("--json", action="store_true", help="Print JSON")
    summary.set_defaults(handler=cmd_summary)

    export = subparsers.add_parser("export", parents=[common],
                                   help="Render PDF / XLSX reports")
    export.add_argument("--format", choices=["pdf", "xlsx", "all"], default="all")
    export.add_argument("--out", default="exports", help="Output directory (default: exports)")
    export.set_defaults(handler=cmd_export)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        return args.handler(args)
    except (ValidationError, RemoteError, ExportError) as e:
        logger.error(str(e))
        return EXIT_ERROR
    except SQLAlchemyError as e:
        logger.error(f"Local store error: {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
