#!/usr/bin/env python3
"""健康检查脚本。

检查数据库连接，并可选地探测所有启用中的 webhook 端点。

使用方式：
    # 只检查数据库
    python scripts/health_check.py

    # 同时探测 webhook 端点
    python scripts/health_check.py --webhooks

    # JSON 输出
    python scripts/health_check.py --json

    # 退出码检查（用于 CI/CD）
    python scripts/health_check.py --strict
"""

import argparse
import asyncio
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


async def check_database() -> dict:
    """检查数据库连接。"""
    from src.core.infrastructure.database.session import check_db_health

    result = await check_db_health()
    if result.connected:
        return {"status": "healthy", "version": result.version}
    return {"status": "unhealthy", "error": result.error}


async def check_webhooks() -> dict:
    """探测所有启用中的 webhook 端点。"""
    from sqlmodel import col, select

    from src.core.infrastructure.database.session import get_async_session
    from src.modules.notifications.infrastructure.models import WebhookModel
    from src.modules.notifications.infrastructure.webhooks.probe import (
        HttpWebhookProbe,
    )

    try:
        async with get_async_session() as session:
            rows = await session.execute(
                select(WebhookModel.id, WebhookModel.url).where(
                    col(WebhookModel.is_deleted).is_(False),
                    col(WebhookModel.is_active).is_(True),
                )
            )
            targets = list(rows.all())
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    probe = HttpWebhookProbe()
    results = await asyncio.gather(*(probe.probe(url) for _, url in targets))

    endpoints = {}
    rejected = 0
    for (webhook_id, _), result in zip(targets, results, strict=True):
        endpoints[webhook_id] = {
            "accepted": result.accepted,
            "message": result.message,
            "warning": result.warning,
        }
        if not result.accepted:
            rejected += 1

    status = "healthy"
    if rejected:
        status = "warning" if rejected < len(targets) else "unhealthy"

    return {
        "status": status,
        "total": len(targets),
        "rejected": rejected,
        "endpoints": endpoints,
    }


async def run_check(include_webhooks: bool) -> dict:
    results = {
        "timestamp": datetime.now(UTC).isoformat(),
        "overall_status": "healthy",
        "components": {"database": await check_database()},
    }
    if include_webhooks:
        results["components"]["webhooks"] = await check_webhooks()

    statuses = [c.get("status", "unknown") for c in results["components"].values()]
    if any(s == "unhealthy" for s in statuses):
        results["overall_status"] = "unhealthy"
    elif any(s == "warning" for s in statuses):
        results["overall_status"] = "degraded"

    return results


def print_result(result: dict, json_output: bool = False):
    """打印检查结果。"""
    if json_output:
        print(json.dumps(result, indent=2))
        return

    print(f"\n{'=' * 60}")
    print(f"Health Check Report - {result['timestamp']}")
    print(f"{'=' * 60}")
    print(f"\nOverall Status: {result['overall_status'].upper()}")
    print(f"\n{'-' * 40}")
    for component, info in result["components"].items():
        print(f"{component}: {info.get('status', 'unknown')}")
        if info.get("status") != "healthy":
            for key, value in info.items():
                if key != "status":
                    print(f"    {key}: {value}")
    print(f"\n{'=' * 60}\n")


def main():
    parser = argparse.ArgumentParser(description="Keyward 健康检查脚本")
    parser.add_argument(
        "--webhooks",
        action="store_true",
        help="同时探测启用中的 webhook 端点",
    )
    parser.add_argument("--json", action="store_true", help="输出 JSON 格式")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="严格模式：任何非 healthy 状态都返回非零退出码",
    )
    args = parser.parse_args()

    result = asyncio.run(run_check(args.webhooks))
    print_result(result, args.json)

    if args.strict and result["overall_status"] != "healthy":
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
