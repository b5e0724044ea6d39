#!/usr/bin/env python3
"""
Bookmark Hub 启动脚本

使用方法：
  # SQLite
  DATABASE_URL=sqlite+aiosqlite:///./data/bookmarks.db bookmark-hub

  # 不连数据库，使用内存存储并写入演示书签
  bookmark-hub --memory --seed-samples
"""

import argparse
import os
import sys


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Bookmark Hub API 服务",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="未使用 --memory 时必须设置 DATABASE_URL 环境变量",
    )
    parser.add_argument('--host', default='127.0.0.1',
                        help='监听地址 (默认: 127.0.0.1)')
    parser.add_argument('--port', '-p', type=int, default=5000,
                        help='监听端口 (默认: 5000)')
    parser.add_argument('--memory', action='store_true',
                        help='使用内存存储，不连接数据库')
    parser.add_argument('--seed-samples', action='store_true',
                        help='启动时写入演示分类和书签')
    parser.add_argument('--reload', action='store_true',
                        help='代码变更时自动重启（开发用）')

    args = parser.parse_args(argv)

    # 配置在导入应用时读取，必须先写环境变量
    if args.memory:
        os.environ["STORAGE_BACKEND"] = "memory"
    if args.seed_samples:
        os.environ["SEED_SAMPLE_DATA"] = "true"

    from .config import get_settings
    get_settings.cache_clear()
    settings = get_settings()
    if settings.STORAGE_BACKEND == "sql" and not settings.DATABASE_URL:
        print("❌ 错误: 未设置 DATABASE_URL 环境变量", file=sys.stderr)
        print("💡 提示: 设置 DATABASE_URL，或使用 --memory 运行内存版本", file=sys.stderr)
        return 1

    import uvicorn
    uvicorn.run("bookmark_hub.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == '__main__':
    sys.exit(main())
