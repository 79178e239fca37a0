"""命令行入口：解析参数、加载配置并调用 `spider.crawl`。

支持两种运行方式：
- 推荐：`python -m bloghub_spider.cli ...`（作为包运行）
- 直接运行脚本：`python bloghub_spider/cli.py ...`（会在运行时自动调整 `sys.path`）
"""

import argparse
import logging
import sys
from pathlib import Path

# 当直接运行脚本（非包方式），修正 sys.path 以便可以使用包的绝对导入
if __package__ is None or __package__ == "":
    root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(root))

from bloghub_spider.bloggers import BLOGGERS, build_bloggers
from bloghub_spider.config import load_config, load_default_config, settings
from bloghub_spider.spider import Fetcher, crawl


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bloghub_spider", description="抓取多个博客源并去重保存文章")
    parser.add_argument("--config", help="YAML 配置文件路径（优先于本地默认配置）")
    parser.add_argument("--data-dir", help="数据目录，默认 data")
    parser.add_argument("--source", action="append", dest="sources", help="只抓取指定博客源，可重复")
    parser.add_argument("--deadline", type=float, help="整体截止时间（秒），到时停止所有博客源")
    parser.add_argument("--list", action="store_true", help="列出支持的博客源后退出")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.list:
        for name, cls in BLOGGERS.items():
            print(f"{name}\t{cls.blogger_name}\t{cls.homepage}")
        return 0

    try:
        cfg = load_config(args.config) if args.config else load_default_config()
    except Exception as e:
        print(f"加载配置出错: {e}")
        cfg = {}

    cfg = settings(cfg)
    if args.data_dir:
        cfg["data_dir"] = args.data_dir
    if args.sources:
        cfg["sources"] = args.sources
    if args.deadline is not None:
        cfg["deadline"] = args.deadline

    logging.basicConfig(level=str(cfg["log_level"]).upper(),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logger = logging.getLogger("bloghub.scheduler")

    try:
        bloggers = build_bloggers(cfg["sources"],
                                  lambda: Fetcher(timeout=cfg["timeout"], user_agent=cfg["user_agent"]))
    except KeyError as e:
        logger.critical(f"博客源配置错误: {e}")
        return 2

    results = crawl(bloggers, data_dir=cfg["data_dir"], max_workers=cfg["max_workers"], deadline=cfg["deadline"])

    failed = 0
    for source, result in results.items():
        if isinstance(result, Exception):
            failed += 1
            logger.error(f"{source} 失败: {result}")
        else:
            logger.info(f"{source}: 新增 {result.saved}，跳过 {result.skipped}，失败 {result.failed}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
