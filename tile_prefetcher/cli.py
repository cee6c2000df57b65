# tile_prefetcher/cli.py
import argparse
import sys

from loguru import logger
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from .cache import SqliteTileCache
from .downloader import TILE_WRITE_FORMATS, DownloaderConfig, TileDownloader, convert_path
from .exceptions import ConfigError
from .providers import ProviderManager
from .tile import load_tile_list, parse_tile

console = Console()


def configure_logging(level: str = "INFO", log_file: str = None):
    """
    配置 loguru：stderr 输出，可选滚动日志文件
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), enqueue=True)
    if log_file:
        logger.add(log_file, level="DEBUG", rotation="10 MB", retention=5, encoding="utf-8", enqueue=True)


def cmd_list_providers(args):
    table = Table(title="可用瓦片源")
    table.add_column("name", style="cyan")
    table.add_column("type")
    table.add_column("zoom_range")
    table.add_column("overlays")
    for name in ProviderManager.list_providers():
        p = ProviderManager.get_provider(name)
        overlays = ", ".join(o.name for o in p.overlays)
        table.add_row(name, p.provider_type.value, f"{p.min_zoom}-{p.max_zoom}", overlays)
    console.print(table)
    return 0


def collect_tiles(args):
    tiles = [parse_tile(t) for t in args.tile or []]
    if args.tiles_file:
        tiles.extend(load_tile_list(args.tiles_file))
    return tiles


def build_config(args) -> DownloaderConfig:
    config = DownloaderConfig.from_file(args.config) if args.config else DownloaderConfig()
    tile_path = args.output_dir
    if tile_path and args.wsl_path:
        tile_path = str(convert_path(tile_path))
    return config.with_overrides(
        max_threads=args.threads,
        retries=args.retries,
        tile_path=tile_path,
        write_format=args.format,
    )


def cmd_fetch(args):
    config = build_config(args)
    tiles = collect_tiles(args)
    provider = ProviderManager.get_provider(args.provider)

    cache = None
    if not config.disk_mode:
        if not args.cache_db:
            raise ConfigError("必须指定 --output-dir 或 --cache-db")
        cache = SqliteTileCache(args.cache_db)

    console.print(f"[bold blue]预取瓦片[/bold blue] provider={provider.name} tiles={len(tiles)}")
    dl = TileDownloader(config, cache=cache)
    try:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("下载", total=len(tiles))
            dl.subscribe(
                on_start=lambda e: progress.update(task, total=e.total, completed=0),
                on_progress=lambda e: progress.update(task, completed=e.done),
                on_complete=lambda e: progress.update(task, description="取消" if e.cancelled else "完成"),
            )
            dl.start(provider, tiles)
            try:
                while not dl.wait(0.5):
                    pass
            except KeyboardInterrupt:
                console.print("[yellow]正在取消...[/yellow]")
                dl.cancel()
                dl.wait()
    finally:
        if cache is not None:
            cache.close()

    stats = dl.get_statistics()
    print_stats(stats)
    return 0 if stats['downloaded'] == stats['total'] else 1


def print_stats(stats: dict):
    table = Table(title="统计")
    for k in ["downloaded", "failed", "pending", "total"]:
        table.add_row(k, str(stats.get(k, 0)))
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="地图瓦片预取器")
    parser.add_argument("--log-level", default="INFO", help="日志级别 (DEBUG/INFO/WARNING/ERROR)")
    parser.add_argument("--log-file", help="日志文件路径")
    subparsers = parser.add_subparsers(dest="cmd")

    subparsers.add_parser("list", help="列出支持的瓦片源")

    p_fetch = subparsers.add_parser("fetch", help="按瓦片列表下载")
    p_fetch.add_argument("--provider", required=True, help="瓦片源 (osm / bing...)")
    p_fetch.add_argument("--tile", action="append", help="瓦片坐标 z/x/y，可重复")
    p_fetch.add_argument("--tiles-file", help="瓦片列表文件，每行一个 z/x/y")
    p_fetch.add_argument("--output-dir", help="瓦片根目录（磁盘模式）")
    p_fetch.add_argument(
        "--wsl-path", action="store_true",
        help="在 WSL 中把 Windows 盘符路径 (D:/tiles) 转换为 /mnt/d/tiles",
    )
    p_fetch.add_argument("--cache-db", help="SQLite 缓存文件（缓存模式）")
    p_fetch.add_argument("--threads", type=int)
    p_fetch.add_argument("--retries", type=int)
    p_fetch.add_argument(
        "--format",
        help=f"瓦片路径模板，或预置名称: {', '.join(TILE_WRITE_FORMATS)}",
    )
    p_fetch.add_argument("--config", help="JSON 配置文件")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    try:
        if args.cmd == "list":
            return cmd_list_providers(args)
        if args.cmd == "fetch":
            return cmd_fetch(args)
    except (ConfigError, ValueError, OSError) as e:
        console.print(f"[red]错误:[/red] {e}")
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
