import argparse
import json
import logging
import sys

from . import __version__
from .errors import ParseVideoError
from .models import VideoParseInfo
from .parser import batch_parse_video_id, parse_video_id, parse_video_share_url_by_regexp
from .registry import SOURCE_REGISTRY


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root = logging.getLogger("parsevideo")
    root.setLevel(level)
    if not root.handlers:
        root.addHandler(handler)

    httpx_level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("httpx").setLevel(httpx_level)
    logging.getLogger("httpcore").setLevel(httpx_level)


def format_result(r: VideoParseInfo) -> str:
    lines = [f"📌 {r.title or '(无标题)'}"]
    if r.author.name:
        lines.append(f"👤 {r.author.name}" + (f" ({r.author.uid})" if r.author.uid else ""))
    if r.video_url:
        lines.append(f"🎬 {r.video_url}")
    if r.music_url:
        lines.append(f"🎵 {r.music_url}")
    if r.cover_url:
        lines.append(f"🖼  {r.cover_url}")
    for i, img in enumerate(r.images, 1):
        lines.append(f"  [{i}] {img.url}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parsevideo",
        description=f"parsevideo v{__version__} - 分享链接解析",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  parsevideo "看这个 https://v.douyin.com/iFABCD/ 分享"
  parsevideo --source douyin --id 7301234567890123456 --json
  parsevideo --source douyin --id a --id b --id c --workers 4
""",
    )
    parser.add_argument("share", nargs="?", help="分享文本或分享链接")
    parser.add_argument("--source", "-s", choices=list(SOURCE_REGISTRY), help="按视频 id 解析时的平台")
    parser.add_argument("--id", dest="ids", action="append", default=[], metavar="VIDEO_ID",
                        help="视频 id, 可重复以批量解析")
    parser.add_argument("--workers", type=int, default=None, help="批量解析并发数")
    parser.add_argument("--timeout", type=float, default=None, help="HTTP 超时 (秒)")
    parser.add_argument("--json", "-j", action="store_true", help="JSON 格式输出")
    parser.add_argument("--verbose", "-v", action="store_true", help="详细日志")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.share and not args.ids:
        parser.print_help()
        return 1
    if args.ids and not args.source:
        parser.error("--id 需要同时指定 --source")

    try:
        if len(args.ids) > 1:
            items = batch_parse_video_id(args.source, args.ids, max_workers=args.workers, timeout=args.timeout)
            if args.json:
                print(json.dumps({k: v.to_dict() for k, v in items.items()}, ensure_ascii=False, indent=2))
            else:
                for vid in args.ids:
                    item = items.get(vid)
                    if item is None:
                        continue
                    print(f"── {vid}")
                    print(format_result(item.parse_info) if item.ok else f"  ❌ {item.error}")
            return 0

        if args.ids:
            result = parse_video_id(args.source, args.ids[0], timeout=args.timeout)
        else:
            result = parse_video_share_url_by_regexp(args.share, timeout=args.timeout)
    except ParseVideoError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_result(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
