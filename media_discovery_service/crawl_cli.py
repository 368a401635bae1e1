import argparse
import asyncio
import json
import os
import sys
from dataclasses import replace
from pathlib import Path

# Add the parent directory of src to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from src.extraction.assembler import filter_noise
from src.extraction.errors import MediaDiscoveryError
from src.extraction.media_crawler import run_crawl
from src.utils.config import get_config
from src.utils.validation import RequestValidator

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Discover media assets on a listing page")
    p.add_argument("--url", required=True, help="Listing page URL")
    p.add_argument("--out-json", type=str, default="assets.json", help="Output JSON path")
    p.add_argument("--filter", action="store_true", help="Drop tracking pixels and UI images")
    p.add_argument("--headed", action="store_true", help="Show the browser window")
    p.add_argument("--max-clicks", type=int, default=None, help="Stop exploring after this many clicks")
    return p.parse_args(argv)

async def main(argv=None) -> int:
    args = parse_args(argv)

    is_valid, error = RequestValidator.validate_url(args.url)
    if not is_valid:
        print(f"[ERROR] {error}", file=sys.stderr)
        return 2

    crawler_config = get_config().crawler
    if args.headed:
        crawler_config = replace(crawler_config, headless=False)
    if args.max_clicks is not None:
        crawler_config = replace(crawler_config, max_clicks=args.max_clicks)

    try:
        assets = await run_crawl(args.url.strip(), crawler_config)
    except MediaDiscoveryError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    if args.filter:
        assets = filter_noise(assets)

    Path(args.out_json).parent.mkdir(parents=True, exist_ok=True)
    with open(args.out_json, "w", encoding="utf-8") as f:
        json.dump({'assets': [asset.to_dict() for asset in assets]}, f, ensure_ascii=False, indent=2)

    print(f"[OK] Found {len(assets)} assets -> {args.out_json}")
    return 0

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
