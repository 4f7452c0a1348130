#!/usr/bin/env python
"""CLI to fetch data from the Sortly API and dump it as JSON.

Examples:
  python scripts/fetch_sortly_data.py --resource items --folder-id 10 --per-page 50 --out data/items.json
  python scripts/fetch_sortly_data.py --resource item --id 17551135 --include custom_attributes,photos --out data/item.json
  python scripts/fetch_sortly_data.py --resource search --name widget --out data/search.json
  python scripts/fetch_sortly_data.py --resource custom-fields --out data/custom_fields.json

Options:
  --verbose (debug logging and rate-limit summary)

"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sortly import SortlyApiError, SortlyConnector  # noqa: E402

RESOURCES = ['items', 'recent', 'item', 'search', 'custom-fields', 'custom-field']


# Loads a local .env if present, never overriding variables already set
def _load_env_file(env_path: Path) -> None:
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip(); v = v.strip().strip('"').strip("'")
        existing = os.environ.get(k)
        if existing is None or existing.strip() == '':
            os.environ[k] = v


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description='Fetch Sortly inventory data')
    p.add_argument('--resource', required=True, choices=RESOURCES)
    p.add_argument('--id', help='Item or custom field id')
    p.add_argument('--include', help='Comma separated side-loads, e.g. custom_attributes,photos')
    p.add_argument('--folder-id')
    p.add_argument('--name', help='Name filter for search')
    p.add_argument('--per-page', type=int)
    p.add_argument('--page', type=int)
    p.add_argument('--out', required=True, help='Output JSON file path')
    p.add_argument('--verbose', action='store_true')
    return p.parse_args(argv)


def fetch(client: SortlyConnector, args) -> Any:
    resource = args.resource
    if resource == 'items':
        return client.list_items(folder_id=args.folder_id, per_page=args.per_page, page=args.page, include=args.include)
    if resource == 'recent':
        return client.list_recent_items(per_page=args.per_page, page=args.page, include=args.include)
    if resource == 'item':
        if not args.id:
            raise SystemExit('--id required for item')
        return client.fetch_item(args.id, include=args.include)
    if resource == 'search':
        search = {'name': args.name, 'folder_ids': [args.folder_id] if args.folder_id else None,
                  'per_page': args.per_page, 'page': args.page, 'include': args.include}
        return client.search_items({k: v for k, v in search.items() if v is not None})
    if resource == 'custom-fields':
        return client.list_custom_fields(per_page=args.per_page, page=args.page)
    if resource == 'custom-field':
        if not args.id:
            raise SystemExit('--id required for custom-field')
        return client.fetch_custom_field(args.id)
    raise SystemExit(f'Unsupported resource: {resource}')


def main(argv: Optional[List[str]] = None, client: Optional[SortlyConnector] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='[%(levelname)s] %(message)s')
    _load_env_file(PROJECT_ROOT / '.env')
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        if client is None:
            client = SortlyConnector.from_env()
        data = fetch(client, args)
    except SortlyApiError as e:
        raise SystemExit(f'[error] {type(e).__name__} (HTTP-{e.status_code}): {e}')

    out_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding='utf-8')
    if args.verbose:
        state = client.rate_limit_state
        print(f'[done] Wrote {out_path}')
        print(f'[rate-limit] max={state.limit} remaining={state.remaining} reset={state.reset_seconds}s request_id={state.request_id}')

if __name__ == '__main__':
    main()
