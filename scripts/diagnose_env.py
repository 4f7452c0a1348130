#!/usr/bin/env python
"""Environment & connectivity diagnostics for the Sortly connector.

Usage:
  python scripts/diagnose_env.py [--connect]

Without flags runs variable presence checks. Use --connect to list one custom field.
"""
from __future__ import annotations
import os, sys, textwrap
from pathlib import Path
from typing import Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sortly import AuthorizationError, SortlyApiError, SortlyConnector  # noqa: E402


def load_env_file(env_path: Path) -> None:
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k,v = line.split('=',1)
        k = k.strip(); v = v.strip().strip('"').strip("'")
        if not k:
            continue
        existing = os.environ.get(k)
        if existing is None or existing.strip() == '':
            os.environ[k] = v

MANDATORY: List[str] = ['SORTLY_API_TOKEN']
OPTIONAL: List[str] = ['SORTLY_BASE_URL', 'SORTLY_TIMEOUT']

def mask(val: str | None) -> str | None:
    if not val:
        return val
    if len(val) <= 6:
        return '*' * len(val)
    return val[:4] + '...' + val[-4:]

def check_presence() -> Dict[str, str]:
    return {k: 'OK' if (os.getenv(k) or '').strip() else 'MISSING' for k in MANDATORY}

def print_report():
    presence = check_presence()
    print('\n[VARIABLE PRESENCE]')
    widest = max(len(k) for k in MANDATORY + OPTIONAL)
    for k, status in presence.items():
        print(f"  {k.ljust(widest)} : {status:<8} {'' if status!='OK' else mask(os.getenv(k))}")
    print('\n[OPTIONAL]')
    for k in OPTIONAL:
        raw = os.getenv(k)
        if raw:
            print(f"  {k.ljust(widest)} = {raw}")
    print()

def check_connection(client: SortlyConnector | None = None) -> bool:
    if client is None:
        if check_presence()['SORTLY_API_TOKEN'] != 'OK':
            print('[sortly] Skipping connectivity test (missing: SORTLY_API_TOKEN)')
            return False
        client = SortlyConnector.from_env()
    print(f"[sortly] GET {client.base_url}/custom_fields?per_page=1")
    try:
        client.list_custom_fields(per_page=1)
    except AuthorizationError as e:
        print(f"[sortly] ERROR HTTP-{e.status_code}: {e}")
        print(textwrap.dedent("""
            HINT 401/403: Invalid or revoked token. Generate a new one under Sortly > Settings > Sortly API.
        """))
        return False
    except SortlyApiError as e:
        print(f"[sortly] ERROR {type(e).__name__} (HTTP-{e.status_code}): {e}")
        return False
    state = client.rate_limit_state
    print(f"[sortly] OK  rate-limit max={state.limit} remaining={state.remaining} reset={state.reset_seconds}s")
    return True


def main(argv: List[str]):
    load_env_file(PROJECT_ROOT / '.env')
    flags = set(a for a in argv[1:] if a.startswith('--'))
    print_report()
    if '--connect' in flags:
        check_connection()

if __name__ == '__main__':
    main(sys.argv)
