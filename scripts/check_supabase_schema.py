# Check which storefront tables exist in the configured Supabase project
from __future__ import annotations
import sys
import io
import logging
from pathlib import Path

sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def main() -> int:
    from bridge_core.config import load_config
    from bridge_core.errors import ConfigurationError
    from bridge_core.logging import setup_logging
    from bridge_core.models import TABLES
    from bridge_core.offline import RemoteGateway, get_local_store
    from bridge_core.services import ResultCode

    setup_logging(level=logging.WARNING)
    config = load_config()
    try:
        config.require_remote()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}")
        print("Set SUPABASE_URL and SUPABASE_ANON_KEY to check a project.")
        return 1

    gateway = RemoteGateway.from_config(config, get_local_store(config.local_db_path))
    health = gateway.measure_connection()
    print(f"Connection: {health['status']} ({health['message']}, {health['latency']} ms)")
    if not gateway.is_configured:
        return 1

    missing = []
    for table in TABLES:
        print(f"\n{'='*60}")
        print(f"Table: {table}")
        print(f"{'='*60}")
        result = gateway.count(table)
        if result.reached_remote:
            print(f"  rows: {result.data}")
        elif result.error_code == ResultCode.SCHEMA_MISSING:
            print("  MISSING")
            missing.append(table)
        else:
            print(f"  Error: {result.error}")

    if missing:
        print(f"\n{len(missing)} table(s) missing. Run scripts/print_provisioning_sql.py "
              "and paste the output into the Supabase SQL editor.")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
