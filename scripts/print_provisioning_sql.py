# Print the SQL that creates every storefront table, policy and the media bucket
from __future__ import annotations
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def main():
    from bridge_core.data import build_provisioning_sql

    print(build_provisioning_sql())


if __name__ == "__main__":
    main()
