"""Example: run a gate scan through the service layer (no Flask).

    python -m examples.example_usage EDW-2026-001
"""

import importlib
import json
import sys

from config import get_settings_module

from src.campus_ops.campus_ops.container import build_container


def main():
    code = sys.argv[1] if len(sys.argv) > 1 else "EDW-2026-001"
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, timezone=getattr(settings, "TIMEZONE", None))

    result = container.gate_service.scan(code)
    print(result.http_status, json.dumps(result.to_payload(), indent=2, default=str))


if __name__ == "__main__":
    main()
