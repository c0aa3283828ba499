"""Backup the attendance ledger blob to a timestamped JSON file.

Note: Works for every storage backend (file, mysql) since it goes through
the same key-value store the ledger uses.
"""

from __future__ import annotations

import importlib
import json
from datetime import datetime
from pathlib import Path

from geo_attendance.config import get_settings_module
from geo_attendance.container import build_store
from geo_attendance.core.constants import ATTENDANCE_STATE_KEY


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    store = build_store(settings)
    raw = store.get_item(ATTENDANCE_STATE_KEY)
    if raw is None:
        raise SystemExit("Nothing to back up: no attendance state stored yet.")

    out_dir = Path(__file__).resolve().parents[1] / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"attendance_{ts}.json"
    try:
        payload = json.loads(raw)
    except ValueError:
        # Unreadable blob: copy it verbatim.
        out_file.write_text(raw, encoding="utf-8")
        print(f"WARNING: stored state is not valid JSON, raw copy written to {out_file}")
        return
    out_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
