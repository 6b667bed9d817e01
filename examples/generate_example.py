"""Generate an example .toon file to see what the format looks like."""

import sys
sys.path.insert(0, str(__import__("pathlib").Path(__file__).parent.parent))

from decimal import Decimal

import toon
from toon import EncodeOptions
from toon.converters import estimate_savings

report = {
    "report": {
        "title": "Analysis Report",
        "generated": "2025-01-15T09:30:00Z",
        "tags": ["security", "architecture", "demo"],
    },
    "findings": [
        {"id": 1, "area": "auth", "severity": "low", "note": "JWT tokens with 24h expiry"},
        {"id": 2, "area": "db", "severity": "none", "note": "parameterized statements only"},
        {"id": 3, "area": "api", "severity": "low", "note": "rate limit: 100 req/min per key"},
        {"id": 4, "area": "cors", "severity": "none", "note": "restricted to known origins"},
    ],
    "steps": [
        "Searched auth/*.py, db/*.py, api/middleware.py",
        {"tool": "grep", "args": {"pattern": "SELECT|INSERT|UPDATE|DELETE", "path": "db/"}},
        {"tool": "read_file", "args": {"path": "api/middleware.py"}},
    ],
    "metrics": {
        "tokens_in": 12450,
        "tokens_out": 3200,
        "latency_ms": 8934,
        "model_cost_usd": Decimal("0.0847"),
        "files_read": 12,
    },
    "recommendation": "Add request signing for webhook endpoints.",
}

# Write the example
output = str(__import__("pathlib").Path(__file__).parent / "hello.toon")
nbytes = toon.dump(report, output, EncodeOptions(indent=2))
print(f"Generated {output} ({nbytes} bytes)")

# Also print the raw content so you can see the format
print()
print("=" * 60)
print("RAW .toon FILE CONTENTS:")
print("=" * 60)
print()
print(toon.encode(report, EncodeOptions(indent=2)))

print()
print("=" * 60)
print("FOLDED KEYS, PIPE DELIMITER:")
print("=" * 60)
print()
print(toon.encode({"config": {"server": {"port": 8080}}, "rows": report["findings"][:2]},
                  EncodeOptions(key_folding="safe", delimiter="pipe")))

stats = estimate_savings(report)
print()
print(f"JSON: {stats['json_chars']} chars, ~{stats['json_tokens']} tokens")
print(f"TOON: {stats['toon_chars']} chars, ~{stats['toon_tokens']} tokens ({stats['savings_percent']}% fewer)")
