"""Run summary model and serialization."""

import json
import math
import os
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any


def _sanitize_for_json(obj: Any) -> Any:
    """Recursively convert Decimals, enums and non-finite floats so json.dump works."""
    if isinstance(obj, dict):
        return {str(k): _sanitize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize_for_json(v) for v in obj]
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, float):
        return 0.0 if (math.isnan(obj) or math.isinf(obj)) else obj
    if isinstance(obj, (int, str, type(None), bool)):
        return obj
    # decimal.Decimal and other number-likes
    try:
        f = float(obj)
        if math.isnan(f) or math.isinf(f):
            return 0.0
        return f
    except (TypeError, ValueError):
        pass
    return str(obj)


@dataclass
class RunSummary:
    """Summary of a CLI recompute run."""
    run_id: str
    input_path: str
    started_at: str
    finished_at: Optional[str] = None
    status: str = "RUNNING"  # RUNNING, COMPLETED, FAILED

    profile_name: Optional[str] = None
    transaction_type: Optional[str] = None
    tax_enabled: bool = True
    line_count: int = 0
    change_count: int = 0
    validation_status: Optional[str] = None  # OK, REVIEW

    totals: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    output_path: Optional[str] = None
    excel_path: Optional[str] = None

    @classmethod
    def create(cls, input_path: str) -> 'RunSummary':
        """Create a new run summary."""
        return cls(
            run_id=str(uuid.uuid4()),
            input_path=str(input_path),
            started_at=datetime.now().isoformat()
        )

    def complete(self, status: str = "COMPLETED"):
        """Mark run as completed."""
        self.status = status
        self.finished_at = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return _sanitize_for_json(asdict(self))

    def save(self, path: Path):
        """Save summary to JSON file (atomic write to avoid truncated file on interrupt)."""
        path = Path(path)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
