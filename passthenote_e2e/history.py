from typing import Dict, Any, List, Optional, Union
from datetime import datetime
from pathlib import Path
import json

from .exceptions import E2EError


class RunHistory:
    """Keeps the results of scenario runs"""

    def __init__(self):
        self.records: List[Dict[str, Any]] = []

    def record(self, scenario: str, result: Dict[str, Any]) -> Dict:
        """Store one scenario result"""
        entry = {
            "timestamp": datetime.now().isoformat(),
            "scenario": scenario,
            "success": bool(result.get("success")),
            "skipped": bool(result.get("skipped")),
            "final_url": result.get("final_url", ""),
            "result": result
        }
        self.records.append(entry)
        return entry

    def get_history(self, scenario: Optional[str] = None, limit: Optional[int] = None) -> list:
        history = [
            entry for entry in self.records
            if scenario is None or entry["scenario"] == scenario
        ]

        if limit:
            return history[-limit:]
        return history

    def last_result(self, scenario: str) -> Optional[Dict]:
        history = self.get_history(scenario, limit=1)
        return history[0] if history else None

    def summary(self) -> Dict[str, Dict]:
        """Per-scenario run counts"""
        summary: Dict[str, Dict] = {}
        for entry in self.records:
            stats = summary.setdefault(entry["scenario"], {
                "runs": 0,
                "passed": 0,
                "failed": 0,
                "skipped": 0,
                "last_run": None
            })
            stats["runs"] += 1
            if entry["skipped"]:
                stats["skipped"] += 1
            elif entry["success"]:
                stats["passed"] += 1
            else:
                stats["failed"] += 1
            stats["last_run"] = entry["timestamp"]
        return summary

    def clear(self):
        self.records.clear()

    def export_json(self) -> str:
        return json.dumps({"records": self.records}, indent=2, default=str)

    def import_json(self, data: str) -> int:
        """Append records from an exported document, returning how many were added"""
        document = json.loads(data)
        if not isinstance(document, dict):
            raise E2EError(f"Expected a history object, got {type(document).__name__}")
        records = document.get("records", [])
        if not isinstance(records, list):
            raise E2EError("History 'records' must be a list")
        self.records.extend(records)
        return len(records)

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export_json())
        return path
