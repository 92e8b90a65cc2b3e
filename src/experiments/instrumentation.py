from __future__ import annotations

import csv
import json
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional


@dataclass
class HeapProfiler:
    """
    Structured event recorder for a Runtime.

    The runtime reports "allocation" and "gc_cycle" events; scenario drivers
    may add their own. Besides the raw event list the profiler keeps running
    totals (events per type, objects reclaimed, peak live count) so drivers
    can summarise a run without rescanning it. Events can be written under
    output_dir as <run_id>.jsonl and <run_id>.csv.
    """

    run_id: str
    output_dir: Optional[str] = None
    write_immediately: bool = False
    events: List[Dict[str, object]] = field(default_factory=list)
    counts: Counter = field(default_factory=Counter)
    reclaimed: int = 0
    peak_live: int = 0

    def record_event(self, event_type: str, payload: Dict[str, object]) -> None:
        record = {
            "seq": len(self.events),
            "timestamp": time.time(),
            "run_id": self.run_id,
            "event": event_type,
            **payload,
        }
        self.events.append(record)
        self.counts[event_type] += 1
        if event_type == "gc_cycle":
            self.reclaimed += int(payload.get("freed", 0))
        live = payload.get("live")
        if isinstance(live, int) and live > self.peak_live:
            self.peak_live = live
        if self.write_immediately and self._output_path():
            self._write_jsonl([record], mode="a")

    def events_of(self, event_type: str) -> List[Dict[str, object]]:
        return [record for record in self.events if record["event"] == event_type]

    def summary(self) -> Dict[str, int]:
        return {**self.counts, "reclaimed": self.reclaimed, "peak_live": self.peak_live}

    def flush(self) -> List[Path]:
        """Write the recorded events to disk and return the files written."""
        if not self._output_path() or not self.events:
            return []
        written: List[Path] = []
        if not self.write_immediately:
            # Streaming mode has already appended every record to the JSONL file.
            written.append(self._write_jsonl(self.events, mode="w"))
        written.append(self._write_csv())
        return written

    def _output_path(self) -> Optional[Path]:
        if not self.output_dir:
            return None
        path = Path(self.output_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _write_jsonl(self, records: Iterable[Dict[str, object]], *, mode: str) -> Path:
        jsonl_path = self._output_path() / f"{self.run_id}.jsonl"
        with jsonl_path.open(mode, encoding="utf-8") as handle:
            for record in records:
                handle.write(json.dumps(record) + "\n")
        return jsonl_path

    def _write_csv(self) -> Path:
        csv_path = self._output_path() / f"{self.run_id}.csv"
        fieldnames = sorted({key for event in self.events for key in event.keys()})
        with csv_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(self.events)
        return csv_path
