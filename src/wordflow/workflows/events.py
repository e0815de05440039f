"""Progress events emitted by translation runs."""

import json
from datetime import datetime
from typing import Any, Dict


class ProgressEvent:
    """Progress event for SSE streaming."""

    def __init__(self, event_type: str, data: Dict[str, Any]):
        self.event_type = event_type
        self.data = data
        self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "type": self.event_type,
            **self.data
        }

    def to_sse(self) -> Dict[str, str]:
        """Convert to the event dict understood by EventSourceResponse."""
        return {"event": self.event_type, "data": json.dumps(self.to_dict(), ensure_ascii=False)}

    @property
    def is_terminal(self) -> bool:
        return self.event_type in ("idle", "cancelled")
