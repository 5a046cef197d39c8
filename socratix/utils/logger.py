import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional
from socratix.config import settings
from pathlib import Path


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the service."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


class ConversationLogger:
    """Logger for saving Socratic dialogue transcripts to a JSONL file."""

    def __init__(self, log_dir: str = None):
        self.log_dir = Path(log_dir or settings.log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / "conversations.jsonl"

    def log_conversation(
        self,
        session_id: str,
        user_id: str,
        topic: str,
        messages: List[Dict[str, Any]],
        level: str = None,
        timing: str = None,
        state: str = None,
        metadata: Dict[str, Any] = None
    ):
        """Log a dialogue snapshot to the JSONL file."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": str(session_id),
            "user_id": user_id,
            "topic": topic,
            "level": level,
            "timing": timing,
            "state": state,
            "messages": messages,
            "message_count": len(messages),
            "metadata": metadata or {}
        }

        # One entry per line
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

    def get_conversations(
        self,
        user_id: str = None,
        session_id: str = None,
        limit: int = None
    ) -> List[Dict[str, Any]]:
        """Retrieve logged snapshots, optionally filtered, newest first."""
        if not self.log_file.exists():
            return []

        conversations = []
        with open(self.log_file, "r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if user_id and entry.get("user_id") != user_id:
                    continue
                if session_id and entry.get("session_id") != session_id:
                    continue
                conversations.append(entry)

        conversations.sort(key=lambda x: x.get("timestamp", ""), reverse=True)

        if limit:
            conversations = conversations[:limit]

        return conversations
