"""
Per-user key/value preferences backed by the Supabase `user_preferences` table.

Rows are (user_id, key, value) with a unique constraint on (user_id, key);
values are stored as JSON.
"""

import logging
from typing import Any, Dict, Optional
from supabase._async.client import AsyncClient

logger = logging.getLogger(__name__)

PREFERENCES_TABLE = "user_preferences"


def prefix_pattern(prefix: str) -> str:
    """LIKE pattern matching keys that start with prefix. Key prefixes contain "_", a LIKE wildcard."""
    escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"{escaped}%"


class PreferencesStore:
    def __init__(self, supabase: AsyncClient, user_id: str):
        self.supabase = supabase
        self.user_id = str(user_id)

    async def get(self, key: str) -> Optional[Any]:
        result = await self.supabase.table(PREFERENCES_TABLE) \
            .select("value") \
            .eq("user_id", self.user_id) \
            .eq("key", key) \
            .execute()
        if not result.data:
            return None
        return result.data[0].get("value")

    async def get_prefixed(self, prefix: str) -> Dict[str, Any]:
        """All values whose key starts with prefix"""
        result = await self.supabase.table(PREFERENCES_TABLE) \
            .select("key, value") \
            .eq("user_id", self.user_id) \
            .like("key", prefix_pattern(prefix)) \
            .execute()
        return {row["key"]: row.get("value") for row in (result.data or [])}

    async def set(self, key: str, value: Any):
        await self.supabase.table(PREFERENCES_TABLE).upsert(
            {"user_id": self.user_id, "key": key, "value": value},
            on_conflict="user_id,key"
        ).execute()

    async def delete(self, key: str):
        await self.supabase.table(PREFERENCES_TABLE) \
            .delete() \
            .eq("user_id", self.user_id) \
            .eq("key", key) \
            .execute()

    async def delete_prefixed(self, prefix: str):
        await self.supabase.table(PREFERENCES_TABLE) \
            .delete() \
            .eq("user_id", self.user_id) \
            .like("key", prefix_pattern(prefix)) \
            .execute()
        logger.info(f"Deleted preferences with prefix '{prefix}' for user {self.user_id}")
