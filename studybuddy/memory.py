"""Per-user chat transcript with Redis persistence."""
import json
import logging
from typing import Any, Dict, List, Optional

import redis.asyncio as redis

from .config import config
from .models import ChatExchange

logger = logging.getLogger(__name__)


class ChatHistory:
    def __init__(self):
        self.redis_client = None
        self._redis_checked = False
        self.max_history = config.chat_history_limit
        self._memory_fallback: Dict[str, List[Dict]] = {}  # In-memory fallback

    async def _init_redis(self):
        """Initialize Redis for transcript persistence."""
        if self.redis_client or self._redis_checked:
            return
        self._redis_checked = True
        if not config.redis_url:
            return

        try:
            self.redis_client = redis.from_url(config.redis_url)
            await self.redis_client.ping()
            logger.info("Chat history storage connected")
        except Exception as e:
            logger.warning(f"Chat history storage unavailable: {e}")
            self.redis_client = None

    def _history_key(self, user_id: str) -> str:
        return f"chat:user:{user_id}"

    async def _read(self, user_id: str) -> List[Dict]:
        await self._init_redis()

        history = []
        if self.redis_client:
            try:
                history_json = await self.redis_client.get(self._history_key(user_id))
                history = json.loads(history_json) if history_json else []
            except Exception as e:
                logger.warning(f"Redis read error: {e}")

        if not history and user_id in self._memory_fallback:
            history = self._memory_fallback[user_id]
        return list(history)

    async def add_exchange(self, user_id: str, message: str, response: str,
                           context: Optional[Dict[str, Any]] = None) -> ChatExchange:
        """Append one message/response pair to the user's transcript."""
        exchange = ChatExchange(message=message, response=response, context=context or {})

        history = await self._read(user_id)
        history.append(exchange.model_dump())

        # Trim to max_history
        if len(history) > self.max_history:
            history = history[-self.max_history:]

        if self.redis_client:
            try:
                await self.redis_client.setex(
                    self._history_key(user_id),
                    config.cache_ttl * 24,  # 24 hours for transcripts
                    json.dumps(history)
                )
            except Exception as e:
                logger.warning(f"Redis write error: {e}")

        # Always save to fallback
        self._memory_fallback[user_id] = history
        return exchange

    async def get_history(self, user_id: str, limit: Optional[int] = None) -> List[ChatExchange]:
        """Newest exchanges first."""
        history = [ChatExchange.model_validate(row) for row in reversed(await self._read(user_id))]
        return history[:limit] if limit else history

    async def get_context_messages(self, user_id: str, limit: int = 5) -> List[Dict[str, str]]:
        """Recent exchanges in LLM role format, oldest first."""
        messages = []
        for exchange in reversed(await self.get_history(user_id, limit=limit)):
            messages.append({"role": "user", "content": exchange.message})
            messages.append({"role": "assistant", "content": exchange.response})
        return messages

    async def clear(self, user_id: str):
        """Clear user's transcript."""
        await self._init_redis()

        if self.redis_client:
            try:
                await self.redis_client.delete(self._history_key(user_id))
            except Exception as e:
                logger.warning(f"Redis delete error: {e}")

        self._memory_fallback.pop(user_id, None)

# Global instance
chat_history = ChatHistory()
