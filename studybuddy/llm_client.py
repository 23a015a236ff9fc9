"""Groq LLM client with caching and fallbacks."""
import asyncio
import hashlib
import json
import logging
from datetime import date
from typing import Dict, List, Optional

import redis.asyncio as redis
from groq import AsyncGroq
from tenacity import retry, stop_after_attempt, wait_exponential

from .config import config
from .date_resolver import local_today
from .models import UserContext
from .prompts import prompt_templates

logger = logging.getLogger(__name__)


class LLMClient:
    def __init__(self):
        # No key means every call degrades to an empty completion
        self.client = AsyncGroq(api_key=config.groq_api_key) if config.groq_api_key else None
        self.redis_client = None
        self._redis_checked = False

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def _init_redis(self):
        """Initialize Redis connection for caching."""
        if self.redis_client or self._redis_checked:
            return
        self._redis_checked = True
        if not config.redis_url:
            return

        try:
            self.redis_client = redis.from_url(config.redis_url)
            await self.redis_client.ping()
            logger.info("Redis cache connected")
        except Exception as e:
            logger.warning(f"Redis unavailable: {e}")
            self.redis_client = None

    def _cache_key(self, messages: List[Dict], temperature: float) -> str:
        """Generate cache key for request."""
        content = json.dumps({
            "messages": messages,
            "model": config.groq_model,
            "temperature": temperature
        }, sort_keys=True)
        return f"llm:{hashlib.md5(content.encode()).hexdigest()}"

    async def _get_cached(self, cache_key: str) -> Optional[Dict]:
        """Get cached response."""
        if not self.redis_client:
            return None
        try:
            cached = await self.redis_client.get(cache_key)
            return json.loads(cached) if cached else None
        except Exception as e:
            logger.warning(f"Cache read error: {e}")
            return None

    async def _set_cache(self, cache_key: str, response: Dict):
        """Cache response."""
        if not self.redis_client:
            return
        try:
            await self.redis_client.setex(
                cache_key,
                config.cache_ttl,
                json.dumps(response)
            )
        except Exception as e:
            logger.warning(f"Cache write error: {e}")

    @retry(
        stop=stop_after_attempt(config.max_retries),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True
    )
    async def _create(self, **kwargs):
        return await asyncio.wait_for(
            self.client.chat.completions.create(**kwargs),
            timeout=config.timeout_seconds
        )

    async def complete(
        self,
        messages: List[Dict],
        temperature: Optional[float] = None,
        json_mode: bool = False
    ) -> Dict:
        """Complete chat with caching and retries. Never raises; failures give empty content."""
        if not self.enabled:
            return {"content": ""}

        temperature = config.temperature if temperature is None else temperature
        await self._init_redis()
        cache_key = self._cache_key(messages, temperature)

        cached = await self._get_cached(cache_key)
        if cached:
            logger.info("Cache hit")
            return cached

        kwargs = {
            "model": config.groq_model,
            "messages": messages,
            "max_tokens": config.max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._create(**kwargs)
            result = {"content": response.choices[0].message.content or ""}
            if result["content"]:
                await self._set_cache(cache_key, result)
            return result

        except asyncio.TimeoutError:
            logger.error("LLM timeout")
            return {"content": ""}
        except Exception as e:
            logger.error(f"LLM error: {e}")
            return {"content": ""}

    async def chat_reply(
        self,
        message: str,
        context: UserContext,
        history: Optional[List[Dict]] = None,
        today: Optional[date] = None,
        file_names: Optional[List[str]] = None
    ) -> Optional[str]:
        """Free-text answer for informational messages, or None when unavailable."""
        if not self.enabled:
            return None

        system_prompt = prompt_templates.get_assistant_prompt()
        context_line = prompt_templates.build_context_line(context, today or local_today(), file_names)
        if context_line:
            system_prompt = f"{system_prompt}\n\n{context_line}"

        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(history or [])
        messages.append({"role": "user", "content": message})

        result = await self.complete(messages)
        return result["content"].strip() or None

# Global instance
llm_client = LLMClient()
