"""
Daily challenge cache-aside controller.

Lookup order for a user's challenge:
    1. in-memory cache
    2. today's persisted challenge (most recently created wins)
    3. weak-topic detection; nothing detected -> short-lived "Get Started" challenge
    4. generation, persisted and cached for a day
"""

import asyncio
import math
from contextlib import asynccontextmanager
from datetime import datetime, tzinfo
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import globals as config
from cache import TTLCache
from models import (
    CacheStats, ChallengeContent, ChallengeHistory, DailyChallenge, DailyChallengeResult,
    GeneratedChallenge, WeakTopic
)
from store import RecordStore
from utils import day_bounds, ensure_aware, get_timezone, local_today, utc_now
from weak_topics import detect_weak_topics, is_sentinel, qualifying_evaluations

GenerateChallenge = Callable[[List[WeakTopic]], Awaitable[GeneratedChallenge]]


class ChallengeNotFoundError(Exception):
    pass


class ChallengeAlreadyCompletedError(Exception):
    pass


def daily_challenge_key(user_id: str) -> str:
    return f"daily_challenge_{user_id}"


class ChallengeController:
    def __init__(self, cache: TTLCache, store: RecordStore, generate_challenge: GenerateChallenge,
                 clock: Callable[[], datetime] = utc_now, tz: Optional[tzinfo] = None):
        self.cache = cache
        self.store = store
        self.generate_challenge = generate_challenge
        self.clock = clock
        self.tz = tz or get_timezone()
        self._user_locks: Dict[str, asyncio.Lock] = {}
        self._lock_waiters: Dict[str, int] = {}

    def _today_bounds(self) -> Tuple[datetime, datetime]:
        return day_bounds(local_today(self.clock(), self.tz), self.tz)

    def _cache_challenge(self, user_id: str, challenge: DailyChallenge, ttl: float) -> None:
        self.cache.set(daily_challenge_key(user_id), challenge.model_copy(deep=True), ttl)

    def _cached_challenge(self, user_id: str) -> Optional[DailyChallenge]:
        cached = self.cache.get(daily_challenge_key(user_id))
        return cached.model_copy(deep=True) if cached is not None else None

    @asynccontextmanager
    async def _user_lock(self, user_id: str):
        """Serialize challenge loading per user; the lock is dropped once nobody holds or awaits it"""
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = self._user_locks[user_id] = asyncio.Lock()
        self._lock_waiters[user_id] = self._lock_waiters.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_waiters[user_id] -= 1
            if self._lock_waiters[user_id] == 0:
                del self._lock_waiters[user_id]
                del self._user_locks[user_id]

    async def get_daily_challenge(self, user_id: str) -> DailyChallengeResult:
        print(f"[Recommendations] Fetching for user: {user_id}")

        cached = self._cached_challenge(user_id)
        if cached is not None:
            print(f"🎯 Cache hit! Returning cached challenge for user: {user_id}")
            return DailyChallengeResult(data=cached, cached=True)

        print(f"💾 Cache miss for user: {user_id}")

        # Concurrent misses for one user wait here instead of generating twice
        async with self._user_lock(user_id):
            cached = self._cached_challenge(user_id)
            if cached is not None:
                return DailyChallengeResult(data=cached, cached=True)

            return await self._load_or_generate(user_id)

    async def _load_or_generate(self, user_id: str) -> DailyChallengeResult:
        cache_settings = config.get_cache_config()
        analytics_settings = config.get_analytics_config()

        start, end = self._today_bounds()
        existing = self.store.find_latest_challenge(user_id, start, end)
        if existing is not None:
            self._cache_challenge(user_id, existing, cache_settings["daily_challenge_ttl"])
            print(f"✅ Found today's challenge in store for user: {user_id}")
            return DailyChallengeResult(data=existing)

        interviews = self.store.find_interviews(user_id)
        weak_topics = detect_weak_topics(
            qualifying_evaluations(interviews),
            limit=analytics_settings["challenge_weak_topics"]
        )

        now = self.clock()
        if is_sentinel(weak_topics):
            starter = DailyChallenge(
                userId=user_id,
                dailyChallenge=ChallengeContent(**config.GET_STARTED_CHALLENGE),
                challengeDate=now,
                createdAt=now
            )
            # Short TTL: the user may complete an interview soon
            self._cache_challenge(user_id, starter, cache_settings["get_started_ttl"])
            return DailyChallengeResult(
                data=starter,
                message="Complete more interviews to get personalized recommendations"
            )

        generated = await self.generate_challenge(weak_topics)

        challenge = self.store.insert_challenge(DailyChallenge(
            userId=user_id,
            weakTopics=weak_topics,
            recommendedTopics=generated.recommendedTopics,
            dailyChallenge=generated.dailyChallenge,
            challengeDate=now,
            createdAt=now
        ))
        self._cache_challenge(user_id, challenge, cache_settings["daily_challenge_ttl"])
        print(f"✅ Stored new generated challenge for user: {user_id}")

        return DailyChallengeResult(data=challenge)

    async def complete_challenge(self, user_id: str, challenge_id: str) -> DailyChallenge:
        challenge = self.store.get_challenge(user_id, challenge_id)
        if challenge is None:
            raise ChallengeNotFoundError(f"Recommendation not found: {challenge_id}")

        if challenge.completed:
            raise ChallengeAlreadyCompletedError("Challenge already completed")

        challenge.mark_as_completed(self.clock())
        challenge = self.store.update_challenge(challenge)

        # Only today's challenge is served from the cache
        start, end = self._today_bounds()
        if start <= ensure_aware(challenge.challengeDate) < end:
            self._cache_challenge(user_id, challenge, config.get_cache_config()["daily_challenge_ttl"])
        print(f"✅ Updated challenge completion status for user: {user_id}")
        return challenge

    async def clear_user_cache(self, user_id: str) -> int:
        """Drop the cached challenge and today's stored ones so the next read regenerates"""
        self.cache.delete(daily_challenge_key(user_id))

        start, end = self._today_bounds()
        deleted = self.store.delete_challenges(user_id, start, end)

        print(f"🗑️  Cleared cache and {deleted} stored challenge(s) for user: {user_id}")
        return deleted

    def get_challenge_history(self, user_id: str, page: int = 1, limit: int = 10) -> ChallengeHistory:
        page = max(page, 1)
        limit = max(limit, 1)

        challenges = self.store.find_challenges(user_id)
        skip = (page - 1) * limit

        return ChallengeHistory(
            challenges=challenges[skip:skip + limit],
            pagination={
                "currentPage": page,
                "totalPages": math.ceil(len(challenges) / limit),
                "totalChallenges": len(challenges),
            }
        )

    def get_cache_stats(self) -> CacheStats:
        return CacheStats(**self.cache.stats())
