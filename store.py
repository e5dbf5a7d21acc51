import os
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from supabase import create_client, Client

from models import DailyChallenge, Interview
from utils import ensure_aware


class RecordStore(ABC):
    """Query-by-filter access to interview and challenge documents"""

    @abstractmethod
    def find_interviews(self, user_id: str) -> List[Interview]:
        pass

    @abstractmethod
    def find_challenges(self, user_id: str, challenge_from: Optional[datetime] = None,
                        challenge_to: Optional[datetime] = None) -> List[DailyChallenge]:
        """Challenges with challengeDate in [challenge_from, challenge_to), newest created first"""
        pass

    @abstractmethod
    def find_completed_challenges(self, user_id: str, completed_from: datetime,
                                  completed_to: datetime) -> List[DailyChallenge]:
        pass

    @abstractmethod
    def get_challenge(self, user_id: str, challenge_id: str) -> Optional[DailyChallenge]:
        pass

    @abstractmethod
    def insert_challenge(self, challenge: DailyChallenge) -> DailyChallenge:
        pass

    @abstractmethod
    def update_challenge(self, challenge: DailyChallenge) -> DailyChallenge:
        pass

    @abstractmethod
    def delete_challenges(self, user_id: str, challenge_from: datetime, challenge_to: datetime) -> int:
        pass

    def find_latest_challenge(self, user_id: str, challenge_from: datetime,
                              challenge_to: datetime) -> Optional[DailyChallenge]:
        challenges = self.find_challenges(user_id, challenge_from, challenge_to)
        return challenges[0] if challenges else None


def _in_range(ts: Optional[datetime], start: Optional[datetime], end: Optional[datetime]) -> bool:
    if ts is None:
        return start is None and end is None
    ts = ensure_aware(ts)
    if start is not None and ts < ensure_aware(start):
        return False
    if end is not None and ts >= ensure_aware(end):
        return False
    return True


class InMemoryRecordStore(RecordStore):
    """Process-local store, used when no database is configured and in tests"""

    def __init__(self):
        self._interviews: Dict[str, Interview] = {}
        self._challenges: Dict[str, DailyChallenge] = {}
        self._lock = threading.Lock()

    def add_interview(self, interview: Interview) -> Interview:
        with self._lock:
            self._interviews[interview.id] = interview.model_copy(deep=True)
        return interview

    def find_interviews(self, user_id: str) -> List[Interview]:
        with self._lock:
            return [i.model_copy(deep=True) for i in self._interviews.values() if i.userId == user_id]

    def find_challenges(self, user_id: str, challenge_from: Optional[datetime] = None,
                        challenge_to: Optional[datetime] = None) -> List[DailyChallenge]:
        with self._lock:
            matches = [
                c.model_copy(deep=True) for c in self._challenges.values()
                if c.userId == user_id and _in_range(c.challengeDate, challenge_from, challenge_to)
            ]
        matches.sort(key=lambda c: ensure_aware(c.createdAt), reverse=True)
        return matches

    def find_completed_challenges(self, user_id: str, completed_from: datetime,
                                  completed_to: datetime) -> List[DailyChallenge]:
        with self._lock:
            return [
                c.model_copy(deep=True) for c in self._challenges.values()
                if c.userId == user_id and c.completed
                and c.completedAt is not None
                and _in_range(c.completedAt, completed_from, completed_to)
            ]

    def get_challenge(self, user_id: str, challenge_id: str) -> Optional[DailyChallenge]:
        with self._lock:
            challenge = self._challenges.get(challenge_id)
            if challenge is None or challenge.userId != user_id:
                return None
            return challenge.model_copy(deep=True)

    def insert_challenge(self, challenge: DailyChallenge) -> DailyChallenge:
        stored = challenge.model_copy(update={"id": challenge.id or uuid.uuid4().hex}, deep=True)
        with self._lock:
            self._challenges[stored.id] = stored
        return stored.model_copy(deep=True)

    def update_challenge(self, challenge: DailyChallenge) -> DailyChallenge:
        with self._lock:
            if challenge.id not in self._challenges:
                raise KeyError(f"Challenge not found: {challenge.id}")
            self._challenges[challenge.id] = challenge.model_copy(deep=True)
        return challenge

    def delete_challenges(self, user_id: str, challenge_from: datetime, challenge_to: datetime) -> int:
        with self._lock:
            doomed = [
                c.id for c in self._challenges.values()
                if c.userId == user_id and _in_range(c.challengeDate, challenge_from, challenge_to)
            ]
            for challenge_id in doomed:
                del self._challenges[challenge_id]
        return len(doomed)


class SupabaseRecordStore(RecordStore):
    """Documents kept in the `interviews` and `recommendations` Supabase tables"""

    INTERVIEWS_TABLE = "interviews"
    CHALLENGES_TABLE = "recommendations"

    def __init__(self, client: Client):
        self.client = client

    def find_interviews(self, user_id: str) -> List[Interview]:
        response = self.client.table(self.INTERVIEWS_TABLE).select('*').eq('userId', user_id).execute()
        return [Interview.model_validate(row) for row in response.data or []]

    def find_challenges(self, user_id: str, challenge_from: Optional[datetime] = None,
                        challenge_to: Optional[datetime] = None) -> List[DailyChallenge]:
        query = self.client.table(self.CHALLENGES_TABLE).select('*').eq('userId', user_id)
        if challenge_from is not None:
            query = query.gte('challengeDate', challenge_from.isoformat())
        if challenge_to is not None:
            query = query.lt('challengeDate', challenge_to.isoformat())
        response = query.order('createdAt', desc=True).execute()
        return [DailyChallenge.model_validate(row) for row in response.data or []]

    def find_completed_challenges(self, user_id: str, completed_from: datetime,
                                  completed_to: datetime) -> List[DailyChallenge]:
        response = (
            self.client.table(self.CHALLENGES_TABLE).select('*')
            .eq('userId', user_id)
            .eq('completed', True)
            .gte('completedAt', completed_from.isoformat())
            .lt('completedAt', completed_to.isoformat())
            .execute()
        )
        return [DailyChallenge.model_validate(row) for row in response.data or []]

    def get_challenge(self, user_id: str, challenge_id: str) -> Optional[DailyChallenge]:
        response = (
            self.client.table(self.CHALLENGES_TABLE).select('*')
            .eq('id', challenge_id)
            .eq('userId', user_id)
            .execute()
        )
        if not response.data:
            return None
        return DailyChallenge.model_validate(response.data[0])

    def insert_challenge(self, challenge: DailyChallenge) -> DailyChallenge:
        payload = challenge.model_dump(mode="json")
        payload["id"] = challenge.id or uuid.uuid4().hex
        response = self.client.table(self.CHALLENGES_TABLE).insert(payload).execute()
        if not response.data:
            raise ValueError("Supabase returned no row for inserted challenge")
        return DailyChallenge.model_validate(response.data[0])

    def update_challenge(self, challenge: DailyChallenge) -> DailyChallenge:
        payload = challenge.model_dump(mode="json", exclude={"id"})
        response = (
            self.client.table(self.CHALLENGES_TABLE)
            .update(payload)
            .eq('id', challenge.id)
            .execute()
        )
        if not response.data:
            raise KeyError(f"Challenge not found: {challenge.id}")
        return DailyChallenge.model_validate(response.data[0])

    def delete_challenges(self, user_id: str, challenge_from: datetime, challenge_to: datetime) -> int:
        response = (
            self.client.table(self.CHALLENGES_TABLE).delete()
            .eq('userId', user_id)
            .gte('challengeDate', challenge_from.isoformat())
            .lt('challengeDate', challenge_to.isoformat())
            .execute()
        )
        return len(response.data or [])


def create_store() -> RecordStore:
    """Supabase when credentials are configured, otherwise an in-memory store"""
    url = os.getenv('SUPABASE_URL')
    key = os.getenv('SUPABASE_SERVICE_ROLE_KEY')

    if not url or not key:
        print("⚠️  SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not set - using in-memory store")
        return InMemoryRecordStore()

    print(f"🗄️  Using Supabase store at {url}")
    return SupabaseRecordStore(create_client(url, key))
