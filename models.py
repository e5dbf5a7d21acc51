from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional, Literal
from datetime import datetime


class Question(BaseModel):
    id: int
    question: str
    difficulty: str


class ScoredEvaluation(BaseModel):
    questionId: int
    score: Optional[float] = Field(None, ge=0, le=10)
    strengths: str = ""
    weaknesses: str = ""
    improvedAnswer: str = ""


class Interview(BaseModel):
    id: str
    userId: str
    role: str = Field(..., max_length=100)
    level: Literal["Beginner", "Intermediate", "Advanced"]
    questions: List[Question] = []
    evaluations: List[ScoredEvaluation] = []
    averageScore: Optional[float] = Field(None, ge=0, le=10)
    status: Literal["started", "completed"] = "started"
    completedAt: Optional[datetime] = None
    createdAt: datetime

    @property
    def questionCount(self) -> int:
        return len(self.questions)

    def calculate_average_score(self) -> Optional[float]:
        """Mean of evaluation scores rounded to 2 decimals; unscored answers count as 0"""
        if not self.evaluations:
            return None

        total_score = sum(e.score or 0 for e in self.evaluations)
        return round(total_score / len(self.evaluations), 2)

    def mark_as_completed(self, now: datetime) -> "Interview":
        if self.status == "completed":
            raise ValueError(f"Interview {self.id} is already completed")

        self.status = "completed"
        self.completedAt = now
        self.averageScore = self.calculate_average_score()
        return self


class WeakTopic(BaseModel):
    topic: str
    frequency: int = Field(..., ge=0)
    recommendation: str = ""


class ChallengeContent(BaseModel):
    title: str
    description: str
    difficulty: Literal["Easy", "Medium", "Hard"] = "Medium"


class GeneratedChallenge(BaseModel):
    """Shape returned by the challenge generator"""
    recommendedTopics: List[str]
    dailyChallenge: ChallengeContent


class DailyChallenge(BaseModel):
    id: Optional[str] = None
    userId: str
    weakTopics: List[WeakTopic] = []
    recommendedTopics: List[str] = []
    dailyChallenge: ChallengeContent
    challengeDate: datetime
    completed: bool = False
    completedAt: Optional[datetime] = None
    createdAt: datetime

    def mark_as_completed(self, now: datetime) -> "DailyChallenge":
        self.completed = True
        self.completedAt = now
        return self


class DailyChallengeResult(BaseModel):
    data: DailyChallenge
    cached: bool = False
    message: Optional[str] = None


# =============================================================================
# DASHBOARD RESPONSES
# =============================================================================

class RecentInterview(BaseModel):
    id: str
    role: str
    level: str
    averageScore: float
    completedAt: Optional[datetime]
    questionCount: int


class ScorePoint(BaseModel):
    date: str
    score: float
    role: str


class DashboardSummary(BaseModel):
    totalInterviews: int
    completedInterviews: int
    overallAverageScore: float
    recentInterviews: List[RecentInterview]
    weakTopics: List[WeakTopic]
    scoreHistory: List[ScorePoint]


class OverallStats(BaseModel):
    totalInterviews: int = 0
    avgScore: float = 0
    maxScore: float = 0
    minScore: float = 0
    totalQuestions: int = 0


class LevelStats(BaseModel):
    level: str
    count: int
    avgScore: float


class DetailedStats(BaseModel):
    overall: OverallStats
    byLevel: List[LevelStats]


class HeatmapDay(BaseModel):
    date: str
    count: int


class StreakData(BaseModel):
    currentStreak: int
    maxStreak: int
    totalActiveDays: int
    totalSubmissions: int
    year: int
    heatmap: List[HeatmapDay]


class ChallengeHistory(BaseModel):
    challenges: List[DailyChallenge]
    pagination: Dict[str, Any]


class CacheStats(BaseModel):
    totalEntries: int
    activeEntries: int
    expiredEntries: int
