from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Header, HTTPException, Query
from scalar_fastapi import get_scalar_api_reference

import globals as config
from cache import TTLCache
from challenge_generator import ChallengeGenerationError, ChallengeGenerator
from dashboard import build_dashboard_summary, build_detailed_stats, build_weak_topic_list
from recommendations import (
    ChallengeAlreadyCompletedError, ChallengeController, ChallengeNotFoundError
)
from store import RecordStore, create_store
from streak import calculate_streak, collect_activity_dates
from utils import day_bounds, get_timezone, local_today, utc_now


def load_environment():
    """Load .env, then re-apply the config overrides it may carry"""
    load_dotenv(override=True)
    config.load_config_from_env()


# Load environment variables
load_environment()


def require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return user_id


def create_app(store: Optional[RecordStore] = None, cache: Optional[TTLCache] = None,
               generate_challenge=None, clock=utc_now) -> FastAPI:
    """Build the API with one explicitly owned cache, started and stopped with the app"""
    tz = get_timezone()
    cache = cache or TTLCache(sweep_interval=config.get_cache_config()["sweep_interval"])
    store = store or create_store()
    controller = ChallengeController(
        cache=cache,
        store=store,
        generate_challenge=generate_challenge or ChallengeGenerator(),
        clock=clock,
        tz=tz
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cache.start()
        try:
            yield
        finally:
            cache.close()

    app = FastAPI(
        title="Interview Insights API",
        description="Dashboard analytics, activity streaks and cached daily challenges for interview practice",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.cache = cache
    app.state.store = store
    app.state.controller = controller

    def today() -> date:
        return local_today(clock(), tz)

    @app.get("/")
    async def health():
        return {"success": True, "message": "Interview Insights API is running"}

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    @app.get("/api/dashboard/summary")
    async def dashboard_summary(x_user_id: Optional[str] = Header(None)):
        user_id = require_user(x_user_id)
        try:
            print(f"📊 Fetching dashboard summary for user {user_id}")
            interviews = store.find_interviews(user_id)
            summary = build_dashboard_summary(interviews, tz)
            print(f"✅ Dashboard summary generated - {summary.totalInterviews} total interviews "
                  f"({summary.completedInterviews} completed)")
            return {"success": True, "data": summary}
        except Exception as e:
            print(f"❌ Dashboard summary error: {str(e)}")
            raise HTTPException(status_code=500, detail="Server error while fetching dashboard summary")

    @app.get("/api/dashboard/stats")
    async def detailed_stats(x_user_id: Optional[str] = Header(None)):
        user_id = require_user(x_user_id)
        try:
            stats = build_detailed_stats(store.find_interviews(user_id))
            return {"success": True, "data": stats}
        except Exception as e:
            print(f"❌ Detailed stats error: {str(e)}")
            raise HTTPException(status_code=500, detail="Server error while fetching statistics")

    @app.get("/api/dashboard/streak")
    async def streak_data(x_user_id: Optional[str] = Header(None)):
        user_id = require_user(x_user_id)
        try:
            current_day = today()
            year_start, _ = day_bounds(date(current_day.year, 1, 1), tz)
            _, year_end = day_bounds(date(current_day.year, 12, 31), tz)

            interviews = store.find_interviews(user_id)
            challenges = store.find_completed_challenges(user_id, year_start, year_end)
            activity = collect_activity_dates(interviews, challenges, current_day.year, tz)

            return {"success": True, "data": calculate_streak(activity, current_day)}
        except Exception as e:
            print(f"❌ Streak data error: {str(e)}")
            raise HTTPException(status_code=500, detail="Server error while fetching streak data")

    @app.get("/api/dashboard/weak-topics")
    async def weak_topics(x_user_id: Optional[str] = Header(None)):
        user_id = require_user(x_user_id)
        try:
            return {"success": True, "data": build_weak_topic_list(store.find_interviews(user_id))}
        except Exception as e:
            print(f"❌ Weak topic detection error: {str(e)}")
            raise HTTPException(status_code=500, detail="Server error while analyzing weak topics")

    # =========================================================================
    # RECOMMENDATIONS / DAILY CHALLENGE
    # =========================================================================

    @app.get("/api/recommendations")
    async def get_recommendations(x_user_id: Optional[str] = Header(None)):
        user_id = require_user(x_user_id)
        try:
            result = await controller.get_daily_challenge(user_id)
            response: Dict[str, Any] = {"success": True, "data": result.data}
            if result.cached:
                response["cached"] = True
            if result.message:
                response["message"] = result.message
            return response
        except ChallengeGenerationError as e:
            print(f"❌ Challenge generation failed: {str(e)}")
            raise HTTPException(status_code=502, detail=str(e))
        except Exception as e:
            print(f"❌ Error fetching recommendations: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to fetch recommendations")

    @app.get("/api/recommendations/history")
    async def challenge_history(x_user_id: Optional[str] = Header(None),
                                page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100)):
        user_id = require_user(x_user_id)
        try:
            return {"success": True, "data": controller.get_challenge_history(user_id, page, limit)}
        except Exception as e:
            print(f"❌ Error fetching challenge history: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to fetch challenge history")

    @app.put("/api/recommendations/{challenge_id}/complete")
    async def complete_challenge(challenge_id: str, x_user_id: Optional[str] = Header(None)):
        user_id = require_user(x_user_id)
        try:
            challenge = await controller.complete_challenge(user_id, challenge_id)
            return {"success": True, "message": "Challenge completed successfully!", "data": challenge}
        except ChallengeNotFoundError:
            raise HTTPException(status_code=404, detail="Recommendation not found")
        except ChallengeAlreadyCompletedError:
            raise HTTPException(status_code=400, detail="Challenge already completed")
        except Exception as e:
            print(f"❌ Error completing challenge: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to complete challenge")

    @app.delete("/api/recommendations/cache")
    async def clear_user_cache(x_user_id: Optional[str] = Header(None)):
        user_id = require_user(x_user_id)
        try:
            deleted = await controller.clear_user_cache(user_id)
            return {"success": True, "message": "Cache cleared successfully", "challengesDeleted": deleted}
        except Exception as e:
            print(f"❌ Error clearing cache: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to clear cache")

    @app.get("/api/recommendations/cache/stats")
    async def cache_stats():
        return {"success": True, "data": controller.get_cache_stats()}

    @app.get("/scalar", include_in_schema=False)
    async def scalar_html():
        return get_scalar_api_reference(
            openapi_url=app.openapi_url,
            title="Interview Insights API Documentation"
        )

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
