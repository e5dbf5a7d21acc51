"""
Global configuration for analytics, caching and challenge generation.

Values here are defaults; secrets are never stored in this module and must be
provided via environment variables.
"""

class OPENROUTER_MODELS:
    GPT_OSS = "openai/gpt-oss-120b"
    GEMINI_FLASH = "google/gemini-2.5-flash"
    QWEN3_32B = "qwen/qwen3-32b"


# =============================================================================
# ANALYTICS CONFIGURATION
# =============================================================================

# Day boundaries for streaks, heatmaps and "today's challenge" are computed
# in this single timezone.
ANALYTICS_CONFIG = {
    "timezone": "UTC",
    "weak_score_threshold": 7,
    "dashboard_weak_topics": 3,
    "challenge_weak_topics": 5,
    "recent_interviews": 5,
    "score_history": 10,
}

# Tokens shorter than this never count as keywords
MIN_KEYWORD_LENGTH = 5

# Order matters: it breaks ties between equally frequent topics.
# 'node', 'api', 'rest' and 'data' are shorter than MIN_KEYWORD_LENGTH and never match.
TECHNICAL_KEYWORDS = [
    'react', 'node', 'mongodb', 'express', 'javascript', 'async',
    'promise', 'state', 'component', 'hooks', 'database', 'query',
    'api', 'rest', 'authentication', 'security', 'performance',
    'testing', 'deployment', 'error', 'handling', 'design', 'pattern',
    'algorithm', 'data', 'structure', 'complexity', 'optimization',
    'backend', 'frontend', 'fullstack', 'server', 'client',
]

TOPIC_RECOMMENDATIONS = {
    'react': 'Practice component lifecycle and hooks',
    'node': 'Review Node.js async patterns and event loop',
    'mongodb': 'Study database indexing and aggregation',
    'express': 'Learn middleware and routing best practices',
    'javascript': 'Strengthen core JavaScript fundamentals',
    'async': 'Master async/await and Promise handling',
    'promise': 'Practice Promise chaining and error handling',
    'state': 'Review state management patterns',
    'hooks': 'Deep dive into React hooks usage',
    'database': 'Study database design and normalization',
    'api': 'Practice RESTful API design principles',
    'authentication': 'Review JWT and OAuth patterns',
    'security': 'Study common security vulnerabilities',
    'performance': 'Learn optimization techniques',
    'testing': 'Practice unit and integration testing',
    'algorithm': 'Practice data structures and algorithms',
    'error': 'Study error handling best practices',
}

NO_PATTERNS_TOPIC = {
    "topic": "No patterns detected yet",
    "frequency": 0,
    "recommendation": "Complete more interviews to identify weak areas",
}

# =============================================================================
# CACHE CONFIGURATION
# =============================================================================

# All durations in seconds
CACHE_CONFIG = {
    "daily_challenge_ttl": 24 * 60 * 60,
    "get_started_ttl": 60 * 60,
    "sweep_interval": 60 * 60,
}

# =============================================================================
# CHALLENGE GENERATION CONFIGURATION
# =============================================================================

CHALLENGE_CONFIG = {
    "provider": "openrouter",
    "model": OPENROUTER_MODELS.GEMINI_FLASH,
    "temperature": 0.7,
    "max_tokens": 2000,
    "timeout": 60,
}

GET_STARTED_CHALLENGE = {
    "title": "Get Started",
    "description": (
        "Complete at least one interview to receive personalized recommendations "
        "and daily challenges based on your performance."
    ),
    "difficulty": "Medium",
}


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def get_analytics_config():
    """Get the current analytics configuration."""
    return ANALYTICS_CONFIG.copy()

def get_cache_config():
    """Get the current cache configuration."""
    return CACHE_CONFIG.copy()

def get_challenge_config():
    """Get the current challenge generation configuration."""
    return CHALLENGE_CONFIG.copy()


def update_challenge_model(provider, model):
    """Update the challenge generation model configuration."""
    CHALLENGE_CONFIG["provider"] = provider
    CHALLENGE_CONFIG["model"] = model
    print(f"✅ Updated challenge model: {provider}/{model}")

def update_timezone(tz_name):
    """Update the timezone used for calendar-day boundaries."""
    ANALYTICS_CONFIG["timezone"] = tz_name
    print(f"✅ Updated analytics timezone: {tz_name}")

# =============================================================================
# ENVIRONMENT-SPECIFIC OVERRIDES
# =============================================================================

def load_config_from_env():
    """Load configuration overrides from environment variables if available."""
    import os

    challenge_provider = os.getenv('CHALLENGE_PROVIDER', 'openrouter')
    challenge_model = os.getenv('CHALLENGE_MODEL')
    if challenge_model:
        update_challenge_model(challenge_provider, challenge_model)

    tz_name = os.getenv('ANALYTICS_TIMEZONE')
    if tz_name:
        update_timezone(tz_name)

    sweep_interval = os.getenv('CACHE_SWEEP_INTERVAL')
    if sweep_interval:
        CACHE_CONFIG["sweep_interval"] = int(sweep_interval)

# Load environment overrides on import
load_config_from_env()
