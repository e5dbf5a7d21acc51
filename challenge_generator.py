import json
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

import globals as config
from llm_client import LLMClient, LLMError, create_llm_client
from models import GeneratedChallenge, WeakTopic
from prompt_loader import PromptLoadError, load_challenge_prompt, render_prompt


class ChallengeGenerationError(Exception):
    """The model could not produce a usable daily challenge"""


CHALLENGE_SCHEMA = {
    "type": "object",
    "properties": {
        "recommendedTopics": {
            "type": "array",
            "description": "Learning topics to focus on",
            "items": {"type": "string"}
        },
        "dailyChallenge": {
            "type": "object",
            "properties": {
                "title": {"type": "string"},
                "description": {"type": "string"},
                "difficulty": {"type": "string", "enum": ["Easy", "Medium", "Hard"]}
            },
            "required": ["title", "description", "difficulty"],
            "additionalProperties": False
        }
    },
    "required": ["recommendedTopics", "dailyChallenge"],
    "additionalProperties": False
}

_CODE_FENCE = re.compile(r'```(?:json)?\s*')


def parse_challenge_response(text: str) -> GeneratedChallenge:
    """Parse model output, tolerating markdown code fences around the JSON"""
    cleaned = _CODE_FENCE.sub('', text.strip()).strip()

    try:
        data: Dict[str, Any] = json.loads(cleaned)
    except json.JSONDecodeError as e:
        print(f"❌ Failed to parse challenge response: {str(e)}")
        print(f"📄 Raw response (first 500 chars): {text[:500]}")
        raise ChallengeGenerationError(f"Model returned invalid JSON: {str(e)}")

    try:
        return GeneratedChallenge.model_validate(data)
    except ValidationError as e:
        raise ChallengeGenerationError(f"Model response does not match challenge schema: {str(e)}")


class ChallengeGenerator:
    """Produces recommended topics and a daily challenge for a set of weak topics"""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self._llm_client = llm_client

    @property
    def llm_client(self) -> LLMClient:
        # Created on first use so the app can start without an API key
        if self._llm_client is None:
            settings = config.get_challenge_config()
            self._llm_client = create_llm_client(
                provider=settings["provider"],
                model=settings["model"],
                temperature=settings["temperature"],
                max_tokens=settings["max_tokens"],
                timeout=settings["timeout"],
            )
        return self._llm_client

    async def __call__(self, weak_topics: List[WeakTopic]) -> GeneratedChallenge:
        topics_list = ", ".join(t.topic for t in weak_topics)
        print(f"🤖 Generating daily challenge for topics: {topics_list}")

        try:
            prompt = render_prompt(load_challenge_prompt(), weak_topics=topics_list)
            messages = [
                {"role": "system", "content": prompt},
                {"role": "user", "content": f"Weak topics: {json.dumps([t.model_dump() for t in weak_topics])}"}
            ]
            response = await self.llm_client.generate(messages, CHALLENGE_SCHEMA)
        except (PromptLoadError, LLMError, ValueError, TimeoutError) as e:
            raise ChallengeGenerationError(f"Failed to generate recommendations from AI: {str(e)}")

        challenge = parse_challenge_response(response)
        print(f"✅ Generated challenge: {challenge.dailyChallenge.title}")
        return challenge
