import json
import os
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from dataclasses import dataclass
import httpx

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class LLMError(Exception):
    """Raised when the model provider cannot produce a usable completion"""


@dataclass
class LLMConfig:
    provider: str
    api_key: str
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout: float = 60


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, messages: List[Dict[str, str]], schema: Optional[Dict] = None) -> str:
        pass


class OpenRouterProvider(LLMProvider):
    def __init__(self, config: LLMConfig):
        self.api_key = config.api_key
        self.model = config.model
        self.base_url = config.base_url or OPENROUTER_BASE_URL
        self.temperature = config.temperature
        self.max_tokens = config.max_tokens
        self.timeout = config.timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def generate(self, messages: List[Dict[str, str]], schema: Optional[Dict] = None) -> str:
        print(f"🧠 Calling OpenRouter model {self.model}")

        payload = self._payload(messages)
        if schema:
            payload["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "response", "strict": True, "schema": schema},
            }

        # Fresh client per call
        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._headers(),
                    json=payload,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                return self._extract_content(response.json())
            except httpx.HTTPStatusError as e:
                response_text = str(e.response.text)
                if e.response.status_code == 400 and schema and (
                    "response_format" in response_text or "not supported" in response_text
                ):
                    print("⚠️ Structured outputs rejected, retrying with schema in the prompt...")
                    return await self._generate_with_prompt_schema(client, messages, schema)
                raise LLMError(
                    f"HTTP error from OpenRouter API: {e.response.status_code} - {response_text}"
                )
            except httpx.TimeoutException:
                raise TimeoutError("Request to OpenRouter API timed out")
            except httpx.HTTPError as e:
                raise LLMError(f"Error calling OpenRouter API: {str(e)}")

    async def _generate_with_prompt_schema(self, client: httpx.AsyncClient,
                                           messages: List[Dict[str, str]], schema: Dict) -> str:
        instruction = f"\n\nIMPORTANT: Your response must be valid JSON matching this schema: {json.dumps(schema)}"
        if messages and messages[0]["role"] == "system":
            patched = [{"role": "system", "content": messages[0]["content"] + instruction}] + messages[1:]
        else:
            patched = [{"role": "system", "content": instruction.strip()}] + messages

        try:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers=self._headers(),
                json=self._payload(patched),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise LLMError(f"Prompt-schema retry against OpenRouter failed: {str(e)}")
        return self._extract_content(response.json())

    @staticmethod
    def _extract_content(data: Dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Unexpected response format from OpenRouter API: missing {e}")

        if not content or content.strip() == "":
            raise LLMError("Empty response from API")
        return content


class LLMClient:
    def __init__(self, config: LLMConfig):
        if config.provider.lower() != "openrouter":
            raise ValueError(f"Only OpenRouter provider is supported. Got: {config.provider}")
        self.provider = OpenRouterProvider(config)

    async def generate(self, messages: List[Dict[str, str]], schema: Optional[Dict] = None) -> str:
        return await self.provider.generate(messages, schema)


def create_llm_client(
    provider: str, model: str, api_key: Optional[str] = None, **options
) -> LLMClient:
    if provider.lower() != "openrouter":
        raise ValueError("Only OpenRouter provider is supported")

    if not api_key:
        api_key = os.getenv("OPENROUTER_API_KEY")
        if not api_key:
            raise ValueError("OPENROUTER_API_KEY not found in environment variables")

    config = LLMConfig(provider=provider, api_key=api_key, model=model, **options)

    return LLMClient(config)
