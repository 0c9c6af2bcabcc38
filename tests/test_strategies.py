"""采样策略测试 - stub / openrouter / anthropic"""

import json
import sys
from pathlib import Path

import httpx
import pytest

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sampling.exceptions import ConfigurationException, ErrorCode, InvalidConfigurationError
from sampling.providers import (
    AnthropicStrategy,
    OpenRouterStrategy,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ProviderRequestError,
    ProviderServerError,
    SamplingRequest,
    StubStrategy,
)
from sampling.providers.adapters.openrouter import load_default_allowed_models

OPENROUTER_BASE = "https://openrouter.test/api/v1"

CATALOG_PAYLOAD = {
    "data": [
        {"id": "openai/gpt-4o", "context_length": 128000},
        {"id": "openai/gpt-4o-mini", "context_length": 128000},
        {"id": "openai/o1", "context_length": 200000, "supported_parameters": ["reasoning"]},
        {"id": "openai/o1-mini", "context_length": 128000, "supported_parameters": ["reasoning"]},
        {"id": "anthropic/claude-3.5-sonnet", "context_length": 200000},
    ]
}


def sampling_request(**params) -> SamplingRequest:
    params.setdefault("messages", [{"role": "user", "content": {"type": "text", "text": "Hello"}}])
    params.setdefault("maxTokens", 100)
    return SamplingRequest.from_params(params)


class FakeOpenRouter:
    """模拟 OpenRouter 的 /models 与 /chat/completions"""

    def __init__(self, completion_status: int = 200, completion_body=None):
        self.completion_status = completion_status
        self.completion_body = completion_body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/models"):
            return httpx.Response(200, json=CATALOG_PAYLOAD)

        body = self.completion_body
        if body is None:
            sent = json.loads(request.content)
            body = {
                "model": sent["model"],
                "choices": [
                    {"message": {"role": "assistant", "content": "Hi there"}, "finish_reason": "stop"}
                ],
            }
        return httpx.Response(self.completion_status, json=body)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def completion_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_openrouter(fake: FakeOpenRouter, **config) -> OpenRouterStrategy:
    config.setdefault("apiKey", "or-key")
    config.setdefault("defaultModel", "openai/gpt-4o-mini")
    config.setdefault("baseUrl", OPENROUTER_BASE)
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return OpenRouterStrategy(config, client=client)


class TestStubStrategy:
    """Stub策略"""

    @pytest.mark.asyncio
    async def test_returns_fixed_response(self):
        strategy = StubStrategy()

        result = await strategy.handle_sampling_request(sampling_request())

        assert result.to_dict() == {
            "model": "stub-model",
            "stopReason": "endTurn",
            "role": "assistant",
            "content": {"type": "text", "text": "This is a stub response."},
        }
        assert strategy.name == "stub"


class TestOpenRouterStrategy:
    """OpenRouter策略"""

    @pytest.mark.asyncio
    async def test_without_preferences_uses_default_and_skips_catalog(self):
        fake = FakeOpenRouter()
        strategy = make_openrouter(fake)

        result = await strategy.handle_sampling_request(sampling_request())

        assert fake.paths() == ["/api/v1/chat/completions"]
        assert result.model == "openai/gpt-4o-mini"
        assert result.text == "Hi there"
        assert result.stop_reason == "stop"

    @pytest.mark.asyncio
    async def test_preferences_select_model_from_catalog(self):
        fake = FakeOpenRouter()
        strategy = make_openrouter(fake)

        await strategy.handle_sampling_request(
            sampling_request(modelPreferences={"intelligencePriority": 1})
        )
        await strategy.handle_sampling_request(
            sampling_request(modelPreferences={"speedPriority": 1})
        )

        assert fake.paths().count("/api/v1/models") == 1
        payloads = [
            json.loads(request.content)
            for request in fake.requests
            if request.url.path.endswith("/chat/completions")
        ]
        assert [payload["model"] for payload in payloads] == ["openai/o1", "openai/o1-mini"]

    @pytest.mark.asyncio
    async def test_request_payload_and_headers(self):
        fake = FakeOpenRouter()
        strategy = make_openrouter(fake, siteTitle="Test Client")

        await strategy.handle_sampling_request(
            sampling_request(
                systemPrompt="Be brief",
                temperature=0,
                stopSequences=["END"],
                messages=[
                    {"role": "user", "content": {"type": "text", "text": "Hello"}},
                    {"role": "assistant", "content": {"type": "text", "text": ""}},
                    {"role": "user", "content": {"type": "text", "text": "Again"}},
                ],
            )
        )

        request = fake.requests[-1]
        payload = fake.completion_payload()
        assert payload["messages"] == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Hello"},
            {"role": "user", "content": "Again"},
        ]
        assert payload["max_tokens"] == 100
        assert payload["temperature"] == 0
        assert payload["stop"] == ["END"]
        assert request.headers["Authorization"] == "Bearer or-key"
        assert request.headers["HTTP-Referer"] == "http://localhost:3000"
        assert request.headers["X-Title"] == "Test Client"

    @pytest.mark.asyncio
    async def test_default_temperature_and_no_stop(self):
        fake = FakeOpenRouter()
        strategy = make_openrouter(fake)

        await strategy.handle_sampling_request(sampling_request())

        payload = fake.completion_payload()
        assert payload["temperature"] == 0.2
        assert "stop" not in payload

    @pytest.mark.asyncio
    async def test_response_without_choices_is_an_error(self):
        fake = FakeOpenRouter(completion_body={"model": "x", "choices": []})
        strategy = make_openrouter(fake)

        with pytest.raises(ProviderError, match="no choices"):
            await strategy.handle_sampling_request(sampling_request())

    @pytest.mark.asyncio
    async def test_error_status_is_mapped(self):
        fake = FakeOpenRouter(
            completion_status=401, completion_body={"error": {"message": "bad key"}}
        )
        strategy = make_openrouter(fake)

        with pytest.raises(ProviderAuthError, match="bad key") as exc_info:
            await strategy.handle_sampling_request(sampling_request())

        assert exc_info.value.status_code == 401

    def test_allowed_models_default_to_bundled_list(self):
        strategy = make_openrouter(FakeOpenRouter())

        assert strategy.selector.score_table.ids() == [
            entry["id"] for entry in load_default_allowed_models()
        ]

    def test_configured_allowed_models_replace_defaults(self):
        strategy = make_openrouter(
            FakeOpenRouter(),
            allowedModels=[
                {"id": "a/b", "speedScore": 1, "intelligenceScore": 1, "costScore": 1}
            ],
        )

        assert list(strategy.selector.score_table.ids()) == ["a/b"]

    def test_invalid_allowed_models_fail_at_construction(self):
        with pytest.raises(InvalidConfigurationError):
            make_openrouter(
                FakeOpenRouter(),
                allowedModels=[{"id": "a/b", "speedScore": 2, "intelligenceScore": 1, "costScore": 1}],
            )

    def test_missing_api_key_requires_environment(self, monkeypatch):
        monkeypatch.setattr("sampling.utils.config.load_dotenv", lambda *args, **kwargs: False)
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)

        with pytest.raises(ConfigurationException) as exc_info:
            OpenRouterStrategy({"defaultModel": "openai/gpt-4o-mini"})

        assert exc_info.value.error_code == ErrorCode.CONFIG_MISSING_REQUIRED
        assert exc_info.value.details["missing"] == ["OPENROUTER_API_KEY"]

    def test_environment_supplies_key_and_default_model(self, monkeypatch):
        monkeypatch.setattr("sampling.utils.config.load_dotenv", lambda *args, **kwargs: False)
        monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
        monkeypatch.setenv("DEFAULT_MODEL_NAME", "openai/gpt-4o")

        strategy = OpenRouterStrategy()

        assert strategy.api_key == "env-key"
        assert strategy.selector.default_model_id == "openai/gpt-4o"


class FakeAnthropic:
    """模拟 Anthropic /v1/messages"""

    def __init__(self, status: int = 200, body=None):
        self.status = status
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.body
        if body is None:
            sent = json.loads(request.content)
            body = {
                "model": sent["model"],
                "content": [
                    {"type": "thinking", "thinking": "..."},
                    {"type": "text", "text": "Claude says hi"},
                ],
                "stop_reason": "end_turn",
            }
        return httpx.Response(self.status, json=body)

    def payload(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_anthropic(fake: FakeAnthropic, **config) -> AnthropicStrategy:
    config.setdefault("apiKey", "sk-ant-test")
    config.setdefault("model", "claude-3-5-sonnet-latest")
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return AnthropicStrategy(config, client=client)


class TestAnthropicStrategy:
    """Anthropic策略"""

    @pytest.mark.asyncio
    async def test_request_payload_and_headers(self):
        fake = FakeAnthropic()
        strategy = make_anthropic(fake)

        result = await strategy.handle_sampling_request(
            sampling_request(
                systemPrompt="You are terse",
                messages=[
                    {"role": "user", "content": {"type": "text", "text": "Hello"}},
                    {"role": "system", "content": {"type": "text", "text": "ignored"}},
                ],
            )
        )

        request = fake.requests[0]
        payload = fake.payload()
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "sk-ant-test"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert payload["model"] == "claude-3-5-sonnet-latest"
        assert payload["system"] == "You are terse"
        assert payload["messages"] == [{"role": "user", "content": "Hello"}]
        assert payload["max_tokens"] == 100
        assert payload["temperature"] == 0.7
        assert payload["stream"] is False

        assert result.text == "Claude says hi"
        assert result.stop_reason == "end_turn"

    @pytest.mark.asyncio
    async def test_extended_thinking_selects_capable_model(self):
        fake = FakeAnthropic()
        strategy = make_anthropic(fake)

        result = await strategy.handle_sampling_request(
            sampling_request(
                modelPreferences={"extendedThinkingRequired": True, "costPriority": 1}
            )
        )

        assert fake.payload()["model"] == "claude-3-7-sonnet-latest"
        assert result.model == "claude-3-7-sonnet-latest"

    @pytest.mark.asyncio
    async def test_speed_priority_selects_haiku(self):
        fake = FakeAnthropic()
        strategy = make_anthropic(fake)

        await strategy.handle_sampling_request(
            sampling_request(modelPreferences={"speedPriority": 1})
        )

        assert fake.payload()["model"] == "claude-3-5-haiku-latest"

    @pytest.mark.asyncio
    async def test_explicit_model_from_preferences(self):
        fake = FakeAnthropic()
        strategy = make_anthropic(fake)

        await strategy.handle_sampling_request(
            sampling_request(modelPreferences={"model": "claude-3-opus-latest"})
        )

        assert fake.payload()["model"] == "claude-3-opus-latest"

    @pytest.mark.asyncio
    async def test_missing_text_block_yields_empty_text(self):
        fake = FakeAnthropic(body={"model": "claude-3-5-sonnet-latest", "content": []})
        strategy = make_anthropic(fake)

        result = await strategy.handle_sampling_request(sampling_request())

        assert result.text == ""
        assert result.stop_reason == "stop"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, error_cls",
        [
            (400, ProviderRequestError),
            (401, ProviderAuthError),
            (429, ProviderRateLimitError),
            (529, ProviderServerError),
            (404, ProviderError),
        ],
    )
    async def test_error_status_mapping(self, status, error_cls):
        fake = FakeAnthropic(status=status, body={"type": "error", "error": {"message": "nope"}})
        strategy = make_anthropic(fake)

        with pytest.raises(error_cls) as exc_info:
            await strategy.handle_sampling_request(sampling_request())

        assert exc_info.value.status_code == status
        assert "nope" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error_is_provider_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        strategy = AnthropicStrategy({"apiKey": "k", "model": "claude-3-5-sonnet-latest"}, client=client)

        with pytest.raises(ProviderError):
            await strategy.handle_sampling_request(sampling_request())

    @pytest.mark.parametrize(
        "config",
        [
            {"model": "claude-3-5-sonnet-latest"},
            {"apiKey": "k"},
            {"apiKey": "", "model": "claude-3-5-sonnet-latest"},
            {"apiKey": "k", "model": "m", "extendedThinkingBonus": -1},
        ],
    )
    def test_invalid_config_fails_at_construction(self, config):
        with pytest.raises(InvalidConfigurationError):
            AnthropicStrategy(config)

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(FakeAnthropic()))
        strategy = AnthropicStrategy({"apiKey": "k", "model": "m"}, client=client)

        await strategy.close()

        assert not client.is_closed
        await client.aclose()
