"""Tests for the completion and embedding services."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from finchat.exceptions import CompletionFailure, ConfigurationError
from finchat.llm import (
    EmbeddingTask,
    GeminiService,
    GroqService,
    ImagePart,
    OllamaService,
    TextPart,
    get_deep_llm_service,
    get_embedding_service,
    get_fast_llm_service,
)
from finchat.exceptions import ValidationError


def groq_client(content="Answer", choices=True):
    """Build a mock AsyncOpenAI client returning one chat completion."""
    response = MagicMock()
    if choices:
        response.choices = [MagicMock()]
        response.choices[0].message.content = content
    else:
        response.choices = []
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response)
    client.close = AsyncMock()
    return client


def gemini_client(text="Deep answer", values=None):
    """Build a mock genai.Client with async generate and embed calls."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text=text))
    embedding = MagicMock(values=values or [0.1, 0.2, 0.3])
    client.aio.models.embed_content = AsyncMock(return_value=MagicMock(embeddings=[embedding]))
    client.aio.aclose = AsyncMock()
    return client


class TestImagePart:
    def test_data_url(self):
        part = ImagePart.from_encoded("data:image/png;base64,iVBORw0KGgo=")
        assert part.mime_type == "image/png"
        assert part.data == "iVBORw0KGgo="
        assert part.to_bytes().startswith(b"\x89PNG")

    def test_bare_base64_defaults_to_jpeg(self):
        part = ImagePart.from_encoded("iVBORw0KGgo=")
        assert part.mime_type == "image/jpeg"

    @pytest.mark.parametrize(
        "encoded", ["", "data:image/png;base64,", "not base64!", 123, None, b"iVBORw0KGgo="]
    )
    def test_invalid(self, encoded):
        with pytest.raises(ValidationError):
            ImagePart.from_encoded(encoded)


class TestGroqService:
    @pytest.mark.asyncio
    async def test_complete_builds_messages(self):
        service = GroqService(api_key="gsk-test")
        client = groq_client()
        history = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]

        with patch.object(service, "_make_client", return_value=client):
            result = await service.complete("SYSTEM", [TextPart("What is the rate?")], history)

        assert result == "Answer"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama-3.3-70b-versatile"
        assert kwargs["temperature"] == 0.5
        assert kwargs["max_tokens"] == 1024
        assert kwargs["messages"] == [
            {"role": "system", "content": "SYSTEM"},
            *history,
            {"role": "user", "content": "What is the rate?"},
        ]
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_image_parts_ignored(self):
        service = GroqService(api_key="gsk-test")
        client = groq_client()
        parts = [TextPart("Describe"), ImagePart(data="iVBORw0KGgo=", mime_type="image/png")]

        with patch.object(service, "_make_client", return_value=client):
            await service.complete("SYSTEM", parts)

        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[-1] == {"role": "user", "content": "Describe"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("client_kwargs", [{"content": ""}, {"choices": False}])
    async def test_empty_response(self, client_kwargs):
        service = GroqService(api_key="gsk-test")
        with patch.object(service, "_make_client", return_value=groq_client(**client_kwargs)):
            with pytest.raises(CompletionFailure):
                await service.complete("SYSTEM", [TextPart("q")])

    @pytest.mark.asyncio
    async def test_client_closed_on_error(self):
        service = GroqService(api_key="gsk-test")
        client = groq_client()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("429"))

        with patch.object(service, "_make_client", return_value=client):
            with pytest.raises(RuntimeError):
                await service.complete("SYSTEM", [TextPart("q")])
        client.close.assert_awaited_once()


class TestGeminiService:
    @pytest.mark.asyncio
    async def test_complete(self):
        service = GeminiService(api_key="test-key")
        client = gemini_client()

        with patch.object(service, "_make_client", return_value=client):
            result = await service.complete(
                "SYSTEM",
                [TextPart("Chart?"), ImagePart(data="iVBORw0KGgo=", mime_type="image/png")],
                [{"role": "assistant", "content": "earlier"}],
            )

        assert result == "Deep answer"
        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        config = kwargs["config"]
        assert config.system_instruction == "SYSTEM"
        assert config.temperature == 0.3
        assert config.max_output_tokens == 4096

        contents = kwargs["contents"]
        assert [c.role for c in contents] == ["model", "user"]
        user_parts = contents[-1].parts
        assert user_parts[0].inline_data.mime_type == "image/png"
        assert user_parts[1].text == "Chart?"
        client.aio.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_client_closed_per_call(self):
        """Each call opens its own client and closes it, even on error."""
        service = GeminiService(api_key="test-key")
        clients = [gemini_client() for _ in range(3)]
        clients[2].aio.models.generate_content = AsyncMock(side_effect=RuntimeError("503"))

        with patch.object(service, "_make_client", side_effect=clients):
            await service.complete("SYSTEM", [TextPart("q")])
            await service.embed("kyat")
            with pytest.raises(RuntimeError):
                await service.complete("SYSTEM", [TextPart("q")])

        for client in clients:
            client.aio.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_response(self):
        service = GeminiService(api_key="test-key")
        with patch.object(service, "_make_client", return_value=gemini_client(text=None)):
            with pytest.raises(CompletionFailure):
                await service.complete("SYSTEM", [TextPart("q")])

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "task,task_type",
        [(EmbeddingTask.DOCUMENT, "RETRIEVAL_DOCUMENT"), (EmbeddingTask.QUERY, "RETRIEVAL_QUERY")],
    )
    async def test_embed(self, task, task_type, monkeypatch):
        monkeypatch.delenv("EMBEDDING_MODEL", raising=False)
        service = GeminiService(api_key="test-key")
        client = gemini_client(values=[0.5, 0.25])

        with patch.object(service, "_make_client", return_value=client):
            vector = await service.embed("kyat", task)

        assert vector == [0.5, 0.25]
        kwargs = client.aio.models.embed_content.call_args.kwargs
        assert kwargs["model"] == "text-embedding-004"
        assert kwargs["contents"] == ["kyat"]
        assert kwargs["config"].task_type == task_type
        client.aio.aclose.assert_awaited_once()


class TestOllamaService:
    @pytest.mark.asyncio
    async def test_complete(self):
        service = OllamaService(host="http://test:11434", model="test-model")
        client = MagicMock()
        response = MagicMock()
        response.message.content = "Local answer"
        client.chat = AsyncMock(return_value=response)
        client.close = AsyncMock()

        with patch.object(service, "_make_client", return_value=client):
            result = await service.complete("SYSTEM", [TextPart("q")])

        assert result == "Local answer"
        client.chat.assert_awaited_once_with(
            model="test-model",
            messages=[{"role": "system", "content": "SYSTEM"}, {"role": "user", "content": "q"}],
            options={"temperature": 0.5},
        )
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_embed(self):
        service = OllamaService(host="http://test:11434", embedding_model="nomic-embed-text")
        client = MagicMock()
        client.embed = AsyncMock(return_value={"embeddings": [[0.1, 0.2]]})
        client.close = AsyncMock()

        with patch.object(service, "_make_client", return_value=client):
            vector = await service.embed("kyat", EmbeddingTask.QUERY)

        assert vector == [0.1, 0.2]
        client.embed.assert_awaited_once_with(model="nomic-embed-text", input="kyat")
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_client_closed_on_error(self):
        service = OllamaService(host="http://test:11434", model="test-model")
        client = MagicMock()
        client.chat = AsyncMock(side_effect=ConnectionError("refused"))
        client.close = AsyncMock()

        with patch.object(service, "_make_client", return_value=client):
            with pytest.raises(ConnectionError):
                await service.complete("SYSTEM", [TextPart("q")])
        client.close.assert_awaited_once()


class TestFactories:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in (
            "FAST_LLM_SERVICE",
            "FAST_LLM_MODEL",
            "GROQ_API_KEY",
            "DEEP_LLM_MODEL",
            "GEMINI_API_KEY",
            "GOOGLE_API_KEY",
            "EMBEDDING_SERVICE",
            "EMBEDDING_MODEL",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_fast_defaults_to_groq(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
        service = get_fast_llm_service()
        assert isinstance(service, GroqService)
        assert service.label == "Groq (Llama 3.3)"

    def test_fast_missing_key(self):
        with pytest.raises(ConfigurationError, match="GROQ_API_KEY"):
            get_fast_llm_service()

    def test_fast_ollama(self):
        service = get_fast_llm_service({"service": "ollama", "host": "http://h:11434"})
        assert isinstance(service, OllamaService)
        assert service.host == "http://h:11434"

    def test_fast_unknown(self):
        with pytest.raises(ConfigurationError, match="unknown"):
            get_fast_llm_service({"service": "unknown"})

    def test_deep_uses_google_api_key_fallback(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
        service = get_deep_llm_service()
        assert isinstance(service, GeminiService)
        assert service.api_key == "g-key"
        assert service.model == "gemini-2.5-flash"

    def test_deep_missing_key(self):
        with pytest.raises(ConfigurationError):
            get_deep_llm_service()

    def test_deep_model_override(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "key")
        monkeypatch.setenv("DEEP_LLM_MODEL", "gemini-2.5-pro")
        assert get_deep_llm_service().model == "gemini-2.5-pro"

    def test_embedding_gemini(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "key")
        service = get_embedding_service()
        assert isinstance(service, GeminiService)
        assert service.embedding_model == "text-embedding-004"

    def test_embedding_ollama(self, monkeypatch):
        monkeypatch.setenv("EMBEDDING_SERVICE", "ollama")
        service = get_embedding_service()
        assert isinstance(service, OllamaService)
        assert service.embedding_model == "nomic-embed-text"

    def test_embedding_unknown(self):
        with pytest.raises(ConfigurationError, match="nope"):
            get_embedding_service({"service": "nope"})
