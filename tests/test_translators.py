import httpx
import pytest

from sarnews.exceptions import TranslationError
from sarnews.translation import MockTranslator, MyMemoryTranslator, OpenAITranslator, create_translator


def mymemory(payload=None, status_code=200):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json=payload)

    return MyMemoryTranslator(transport=httpx.MockTransport(handler)), seen


@pytest.mark.asyncio
async def test_mymemory_translates():
    translator, seen = mymemory({"responseStatus": 200, "responseData": {"translatedText": " 古晋新桥 "}})

    result = await translator.translate("New bridge in Kuching", "zh")

    assert result == "古晋新桥"
    assert seen[0].url.params["langpair"] == "en|zh-CN"
    assert seen[0].url.params["q"] == "New bridge in Kuching"


@pytest.mark.asyncio
async def test_mymemory_malay_pair():
    translator, seen = mymemory({"responseStatus": 200, "responseData": {"translatedText": "Jambatan baharu"}})

    await translator.translate("New bridge", "ms")

    assert seen[0].url.params["langpair"] == "en|ms"


@pytest.mark.asyncio
async def test_mymemory_quota_response_is_an_error():
    translator, _ = mymemory({"responseStatus": 429, "responseData": {"translatedText": "QUOTA EXCEEDED"}})

    with pytest.raises(TranslationError):
        await translator.translate("New bridge", "zh")


@pytest.mark.asyncio
async def test_mymemory_http_error():
    translator, _ = mymemory({}, status_code=502)

    with pytest.raises(TranslationError):
        await translator.translate("New bridge", "zh")


@pytest.mark.asyncio
async def test_unsupported_language():
    translator, seen = mymemory({})

    with pytest.raises(TranslationError):
        await translator.translate("New bridge", "fr")
    assert seen == []


def test_create_translator():
    assert isinstance(create_translator({"provider": "mymemory"}), MyMemoryTranslator)
    assert isinstance(create_translator({"provider": "mock"}), MockTranslator)
    assert isinstance(create_translator({"provider": "openai", "api_key": "sk-test"}), OpenAITranslator)


def test_openai_without_key_gives_no_translator():
    assert create_translator({"provider": "openai"}) is None


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError, match="babelfish"):
        create_translator({"provider": "babelfish"})
