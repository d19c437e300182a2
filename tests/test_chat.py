import random
from types import SimpleNamespace

import pytest
from openai import OpenAIError
from sqlalchemy import event

from portal.core.errors import NotFound, UpstreamUnavailable, ValidationFailed
from portal.plugins.chat import personas
from portal.plugins.chat.responders import (
    FALLBACK_REPLY,
    ChatResponder,
    LiveChatResponder,
    MockChatResponder,
    get_responder,
)
from portal.plugins.chat.service import ChatService


class InstantResponder(MockChatResponder):
    """Canned replies without the simulated completion latency."""

    def __init__(self, rng=None):
        super().__init__(delay_ms=0, rng=rng)

    async def generate(self, bot_type, history, message):
        self.last_history = history
        return personas.pick_canned_response(bot_type, message, self.rng)


class FailingResponder(ChatResponder):
    async def generate(self, bot_type, history, message):
        raise UpstreamUnavailable("completion service down")


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def responder():
    return InstantResponder(rng=random.Random(7))


@pytest.fixture
def chat_service(db, responder):
    return ChatService(db, responder)


@pytest.mark.asyncio
async def test_create_session_starts_with_welcome(chat_service, make_user):
    user_id = make_user()
    created = await chat_service.create_session(user_id, "study")

    assert created.session.bot_type == "study"
    assert created.session.user_id == user_id
    assert created.welcome_message.role == "assistant"
    assert created.welcome_message.content == personas.WELCOME_MESSAGES["study"]

    history = await chat_service.get_chat_history(created.session.id)
    assert [m.content for m in history] == [personas.WELCOME_MESSAGES["study"]]


@pytest.mark.asyncio
async def test_create_session_rejects_unknown_bot(chat_service, make_user):
    with pytest.raises(ValidationFailed):
        await chat_service.create_session(make_user(), "astrology")


@pytest.mark.asyncio
async def test_create_session_unknown_user(chat_service):
    with pytest.raises(NotFound):
        await chat_service.create_session(999, "campus")


@pytest.mark.asyncio
async def test_stress_keyword_overrides_campus_persona(chat_service, make_user):
    created = await chat_service.create_session(make_user(), "campus")
    reply = await chat_service.chat(created.session.id, "I'm feeling stressed about my exam")

    assert reply.role == "assistant"
    assert reply.content == personas.RESPONSE_POOLS["wellness"][3]


@pytest.mark.asyncio
async def test_chat_appends_user_and_assistant_messages(chat_service, make_user, responder):
    created = await chat_service.create_session(make_user(), "campus")
    await chat_service.chat(created.session.id, "Where is the library?")
    await chat_service.chat(created.session.id, "Which building has the AI lab?")

    history = await chat_service.get_chat_history(created.session.id)
    assert [m.role for m in history] == ["assistant", "user", "assistant", "user", "assistant"]
    assert history[2].content == personas.RESPONSE_POOLS["campus"][0]
    assert history[4].content == personas.RESPONSE_POOLS["campus"][1]
    # context excludes the message being answered
    assert [m["role"] for m in responder.last_history] == ["assistant", "user", "assistant"]


@pytest.mark.asyncio
async def test_context_is_capped_at_ten_messages(chat_service, make_user, responder):
    created = await chat_service.create_session(make_user(), "career")
    for i in range(6):
        await chat_service.chat(created.session.id, f"question {i}")
    assert len(responder.last_history) == 10
    assert responder.last_history[-1]["role"] == "assistant"


@pytest.mark.asyncio
async def test_chat_unknown_session(chat_service):
    with pytest.raises(NotFound):
        await chat_service.chat(12345, "hello")


@pytest.mark.asyncio
async def test_chat_rejects_empty_message(chat_service, make_user):
    created = await chat_service.create_session(make_user(), "campus")
    with pytest.raises(ValidationFailed):
        await chat_service.chat(created.session.id, "   ")


@pytest.mark.asyncio
async def test_user_message_survives_generation_failure(db, make_user):
    service = ChatService(db, FailingResponder())
    created = await service.create_session(make_user(), "email")

    with pytest.raises(UpstreamUnavailable):
        await service.chat(created.session.id, "Help me email my professor")

    history = await service.get_chat_history(created.session.id)
    assert [(m.role, m.content) for m in history][-1] == ("user", "Help me email my professor")


@pytest.mark.asyncio
async def test_user_sessions_newest_first_with_preview(chat_service, make_user):
    user_id = make_user()
    other_user = make_user()
    first = await chat_service.create_session(user_id, "campus")
    second = await chat_service.create_session(user_id, "interview")
    await chat_service.create_session(other_user, "study")
    await chat_service.chat(first.session.id, "Tell me about the gym")

    previews = await chat_service.get_user_sessions(user_id)

    assert [p.session.id for p in previews] == [second.session.id, first.session.id]
    assert previews[0].last_message.content == personas.WELCOME_MESSAGES["interview"]
    assert previews[1].last_message.role == "assistant"


@pytest.mark.asyncio
async def test_user_sessions_load_previews_in_one_query(db, chat_service, make_user):
    user_id = make_user()
    for bot_type in ("campus", "study", "career"):
        created = await chat_service.create_session(user_id, bot_type)
        await chat_service.chat(created.session.id, "hello")

    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append(statement)

    event.listen(db.engine, "before_cursor_execute", record)
    try:
        previews = await chat_service.get_user_sessions(user_id)
    finally:
        event.remove(db.engine, "before_cursor_execute", record)

    assert len(previews) == 3
    assert all(p.last_message.role == "assistant" for p in previews)
    assert len(statements) == 1


def test_keyword_rules_in_priority_order():
    pools = personas.RESPONSE_POOLS
    assert personas.pick_canned_response("career", "is there a book on resumes?") == pools["career"][0]
    assert personas.pick_canned_response("career", "where do I go?") == pools["career"][1]
    assert personas.pick_canned_response("study", "I need to write to my professor") == pools["email"][0]
    assert personas.pick_canned_response("wellness", "mock interview tips") == pools["interview"][0]
    assert personas.pick_canned_response("career", "how do I learn faster") == pools["study"][0]
    assert personas.pick_canned_response("unknown", "the library?") == pools["campus"][0]


def test_unmatched_message_draws_from_persona_pool():
    rng = random.Random(1)
    for _ in range(20):
        assert personas.pick_canned_response("career", "hmm", rng) in personas.RESPONSE_POOLS["career"]


@pytest.mark.asyncio
async def test_live_responder_sends_persona_prompt_and_history():
    completions = FakeCompletions(content="Try the writing center.")
    responder = LiveChatResponder("sk-test", model="gpt-4", max_tokens=200, client=fake_client(completions))
    history = [{"role": "assistant", "content": "hi"}, {"role": "user", "content": "earlier"}]

    reply = await responder.generate("email", history, "Draft an email")

    assert reply == "Try the writing center."
    messages = completions.kwargs["messages"]
    assert messages[0] == {"role": "system", "content": personas.SYSTEM_PROMPTS["email"]}
    assert messages[1:3] == history
    assert messages[-1] == {"role": "user", "content": "Draft an email"}
    assert completions.kwargs["max_tokens"] == 200
    assert completions.kwargs["temperature"] == 0.7


@pytest.mark.asyncio
async def test_live_responder_empty_completion_falls_back():
    responder = LiveChatResponder("sk-test", client=fake_client(FakeCompletions(content="")))
    assert await responder.generate("campus", [], "hello") == FALLBACK_REPLY


@pytest.mark.asyncio
async def test_live_responder_sdk_error_is_upstream_unavailable():
    responder = LiveChatResponder("sk-test", client=fake_client(FakeCompletions(error=OpenAIError("quota"))))
    with pytest.raises(UpstreamUnavailable):
        await responder.generate("campus", [], "hello")


def test_responder_factory():
    assert isinstance(get_responder(True, {}), MockChatResponder)
    live = get_responder(False, {"api_key": "sk-test", "model": "gpt-4o-mini", "max_tokens": "300"})
    assert isinstance(live, LiveChatResponder)
    assert live.model == "gpt-4o-mini"
    assert live.max_tokens == 300
