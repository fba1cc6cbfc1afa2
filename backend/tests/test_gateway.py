"""
Tests for ModelGateway.
Tests retry and fallback order, degraded replies, commit semantics, pacing, and cancellation.
"""

import asyncio

import pytest


class TestHappyPath:

    @pytest.mark.asyncio
    async def test_streams_and_commits_exchange(self, make_gateway, scripted_backend, memory):
        from orchestration.messages import AgentRole, MessageRole

        hosted = scripted_backend(["The wall looks sound."])
        gateway = make_gateway(hosted=hosted)

        stream = gateway.invoke(AgentRole.STRUCTURAL, "Is this wall safe?")
        chunks = [c async for c in stream]

        assert "".join(c.text for c in chunks) == "The wall looks sound."
        assert {c.attempt for c in chunks} == {1}
        assert stream.completed
        assert not stream.result.degraded
        assert not stream.result.exhausted

        history = memory.get_recent(AgentRole.STRUCTURAL)
        assert [m.role for m in history] == [MessageRole.SYSTEM, MessageRole.USER, MessageRole.ASSISTANT]
        assert history[2].content == "The wall looks sound."

    @pytest.mark.asyncio
    async def test_history_and_context_sent_to_provider(self, make_gateway, scripted_backend):
        from orchestration.context import ProjectContext
        from orchestration.messages import AgentRole

        hosted = scripted_backend(["First answer.", "Second answer."])
        gateway = make_gateway(hosted=hosted)

        await gateway.invoke(AgentRole.PROJECT_MANAGER, "Plan my kitchen").collect()
        context = ProjectContext(project_type="kitchen", budget=25000, preferences=["open shelving"])
        await gateway.invoke(AgentRole.PROJECT_MANAGER, "How long?", context).collect()

        sent = hosted.messages[1]
        assert sent[0]["role"] == "system"
        assert [m["content"] for m in sent[1:3]] == ["Plan my kitchen", "First answer."]
        assert "Project type: kitchen" in sent[-1]["content"]
        assert "Budget: $25,000" in sent[-1]["content"]
        assert "Preferences: open shelving" in sent[-1]["content"]

    @pytest.mark.asyncio
    async def test_complete_uses_non_streaming_call(self, make_gateway, scripted_backend):
        from orchestration.messages import AgentRole

        hosted = scripted_backend(["Single shot."])
        gateway = make_gateway(hosted=hosted)

        result = await gateway.complete(AgentRole.COORDINATOR, "hello")
        assert result.message.content == "Single shot."
        assert len(hosted.calls) == 1


class TestRetryAndFallback:

    @pytest.mark.asyncio
    async def test_retries_same_route_once(self, make_gateway, scripted_backend):
        from config import EFFICIENT_MODEL
        from inference.base import FailureKind, ProviderFailure
        from orchestration.messages import AgentRole

        hosted = scripted_backend([ProviderFailure(FailureKind.TIMEOUT), "Recovered."])
        gateway = make_gateway(hosted=hosted)

        result = await gateway.invoke(AgentRole.STRUCTURAL, "check").collect()
        assert hosted.calls == [EFFICIENT_MODEL, EFFICIENT_MODEL]
        assert result.message.content == "Recovered."
        assert not result.degraded
        assert [a.failure.kind if a.failure else None for a in result.attempts] == [
            FailureKind.TIMEOUT, None,
        ]

    @pytest.mark.asyncio
    async def test_provider_a_then_b_before_canned(self, make_gateway, scripted_backend):
        """Both providers fail: A is tried (with its retry) before B, then the canned reply."""
        from config import CANNED_RESPONSES, CAPABLE_MODEL, EFFICIENT_MODEL
        from orchestration.messages import AgentRole

        hosted = scripted_backend()
        local = scripted_backend()
        gateway = make_gateway(hosted=hosted, local=local)

        result = await gateway.invoke(AgentRole.STRUCTURAL, "remove the wall").collect()

        assert hosted.calls == [EFFICIENT_MODEL, EFFICIENT_MODEL, CAPABLE_MODEL, CAPABLE_MODEL]
        assert local.calls == ["llama3.1", "llama3.1"]
        assert [a.route.provider for a in result.attempts] == ["openrouter"] * 4 + ["ollama"] * 2
        assert result.exhausted
        assert result.degraded
        assert result.message.content == CANNED_RESPONSES[AgentRole.STRUCTURAL]

    @pytest.mark.asyncio
    async def test_fallback_success_is_degraded(self, make_gateway, scripted_backend):
        from config import CAPABLE_MODEL
        from inference.base import FailureKind, ProviderFailure
        from orchestration.messages import AgentRole

        hosted = scripted_backend([
            ProviderFailure(FailureKind.RATE_LIMITED),
            ProviderFailure(FailureKind.RATE_LIMITED),
            "From the backup model.",
        ])
        gateway = make_gateway(hosted=hosted)

        result = await gateway.invoke(AgentRole.DESIGN, "pick colors").collect()
        assert result.route.model_id == CAPABLE_MODEL
        assert result.degraded
        assert not result.exhausted
        assert result.message.degraded

    @pytest.mark.asyncio
    async def test_all_design_providers_fail(self, make_gateway, scripted_backend, memory):
        """Canned design reply, degraded, and exactly one exchange committed."""
        from config import CANNED_RESPONSES
        from orchestration.messages import AgentRole

        gateway = make_gateway(hosted=scripted_backend(), local=scripted_backend())
        stream = gateway.invoke(AgentRole.DESIGN, "What style fits?")
        chunks = [c async for c in stream]

        assert stream.result.degraded
        assert stream.result.message.content == CANNED_RESPONSES[AgentRole.DESIGN]
        assert chunks[-1].text == CANNED_RESPONSES[AgentRole.DESIGN]
        assert memory.size(AgentRole.DESIGN) == 3
        assert memory.get_recent(AgentRole.DESIGN)[-1].degraded

    @pytest.mark.asyncio
    async def test_no_backends_gives_canned_reply(self, make_gateway):
        from config import CANNED_RESPONSES
        from orchestration.messages import AgentRole

        result = await make_gateway().invoke(AgentRole.VISION, "look").collect()
        assert result.exhausted
        assert result.attempts == ()
        assert result.message.content == CANNED_RESPONSES[AgentRole.VISION]

    @pytest.mark.asyncio
    async def test_failed_attempt_text_is_not_committed(self, make_gateway, scripted_backend, memory):
        """Text streamed by a failed attempt is superseded by the next attempt."""
        from inference.base import FailureKind, ProviderEvent, ProviderFailure
        from orchestration.messages import AgentRole

        hosted = scripted_backend([
            [ProviderEvent(text="Half an ans"),
             ProviderEvent(failure=ProviderFailure(FailureKind.MALFORMED_RESPONSE))],
            "Whole answer.",
        ])
        gateway = make_gateway(hosted=hosted)
        stream = gateway.invoke(AgentRole.COORDINATOR, "hi")
        chunks = [c async for c in stream]

        assert chunks[0].attempt == 1 and chunks[0].text == "Half an ans"
        assert all(c.attempt == 2 for c in chunks[1:])
        assert memory.get_recent(AgentRole.COORDINATOR)[-1].content == "Whole answer."

    @pytest.mark.asyncio
    async def test_misshapen_provider_payload_falls_back(self, make_gateway, scripted_backend):
        """Well-formed JSON of the wrong shape counts as a failed attempt, never an exception."""
        import json

        import httpx

        from inference.openai_compat import OpenAICompatBackend
        from orchestration.messages import AgentRole

        def handler(request):
            body = json.loads(request.content)
            if body["stream"]:
                return httpx.Response(200, text='data: {"choices": ["oops"]}\n\ndata: [DONE]\n\n')
            return httpx.Response(200, json={"choices": [{"message": "plain"}]})

        hosted = OpenAICompatBackend("http://x", transport=httpx.MockTransport(handler))
        local = scripted_backend(["Local answer.", "Local again."])
        gateway = make_gateway(hosted=hosted, local=local)

        streamed = await gateway.invoke(AgentRole.STRUCTURAL, "check").collect()
        assert streamed.message.content == "Local answer."
        assert streamed.route.provider == "ollama"
        assert all(a.failure.kind.value == "malformed_response" for a in streamed.attempts[:-1])

        completed = await gateway.complete(AgentRole.STRUCTURAL, "again")
        assert completed.message.content == "Local again."

    @pytest.mark.asyncio
    async def test_adapter_exception_is_a_failed_attempt(self, make_gateway, scripted_backend, memory):
        from config import CANNED_RESPONSES
        from inference.base import FailureKind, ProviderEvent
        from orchestration.messages import AgentRole

        class Broken(scripted_backend):
            async def stream_chat(self, model_id, messages, max_tokens=1024, temperature=0.7):
                self.calls.append(model_id)
                raise RuntimeError("adapter bug")
                yield

        gateway = make_gateway(hosted=Broken(),
                               local=scripted_backend([[ProviderEvent(text=5)]]))
        result = await gateway.invoke(AgentRole.DESIGN, "colors?").collect()

        assert result.exhausted
        assert result.message.content == CANNED_RESPONSES[AgentRole.DESIGN]
        assert {a.failure.kind for a in result.attempts} == {FailureKind.MALFORMED_RESPONSE,
                                                             FailureKind.UNAVAILABLE}
        assert result.attempts[0].failure.kind == FailureKind.MALFORMED_RESPONSE
        assert memory.size(AgentRole.DESIGN) == 3


class TestPacing:

    @pytest.mark.asyncio
    async def test_successive_invocations_wait_min_interval(self, make_gateway, scripted_backend,
                                                            fake_clock):
        from orchestration.messages import AgentRole

        gateway = make_gateway(hosted=scripted_backend(["one", "two"]))
        await gateway.invoke(AgentRole.DESIGN, "a").collect()
        await gateway.invoke(AgentRole.DESIGN, "b").collect()
        assert fake_clock.sleeps == [2.0]

    @pytest.mark.asyncio
    async def test_retries_do_not_reacquire_gate(self, make_gateway, scripted_backend, fake_clock):
        from inference.base import FailureKind, ProviderFailure
        from orchestration.messages import AgentRole

        hosted = scripted_backend([ProviderFailure(FailureKind.TIMEOUT), "ok"])
        await make_gateway(hosted=hosted).invoke(AgentRole.DESIGN, "a").collect()
        assert fake_clock.sleeps == []


class TestCancellation:

    @pytest.mark.asyncio
    async def test_cancel_commits_nothing(self, make_gateway, scripted_backend, memory):
        from orchestration.messages import AgentRole

        gate = asyncio.Event()
        gateway = make_gateway(hosted=scripted_backend(["one two three"], gate=gate))
        stream = gateway.invoke(AgentRole.STRUCTURAL, "go")

        first = await stream.__anext__()
        assert first.text == "one "
        stream.cancel()

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()
        assert stream.cancelled
        assert stream.result is None
        assert memory.size(AgentRole.STRUCTURAL) == 1

    @pytest.mark.asyncio
    async def test_task_cancellation_commits_nothing(self, make_gateway, scripted_backend, memory):
        from orchestration.messages import AgentRole

        gate = asyncio.Event()
        gateway = make_gateway(hosted=scripted_backend(["one two three"], gate=gate))
        stream = gateway.invoke(AgentRole.DESIGN, "go")
        received = []

        async def consume():
            async for chunk in stream:
                received.append(chunk)

        task = asyncio.create_task(consume())
        while not received:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert stream.cancelled
        assert memory.size(AgentRole.DESIGN) == 1

    @pytest.mark.asyncio
    async def test_cancel_interrupts_a_stalled_pull(self, make_gateway, scripted_backend, memory):
        """cancel() from another task ends a pull that is waiting on upstream."""
        from orchestration.messages import AgentRole

        gate = asyncio.Event()
        gateway = make_gateway(hosted=scripted_backend(["one two three"], gate=gate))
        stream = gateway.invoke(AgentRole.STRUCTURAL, "go")
        await stream.__anext__()

        pending = asyncio.create_task(stream.__anext__())
        for _ in range(3):
            await asyncio.sleep(0)
        assert not pending.done()

        stream.cancel()
        for _ in range(5):
            await asyncio.sleep(0)
        assert pending.done()
        with pytest.raises(StopAsyncIteration):
            pending.result()

        gate.set()
        await asyncio.sleep(0)
        assert stream.result is None
        assert memory.size(AgentRole.STRUCTURAL) == 1

    @pytest.mark.asyncio
    async def test_cancel_after_completion_is_noop(self, make_gateway, scripted_backend, memory):
        from orchestration.messages import AgentRole

        stream = make_gateway(hosted=scripted_backend(["done"])).invoke(AgentRole.VISION, "x")
        await stream.collect()
        stream.cancel()
        assert stream.completed and not stream.cancelled
        assert memory.size(AgentRole.VISION) == 3
