import asyncio
import io
import itertools

import httpx
import pytest

from formspam.config import ChooseN, EngineConfig, Static, StringField
from formspam.engine import SubmissionEngine
from formspam.generator import FormGenerator
from formspam.writer import ReportWriter


FIELDS = [Static(name="a", value="1"), StringField(name="b", max_len=3)]


def make_engine(handler, **config_kwargs):
    settings = dict(url="http://form.test/submit", max_open=4, report_interval=1000.0)
    settings.update(config_kwargs)
    fields = settings.pop("fields", FIELDS)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    writer = ReportWriter(stream=io.StringIO())
    engine = SubmissionEngine(fields, EngineConfig(**settings), client=client, writer=writer)
    return engine, client, writer


async def run_for(engine, seconds):
    task = asyncio.create_task(engine.run())
    await asyncio.sleep(seconds)
    engine.stop()
    return await asyncio.wait_for(task, timeout=5)


def ok(request):
    return httpx.Response(200)


# 1. Admission control
@pytest.mark.asyncio
@pytest.mark.parametrize("max_open", [1, 3, 8])
async def test_never_more_than_max_open_in_flight(max_open):
    active = 0
    peak = 0

    async def handler(request):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.005)
        active -= 1
        return httpx.Response(200)

    engine, client, _ = make_engine(handler, max_open=max_open)
    summary = await run_for(engine, 0.2)
    await client.aclose()

    assert peak == max_open
    assert summary.sent > max_open


# 2. Outcome counting
@pytest.mark.asyncio
async def test_success_and_failure_are_counted():
    statuses = itertools.cycle([200, 201, 500, 404])

    def handler(request):
        return httpx.Response(next(statuses))

    engine, client, _ = make_engine(handler)
    summary = await run_for(engine, 0.05)
    await client.aclose()

    assert summary.sent > 0
    assert summary.failed > 0
    assert engine.sent + engine.failed == engine.spawned


@pytest.mark.asyncio
async def test_transport_errors_count_as_failed():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    engine, client, _ = make_engine(handler)
    summary = await run_for(engine, 0.05)
    await client.aclose()

    assert summary.sent == 0
    assert summary.failed > 0


@pytest.mark.asyncio
async def test_timeouts_count_as_failed():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200)

    engine, client, _ = make_engine(handler, max_open=2, timeout=0.02)
    summary = await run_for(engine, 0.15)
    await client.aclose()

    assert summary.sent == 0
    assert summary.failed >= 2


@pytest.mark.asyncio
async def test_form_is_posted_as_multipart():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    engine, client, _ = make_engine(handler, max_open=1)
    await run_for(engine, 0.02)
    await client.aclose()

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "http://form.test/submit"
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="a"' in request.content
    assert b'name="b"' in request.content
    assert b'filename=' not in request.content


# 3. Crash isolation
@pytest.mark.asyncio
async def test_crashing_generation_does_not_stop_the_loop():
    calls = 0
    real = FormGenerator(seed=1)

    class FlakyGenerator:
        def generate(self, fields):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("boom")
            return real.generate(fields)

    engine, client, _ = make_engine(ok)
    engine.generator = FlakyGenerator()
    summary = await run_for(engine, 0.05)
    await client.aclose()

    assert summary.failed >= 1
    assert summary.sent >= 1


@pytest.mark.asyncio
async def test_ungeneratable_field_fails_each_attempt():
    fields = [ChooseN(n=2, pairs=(("a", "1"),))]
    engine, client, _ = make_engine(ok, fields=fields)
    summary = await run_for(engine, 0.02)
    await client.aclose()

    assert summary.sent == 0
    assert summary.failed > 0


# 4. Cancellation
@pytest.mark.asyncio
async def test_nothing_spawned_after_stop():
    async def handler(request):
        await asyncio.sleep(0.01)
        return httpx.Response(200)

    engine, client, _ = make_engine(handler, max_open=2)
    task = asyncio.create_task(engine.run())
    await asyncio.sleep(0.1)
    engine.stop()
    spawned_at_stop = engine.spawned
    summary = await asyncio.wait_for(task, timeout=5)
    await asyncio.sleep(0.05)
    await client.aclose()

    assert engine.spawned == spawned_at_stop
    assert summary.sent + summary.failed <= engine.spawned
    # in-flight requests may still finish after the final summary
    assert engine.sent >= summary.sent
    assert engine.failed >= summary.failed


@pytest.mark.asyncio
async def test_stop_while_saturated_returns_promptly():
    async def handler(request):
        await asyncio.sleep(30)
        return httpx.Response(200)

    engine, client, _ = make_engine(handler, max_open=1, timeout=60, shutdown_grace=0)
    task = asyncio.create_task(engine.run())
    await asyncio.sleep(0.05)
    engine.stop()
    summary = await asyncio.wait_for(task, timeout=2)
    await client.aclose()

    assert engine.spawned == 1
    assert summary.sent == 0
    assert not engine.tasks


@pytest.mark.asyncio
async def test_stopped_before_start():
    engine, client, writer = make_engine(ok)
    engine.stop()
    summary = await engine.run()
    await client.aclose()

    assert engine.spawned == 0
    assert (summary.sent, summary.failed) == (0, 0)
    assert writer.finalize() == 1


# 5. Reporting
@pytest.mark.asyncio
async def test_interim_reports():
    ticks = itertools.count()
    engine, client, writer = make_engine(ok, report_interval=5.0)
    engine.clock = lambda: float(next(ticks))
    await run_for(engine, 0.02)
    await client.aclose()

    lines = writer.stream.getvalue().splitlines()
    assert len(lines) >= 2
    assert all(line.startswith("[*] ") for line in lines)
    assert "requests sent" in lines[-1]


# 6. Construction
def test_max_open_must_be_positive():
    with pytest.raises(ValueError):
        SubmissionEngine(FIELDS, EngineConfig(url="http://x", max_open=0))


@pytest.mark.asyncio
async def test_built_client_settings():
    config = EngineConfig(url="http://x", max_open=3, timeout=7.0, max_redirects=2,
                          user_agent="formspam-test")
    engine = SubmissionEngine(FIELDS, config)
    client = engine._build_client()
    try:
        assert client.headers["User-Agent"] == "formspam-test"
        assert client.follow_redirects is True
        assert client.max_redirects == 2
        assert client.timeout.connect == 7.0
        assert client.timeout.read == 7.0
    finally:
        await client.aclose()
