from __future__ import annotations

import json

import httpx
import pytest

from studio.config import NotifierBackend, NotifierSettings
from studio.errors import NotificationError
from studio.notifier import EmailApiNotifier, LogNotifier, build_notifier, render_contact_message

API_URL = "https://mail.example.net/v1/send"


def _settings(**overrides) -> NotifierSettings:
    values = dict(
        backend=NotifierBackend.EMAIL_API,
        api_url=API_URL,
        recipient="studio@readyfy.dev",
        max_attempts=3,
        retry_backoff=0,
    )
    values.update(overrides)
    return NotifierSettings(**values)


def _notifier(responses: list[int], seen: list[httpx.Request]) -> EmailApiNotifier:
    codes = iter(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(next(codes), json={"ok": True})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EmailApiNotifier(_settings(), client=client)


def _message():
    return render_contact_message(
        name="Grace", email="grace@navy.dev", company="Navy", service=None, message="Hello"
    )


async def test_posts_rendered_message():
    seen: list[httpx.Request] = []
    notifier = _notifier([200], seen)

    await notifier.send(_message())
    await notifier.aclose()

    assert len(seen) == 1
    body = json.loads(seen[0].content)
    assert str(seen[0].url) == API_URL
    assert body["to"] == ["studio@readyfy.dev"]
    assert body["subject"] == "New Contact Form Submission"
    assert "<strong>Company:</strong> Navy" in body["html"]
    assert "<strong>Service:</strong> N/A" in body["html"]


async def test_retries_server_errors():
    seen: list[httpx.Request] = []
    notifier = _notifier([503, 500, 202], seen)

    await notifier.send(_message())
    assert len(seen) == 3


async def test_gives_up_after_max_attempts():
    seen: list[httpx.Request] = []
    notifier = _notifier([503, 503, 503], seen)

    with pytest.raises(NotificationError):
        await notifier.send(_message())
    assert len(seen) == 3


async def test_client_errors_are_not_retried():
    seen: list[httpx.Request] = []
    notifier = _notifier([400], seen)

    with pytest.raises(NotificationError):
        await notifier.send(_message())
    assert len(seen) == 1


async def test_transport_errors_become_notification_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = EmailApiNotifier(_settings(max_attempts=2), client=client)

    with pytest.raises(NotificationError):
        await notifier.send(_message())


def test_build_notifier_defaults_to_log():
    assert isinstance(build_notifier(NotifierSettings()), LogNotifier)


def test_email_api_requires_url():
    with pytest.raises(ValueError):
        build_notifier(NotifierSettings(backend=NotifierBackend.EMAIL_API, api_url=None))
