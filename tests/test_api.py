"""
tests/test_api.py
==================
HTTP Endpoint Tests — /interpret, /stream/{mode}, /health, /

Test categories:
    1. End-to-end relay (A → B, B → A), drain then empty
    2. Request validation → 400, no provider call, no queue mutation
    3. Provider / internal failures → generic 500
    4. Poll endpoint edge cases
    5. Liveness and health
    6. Client disconnect → pipeline cancelled, 499, staged audio removed

All tests are offline — the capability provider is faked and the app is
driven through FastAPI's TestClient.
"""

import asyncio
import base64
import os
import sys
import tempfile
import unittest
from unittest.mock import AsyncMock

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fastapi.testclient import TestClient

from tests.fakes import FakeProvider
from voicerelay.api import create_app
from voicerelay.config import Settings
from voicerelay.relay.session import ParticipantSlot, SessionRelay

EMPTY_POLL = {"audioBase64": None, "text": None, "timestamp": None}


def _form(mode: str = "A", source: str = "en-US", target: str = "fr-FR") -> dict:
    return {"sourceLang": source, "targetLang": target, "mode": mode}


def _audio(content: bytes = b"Hello, how are you?") -> dict:
    return {"audio": ("clip.webm", content, "audio/webm")}


class _ApiTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.upload_dir = self._tmp.name
        self.provider = FakeProvider()
        self.relay = SessionRelay()
        self.app = create_app(
            Settings(upload_dir=self.upload_dir),
            provider=self.provider,
            relay=self.relay,
        )
        self.client = TestClient(self.app)

    def tearDown(self):
        self._tmp.cleanup()

    def assertNothingQueued(self):
        for slot in ParticipantSlot:
            self.assertEqual(self.relay.pending(slot), 0)


# ===================================================================
# 1. End-to-end relay
# ===================================================================


class TestRelayEndToEnd(_ApiTestCase):

    def test_a_to_b(self):
        resp = self.client.post("/interpret", data=_form("A"), files=_audio())
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(set(body), {"transcript", "interpretedText", "audioBase64"})
        self.assertEqual(body["transcript"], "Hello, how are you?")
        self.assertEqual(body["interpretedText"], "translated: Hello, how are you?")
        self.assertEqual(
            base64.b64decode(body["audioBase64"]),
            b"audio<translated: Hello, how are you?>",
        )

        # Sender's own queue stays empty.
        self.assertEqual(self.client.get("/stream/A").json(), EMPTY_POLL)

        delivered = self.client.get("/stream/B")
        self.assertEqual(delivered.status_code, 200)
        payload = delivered.json()
        self.assertEqual(payload["text"], body["interpretedText"])
        self.assertEqual(payload["audioBase64"], body["audioBase64"])
        self.assertIsInstance(payload["timestamp"], int)

        drained = self.client.get("/stream/B")
        self.assertEqual(drained.status_code, 200)
        self.assertEqual(drained.json(), EMPTY_POLL)

    def test_b_to_a(self):
        resp = self.client.post(
            "/interpret", data=_form("B", "fr-FR", "en-US"), files=_audio(b"Bonjour"),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get("/stream/B").json(), EMPTY_POLL)
        self.assertEqual(self.client.get("/stream/A").json()["text"], "translated: Bonjour")

    def test_language_hint_and_voice(self):
        self.client.post("/interpret", data=_form("A", "es-ES", "de-DE"), files=_audio())
        self.assertEqual(self.provider.calls[0], ("transcribe", "es"))
        self.assertEqual(self.provider.calls[-1], ("synthesize", "echo"))

    def test_multiple_submissions_fifo(self):
        for text in (b"one", b"two", b"three"):
            self.client.post("/interpret", data=_form("A"), files=_audio(text))

        texts = [self.client.get("/stream/B").json()["text"] for _ in range(3)]
        self.assertEqual(
            texts, ["translated: one", "translated: two", "translated: three"],
        )
        self.assertEqual(self.client.get("/stream/B").json(), EMPTY_POLL)

    def test_staged_audio_removed(self):
        self.client.post("/interpret", data=_form("A"), files=_audio())
        self.assertEqual(os.listdir(self.upload_dir), [])


# ===================================================================
# 2. Validation
# ===================================================================


class TestInterpretValidation(_ApiTestCase):

    def _assert_rejected(self, resp, message: str):
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": message})
        self.assertEqual(self.provider.calls, [])
        self.assertNothingQueued()
        self.assertEqual(os.listdir(self.upload_dir), [])

    def test_missing_audio(self):
        resp = self.client.post("/interpret", data=_form("A"))
        self._assert_rejected(resp, "No audio file uploaded.")

    def test_audio_sent_as_text_field(self):
        form = dict(_form("A"), audio="x")
        resp = self.client.post("/interpret", data=form)
        self._assert_rejected(resp, "No audio file uploaded.")

    def test_missing_source_lang(self):
        form = _form("A")
        del form["sourceLang"]
        resp = self.client.post("/interpret", data=form, files=_audio())
        self._assert_rejected(resp, "Missing sourceLang or targetLang.")

    def test_missing_target_lang(self):
        form = _form("A")
        del form["targetLang"]
        resp = self.client.post("/interpret", data=form, files=_audio())
        self._assert_rejected(resp, "Missing sourceLang or targetLang.")

    def test_invalid_mode(self):
        for mode in ("C", "a", "AB"):
            with self.subTest(mode=mode):
                resp = self.client.post("/interpret", data=_form(mode), files=_audio())
                self._assert_rejected(resp, "Invalid mode value.")

    def test_missing_mode(self):
        form = _form("A")
        del form["mode"]
        resp = self.client.post("/interpret", data=form, files=_audio())
        self._assert_rejected(resp, "Invalid mode value.")

    def test_unsupported_language(self):
        resp = self.client.post(
            "/interpret", data=_form("A", "en-US", "xx-XX"), files=_audio(),
        )
        self._assert_rejected(resp, "Unsupported language code: xx-XX.")


# ===================================================================
# 3. Failures
# ===================================================================


class TestInterpretFailures(_ApiTestCase):

    def test_provider_failure_is_generic_500(self):
        self.provider.fail_stage = "synthesize"
        resp = self.client.post("/interpret", data=_form("A"), files=_audio())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Failed to interpret."})
        self.assertNothingQueued()
        self.assertEqual(os.listdir(self.upload_dir), [])

    def test_transcription_failure_is_generic_500(self):
        self.provider.fail_stage = "transcribe"
        resp = self.client.post("/interpret", data=_form("B"), files=_audio())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Failed to interpret."})
        self.assertEqual(self.client.get("/stream/A").json(), EMPTY_POLL)

    def test_unexpected_error_is_generic_500(self):
        self.app.state.pipeline.ingest = AsyncMock(side_effect=ValueError("boom"))
        resp = self.client.post("/interpret", data=_form("A"), files=_audio())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Failed to interpret."})

    def test_blank_transcript_returns_empty_result(self):
        resp = self.client.post("/interpret", data=_form("A"), files=_audio(b"  "))

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(), {"transcript": "", "interpretedText": "", "audioBase64": ""},
        )
        self.assertNothingQueued()


# ===================================================================
# 4. Poll endpoint
# ===================================================================


class TestStream(_ApiTestCase):

    def test_empty_queues(self):
        for mode in ("A", "B"):
            with self.subTest(mode=mode):
                resp = self.client.get(f"/stream/{mode}")
                self.assertEqual(resp.status_code, 200)
                self.assertEqual(resp.json(), EMPTY_POLL)

    def test_invalid_mode(self):
        self.client.post("/interpret", data=_form("A"), files=_audio())

        for mode in ("C", "a", "b", "AB"):
            with self.subTest(mode=mode):
                resp = self.client.get(f"/stream/{mode}")
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json(), {"error": "Invalid stream mode."})

        # The pending utterance for B is untouched.
        self.assertEqual(self.relay.pending(ParticipantSlot.B), 1)
        self.assertEqual(self.relay.pending(ParticipantSlot.A), 0)


# ===================================================================
# 5. Liveness & health
# ===================================================================


class TestLiveness(_ApiTestCase):

    def test_root(self):
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.text, "Hello from the backend!")
        self.assertTrue(resp.headers["content-type"].startswith("text/plain"))

    def test_health_reports_pending(self):
        self.client.post("/interpret", data=_form("A"), files=_audio())
        resp = self.client.get("/health")

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["pending"], {"A": 0, "B": 1})

    def test_apps_do_not_share_sessions(self):
        self.client.post("/interpret", data=_form("A"), files=_audio())
        other = TestClient(create_app(Settings(upload_dir=self.upload_dir), provider=FakeProvider()))
        self.assertEqual(other.get("/stream/B").json(), EMPTY_POLL)


# ===================================================================
# 6. Client disconnect
# ===================================================================


_BOUNDARY = "voicerelay-test-boundary"


def _multipart_body(fields: dict, audio: bytes) -> bytes:
    parts = []
    for name, value in fields.items():
        parts.append(
            f"--{_BOUNDARY}\r\n"
            f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n".encode()
        )
    parts.append(
        f"--{_BOUNDARY}\r\n"
        'Content-Disposition: form-data; name="audio"; filename="clip.webm"\r\n'
        "Content-Type: audio/webm\r\n\r\n".encode()
        + audio
        + b"\r\n"
    )
    parts.append(f"--{_BOUNDARY}--\r\n".encode())
    return b"".join(parts)


class TestClientDisconnect(unittest.IsolatedAsyncioTestCase):
    """Drives the ASGI app directly so the client can hang up mid-request."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.upload_dir = self._tmp.name
        self.relay = SessionRelay()

    def tearDown(self):
        self._tmp.cleanup()

    async def test_disconnect_cancels_interpretation(self):
        provider = FakeProvider(hang_stage="transcribe")
        app = create_app(
            Settings(upload_dir=self.upload_dir), provider=provider, relay=self.relay,
        )
        body = _multipart_body(_form("A"), b"Hello")
        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "POST",
            "scheme": "http",
            "path": "/interpret",
            "raw_path": b"/interpret",
            "root_path": "",
            "query_string": b"",
            "headers": [
                (b"host", b"testserver"),
                (b"content-type", f"multipart/form-data; boundary={_BOUNDARY}".encode()),
                (b"content-length", str(len(body)).encode()),
            ],
            "client": ("testclient", 50000),
            "server": ("testserver", 80),
        }
        body_sent = False

        async def receive():
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": body, "more_body": False}
            # Hang up only once the request is stuck inside the provider.
            if provider.entered.is_set():
                return {"type": "http.disconnect"}
            await asyncio.sleep(3600)

        sent = []

        async def send(message):
            sent.append(message)

        await asyncio.wait_for(app(scope, receive, send), 10)

        statuses = [m["status"] for m in sent if m["type"] == "http.response.start"]
        self.assertEqual(statuses, [499])
        self.assertEqual(os.listdir(self.upload_dir), [])
        for slot in ParticipantSlot:
            self.assertEqual(self.relay.pending(slot), 0)
        self.assertEqual([c[0] for c in provider.calls], ["transcribe"])


if __name__ == "__main__":
    unittest.main()
