"""Unit tests for the Veo job orchestrator."""

import asyncio
import json

import httpx
import pytest

from studio import metrics
from studio.errors import CredentialError, GeminiAPIError, NoResultError
from studio.pipeline.models import AspectRatio, JobHandle
from studio.pipeline.video_job import VideoJobOrchestrator

from tests.fakes import OPERATION_NAME, VIDEO_BYTES, VIDEO_URI, api_error, make_image, operation


@pytest.fixture
def orchestrator(client, media) -> VideoJobOrchestrator:
    return VideoJobOrchestrator(client, media, model="veo-test", poll_interval=0)


class TestJobHandle:
    """Tests for JobHandle.from_operation."""

    def test_pending_operation(self):
        handle = JobHandle.from_operation(operation(done=False))
        assert handle.name == OPERATION_NAME
        assert handle.done is False
        assert handle.result_uris == []

    def test_rest_response_shape(self):
        handle = JobHandle.from_operation(operation(done=True, uris=[VIDEO_URI]))
        assert handle.done is True
        assert handle.result_uris == [VIDEO_URI]

    def test_sdk_response_shape(self):
        op = {"name": "op", "done": True,
              "response": {"generatedVideos": [{"video": {"uri": "u1"}}]}}
        assert JobHandle.from_operation(op).result_uris == ["u1"]

    def test_error_payload(self):
        op = operation(done=True, error={"code": 3, "message": "unsafe content"})
        assert JobHandle.from_operation(op).error == "unsafe content"


class TestSubmit:
    """Tests for the job request payload."""

    @pytest.mark.asyncio
    async def test_anchors_first_and_last_frames(self, orchestrator, fake_api):
        images = [make_image(i, mime_type="image/jpeg" if i == 4 else "image/png") for i in range(5)]

        handle = await orchestrator.submit(images, "a prompt", AspectRatio.PORTRAIT)

        assert handle.name == OPERATION_NAME
        request = fake_api.requests_to(":predictLongRunning")[0]
        assert request.url.path.endswith("/models/veo-test:predictLongRunning")
        body = json.loads(request.content)
        instance = body["instances"][0]
        assert instance["prompt"] == "a prompt"
        assert instance["image"] == {"bytesBase64Encoded": images[0].b64, "mimeType": "image/png"}
        assert instance["lastFrame"] == {"bytesBase64Encoded": images[4].b64, "mimeType": "image/jpeg"}
        assert body["parameters"] == {"sampleCount": 1, "resolution": "1080p", "aspectRatio": "9:16"}

    @pytest.mark.asyncio
    async def test_rejects_empty_image_set(self, orchestrator, fake_api):
        with pytest.raises(ValueError):
            await orchestrator.generate([], "prompt", AspectRatio.LANDSCAPE)
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_credential_failure_is_classified(self, orchestrator, fake_api, five_images):
        fake_api.submit_response = (
            404, api_error(404, "NOT_FOUND", "Requested entity was not found.")
        )
        with pytest.raises(CredentialError, match="Requested entity was not found"):
            await orchestrator.generate(five_images, "prompt", AspectRatio.LANDSCAPE)


class TestPollLoop:
    """Tests for polling until done."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pending_polls", [0, 1, 3])
    async def test_polls_exactly_until_done(self, orchestrator, fake_api, media, five_images, pending_polls):
        fake_api.operation_states = (
            [operation(done=False)] * pending_polls + [operation(done=True, uris=[VIDEO_URI])]
        )

        handle = await orchestrator.generate(five_images, "prompt", AspectRatio.LANDSCAPE)

        assert fake_api.polls == pending_polls + 1
        assert fake_api.operation_states == []
        assert media.get(handle).data == VIDEO_BYTES
        assert media.get(handle).mime_type == "video/mp4"
        assert metrics.get_snapshot()["counters"]["veo.polls"] == pending_polls + 1

    @pytest.mark.asyncio
    async def test_already_done_submission_skips_polling(self, orchestrator, fake_api, media, five_images):
        fake_api.submit_response = (200, operation(done=True, uris=[VIDEO_URI]))

        handle = await orchestrator.generate(five_images, "prompt", AspectRatio.LANDSCAPE)

        assert fake_api.polls == 0
        assert handle in media

    @pytest.mark.asyncio
    async def test_download_is_authenticated(self, orchestrator, fake_api, five_images):
        fake_api.operation_states = [operation(done=True, uris=[VIDEO_URI, "https://other/x"])]

        await orchestrator.generate(five_images, "prompt", AspectRatio.LANDSCAPE)

        download = [r for r in fake_api.requests if "/files/" in r.url.path]
        assert len(download) == 1
        assert str(download[0].url) == VIDEO_URI
        assert download[0].headers["x-goog-api-key"] == "test-key"

    @pytest.mark.asyncio
    async def test_empty_result_list_fails_without_more_polls(self, orchestrator, fake_api, media, five_images):
        fake_api.operation_states = [operation(done=False), operation(done=True, uris=[])]

        with pytest.raises(NoResultError, match="no result"):
            await orchestrator.generate(five_images, "prompt", AspectRatio.LANDSCAPE)

        assert fake_api.polls == 2
        assert len(media) == 0

    @pytest.mark.asyncio
    async def test_job_error_payload_fails(self, orchestrator, fake_api, five_images):
        fake_api.operation_states = [operation(done=True, error={"code": 3, "message": "blocked"})]

        with pytest.raises(GeminiAPIError, match="blocked"):
            await orchestrator.generate(five_images, "prompt", AspectRatio.LANDSCAPE)

    @pytest.mark.asyncio
    async def test_transport_failure_mid_poll_propagates(self, client, media, five_images):
        calls = {"polls": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith(":predictLongRunning"):
                return httpx.Response(200, json=operation(done=False))
            calls["polls"] += 1
            if calls["polls"] == 2:
                raise httpx.ConnectError("network down", request=request)
            return httpx.Response(200, json=operation(done=False))

        client._transport = httpx.MockTransport(handler)
        orchestrator = VideoJobOrchestrator(client, media, poll_interval=0)

        with pytest.raises(httpx.ConnectError):
            await orchestrator.generate(five_images, "prompt", AspectRatio.LANDSCAPE)
        assert calls["polls"] == 2

    @pytest.mark.asyncio
    async def test_cancelling_stops_polling(self, client, media, five_images):
        """The poll loop ends at its next sleep once the task is cancelled."""
        calls = {"polls": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith(":predictLongRunning"):
                return httpx.Response(200, json=operation(done=False))
            calls["polls"] += 1
            return httpx.Response(200, json=operation(done=False))

        client._transport = httpx.MockTransport(handler)
        orchestrator = VideoJobOrchestrator(client, media, poll_interval=0.01)

        task = asyncio.create_task(
            orchestrator.generate(five_images, "prompt", AspectRatio.LANDSCAPE)
        )
        while calls["polls"] < 2:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        seen = calls["polls"]
        await asyncio.sleep(0.05)
        assert calls["polls"] == seen
