import pytest

from costume_roaster import config
from costume_roaster.core import fish_audio
from costume_roaster.core.fish_audio import SynthesizedAudio
from costume_roaster.core.gemini import ANALYSIS_PRESET, IMAGE_PRESET, ROAST_PRESET, GeminiAPIError

from conftest import JPEG_DATA_URL, PNG_BASE64, PNG_DATA_URL, image_response, text_response

ANALYSIS_JSON = (
    '```json\n{"costumeType": "Dracula", "failPoints": ["plastic fangs", "cape from a tablecloth"], '
    '"overallAssessment": "Bloodless."}\n```'
)


# -------------------------
# analyze
# -------------------------
def test_analyze_returns_structured_analysis(client, fake_gemini):
    fake_gemini.queue(text_response(ANALYSIS_JSON))

    response = client.post("/api/analyze", json={"image": JPEG_DATA_URL})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == {
        "costumeType": "Dracula",
        "failPoints": ["plastic fangs", "cape from a tablecloth"],
        "overallAssessment": "Bloodless.",
    }

    call = fake_gemini.calls[0]
    assert call["model"] == config.GEMINI_VISION_MODEL
    assert call["preset"] is ANALYSIS_PRESET
    assert call["parts"][0]["inline_data"]["mime_type"] == "image/jpeg"
    assert "costumeType" in call["parts"][1]["text"]


def test_analyze_backfills_missing_fields(client, fake_gemini):
    fake_gemini.queue(text_response('{"costumeType": "Pirate"}'))

    response = client.post("/api/analyze", json={"image": PNG_BASE64})

    data = response.json()["data"]
    assert data["costumeType"] == "Pirate"
    assert data["failPoints"] == []
    assert data["overallAssessment"] == "Costume needs improvement."


def test_analyze_parse_failure_is_500(client, fake_gemini):
    fake_gemini.queue(text_response("I refuse to judge this costume."))

    response = client.post("/api/analyze", json={"image": JPEG_DATA_URL})

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to parse costume analysis. Please try again.",
    }


def test_analyze_rejects_invalid_image_before_calling_model(client, fake_gemini):
    response = client.post("/api/analyze", json={"image": "data:image/gif;base64,R0lGODlh"})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "not supported" in response.json()["error"]
    assert fake_gemini.calls == []


def test_analyze_rejects_oversized_image(client, fake_gemini, monkeypatch):
    monkeypatch.setattr(config, "MAX_IMAGE_SIZE_BYTES", 1024)

    response = client.post("/api/analyze", json={"image": JPEG_DATA_URL})

    assert response.status_code == 400
    assert "too large" in response.json()["error"]


def test_invalid_json_body_is_400(client, fake_gemini):
    response = client.post(
        "/api/analyze", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid JSON body"}


def test_rate_limited_upstream_is_429(client, fake_gemini):
    fake_gemini.queue(GeminiAPIError("Quota exceeded", status_code=429, status="RESOURCE_EXHAUSTED"))

    response = client.post("/api/analyze", json={"image": JPEG_DATA_URL})

    assert response.status_code == 429
    assert response.json()["error"] == "Service is busy. Please try again in a moment."


def test_missing_credentials_is_generic_500(client, fake_gemini, monkeypatch):
    monkeypatch.setattr(config, "GEMINI_KEY", None)

    response = client.post("/api/analyze", json={"image": JPEG_DATA_URL})

    assert response.status_code == 500
    assert response.json()["error"] == "API configuration error. Please contact support."


# -------------------------
# generate-roast
# -------------------------
def test_generate_roast(client, fake_gemini):
    fake_gemini.queue(text_response("  Arr, that eyepatch came free with a cereal box.  \n"))

    response = client.post(
        "/api/generate-roast",
        json={"costumeType": "Pirate", "failPoints": ["cheap eyepatch"], "analysis": "needs work"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"roast": "Arr, that eyepatch came free with a cereal box."},
    }
    call = fake_gemini.calls[0]
    assert call["preset"] is ROAST_PRESET
    assert "cheap eyepatch" in call["parts"][0]["text"]


def test_generate_roast_missing_field(client, fake_gemini):
    response = client.post("/api/generate-roast", json={"costumeType": "Pirate", "analysis": "meh"})

    assert response.status_code == 400
    assert "failPoints" in response.json()["error"]


def test_generate_roast_upstream_failure_is_generic(client, fake_gemini):
    fake_gemini.queue(RuntimeError("socket exploded at 0xdeadbeef"))

    response = client.post(
        "/api/generate-roast",
        json={"costumeType": "Pirate", "failPoints": [], "analysis": "needs work"},
    )

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to generate roast. Please try again."


# -------------------------
# generate-costume
# -------------------------
def test_generate_costume_returns_data_url(client, fake_gemini):
    fake_gemini.queue(image_response("QUJD", "image/png"))

    response = client.post(
        "/api/generate-costume", json={"image": PNG_DATA_URL, "costumeType": "Witch"}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["image"] == "data:image/png;base64,QUJD"
    assert "Witch" in data["prompt"]

    call = fake_gemini.calls[0]
    assert call["model"] == config.GEMINI_IMAGE_MODEL
    assert call["preset"] is IMAGE_PRESET
    assert call["parts"][1]["inline_data"]["data"] == PNG_BASE64


def test_generate_costume_prefers_improvement_prompt(client, fake_gemini):
    fake_gemini.queue(image_response())

    response = client.post(
        "/api/generate-costume",
        json={"image": PNG_DATA_URL, "costumeType": "Witch", "improvementPrompt": "Add a broom"},
    )

    assert response.json()["data"]["prompt"] == "Add a broom"
    assert fake_gemini.calls[0]["parts"][0] == {"text": "Add a broom"}


def test_generate_costume_safety_error_is_content_policy(client, fake_gemini):
    fake_gemini.queue(Exception("Candidate was blocked due to safety"))

    response = client.post(
        "/api/generate-costume", json={"image": PNG_DATA_URL, "costumeType": "Witch"}
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "content policy" in response.json()["error"]


def test_generate_costume_without_image_is_500(client, fake_gemini):
    fake_gemini.queue(text_response("I can only describe it."))

    response = client.post(
        "/api/generate-costume", json={"image": PNG_DATA_URL, "costumeType": "Witch"}
    )

    assert response.status_code == 500
    assert response.json()["error"] == "No image data in response"


def test_generate_costume_safety_finish_reason_is_content_policy(client, fake_gemini):
    fake_gemini.queue({"candidates": [{"finishReason": "IMAGE_SAFETY"}]})

    response = client.post(
        "/api/generate-costume", json={"image": PNG_DATA_URL, "costumeType": "Witch"}
    )

    assert response.status_code == 400
    assert "content policy" in response.json()["error"]


# -------------------------
# generate-meme
# -------------------------
def test_generate_meme(client, fake_gemini):
    fake_gemini.queue(image_response("TUVNRQ==", "image/jpeg", text="here you go"))

    response = client.post("/api/generate-meme", json={"roastText": "Nice cape, Batman."})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"image": "data:image/jpeg;base64,TUVNRQ=="},
    }
    assert "Nice cape, Batman." in fake_gemini.calls[0]["parts"][0]["text"]


def test_generate_meme_is_independent_per_call(client, fake_gemini):
    fake_gemini.queue(image_response("Rmlyc3Q="), image_response("U2Vjb25k"))
    body = {"roastText": "Boo.", "image": PNG_DATA_URL}

    first = client.post("/api/generate-meme", json=body).json()
    second = client.post("/api/generate-meme", json=body).json()

    assert first["data"]["image"].endswith("Rmlyc3Q=")
    assert second["data"]["image"].endswith("U2Vjb25k")
    assert fake_gemini.calls[0]["parts"] == fake_gemini.calls[1]["parts"]
    assert body == {"roastText": "Boo.", "image": PNG_DATA_URL}


def test_generate_meme_blank_text(client, fake_gemini):
    response = client.post("/api/generate-meme", json={"roastText": "  "})

    assert response.status_code == 400


def test_generate_meme_empty_candidates_is_500(client, fake_gemini):
    fake_gemini.queue({"candidates": []})

    response = client.post("/api/generate-meme", json={"roastText": "Boo."})

    assert response.status_code == 500
    assert response.json()["error"] == "No image generated"


# -------------------------
# modify-image
# -------------------------
def test_modify_image(client, fake_gemini):
    fake_gemini.queue(image_response("TU9E", "image/png", text="Added a spooky parrot."))

    response = client.post(
        "/api/modify-image", json={"imageData": PNG_DATA_URL, "prompt": "add a parrot"}
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "modifiedImageData": "data:image/png;base64,TU9E",
        "analysis": "Added a spooky parrot.",
        "message": "Image modification complete.",
    }
    assert "add a parrot" in fake_gemini.calls[0]["parts"][0]["text"]


def test_modify_image_missing_prompt(client, fake_gemini):
    response = client.post("/api/modify-image", json={"imageData": PNG_DATA_URL})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "prompt is required"}


# -------------------------
# generate-audio
# -------------------------
@pytest.fixture
def fake_tts(monkeypatch):
    requests = []

    async def _synthesize(request):
        requests.append(request)
        return SynthesizedAudio(content=b"ID3fake-mp3", format=request.format)

    monkeypatch.setattr(fish_audio, "synthesize_speech", _synthesize)
    return requests


def test_generate_audio_streams_bytes(client, fake_tts):
    response = client.post("/api/generate-audio", json={"text": "Boo!", "voice": "joker"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mp3"
    assert response.content == b"ID3fake-mp3"
    assert fake_tts[0].reference_id == "fad5a5a6770e47019f566b8f8c0ff609"


def test_generate_audio_format_sets_content_type(client, fake_tts):
    response = client.post("/api/generate-audio", json={"text": "Boo!", "format": "wav"})

    assert response.headers["content-type"] == "audio/wav"


def test_generate_audio_empty_text_is_400(client, fake_tts):
    response = client.post("/api/generate-audio", json={"text": "   "})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert fake_tts == []


def test_generate_audio_quota_is_429(client, monkeypatch):
    from costume_roaster.core.errors import UpstreamRateLimitError

    async def _synthesize(request):
        raise UpstreamRateLimitError("Audio service quota exceeded")

    monkeypatch.setattr(fish_audio, "synthesize_speech", _synthesize)

    response = client.post("/api/generate-audio", json={"text": "Boo!"})

    assert response.status_code == 429
    assert response.json() == {"success": False, "error": "Audio service quota exceeded"}


def test_generate_audio_without_key_is_500(client, monkeypatch):
    monkeypatch.setattr(config, "FISH_AUDIO_API_KEY", None)

    response = client.post("/api/generate-audio", json={"text": "Boo!"})

    assert response.status_code == 500
    assert response.json()["error"] == "Audio service not configured"


# -------------------------
# misc
# -------------------------
def test_voices(client):
    response = client.get("/api/voices")

    voices = response.json()["voices"]
    assert response.status_code == 200
    assert {"id": "spongebob", "name": "SpongeBob", "description": "I'm ready!"} in voices
    assert len(voices) == 7


def test_health(client):
    assert client.get("/api/health").json()["status"] == "healthy"
