"""
gemini_service.py — The Gemini Relay
=====================================
Thin HTTP gateway in front of Gemini. Takes text, images, documents and
audio, hands them to the model and relays whatever text comes back.

Endpoints:
  POST /generate-text            — JSON {prompt} → {output}
  POST /generate-from-image      — multipart image (+ optional prompt) → {output}
  POST /generate-from-document   — multipart document → {output}
  POST /generate-from-audio      — multipart audio → {output}
  GET  /health

Remote failures come back as 500 {"error": "..."}. Uploaded files are
deleted once the model call finishes, success or not.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, File, Form, UploadFile, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

from gemini_client import GeminiClient
from upload_store import store_upload, encode_inline_part

logging.basicConfig(level=logging.INFO, format="%(asctime)s [GEMINI] %(levelname)s %(message)s")
log = logging.getLogger("gemini-gateway")

# ── Configuration ─────────────────────────────────────────────────────────────
PORT       = int(os.getenv("PORT", "3000"))
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

IMAGE_MIME_TYPE      = "image/png"
DEFAULT_IMAGE_PROMPT = "describe the image"
DOCUMENT_PROMPT      = "analyse this document"
AUDIO_PROMPT         = "Transcribe or analyse the following audio: "


# ── Model Client ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.model_client = GeminiClient.from_env()
    log.info(f"Gemini relay ready (model={app.state.model_client.model_name})")
    yield


app = FastAPI(title="Gemini Relay", lifespan=lifespan)


def get_model_client(request: Request) -> GeminiClient:
    return request.app.state.model_client


async def relay(client: GeminiClient, contents, endpoint: str):
    """Run one model call and wrap the outcome in the {output}/{error} envelope."""
    try:
        output = await client.generate(contents)
        return {"output": output}
    except Exception as e:
        log.error(f"Gemini API error on {endpoint}: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})


async def relay_upload(client: GeminiClient, upload: UploadFile, prompt: str,
                       endpoint: str, mime_type: Optional[str] = None):
    """Park the upload on disk, send [prompt, part] to the model, always clean up."""
    async with store_upload(upload, UPLOAD_DIR) as stored:
        log.info(f"{endpoint}: {stored.filename} ({stored.mime_type}, {stored.size} bytes)")
        part = encode_inline_part(stored.path, mime_type or stored.mime_type)
        return await relay(client, [prompt, part.to_content()], endpoint)


# ── Endpoints ─────────────────────────────────────────────────────────────────
class TextRequest(BaseModel):
    prompt: str


@app.post("/generate-text")
async def generate_text(req: TextRequest, client: GeminiClient = Depends(get_model_client)):
    log.info(f"/generate-text: {len(req.prompt)} chars")
    return await relay(client, req.prompt, "/generate-text")


@app.post("/generate-from-image")
async def generate_from_image(image: UploadFile = File(...),
                              prompt: Optional[str] = Form(None),
                              client: GeminiClient = Depends(get_model_client)):
    # Image uploads are always tagged PNG, whatever the client declared.
    return await relay_upload(
        client, image, prompt or DEFAULT_IMAGE_PROMPT,
        "/generate-from-image", mime_type=IMAGE_MIME_TYPE,
    )


@app.post("/generate-from-document")
async def generate_from_document(document: UploadFile = File(...),
                                 client: GeminiClient = Depends(get_model_client)):
    return await relay_upload(client, document, DOCUMENT_PROMPT, "/generate-from-document")


@app.post("/generate-from-audio")
async def generate_from_audio(audio: UploadFile = File(...),
                              client: GeminiClient = Depends(get_model_client)):
    return await relay_upload(client, audio, AUDIO_PROMPT, "/generate-from-audio")


@app.get("/health")
async def health(client: GeminiClient = Depends(get_model_client)):
    return {"status": "online", "model": client.model_name}


if __name__ == "__main__":
    import uvicorn
    log.info(f"Server is running on http://localhost:{PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
