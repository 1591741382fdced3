"""
Prompt endpoint.

``POST /`` takes the whole request body, whatever its content type, as
the natural-language prompt and answers with plain text.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from ...orchestration import SessionState
from ...orchestrator import new_execution_id
from ...tracing import TracingContext, get_tracing_client

logger = logging.getLogger(__name__)

router = APIRouter()

FAILURE_MESSAGE = "Sorry, something went wrong while answering your request."
EMPTY_PROMPT_MESSAGE = "The request body must contain a prompt."


@router.post(
    "/",
    response_class=PlainTextResponse,
    responses={
        400: {"description": "Empty prompt", "content": {"text/plain": {}}},
        500: {"description": "The request could not be answered", "content": {"text/plain": {}}},
    },
    summary="Answer a prompt",
    description=(
        "Send a natural-language question as the request body. The server "
        "translates it into calls against the configured REST API and "
        "answers in plain text."
    ),
)
async def submit_prompt(request: Request) -> PlainTextResponse:
    body = await request.body()
    prompt = body.decode("utf-8", errors="replace").strip()
    if not prompt:
        logger.warning("Rejected request with empty prompt")
        return PlainTextResponse(EMPTY_PROMPT_MESSAGE, status_code=400)

    execution_id = new_execution_id()
    logger.info(f"[{execution_id}] Processing prompt: {prompt[:100]}")

    tracing_context = TracingContext(execution_id=execution_id)
    tracing_context.start_trace(name="prompt_request", prompt=prompt)

    orchestrator = request.app.state.orchestrator
    try:
        # Orchestration blocks on network I/O; keep it off the event loop.
        session = await run_in_threadpool(
            orchestrator.run, prompt, execution_id, tracing_context
        )
    except Exception as e:
        logger.exception(f"[{execution_id}] Orchestration crashed: {e}")
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        return PlainTextResponse(FAILURE_MESSAGE, status_code=500)

    if session.state is not SessionState.DONE or session.response is None:
        tracing_context.end_trace(output=str(session.error), status="error")
        _flush_tracing()
        return PlainTextResponse(FAILURE_MESSAGE, status_code=500)

    answer = session.response.text
    logger.debug(f"[{execution_id}] Answer: {answer[:200]}")
    tracing_context.end_trace(output=answer, status="success")
    _flush_tracing()
    return PlainTextResponse(answer)


def _flush_tracing() -> None:
    client = get_tracing_client()
    if client:
        client.flush()
