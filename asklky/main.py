"""Quart application exposing the Ask LKY conversation over HTTP."""
from quart import Quart, request, jsonify
from pydantic import BaseModel, Field, ValidationError
import structlog

from asklky import config
from asklky.conversation import ConversationController, TurnState
from asklky.corpus import get_corpus
from asklky.llm_client import generation_client
from asklky.logging_setup import configure_logging

configure_logging()

logger = structlog.get_logger()

app = Quart(__name__)

# One conversation per process; history lives only in memory
controller = ConversationController(get_corpus(), generation_client)


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""

    message: str = Field(max_length=config.MAX_QUERY_LENGTH)


@app.route("/api/chat", methods=["POST"])
async def chat():
    """Submit a query and run the turn to completion.

    Expects JSON body:
    {
        "message": "user question"
    }

    Returns JSON:
    {
        "accepted": true,
        "state": "idle" | "pending" | "errored",
        "history": [{"role": "user" | "assistant", "text": "..."}],
        "error": null | "An error occurred. Please try again."
    }

    Blank messages are accepted by the endpoint but ignored by the
    conversation ("accepted": false). A submission while another turn is
    in flight gets 409.
    """
    data = await request.get_json(silent=True)

    try:
        body = ChatRequest.model_validate(data or {})
    except ValidationError as e:
        logger.warning("invalid_chat_request", errors=e.error_count())
        return jsonify({"error": "Body must be JSON with a 'message' string "
                                 f"of at most {config.MAX_QUERY_LENGTH} characters"}), 400

    was_pending = controller.state is TurnState.PENDING
    accepted = await controller.submit_query(body.message)

    response_data = {"accepted": accepted, **controller.snapshot().to_dict()}

    if not accepted and was_pending:
        logger.info(
            "chat_rejected_pending",
            state=response_data["state"],
            history_length=len(response_data["history"]),
        )
        return jsonify(response_data), 409

    logger.info(
        "chat_response_sent",
        accepted=accepted,
        state=response_data["state"],
        history_length=len(response_data["history"]),
    )
    return jsonify(response_data)


@app.route("/api/conversation", methods=["GET"])
async def get_conversation():
    """Return the current state, history and last error."""
    return jsonify(controller.snapshot().to_dict())


@app.route("/health/ready")
async def health_ready():
    """Readiness probe - check the generation service is reachable.

    Checks:
    - Gemini API answers a model listing
    - Configured generation model is listed
    """
    checks = {
        "status": "healthy",
        "generation_service": False,
        "model": False,
        "corpus_passages": len(controller.corpus),
    }

    try:
        models = await generation_client.list_models()
        checks["generation_service"] = True

        if any(name.endswith(config.GENERATION_MODEL) for name in models):
            checks["model"] = True
        else:
            checks["status"] = "unhealthy"
            checks["error"] = f"Missing generation model: {config.GENERATION_MODEL}"

    except Exception as e:
        logger.error("health_check_failed", error=str(e))
        checks["status"] = "unhealthy"
        checks["error"] = str(e)

    status_code = 200 if checks["status"] == "healthy" else 503
    return jsonify(checks), status_code


@app.route("/health/live")
async def health_live():
    """Liveness probe - check if app is running."""
    return jsonify({"status": "alive"}), 200


@app.errorhandler(404)
async def not_found(error):
    """Handle 404 errors."""
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(500)
async def internal_error(error):
    """Handle 500 errors."""
    logger.error("internal_server_error", error=str(error))
    return jsonify({"error": "Internal server error"}), 500


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
