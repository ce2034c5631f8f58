"""FastMCP server — thin wrapper exposing CourseService over MCP and HTTP."""

import json
import logging

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from coursegen.ingestion.gateway import QUOTA_MESSAGE, QuotaExceededError
from coursegen.service import CourseService, InvalidPromptError

logger = logging.getLogger(__name__)


mcp = FastMCP(
    name="coursegen",
    instructions=(
        "coursegen turns a learning topic into a course: the most popular "
        "long-form crash course on YouTube, split into segments ordered "
        "from beginner to advanced. Use generate_course with a topic."
    ),
)

_service: CourseService | None = None


def _get_service() -> CourseService:
    """Lazy-initialise the service singleton (and its shared request gateway)."""
    global _service
    if _service is None:
        _service = CourseService()
    return _service


@mcp.tool(annotations={"readOnlyHint": True, "openWorldHint": True})
async def generate_course(prompt: str) -> dict:
    """Build a difficulty-ordered course of video segments for a topic.

    Args:
        prompt: What the user wants to learn (e.g. "python", "react hooks").
    """
    return await _course_payload(prompt)


@mcp.custom_route("/api/getVideos", methods=["POST"])
async def get_videos(request: Request) -> JSONResponse:
    """HTTP endpoint: ``{"prompt": str}`` in, ``{"videos": [...]}`` out."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    prompt = body.get("prompt") if isinstance(body, dict) else None

    try:
        videos = await _get_service().build_course(prompt)
    except InvalidPromptError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except QuotaExceededError:
        return JSONResponse({"error": QUOTA_MESSAGE}, status_code=429)
    except Exception:
        logger.exception("Error fetching videos")
        return JSONResponse({"error": "Failed to fetch videos"}, status_code=500)

    return JSONResponse({"videos": [v.model_dump(mode="json") for v in videos]})


@mcp.custom_route("/api/stats", methods=["GET"])
async def get_stats(request: Request) -> JSONResponse:
    """Request gateway counters for the running process."""
    stats = _get_service().client.gateway.stats()
    return JSONResponse({
        "total_requests": stats.total_requests,
        "requests_in_window": stats.requests_in_window,
        "last_request_at": stats.last_request_at,
    })


async def _course_payload(prompt: str) -> dict:
    """Tool response for generate_course; errors become an ``error`` key."""
    try:
        videos = await _get_service().build_course(prompt)
    except (InvalidPromptError, QuotaExceededError) as e:
        return {"error": str(e)}

    return {
        "prompt": prompt,
        "videos": [v.model_dump(mode="json") for v in videos],
        "instructions": (
            "Present the segments in order. Each has a url that starts "
            "playback at the segment and a difficulty_label."
            if videos else
            "No videos available for this topic."
        ),
    }
