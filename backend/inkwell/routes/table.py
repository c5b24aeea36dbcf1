"""
Inkwell Backend — Route Table
===============================

What:  The complete list of API endpoints as (method, path) → handler rows,
       and `build_router()` which registers them on a FastAPI router.
Why:   One place to read the whole HTTP surface: paths, status codes and the
       error codes each endpoint can answer, independent of where handlers
       live. Handlers stay plain async functions.

Adding an endpoint means writing the handler and adding one Route row.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi import APIRouter

from inkwell.routes import auth, posts, users
from inkwell.schemas.common import ErrorResponse, MessageResponse
from inkwell.schemas.post import PostResponse
from inkwell.schemas.user import SessionResponse, UserDetailResponse, UserResponse

_ERROR_DESCRIPTIONS = {
    400: "Invalid input",
    401: "Missing, invalid or expired session",
    403: "Caller does not own the resource",
    404: "Resource not found",
    409: "Email already in use",
    500: "Server error",
}


@dataclass(frozen=True)
class Route:
    """One row of the route table."""

    method: str
    path: str
    endpoint: Callable[..., Any]
    response_model: Any = None
    status_code: int = 200
    summary: str = ""
    tags: Tuple[str, ...] = ()
    errors: Tuple[int, ...] = (500,)

    def responses(self) -> Dict[int, Dict[str, Any]]:
        return {
            code: {"description": _ERROR_DESCRIPTIONS[code], "model": ErrorResponse}
            for code in self.errors
        }


ROUTE_TABLE: List[Route] = [
    # ── Posts ─────────────────────────────────────────────────────────────
    Route("GET", "/posts", posts.list_posts,
          response_model=List[PostResponse],
          summary="List posts, newest first", tags=("Posts",)),
    Route("POST", "/posts", posts.create_post,
          response_model=PostResponse, status_code=201,
          summary="Create a post", tags=("Posts",),
          errors=(400, 401, 403, 500)),
    Route("GET", "/posts/{post_id}", posts.get_post,
          response_model=PostResponse,
          summary="Get a post by id", tags=("Posts",),
          errors=(404, 500)),
    Route("PUT", "/posts/{post_id}", posts.update_post,
          response_model=PostResponse,
          summary="Edit a post", tags=("Posts",),
          errors=(400, 401, 403, 404, 500)),
    Route("DELETE", "/posts/{post_id}", posts.delete_post,
          response_model=MessageResponse,
          summary="Delete a post", tags=("Posts",),
          errors=(401, 403, 404, 500)),

    # ── Users ─────────────────────────────────────────────────────────────
    Route("GET", "/users/{user_id}", users.get_user,
          response_model=UserDetailResponse,
          summary="Get a user and their posts", tags=("Users",),
          errors=(404, 500)),
    Route("PUT", "/users/{user_id}", users.update_user,
          response_model=UserResponse,
          summary="Update a user", tags=("Users",),
          errors=(400, 404, 409, 500)),
    Route("DELETE", "/users/{user_id}", users.delete_user,
          response_model=MessageResponse,
          summary="Delete a user and their posts", tags=("Users",),
          errors=(404, 500)),

    # ── Sessions ──────────────────────────────────────────────────────────
    Route("POST", "/auth/session", auth.create_session,
          response_model=SessionResponse, status_code=201,
          summary="Sign in by email", tags=("Auth",),
          errors=(400, 500)),
    Route("GET", "/auth/session", auth.read_session,
          response_model=UserResponse,
          summary="Current signed-in user", tags=("Auth",),
          errors=(401, 500)),
]


def build_router(prefix: str = "", routes: Optional[List[Route]] = None) -> APIRouter:
    """Registers every row of the route table on a new APIRouter."""
    router = APIRouter(prefix=prefix)
    for route in routes if routes is not None else ROUTE_TABLE:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            response_model=route.response_model,
            status_code=route.status_code,
            summary=route.summary or None,
            tags=list(route.tags),
            responses=route.responses(),
        )
    return router
