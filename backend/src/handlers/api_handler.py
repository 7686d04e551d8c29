"""Main FastAPI application handler for Lambda deployment."""

import logging
import os
import time
from datetime import UTC, datetime
from typing import Any

import boto3
from botocore.exceptions import ClientError
from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from mangum import Mangum
from pydantic import BaseModel, Field

from models.climb import ClimbCreate, ClimbProfile, ClimbStatus, ClimbUpdate, GearListUpdate
from services.auth_service import AuthenticationError, AuthService
from services.climb_service import ClimbService
from services.gear_catalog import lookup_defaults, normalize_name
from services.gear_recommendation_service import merge_with_report
from services.pack_weight_service import summarize_pack_weight, summarize_required_gear

logger = logging.getLogger(__name__)

CACHE_CONTROL_PRIVATE = "private, no-store"
CACHE_CONTROL_PUBLIC_LONG = "public, max-age=86400"

# Initialize FastAPI app
app = FastAPI(
    title="Climb Gear Planner API",
    description="API for planning climbs, gear checklists and pack weight",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log slow and failing API requests with timing."""
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000

    path = request.url.path
    if duration_ms > 1000:
        logger.warning(
            "[SLOW] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 500:
        logger.error(
            "[ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 400:
        logger.info(
            "[CLIENT_ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )

    return response


# Lazy-initialized AWS clients and services
# Required for Lambda SnapStart - connections must be re-established after restore
_dynamodb = None
_climbs_table = None
_climb_service = None
_auth_service = None

# Security scheme for bearer token authentication
security = HTTPBearer(auto_error=False)


def reset_services():
    """Reset all lazy-initialized services. Useful for testing.

    Also resets boto3's default session so that subsequent calls to
    boto3.resource() are created inside the current mock context
    (e.g., moto's mock_aws).
    """
    global _dynamodb, _climbs_table, _climb_service, _auth_service
    _dynamodb = None
    _climbs_table = None
    _climb_service = None
    _auth_service = None
    boto3.DEFAULT_SESSION = None


def get_dynamodb():
    """Get or create DynamoDB resource (lazy init for SnapStart)."""
    global _dynamodb
    if _dynamodb is None:
        region = os.environ.get("AWS_DEFAULT_REGION", "us-west-2")
        _dynamodb = boto3.resource("dynamodb", region_name=region)
    return _dynamodb


def get_climbs_table():
    """Get or create climbs table (lazy init for SnapStart)."""
    global _climbs_table
    if _climbs_table is None:
        _climbs_table = get_dynamodb().Table(
            os.environ.get("CLIMBS_TABLE", "climb-planner-climbs-dev")
        )
    return _climbs_table


def get_climb_service():
    """Get or create ClimbService (lazy init for SnapStart)."""
    global _climb_service
    if _climb_service is None:
        _climb_service = ClimbService(table=get_climbs_table())
    return _climb_service


def get_auth_service():
    """Get or create AuthService (lazy init for SnapStart)."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(jwt_secret=os.environ.get("JWT_SECRET_KEY"))
    return _auth_service


# MARK: - Authentication Dependency


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),  # noqa: B008
) -> str:
    """Extract user ID from JWT token.

    Raises:
        HTTPException: If token is missing or invalid
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return get_auth_service().verify_access_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


# MARK: - Request Models


class RefreshTokenRequest(BaseModel):
    """Request body for token refresh."""

    refresh_token: str = Field(..., min_length=1)


class GearPreviewRequest(BaseModel):
    """Request body for a stateless gear recommendation preview."""

    climb: ClimbProfile = Field(default_factory=ClimbProfile)
    required_gear: Any = Field(None, description="Existing gear list, if any")


def _gear_payload(gear: Any, base_pack_weight_kg: Any) -> dict[str, Any]:
    return {
        "pack_weight": summarize_pack_weight(gear, base_pack_weight_kg).model_dump(),
        "required_summary": summarize_required_gear(gear).model_dump(),
    }


# MARK: - Health Check


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": "1.0.0",
    }


# MARK: - Auth Endpoints


@app.post("/api/v1/auth/refresh")
async def refresh_token(request: RefreshTokenRequest):
    """Refresh access token using refresh token."""
    try:
        tokens = get_auth_service().refresh_tokens(request.refresh_token)
        return {"tokens": tokens}

    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


# MARK: - Climb Endpoints


@app.post("/api/v1/climbs", status_code=status.HTTP_201_CREATED)
async def create_climb(
    climb_data: ClimbCreate,
    user_id: str = Depends(get_current_user_id),
    autofill_gear: bool = Query(False, description="Fill in recommended gear"),
):
    """Create a new climb for the authenticated user."""
    try:
        climb = get_climb_service().create_climb(
            user_id, climb_data, autofill_gear=autofill_gear
        )
        return climb.model_dump()

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except Exception as e:
        logger.error("Failed to create climb for %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create climb",
        )


@app.get("/api/v1/climbs")
async def get_user_climbs(
    response: Response,
    user_id: str = Depends(get_current_user_id),
    status_filter: str | None = Query(
        None, alias="status", description="Filter by status"
    ),
):
    """Get all climbs for the authenticated user, latest start date first."""
    try:
        climb_status = None
        if status_filter:
            try:
                climb_status = ClimbStatus(status_filter.lower())
            except ValueError:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid status. Must be one of: {[s.value for s in ClimbStatus]}",
                )

        climbs = get_climb_service().get_user_climbs(user_id=user_id, status=climb_status)

        response.headers["Cache-Control"] = CACHE_CONTROL_PRIVATE

        return {
            "climbs": [c.model_dump() for c in climbs],
            "count": len(climbs),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to list climbs for %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get climbs",
        )


@app.post("/api/v1/climbs/gear/autofill")
async def autofill_all_climbs(user_id: str = Depends(get_current_user_id)):
    """Merge recommended gear into every climb the user owns."""
    try:
        return get_climb_service().autofill_all(user_id)

    except Exception as e:
        logger.error("Bulk autofill failed for %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to autofill gear",
        )


@app.get("/api/v1/climbs/{climb_id}")
async def get_climb(
    climb_id: str,
    response: Response,
    user_id: str = Depends(get_current_user_id),
):
    """Get a specific climb by ID."""
    try:
        climb = get_climb_service().get_climb(climb_id, user_id)
        if not climb:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Climb {climb_id} not found",
            )

        response.headers["Cache-Control"] = CACHE_CONTROL_PRIVATE

        return climb.model_dump()

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to get climb %s: %s", climb_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get climb",
        )


@app.put("/api/v1/climbs/{climb_id}")
async def update_climb(
    climb_id: str,
    update_data: ClimbUpdate,
    user_id: str = Depends(get_current_user_id),
):
    """Update a climb."""
    try:
        climb = get_climb_service().update_climb(climb_id, user_id, update_data)
        return climb.model_dump()

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except Exception as e:
        logger.error("Failed to update climb %s: %s", climb_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update climb",
        )


@app.delete("/api/v1/climbs/{climb_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_climb(
    climb_id: str,
    user_id: str = Depends(get_current_user_id),
):
    """Delete a climb."""
    try:
        deleted = get_climb_service().delete_climb(climb_id, user_id)
        if not deleted:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Climb {climb_id} not found",
            )
        return None

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to delete climb %s: %s", climb_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete climb",
        )


# MARK: - Gear Endpoints


@app.get("/api/v1/climbs/{climb_id}/gear")
async def get_climb_gear(
    climb_id: str,
    response: Response,
    user_id: str = Depends(get_current_user_id),
):
    """Get a climb's gear checklist with its pack weight summary."""
    try:
        climb = get_climb_service().get_climb(climb_id, user_id)
        if not climb:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Climb {climb_id} not found",
            )

        response.headers["Cache-Control"] = CACHE_CONTROL_PRIVATE

        return {
            "climb_id": climb.climb_id,
            "backpack_name": climb.backpack_name,
            "base_pack_weight_kg": climb.base_pack_weight_kg,
            "required_gear": [item.model_dump() for item in climb.required_gear],
            **_gear_payload(climb.required_gear, climb.base_pack_weight_kg),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to get gear for climb %s: %s", climb_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get gear",
        )


@app.put("/api/v1/climbs/{climb_id}/gear")
async def update_climb_gear(
    climb_id: str,
    gear_data: GearListUpdate,
    user_id: str = Depends(get_current_user_id),
):
    """Save a climb's gear checklist, backpack name and base pack weight."""
    try:
        climb = get_climb_service().update_gear(climb_id, user_id, gear_data)
        return {
            "climb_id": climb.climb_id,
            "backpack_name": climb.backpack_name,
            "base_pack_weight_kg": climb.base_pack_weight_kg,
            "required_gear": [item.model_dump() for item in climb.required_gear],
            **_gear_payload(climb.required_gear, climb.base_pack_weight_kg),
        }

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except Exception as e:
        logger.error("Failed to save gear for climb %s: %s", climb_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save gear",
        )


@app.post("/api/v1/climbs/{climb_id}/gear/autofill")
async def autofill_climb_gear(
    climb_id: str,
    user_id: str = Depends(get_current_user_id),
):
    """Merge recommended gear into a climb's checklist.

    Safe to repeat: items already on the list are never added twice.
    """
    try:
        climb, result = get_climb_service().autofill_gear(climb_id, user_id)
        return {
            "climb_id": climb.climb_id,
            **result.to_dict(),
            **_gear_payload(result.items, climb.base_pack_weight_kg),
        }

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except Exception as e:
        logger.error("Failed to autofill gear for climb %s: %s", climb_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to autofill gear",
        )


@app.get("/api/v1/climbs/{climb_id}/pack-weight")
async def get_pack_weight(
    climb_id: str,
    response: Response,
    user_id: str = Depends(get_current_user_id),
):
    """Get planning and packed weight totals for a climb."""
    try:
        summary = get_climb_service().get_pack_summary(climb_id, user_id)
        response.headers["Cache-Control"] = CACHE_CONTROL_PRIVATE
        return summary.model_dump()

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except Exception as e:
        logger.error("Failed to get pack weight for climb %s: %s", climb_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get pack weight",
        )


@app.post("/api/v1/gear/recommendations")
async def preview_gear_recommendations(request: GearPreviewRequest):
    """Preview recommended gear for climb attributes without saving anything.

    When required_gear is given it is backfilled and merged exactly as the
    autofill endpoint would.
    """
    result = merge_with_report(request.required_gear, request.climb)
    return {
        **result.to_dict(),
        **_gear_payload(result.items, request.climb.base_pack_weight_kg),
    }


@app.get("/api/v1/gear/defaults")
async def get_gear_defaults(
    response: Response,
    name: str = Query(..., min_length=1, description="Gear item name"),
):
    """Look up default weight, importance and category for an item name."""
    defaults = lookup_defaults(name)
    if defaults is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No defaults known for '{name}'",
        )

    response.headers["Cache-Control"] = CACHE_CONTROL_PUBLIC_LONG

    return {
        "item_name": name,
        "normalized_name": normalize_name(name),
        "estimated_weight_kg": defaults.weight_kg,
        "importance": defaults.importance.value,
        "category": defaults.category.value,
    }


# MARK: - Error Handlers


@app.exception_handler(ClientError)
async def aws_client_error_handler(request, exc: ClientError):
    """Handle AWS client errors."""
    error_code = exc.response["Error"]["Code"]
    error_message = exc.response["Error"]["Message"]

    if error_code == "ResourceNotFoundException":
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"Resource not found: {error_message}"},
        )
    else:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"AWS error: {error_message}"},
        )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    """Handle value errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
    )


# MARK: - Lambda Handler

api_handler = Mangum(app, lifespan="off")


# For local development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
