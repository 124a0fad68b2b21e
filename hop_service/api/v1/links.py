from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from hop_service.dependencies import get_link_service
from hop_service.schemas.link import LinkCreate, LinkResponse
from hop_service.services.link_service import LinkService

router = APIRouter(prefix="/links", tags=["links"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_payload(request: Request) -> LinkCreate:
    """Accept the URL either as a JSON body or as a form field"""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(FORM_CONTENT_TYPES):
            form = await request.form()
            return LinkCreate(url=form.get("url", ""))
        return LinkCreate.model_validate(await request.json())
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from e
    except ValueError as e:
        # Body is not valid JSON
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": str(e), "input": None}]
        ) from e


@router.post(
    "",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": LinkCreate.model_json_schema()},
                "application/x-www-form-urlencoded": {"schema": LinkCreate.model_json_schema()},
            },
        }
    },
)
async def create_link(
    request: Request,
    link_service: LinkService = Depends(get_link_service)
):
    """Create a new short link (async for cache I/O)"""
    payload = await _read_payload(request)
    return await link_service.create(payload.url)


@router.get("/{key}", response_model=LinkResponse)
async def get_link(
    key: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Get information about a short link, always read from the database"""
    link = await link_service.find(key)
    if not link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )
    return link
