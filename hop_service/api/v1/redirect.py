from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse

from hop_service.dependencies import get_link_service
from hop_service.services.link_service import LinkService

router = APIRouter(tags=["redirect"])


@router.get("/{key}")
async def redirect_to_long_url(
    key: str,
    link_service: LinkService = Depends(get_link_service)
):
    """
    Redirect to the original URL.

    Flow:
    1. Get long_url from cache, if there is a usable one
    2. Fall back to the database on miss
    3. 302 redirect, or 404 when the key is unknown
    """
    long_url = await link_service.resolve(key)

    if not long_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )

    return RedirectResponse(url=long_url, status_code=status.HTTP_302_FOUND)
