"""Media API endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile
from pydantic import ValidationError

from sentinela.api.models.media import MediaResponse, PaginatedMediaResponse
from sentinela.core.exceptions import ConfidentialAccessError, NotFoundError
from sentinela.core.logging import get_logger
from sentinela.domain.access import CallerContext
from sentinela.domain.entities.media import MediaType
from sentinela.infrastructure.dependencies import get_caller, get_media_service
from sentinela.services.face_search import ALLOWED_IMAGE_TYPES
from sentinela.services.media import MediaService
from sentinela.services.models import MediaCreate, MediaQuery, MediaUpdate

logger = get_logger(__name__)
router = APIRouter(
    responses={
        401: {"description": "Missing or invalid caller identity"},
        500: {"description": "Internal server error"}
    }
)


@router.post(
    "",
    response_model=MediaResponse,
    status_code=201,
    summary="Attach media to a person",
    description=(
        "Stores a media record. FACE media are queued for embedding extraction; "
        "they become searchable once extraction succeeds."
    ),
    responses={
        403: {"description": "Confidential person"},
        404: {"description": "Person not found"},
    },
)
async def create_media(
    request: MediaCreate,
    caller: CallerContext = Depends(get_caller),
    service: MediaService = Depends(get_media_service),
) -> MediaResponse:
    try:
        return MediaResponse.from_record(await service.create(request, caller))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Media creation denied on confidential person",
                       person_id=request.person_id, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)


@router.post(
    "/upload",
    response_model=MediaResponse,
    status_code=201,
    summary="Attach media to a person, sending the image",
    description=(
        "Same as attaching media by URL, but the image travels with the request. "
        "For FACE media the embedding is extracted from the uploaded bytes, so the "
        "stored URL is never downloaded."
    ),
    responses={
        400: {"description": "Missing, empty or unsupported image"},
        403: {"description": "Confidential person"},
        404: {"description": "Person not found"},
    },
)
async def upload_media(
    image: UploadFile = File(..., description="Image file (JPEG or PNG for FACE media)"),
    type: str = Form(..., description="Media type"),
    url: str = Form(..., description="Storage URL of the asset"),
    person_id: str = Form(..., description="Owning person"),
    label: Optional[str] = Form(None, description="Short label"),
    description: Optional[str] = Form(None, description="Description"),
    caller: CallerContext = Depends(get_caller),
    service: MediaService = Depends(get_media_service),
) -> MediaResponse:
    try:
        request = MediaCreate(
            type=type, url=url, person_id=person_id, label=label, description=description
        )
    except ValidationError as e:
        await image.close()
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    try:
        content_type = image.content_type or "application/octet-stream"
        if request.type == MediaType.FACE and content_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Unsupported image type {content_type}. Send a JPEG or PNG",
            )
        image_bytes = await image.read()
        if not image_bytes:
            raise HTTPException(status_code=400, detail="The uploaded image is empty")

        record = await service.create(
            request, caller, image_bytes=image_bytes, content_type=content_type
        )
        return MediaResponse.from_record(record)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Media upload denied on confidential person",
                       person_id=request.person_id, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)
    finally:
        await image.close()


@router.get(
    "",
    response_model=PaginatedMediaResponse,
    summary="List media",
)
async def list_media(
    type: Optional[MediaType] = Query(None, description="Media type"),
    person_id: Optional[int] = Query(None, ge=1, description="Owning person"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    caller: CallerContext = Depends(get_caller),
    service: MediaService = Depends(get_media_service),
) -> PaginatedMediaResponse:
    query = MediaQuery(type=type, person_id=person_id, page=page, limit=limit)
    return PaginatedMediaResponse.from_page(await service.list(query, caller))


@router.get(
    "/{media_id}",
    response_model=MediaResponse,
    summary="Get a media record",
    responses={
        403: {"description": "Confidential person"},
        404: {"description": "Media not found"},
    },
)
async def get_media(
    media_id: int,
    caller: CallerContext = Depends(get_caller),
    service: MediaService = Depends(get_media_service),
) -> MediaResponse:
    try:
        return MediaResponse.from_record(await service.get(media_id, caller))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Confidential media access denied", media_id=media_id, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)


@router.patch(
    "/{media_id}",
    response_model=MediaResponse,
    summary="Update a media record",
    description=(
        "Changes the label, description or owning person. The image itself cannot "
        "be replaced; delete the record and attach a new one instead."
    ),
    responses={
        403: {"description": "Confidential person"},
        404: {"description": "Media or new person not found"},
    },
)
async def update_media(
    media_id: int,
    request: MediaUpdate,
    caller: CallerContext = Depends(get_caller),
    service: MediaService = Depends(get_media_service),
) -> MediaResponse:
    try:
        return MediaResponse.from_record(await service.update(media_id, request, caller))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Confidential media update denied", media_id=media_id, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)


@router.delete(
    "/{media_id}",
    status_code=204,
    summary="Delete a media record",
    description="Deleted face photos stop matching face searches immediately.",
    responses={
        403: {"description": "Confidential person"},
        404: {"description": "Media not found"},
    },
)
async def delete_media(
    media_id: int,
    caller: CallerContext = Depends(get_caller),
    service: MediaService = Depends(get_media_service),
) -> Response:
    try:
        await service.remove(media_id, caller)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Confidential media delete denied", media_id=media_id, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)
    return Response(status_code=204)
