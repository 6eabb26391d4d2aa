"""People API endpoints, including search by face."""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile

from sentinela.api.models.people import (
    FaceSearchResultResponse,
    PaginatedPeopleResponse,
    PersonResponse,
)
from sentinela.core.exceptions import (
    ConfidentialAccessError,
    ConflictError,
    EmbeddingExtractionError,
    InvalidImageError,
    InvalidSearchParamsError,
    NotFoundError,
    VectorStoreError,
)
from sentinela.core.logging import get_logger
from sentinela.domain.access import CallerContext
from sentinela.domain.value_objects.search import SearchParams
from sentinela.infrastructure.dependencies import (
    get_caller,
    get_face_search_service,
    get_people_service,
)
from sentinela.services.face_search import FaceSearchService
from sentinela.services.models import PersonCreate, PersonQuery, PersonUpdate
from sentinela.services.people import PeopleService

logger = get_logger(__name__)
router = APIRouter(
    responses={
        400: {"description": "Invalid request"},
        401: {"description": "Missing or invalid caller identity"},
        500: {"description": "Internal server error"}
    }
)


@router.post(
    "/search-by-face",
    response_model=List[FaceSearchResultResponse],
    summary="Search people by face",
    description=(
        "Extracts the face embedding of the uploaded photo and returns the people "
        "whose registered face photos are most similar, best match first."
    ),
    responses={
        200: {
            "description": "Matches found (possibly none)",
            "content": {
                "application/json": {
                    "example": [
                        {
                            "person": {"id": 1, "full_name": "Maria Souza", "is_confidential": False},
                            "similarity": 0.93,
                            "distance": 0.07,
                            "face_photo_url": "https://storage.example/faces/1.jpg",
                        }
                    ]
                }
            },
        },
        422: {
            "description": "No face could be extracted from the image",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Could not process the image. Make sure it shows a face clearly and send it again"
                    }
                }
            },
        },
    },
)
async def search_by_face(
    image: Optional[UploadFile] = File(None, description="Face photo to search for (JPEG or PNG)"),
    limit: Optional[str] = Form(None, description="Maximum number of people (1 to 50)"),
    threshold: Optional[str] = Form(None, description="Minimum similarity (0.0 to 1.0)"),
    caller: CallerContext = Depends(get_caller),
    service: FaceSearchService = Depends(get_face_search_service),
) -> List[FaceSearchResultResponse]:
    """Search for people by a face photo.

    ``limit`` and ``threshold`` are taken as raw form text so that malformed
    values are reported as 400 like out-of-range ones.

    Args:
        image: Uploaded face image
        limit: Maximum number of results
        threshold: Minimum similarity
        caller: Authenticated caller
        service: Face search service provided by dependency injection

    Returns:
        Ranked list of matches

    Raises:
        HTTPException: If the request is invalid or processing fails
    """
    try:
        params = SearchParams.create(limit=limit, threshold=threshold)
        if image is None:
            raise InvalidImageError("The image is required. Send the file in the \"image\" field")
        image_bytes = await image.read()
        matches = await service.search_by_face(
            image_bytes=image_bytes,
            params=params,
            caller=caller,
            content_type=image.content_type or "application/octet-stream",
        )
        return [FaceSearchResultResponse.from_match(m) for m in matches]

    except (InvalidImageError, InvalidSearchParamsError) as e:
        logger.warning("Invalid face search request", error=str(e), details=e.details)
        raise HTTPException(status_code=400, detail=e.message)
    except EmbeddingExtractionError as e:
        logger.warning("Face search failed: no usable embedding", error=str(e))
        raise HTTPException(status_code=422, detail=e.message)
    except VectorStoreError as e:
        logger.error("Failed to query face embeddings", error=str(e))
        raise HTTPException(
            status_code=500,
            detail="Failed to search face data"
        )
    except Exception as e:
        logger.error("Unexpected error during face search", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred."
        )
    finally:
        if image is not None:
            await image.close()


@router.post(
    "",
    response_model=PersonResponse,
    status_code=201,
    summary="Register a person",
    responses={409: {"description": "CPF or full name and mother's name already registered"}},
)
async def create_person(
    request: PersonCreate,
    caller: CallerContext = Depends(get_caller),
    service: PeopleService = Depends(get_people_service),
) -> PersonResponse:
    try:
        record = await service.create(request, caller)
        return PersonResponse.from_record(record)
    except ConflictError as e:
        logger.warning("Person already registered", error=str(e), details=e.details)
        raise HTTPException(status_code=409, detail=e.message)


@router.get(
    "",
    response_model=PaginatedPeopleResponse,
    summary="List people",
    description=(
        "Lists people visible to the caller, newest first. Name filters match "
        "case-insensitive substrings."
    ),
)
async def list_people(
    full_name: Optional[str] = Query(None, description="Substring of the full name"),
    nickname: Optional[str] = Query(None, description="Substring of the nickname"),
    mother_name: Optional[str] = Query(None, description="Substring of the mother's name"),
    father_name: Optional[str] = Query(None, description="Substring of the father's name"),
    cpf: Optional[str] = Query(None, description="Exact taxpayer identifier"),
    is_confidential: Optional[bool] = Query(None, description="Confidentiality flag"),
    created_by: Optional[int] = Query(None, description="Creating user"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    caller: CallerContext = Depends(get_caller),
    service: PeopleService = Depends(get_people_service),
) -> PaginatedPeopleResponse:
    query = PersonQuery(
        full_name=full_name,
        nickname=nickname,
        mother_name=mother_name,
        father_name=father_name,
        cpf=cpf,
        is_confidential=is_confidential,
        created_by=created_by,
        page=page,
        limit=limit,
    )
    return PaginatedPeopleResponse.from_page(await service.list(query, caller))


@router.get(
    "/cpf/{cpf}",
    response_model=PersonResponse,
    summary="Get a person by CPF",
    responses={
        403: {"description": "Confidential record"},
        404: {"description": "No person with this CPF"},
    },
)
async def get_person_by_cpf(
    cpf: str,
    caller: CallerContext = Depends(get_caller),
    service: PeopleService = Depends(get_people_service),
) -> PersonResponse:
    try:
        return PersonResponse.from_record(await service.get_by_cpf(cpf, caller))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Confidential person access denied", cpf=cpf, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)


@router.get(
    "/{person_id}",
    response_model=PersonResponse,
    summary="Get a person",
    responses={
        403: {"description": "Confidential record"},
        404: {"description": "Person not found"},
    },
)
async def get_person(
    person_id: int,
    caller: CallerContext = Depends(get_caller),
    service: PeopleService = Depends(get_people_service),
) -> PersonResponse:
    try:
        return PersonResponse.from_record(await service.get(person_id, caller))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Confidential person access denied", person_id=person_id, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)


@router.patch(
    "/{person_id}",
    response_model=PersonResponse,
    summary="Update a person",
    description="Changes only the fields present in the body.",
    responses={
        403: {"description": "Confidential record"},
        404: {"description": "Person not found"},
        409: {"description": "CPF or full name and mother's name already registered"},
    },
)
async def update_person(
    person_id: int,
    request: PersonUpdate,
    caller: CallerContext = Depends(get_caller),
    service: PeopleService = Depends(get_people_service),
) -> PersonResponse:
    try:
        return PersonResponse.from_record(await service.update(person_id, request, caller))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Confidential person update denied", person_id=person_id, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)
    except ConflictError as e:
        logger.warning("Person update conflicts", person_id=person_id, details=e.details)
        raise HTTPException(status_code=409, detail=e.message)


@router.delete(
    "/{person_id}",
    status_code=204,
    summary="Delete a person",
    description="Deletes the person and all of their media, including registered face photos.",
    responses={
        403: {"description": "Confidential record"},
        404: {"description": "Person not found"},
    },
)
async def delete_person(
    person_id: int,
    caller: CallerContext = Depends(get_caller),
    service: PeopleService = Depends(get_people_service),
) -> Response:
    try:
        await service.remove(person_id, caller)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfidentialAccessError as e:
        logger.warning("Confidential person delete denied", person_id=person_id, user_id=caller.user_id)
        raise HTTPException(status_code=403, detail=e.message)
    return Response(status_code=204)
