from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from sqlmodel import Session

from core.database import get_session
from core.logger import get_logger
from schemas.schemas import ImportResponse, MessageResponse, SwiftCodeCreate
from services.registry_store import SQLRegistryStore
from services.swift_import import parse_swift_codes
from services.swift_service import MutationOutcome, SwiftCodeService

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/swift-codes", tags=["swift-codes"])

OUTCOME_STATUS = {
    MutationOutcome.CREATED: status.HTTP_201_CREATED,
    MutationOutcome.DELETED: status.HTTP_200_OK,
    MutationOutcome.CONFLICT: status.HTTP_409_CONFLICT,
    MutationOutcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    MutationOutcome.DELETE_FAILED: status.HTTP_404_NOT_FOUND,
}

# --- dependencies ---

def get_swift_service(session: Session = Depends(get_session)) -> SwiftCodeService:
    return SwiftCodeService(SQLRegistryStore(session))

# --- endpoints ---

@router.get("/", response_model=MessageResponse)
async def index():
    return {"message": "SWIFT codes API"}

@router.get("/country/{country_iso2}", response_model=dict)
async def get_swift_codes_by_country(
    country_iso2: str,
    service: SwiftCodeService = Depends(get_swift_service)
):
    return service.get_swift_codes_by_country(country_iso2)

@router.post("/import", response_model=ImportResponse)
async def import_swift_codes(
    file: UploadFile = File(...),
    service: SwiftCodeService = Depends(get_swift_service)
):
    if not file.filename or not file.filename.lower().endswith(('.xlsx', '.xls')):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload Excel.")

    contents = await file.read()
    imported = service.import_swift_codes(parse_swift_codes(contents))
    logger.info(f"Imported {imported} SWIFT codes from {file.filename}")
    return {"message": f"Successfully imported {imported} SWIFT codes", "imported": imported}

@router.get("/{swift_code}", response_model=dict)
async def get_swift_code(
    swift_code: str,
    service: SwiftCodeService = Depends(get_swift_service)
):
    return service.get_swift_code(swift_code)

@router.post("/", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def add_swift_code(
    payload: SwiftCodeCreate,
    service: SwiftCodeService = Depends(get_swift_service)
):
    result = service.add_swift_code(payload)
    return JSONResponse(status_code=OUTCOME_STATUS[result.outcome], content={"message": result.message})

@router.delete("/{swift_code}", response_model=MessageResponse)
async def delete_swift_code(
    swift_code: str,
    service: SwiftCodeService = Depends(get_swift_service)
):
    result = service.delete_swift_code(swift_code)
    return JSONResponse(status_code=OUTCOME_STATUS[result.outcome], content={"message": result.message})
