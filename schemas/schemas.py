from typing import List, Optional
from pydantic import BaseModel

# --- Request Schemas ---
class SwiftCodeCreate(BaseModel):
    # Optional so that missing fields surface as a 400 from the service, not a 422
    address: Optional[str] = None
    bankName: Optional[str] = None
    countryISO2: Optional[str] = None
    countryName: Optional[str] = None
    isHeadquarter: Optional[bool] = None
    swiftCode: Optional[str] = None

# --- Response Schemas ---
class SwiftCodeRead(BaseModel):
    address: str
    bankName: str
    countryISO2: str
    countryName: str
    isHeadquarter: bool
    swiftCode: str

class HeadquarterRead(SwiftCodeRead):
    branches: List[SwiftCodeRead]

class CountrySwiftCodeRead(BaseModel):
    address: str
    bankName: str
    countryISO2: str
    isHeadquarter: bool
    swiftCode: str

class CountrySwiftCodesRead(BaseModel):
    countryISO2: str
    countryName: str
    swiftCodes: List[CountrySwiftCodeRead]

class MessageResponse(BaseModel):
    message: str

class ImportResponse(BaseModel):
    message: str
    imported: int
