from typing import List, Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

class SwiftCode(SQLModel, table=True):
    __tablename__ = "swift_codes"
    swift_code: str = Field(primary_key=True)
    prefix: str = Field(index=True)
    country_iso2: str = Field(index=True)
    code_type: str = Field(default="UNKNOWN")
    name: str
    address: str
    town_name: str = Field(default="UNKNOWN")
    country_name: str
    time_zone: str = Field(default="UNKNOWN")
    is_headquarter: bool = Field(default=False, index=True)

class HeadquarterIndex(SQLModel, table=True):
    # One row per prefix: the primary key is what keeps a hierarchy to a single headquarters
    __tablename__ = "headquarter_index"
    prefix: str = Field(primary_key=True)
    headquarter_code: str = Field(foreign_key="swift_codes.swift_code", unique=True)

class BranchLink(SQLModel, table=True):
    __tablename__ = "branch_links"
    __table_args__ = (UniqueConstraint("headquarter_code", "branch_code"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    headquarter_code: str = Field(foreign_key="swift_codes.swift_code", index=True)
    branch_code: str = Field(index=True)

class SwiftCodeRecord(SQLModel):
    """Persisted shape of one SWIFT code, with its resolved branch list."""
    countryISO2: str
    swiftCode: str
    codeType: str = "UNKNOWN"
    name: str
    address: str
    townName: str = "UNKNOWN"
    countryName: str
    timeZone: str = "UNKNOWN"
    isHeadquarter: bool = False
    branches: List[str] = Field(default_factory=list)
