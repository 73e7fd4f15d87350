"""
Add/delete orchestration and read views for the SWIFT code registry.

Mutations report their outcome as a MutationResult. Invalid input raises
ValidationError. Any failure coming out of the store that is not a registry
error is logged and re-raised as StoreError, so callers never see driver
messages. A branch insert is not rolled back when linking it to its
headquarters fails afterwards.
"""

from enum import Enum
from typing import List, NamedTuple

from core.exceptions import ConflictError, NotFoundError, StoreError, SwiftRegistryError, ValidationError
from core.logger import get_logger
from models import SwiftCodeRecord
from schemas.schemas import (
    CountrySwiftCodeRead,
    CountrySwiftCodesRead,
    HeadquarterRead,
    SwiftCodeCreate,
    SwiftCodeRead,
)
from services.code_identity import classify, normalize_code
from services.hierarchy import HierarchyResolver, resolve_bulk
from services.registry_store import RegistryStore

logger = get_logger(__name__)

REQUIRED_FIELDS = ("address", "bankName", "countryISO2", "countryName", "isHeadquarter", "swiftCode")


class MutationOutcome(str, Enum):
    CREATED = "created"
    DELETED = "deleted"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    DELETE_FAILED = "delete_failed"


class MutationResult(NamedTuple):
    outcome: MutationOutcome
    message: str

    @property
    def success(self) -> bool:
        return self.outcome in (MutationOutcome.CREATED, MutationOutcome.DELETED)


def to_public(record: SwiftCodeRecord) -> SwiftCodeRead:
    return SwiftCodeRead(
        address=record.address,
        bankName=record.name,
        countryISO2=record.countryISO2,
        countryName=record.countryName,
        isHeadquarter=record.isHeadquarter,
        swiftCode=record.swiftCode,
    )


class SwiftCodeService:
    def __init__(self, store: RegistryStore):
        self.store = store
        self.resolver = HierarchyResolver(store)

    # --- reads ---

    def get_swift_code(self, swift_code: str) -> dict:
        code = normalize_code(swift_code)
        try:
            record = self.store.find_by_code(code)
            if not record:
                raise NotFoundError(f"SWIFT code {code} not found")

            if not record.isHeadquarter:
                return to_public(record).model_dump()

            branches = self.store.find_by_codes(record.branches)
            return HeadquarterRead(
                **to_public(record).model_dump(),
                branches=[to_public(branch) for branch in branches],
            ).model_dump()
        except SwiftRegistryError:
            raise
        except Exception as e:
            logger.error(f"Unable to get SWIFT details by code {code}: {e}", exc_info=True)
            raise StoreError() from e

    def get_swift_codes_by_country(self, country_iso2: str) -> dict:
        country = country_iso2.strip().upper()
        try:
            records = self.store.find_by_country(country)
        except Exception as e:
            logger.error(f"Unable to get SWIFT codes by country {country}: {e}", exc_info=True)
            raise StoreError() from e

        if not records:
            raise NotFoundError(f"SWIFT codes for country {country} not found")

        return CountrySwiftCodesRead(
            countryISO2=country,
            countryName=records[0].countryName,
            swiftCodes=[
                CountrySwiftCodeRead(
                    address=record.address,
                    bankName=record.name,
                    countryISO2=record.countryISO2,
                    isHeadquarter=record.isHeadquarter,
                    swiftCode=record.swiftCode,
                )
                for record in records
            ],
        ).model_dump()

    # --- mutations ---

    def add_swift_code(self, payload: SwiftCodeCreate) -> MutationResult:
        data = payload.model_dump()
        missing = [
            field for field in REQUIRED_FIELDS
            if data[field] is None or (isinstance(data[field], str) and not data[field].strip())
        ]
        if missing:
            raise ValidationError(
                "Missing required fields. Please provide address, bankName, countryISO2, "
                f"countryName, isHeadquarter, and swiftCode. Missing: {', '.join(missing)}"
            )

        identity = classify(payload.swiftCode)
        if payload.isHeadquarter and not identity.is_headquarter:
            raise ValidationError("Headquarters SWIFT codes must end with XXX.")
        if not payload.isHeadquarter and identity.is_headquarter:
            raise ValidationError("SWIFT codes ending with XXX are headquarters codes.")

        record = SwiftCodeRecord(
            countryISO2=payload.countryISO2.strip().upper(),
            swiftCode=identity.code,
            name=payload.bankName.strip(),
            address=payload.address.strip(),
            countryName=payload.countryName.strip().upper(),
            isHeadquarter=identity.is_headquarter,
        )

        try:
            if self.store.find_by_code(identity.code):
                return MutationResult(
                    MutationOutcome.CONFLICT,
                    f"SWIFT code {identity.code} already exists in the database",
                )

            if identity.is_headquarter:
                record.branches = self.resolver.adopt_branches(identity)
                self.store.insert(record)
            else:
                self.store.insert(record)
                self.resolver.link_branch(identity)
        except ConflictError as e:
            logger.warning(f"Rejected SWIFT code {identity.code}: {e.message}")
            return MutationResult(MutationOutcome.CONFLICT, e.message)
        except SwiftRegistryError:
            raise
        except Exception as e:
            logger.error(f"Failed to add SWIFT code {identity.code}: {e}", exc_info=True)
            raise StoreError() from e

        logger.info(f"Added SWIFT code {identity.code}")
        return MutationResult(MutationOutcome.CREATED, f"Successfully added SWIFT code {identity.code}")

    def delete_swift_code(self, swift_code: str) -> MutationResult:
        code = normalize_code(swift_code)
        if not code:
            raise ValidationError("SWIFT code is required")

        try:
            record = self.store.find_by_code(code)
            if not record:
                return MutationResult(MutationOutcome.NOT_FOUND, f"SWIFT code {code} not found in the database")

            identity = classify(record.swiftCode)
            if identity.is_headquarter:
                self.resolver.release_headquarter(identity)
            else:
                self.resolver.unlink_branch(identity)

            deleted = self.store.delete(code)
        except SwiftRegistryError:
            raise
        except Exception as e:
            logger.error(f"Failed to delete SWIFT code {code}: {e}", exc_info=True)
            raise StoreError() from e

        if deleted == 1:
            logger.info(f"Deleted SWIFT code {code}")
            return MutationResult(MutationOutcome.DELETED, f"Successfully deleted SWIFT code {code}")

        logger.warning(f"SWIFT code {code} disappeared before it could be deleted")
        return MutationResult(MutationOutcome.DELETE_FAILED, f"Failed to delete SWIFT code {code}")

    def import_swift_codes(self, records: List[SwiftCodeRecord]) -> int:
        resolved = resolve_bulk(records)
        try:
            return self.store.replace_all(resolved)
        except Exception as e:
            logger.error(f"Failed to insert SWIFT codes: {e}", exc_info=True)
            raise StoreError() from e
