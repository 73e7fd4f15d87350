"""
Persistence contract for the SWIFT code registry and its SQLModel backend.

Branch membership is stored as one ``branch_links`` row per (headquarters,
branch) pair, so adding or removing a branch is a single guarded insert or a
filtered delete rather than a read-modify-write of a list. The prefix to
headquarters mapping lives in ``headquarter_index``, whose primary key allows
only one headquarters per prefix.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import FlushError
from sqlmodel import Session, delete, select

from core.exceptions import DuplicateCodeError, PrefixConflictError
from core.logger import get_logger
from models import BranchLink, HeadquarterIndex, SwiftCode, SwiftCodeRecord
from services.code_identity import code_prefix

logger = get_logger(__name__)


class RegistryStore(ABC):
    """Operations the hierarchy logic needs from storage."""

    @abstractmethod
    def find_by_code(self, code: str) -> Optional[SwiftCodeRecord]: ...

    @abstractmethod
    def find_by_prefix(self, prefix: str, is_headquarter: bool = True) -> Optional[SwiftCodeRecord]: ...

    @abstractmethod
    def find_branches_by_prefix(self, prefix: str) -> List[SwiftCodeRecord]: ...

    @abstractmethod
    def find_by_codes(self, codes: List[str]) -> List[SwiftCodeRecord]: ...

    @abstractmethod
    def find_by_country(self, country_iso2: str) -> List[SwiftCodeRecord]: ...

    @abstractmethod
    def insert(self, record: SwiftCodeRecord) -> None: ...

    @abstractmethod
    def add_branch(self, headquarter_code: str, branch_code: str) -> bool: ...

    @abstractmethod
    def remove_branch(self, headquarter_code: str, branch_code: str) -> bool: ...

    @abstractmethod
    def update_branch_list(self, headquarter_code: str, branches: Iterable[str]) -> None: ...

    @abstractmethod
    def delete(self, code: str) -> int: ...

    @abstractmethod
    def replace_all(self, records: List[SwiftCodeRecord]) -> int: ...


def _to_row(record: SwiftCodeRecord) -> SwiftCode:
    return SwiftCode(
        swift_code=record.swiftCode,
        prefix=code_prefix(record.swiftCode),
        country_iso2=record.countryISO2,
        code_type=record.codeType,
        name=record.name,
        address=record.address,
        town_name=record.townName,
        country_name=record.countryName,
        time_zone=record.timeZone,
        is_headquarter=record.isHeadquarter,
    )


class SQLRegistryStore(RegistryStore):
    """RegistryStore over a SQLModel session; every mutating call commits on its own."""

    def __init__(self, session: Session):
        self.session = session

    # --- reads ---

    def _branch_codes(self, headquarter_code: str) -> List[str]:
        stmt = (
            select(BranchLink.branch_code)
            .where(BranchLink.headquarter_code == headquarter_code)
            .order_by(BranchLink.id)
        )
        return list(self.session.exec(stmt).all())

    def _to_record(self, row: SwiftCode) -> SwiftCodeRecord:
        return SwiftCodeRecord(
            countryISO2=row.country_iso2,
            swiftCode=row.swift_code,
            codeType=row.code_type,
            name=row.name,
            address=row.address,
            townName=row.town_name,
            countryName=row.country_name,
            timeZone=row.time_zone,
            isHeadquarter=row.is_headquarter,
            branches=self._branch_codes(row.swift_code) if row.is_headquarter else [],
        )

    def find_by_code(self, code: str) -> Optional[SwiftCodeRecord]:
        row = self.session.get(SwiftCode, code)
        return self._to_record(row) if row else None

    def find_by_prefix(self, prefix: str, is_headquarter: bool = True) -> Optional[SwiftCodeRecord]:
        if is_headquarter:
            entry = self.session.get(HeadquarterIndex, prefix)
            return self.find_by_code(entry.headquarter_code) if entry else None

        row = self.session.exec(
            select(SwiftCode)
            .where(SwiftCode.prefix == prefix, SwiftCode.is_headquarter == False)  # noqa: E712
            .order_by(SwiftCode.swift_code)
        ).first()
        return self._to_record(row) if row else None

    def find_branches_by_prefix(self, prefix: str) -> List[SwiftCodeRecord]:
        rows = self.session.exec(
            select(SwiftCode)
            .where(SwiftCode.prefix == prefix, SwiftCode.is_headquarter == False)  # noqa: E712
            .order_by(SwiftCode.swift_code)
        ).all()
        return [self._to_record(row) for row in rows]

    def find_by_codes(self, codes: List[str]) -> List[SwiftCodeRecord]:
        if not codes:
            return []
        rows = self.session.exec(select(SwiftCode).where(SwiftCode.swift_code.in_(codes))).all()
        by_code = {row.swift_code: row for row in rows}
        return [self._to_record(by_code[code]) for code in codes if code in by_code]

    def find_by_country(self, country_iso2: str) -> List[SwiftCodeRecord]:
        rows = self.session.exec(
            select(SwiftCode)
            .where(SwiftCode.country_iso2 == country_iso2.strip().upper())
            .order_by(SwiftCode.swift_code)
        ).all()
        return [self._to_record(row) for row in rows]

    # --- writes ---

    def _flush_or_raise(self, error: Exception):
        try:
            self.session.flush()
        except (IntegrityError, FlushError):
            # FlushError: the clashing row is already loaded in this session
            self.session.rollback()
            raise error

    def insert(self, record: SwiftCodeRecord) -> None:
        row = _to_row(record)
        self.session.add(row)
        self._flush_or_raise(DuplicateCodeError(f"SWIFT code {row.swift_code} already exists in the database"))

        if row.is_headquarter:
            self.session.add(HeadquarterIndex(prefix=row.prefix, headquarter_code=row.swift_code))
            self._flush_or_raise(PrefixConflictError(
                f"SWIFT code {row.swift_code} that is headquarter already matches existing headquarters prefix {row.prefix}"
            ))
            for branch_code in dict.fromkeys(record.branches):
                self.session.add(BranchLink(headquarter_code=row.swift_code, branch_code=branch_code))

        self.session.commit()

    def _is_linked(self, headquarter_code: str, branch_code: str) -> bool:
        return self.session.exec(
            select(BranchLink.id).where(
                BranchLink.headquarter_code == headquarter_code,
                BranchLink.branch_code == branch_code,
            )
        ).first() is not None

    def add_branch(self, headquarter_code: str, branch_code: str) -> bool:
        self.session.add(BranchLink(headquarter_code=headquarter_code, branch_code=branch_code))
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            # Only the unique (headquarter_code, branch_code) pair means "already linked"
            if self._is_linked(headquarter_code, branch_code):
                return False
            raise
        return True

    def remove_branch(self, headquarter_code: str, branch_code: str) -> bool:
        result = self.session.exec(
            delete(BranchLink).where(
                BranchLink.headquarter_code == headquarter_code,
                BranchLink.branch_code == branch_code,
            )
        )
        self.session.commit()
        return result.rowcount > 0

    def update_branch_list(self, headquarter_code: str, branches: Iterable[str]) -> None:
        self.session.exec(delete(BranchLink).where(BranchLink.headquarter_code == headquarter_code))
        self.session.add_all(
            BranchLink(headquarter_code=headquarter_code, branch_code=branch_code)
            for branch_code in dict.fromkeys(branches)
        )
        self.session.commit()

    def delete(self, code: str) -> int:
        # Branch rows stay; only a headquarters' own index entry and links go with it
        prefix = self.session.exec(
            select(HeadquarterIndex.prefix).where(HeadquarterIndex.headquarter_code == code)
        ).first()
        self.session.exec(delete(HeadquarterIndex).where(HeadquarterIndex.headquarter_code == code))
        self.session.exec(delete(BranchLink).where(BranchLink.headquarter_code == code))
        result = self.session.exec(delete(SwiftCode).where(SwiftCode.swift_code == code))

        if prefix:
            # An import may leave a second headquarters row on the prefix; it takes over the index
            successor = self.session.exec(
                select(SwiftCode)
                .where(SwiftCode.prefix == prefix, SwiftCode.is_headquarter == True)  # noqa: E712
                .order_by(SwiftCode.swift_code)
            ).first()
            if successor:
                self.session.add(HeadquarterIndex(prefix=prefix, headquarter_code=successor.swift_code))
                logger.info(f"Headquarters {successor.swift_code} now owns prefix {prefix}")

        self.session.commit()
        return result.rowcount

    def replace_all(self, records: List[SwiftCodeRecord]) -> int:
        self.session.exec(delete(BranchLink))
        self.session.exec(delete(HeadquarterIndex))
        self.session.exec(delete(SwiftCode))
        logger.info("Cleared existing SWIFT codes")

        rows = [_to_row(record) for record in records]
        self.session.add_all(rows)
        self.session.flush()

        index: Dict[str, str] = {}
        for row in rows:
            if row.is_headquarter:
                index[row.prefix] = row.swift_code
        self.session.add_all(
            HeadquarterIndex(prefix=prefix, headquarter_code=code) for prefix, code in index.items()
        )
        for record in records:
            if record.isHeadquarter:
                self.session.add_all(
                    BranchLink(headquarter_code=record.swiftCode, branch_code=branch_code)
                    for branch_code in dict.fromkeys(record.branches)
                )

        self.session.commit()
        logger.info(f"Inserted {len(rows)} SWIFT codes into database")
        return len(rows)
