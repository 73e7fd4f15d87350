"""
Headquarters/branch hierarchy resolution.

``resolve_bulk`` links a whole import in two passes so branches listed before
their headquarters still end up linked. ``HierarchyResolver`` keeps the links
consistent for single inserts and deletes against a live RegistryStore.
"""

from typing import Dict, List, Optional

from core.exceptions import PrefixConflictError
from core.logger import get_logger
from models import SwiftCodeRecord
from services.code_identity import CodeIdentity, code_prefix
from services.registry_store import RegistryStore

logger = get_logger(__name__)


def resolve_bulk(records: List[SwiftCodeRecord]) -> List[SwiftCodeRecord]:
    """
    Link every branch of an import to the headquarters sharing its prefix.

    Args:
        records: classified SWIFT codes in source order. ``isHeadquarter`` must
            already reflect the code suffix.

    Returns:
        The de-duplicated records, with ``branches`` filled in on each linked
        headquarters. When two headquarters share a prefix the later one takes
        the branches; branches without a headquarters stay unlinked.
    """
    resolved: List[SwiftCodeRecord] = []
    seen = set()
    headquarters: Dict[str, SwiftCodeRecord] = {}
    unassigned_branches: List[str] = []

    for record in records:
        if record.swiftCode in seen:
            logger.warning(f"Duplicate SWIFT code {record.swiftCode} in import, keeping first occurrence")
            continue
        seen.add(record.swiftCode)

        entry = record.model_copy(update={"branches": []})
        resolved.append(entry)
        if entry.isHeadquarter:
            headquarters[code_prefix(entry.swiftCode)] = entry
        else:
            unassigned_branches.append(entry.swiftCode)

    # Second pass: branches may precede their headquarters in the source
    unlinked = 0
    for branch_code in unassigned_branches:
        headquarter = headquarters.get(code_prefix(branch_code))
        if headquarter:
            headquarter.branches.append(branch_code)
        else:
            unlinked += 1

    logger.info(
        f"Resolved {len(resolved)} SWIFT codes: {len(headquarters)} headquarters, "
        f"{len(unassigned_branches) - unlinked} linked branches, {unlinked} unlinked branches"
    )
    return resolved


class HierarchyResolver:
    """Incremental link maintenance; store failures propagate to the caller."""

    def __init__(self, store: RegistryStore):
        self.store = store

    def link_branch(self, identity: CodeIdentity) -> Optional[str]:
        headquarter = self.store.find_by_prefix(identity.prefix, is_headquarter=True)
        if not headquarter:
            logger.info(f"No headquarters found for branch {identity.code}")
            return None

        if self.store.add_branch(headquarter.swiftCode, identity.code):
            logger.info(f"Added branch {identity.code} to headquarters {headquarter.swiftCode}")
        return headquarter.swiftCode

    def adopt_branches(self, identity: CodeIdentity) -> List[str]:
        """Return existing branches under the prefix; raise if it already has a headquarters."""
        existing = self.store.find_by_prefix(identity.prefix, is_headquarter=True)
        if existing:
            raise PrefixConflictError(
                f"SWIFT code {identity.code} that is headquarter already matches "
                f"existing headquarters prefix {existing.swiftCode}"
            )

        branches = [branch.swiftCode for branch in self.store.find_branches_by_prefix(identity.prefix)]
        if branches:
            logger.info(f"Headquarters {identity.code} adopts {len(branches)} existing branches")
        return branches

    def unlink_branch(self, identity: CodeIdentity) -> Optional[str]:
        headquarter = self.store.find_by_prefix(identity.prefix, is_headquarter=True)
        if not headquarter:
            return None

        self.store.remove_branch(headquarter.swiftCode, identity.code)
        logger.info(f"Removed branch {identity.code} from headquarters {headquarter.swiftCode}")
        return headquarter.swiftCode

    def release_headquarter(self, identity: CodeIdentity) -> None:
        # Deleting a headquarters never cascades: its branches stay as orphans
        logger.info(f"Deleting headquarters {identity.code}; branches under prefix {identity.prefix} are left in place")
