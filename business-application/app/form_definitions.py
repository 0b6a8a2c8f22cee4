"""Field definitions for the Business Application form.

Defines the business types an applicant can choose from, the contact
fields every application carries, and the repeatable collections
(pharmacies by ODS code, registered pharmacists). The registry is built
once at import time and never mutated.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from shared.config_store import get_config_value, get_setting

from app.collection_editor import CollectionPolicy
from app.field_schema import CollectionDefinition, FieldKind, FieldSchema
from app.validation import UnknownCategoryError, UnknownCollectionError

TOOL_NAME = "business-application"

NAME_PATTERN = r"^[A-Za-z0-9 &'.-]+$"
TELEPHONE_PATTERN = r"^(0|\+?44)7\d{9}$|^(0|\+?44)1\d{8,9}$"
ODS_PATTERN = r"^[A-Za-z]{2,3}\d{2,3}$"
GPHC_PATTERN = r"^\d{7}$"
PERSON_NAME_PATTERN = r"^[A-Za-z][A-Za-z '.-]*$"


# ---------------------------------------------------------------------------
# Shared field schemas
# ---------------------------------------------------------------------------

_NAME = FieldSchema(key="name", label="Name", pattern=NAME_PATTERN)
_ADDRESS = FieldSchema(key="address", label="Address", kind=FieldKind.ADDRESS)

CONTACT_FIELDS: tuple[FieldSchema, ...] = (
    FieldSchema(key="contactName", label="Name"),
    FieldSchema(key="position", label="Position"),
    FieldSchema(key="email", label="Email", kind=FieldKind.EMAIL),
    FieldSchema(key="invoiceEmail", label="Invoice email (Optional)", kind=FieldKind.EMAIL, optional=True),
    FieldSchema(
        key="telephone",
        label="Telephone",
        kind=FieldKind.TELEPHONE,
        pattern=TELEPHONE_PATTERN,
        format_hint="Please enter a UK mobile or landline number.",
    ),
)


# ---------------------------------------------------------------------------
# Business types
# ---------------------------------------------------------------------------

class Category(str, Enum):
    LIMITED_COMPANY = "limitedCompany"
    SOLE_TRADER = "soleTrader"
    PARTNERSHIP = "partnership"


class CategoryDefinition:
    """A business type: display name plus its ordered field schemas."""

    def __init__(self, category: Category, display_name: str, fields: tuple[FieldSchema, ...]) -> None:
        self.category = category
        self.display_name = display_name
        self.fields = MappingProxyType({f.key: f for f in fields})

    @property
    def key(self) -> str:
        return self.category.value

    def schemas(self) -> list[FieldSchema]:
        return list(self.fields.values())

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.display_name,
            "fields": [f.to_dict() for f in self.fields.values()],
        }


CATEGORIES: MappingProxyType = MappingProxyType({
    Category.LIMITED_COMPANY: CategoryDefinition(
        Category.LIMITED_COMPANY,
        "Limited Company",
        (
            _NAME,
            FieldSchema(
                key="number",
                label="Number",
                placeholder="01234567",
            ),
            _ADDRESS,
        ),
    ),
    Category.SOLE_TRADER: CategoryDefinition(
        Category.SOLE_TRADER,
        "Sole Trader",
        (_NAME, _ADDRESS),
    ),
    Category.PARTNERSHIP: CategoryDefinition(
        Category.PARTNERSHIP,
        "Partnership",
        (_NAME, _ADDRESS, FieldSchema(key="partners", label="Partner names")),
    ),
})


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------

PHARMACIES = CollectionDefinition(
    name="pharmacies",
    label="Pharmacies",
    item_label="pharmacy",
    components=(
        FieldSchema(
            key="ods",
            label="ODS code",
            kind=FieldKind.STRUCTURED,
            pattern=ODS_PATTERN,
            placeholder="ODS code",
            max_length=6,
            format_hint="Please correct the format: AB123",
        ),
    ),
    mandatory=True,
    add_label="Add pharmacy",
)

PHARMACISTS = CollectionDefinition(
    name="pharmacists",
    label="Pharmacists",
    item_label="pharmacist",
    components=(
        FieldSchema(
            key="gphc",
            label="GPhC number",
            kind=FieldKind.STRUCTURED,
            pattern=GPHC_PATTERN,
            placeholder="GPhC number",
            max_length=7,
            format_hint="Please correct the format: 1234567",
        ),
        FieldSchema(
            key="name",
            label="Pharmacist name",
            kind=FieldKind.STRUCTURED,
            pattern=PERSON_NAME_PATTERN,
            placeholder="Name",
        ),
    ),
    mandatory=False,
    add_label="Add pharmacist",
)

COLLECTIONS: tuple[CollectionDefinition, ...] = (PHARMACIES, PHARMACISTS)


def _check_registry() -> None:
    """Every Category needs a definition; contact keys must stay distinct."""
    missing = [c for c in Category if c not in CATEGORIES]
    if missing:
        raise RuntimeError(f"No definition for categories: {[c.value for c in missing]}")
    contact_keys = {f.key for f in CONTACT_FIELDS}
    if len(contact_keys) != len(CONTACT_FIELDS):
        raise RuntimeError("Duplicate contact field keys")
    for definition in CATEGORIES.values():
        overlap = contact_keys & set(definition.fields)
        if overlap:
            raise RuntimeError(f"{definition.key} fields collide with contact fields: {sorted(overlap)}")
    names = [c.name for c in COLLECTIONS]
    if len(set(names)) != len(names):
        raise RuntimeError("Duplicate collection names")


_check_registry()


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def resolve(category_key: str | Category) -> CategoryDefinition:
    """Return the definition for a category key.

    Raises:
        UnknownCategoryError: if the key is not a registered business type.
    """
    try:
        category = Category(category_key)
    except ValueError:
        raise UnknownCategoryError(str(category_key)) from None
    return CATEGORIES[category]


def get_collection(name: str) -> CollectionDefinition:
    for definition in COLLECTIONS:
        if definition.name == name:
            return definition
    raise UnknownCollectionError(name)


def list_categories() -> list[CategoryDefinition]:
    return [CATEGORIES[c] for c in Category]


# ── Config-aware settings (JSON override with hardcoded fallback) ───────────

def load_collection_policy() -> CollectionPolicy:
    return CollectionPolicy.from_dict(get_config_value(TOOL_NAME, "collection_policy", {}))


def journal_url() -> str:
    return get_setting(TOOL_NAME, "journal_url", "BUSINESS_JOURNAL_URL", "http://localhost:8600/api/journal")


def journal_timeout() -> float:
    return get_setting(TOOL_NAME, "journal_timeout", "BUSINESS_JOURNAL_TIMEOUT", 30.0)
