"""Person (identity) domain entities."""
import re
import unicodedata
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Fold a name for identity comparisons.

    Accents are stripped, case is folded and runs of whitespace collapse to a
    single space, so ``"  José  da SILVA"`` and ``"jose da silva"`` compare equal.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _WHITESPACE.sub(" ", stripped.casefold()).strip()


def identity_key(full_name: str, mother_name: Optional[str]) -> Optional[str]:
    """Uniqueness key for the (full name, mother's name) pair.

    Returns None when the mother's name is absent or blank; such people are
    not subject to the pair uniqueness rule.
    """
    if not mother_name or not mother_name.strip():
        return None
    return f"{normalize_name(full_name)}|{normalize_name(mother_name)}"


def normalize_cpf(cpf: Optional[str]) -> Optional[str]:
    """Strip CPF punctuation so formatted and bare values collide."""
    if cpf is None:
        return None
    digits = re.sub(r"\D", "", cpf)
    return digits or None


class PersonRecord(BaseModel):
    """Identity record returned by services and search."""
    id: int = Field(..., description="Person identifier")
    full_name: str = Field(..., description="Full name")
    nickname: Optional[str] = Field(None, description="Nickname")
    cpf: Optional[str] = Field(None, description="Taxpayer identifier (digits only)")
    rg: Optional[str] = Field(None, description="Document identifier")
    voter_id: Optional[str] = Field(None, description="Voter registration")
    mother_name: Optional[str] = Field(None, description="Mother's name")
    father_name: Optional[str] = Field(None, description="Father's name")
    address_primary: Optional[str] = Field(None, description="Primary address")
    address_secondary: Optional[str] = Field(None, description="Secondary address")
    latitude: Optional[float] = Field(None, description="Latitude")
    longitude: Optional[float] = Field(None, description="Longitude")
    warrant_status: Optional[str] = Field(None, description="Warrant status")
    warrant_file_url: Optional[str] = Field(None, description="Warrant document URL")
    notes: Optional[str] = Field(None, description="Free-text notes")
    is_confidential: bool = Field(False, description="Restricted to privileged roles")
    created_by: Optional[int] = Field(None, description="Creating user")
    updated_by: Optional[int] = Field(None, description="Last updating user")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)
