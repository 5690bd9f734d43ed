"""
Pydantic schemas for catalog entries, model output and ledger records.
Defines the strict extraction schema the LLM output must satisfy.
"""
import math
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError


class Account(BaseModel):
    """Ledger account as returned by the ledger store."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    closed: bool = False


class Category(BaseModel):
    """Ledger category as returned by the ledger store."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: Optional[str] = None
    hidden: bool = False


class Catalog(BaseModel):
    """Active accounts and visible categories available for matching."""
    model_config = ConfigDict(frozen=True)

    accounts: List[Account] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)


class ExtractedTransaction(BaseModel):
    """
    Structured output the LLM must return.
    Every field is either null or exactly the documented scalar type; no coercion.
    """
    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    amount: Optional[Union[int, float]] = Field(...)
    description: Optional[str] = Field(...)
    date: Optional[str] = Field(...)
    account_label: Optional[str] = Field(..., alias="account")
    category_label: Optional[str] = Field(..., alias="category")

    @field_validator("amount", mode="before")
    @classmethod
    def reject_non_numeric_amount(cls, v):
        """JSON true/false and non-finite values must not pass as a number."""
        if isinstance(v, bool):
            raise ValueError("amount must be number or null")
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("amount must be a finite number")
        return v

    @property
    def is_transaction(self) -> bool:
        return self.amount is not None

    def to_output(self) -> Dict[str, Any]:
        """Serialize using the model's own key names."""
        return self.model_dump(by_alias=True)


class ResolvedTransaction(BaseModel):
    """Ledger-ready transaction. Constructed once and never mutated."""
    model_config = ConfigDict(frozen=True)

    account_id: str
    date: str
    amount_minor_units: int
    payee_name: Optional[str] = None
    category_id: Optional[str] = None
    notes: str = ""
    idempotency_key: str = Field(..., min_length=32, max_length=32)
    cleared: bool = False

    def to_import_record(self, id_prefix: str = "sms") -> Dict[str, Any]:
        """
        Build the record submitted to the ledger import call.

        Args:
            id_prefix: Namespace prepended to the idempotency key

        Returns:
            Import record dictionary
        """
        return {
            "account": self.account_id,
            "date": self.date,
            "amount": self.amount_minor_units,
            "payee_name": self.payee_name,
            "category": self.category_id,
            "notes": self.notes,
            "imported_id": f"{id_prefix}:{self.idempotency_key}",
            "cleared": self.cleared,
        }


def validate_extraction(payload: Any) -> ExtractedTransaction:
    """
    Validate parsed model output against the extraction schema.

    Args:
        payload: Value recovered from model text

    Returns:
        ExtractedTransaction

    Raises:
        ValidationError: If the payload is not an object or any field has the wrong type
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            "LLM output is not an object",
            details={"type": type(payload).__name__}
        )

    try:
        return ExtractedTransaction.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        first = errors[0] if errors else {"field": "?", "message": str(e)}
        raise ValidationError(
            f"LLM output failed validation: {first['field']}: {first['message']}",
            details={"errors": errors}
        )
