"""Error models for batch field mapping."""

from dataclasses import dataclass
from typing import Optional

from fieldmapper.exceptions import OracleError


@dataclass
class SupplierMappingError:
    """Record of a supplier whose mapping attempt failed."""

    supplier: str
    error: str
    error_type: str
    reason: Optional[str] = None
    raw_response: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            'supplier': self.supplier,
            'error': self.error,
            'error_type': self.error_type,
        }
        if self.reason:
            result['reason'] = self.reason
        if self.raw_response:
            result['raw_response'] = self.raw_response
        return result

    @classmethod
    def from_exception(cls, supplier: str, exc: Exception) -> 'SupplierMappingError':
        if isinstance(exc, OracleError):
            return cls(
                supplier=supplier,
                error=str(exc),
                error_type=type(exc).__name__,
                reason=exc.reason,
                raw_response=exc.raw_response,
            )
        return cls(supplier=supplier, error=str(exc), error_type=type(exc).__name__)
