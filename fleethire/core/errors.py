"""Domain-edge exceptions and lookup helpers"""
from fastapi import HTTPException
from typing import List, Optional


class QuoteValidationError(Exception):
    """Raised when a draft is not complete enough to be previewed or sent."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class CatalogUnavailableError(Exception):
    pass


class SubmissionError(Exception):
    pass


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[str] = None) -> None:

    if not item:
        if resource_id:
            raise HTTPException(
                status_code=404,
                detail=f"{resource_name} with id {resource_id} not found"
            )
        raise HTTPException(status_code=404, detail=f"{resource_name} not found")
