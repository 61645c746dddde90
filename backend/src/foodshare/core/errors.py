"""Error taxonomy raised by the service layer.

Routers never build error responses themselves; the handler registered in
``create_app`` turns any ``FoodShareError`` into ``{"error", "detail"}`` with
the class' status code.
"""
from __future__ import annotations


class FoodShareError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    default_detail: str = "Unexpected error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInput(FoodShareError):
    status_code = 400
    code = "invalid_input"
    default_detail = "Invalid input"


class NotFound(FoodShareError):
    status_code = 404
    code = "not_found"
    default_detail = "Not found"


class ClaimConflict(FoodShareError):
    status_code = 409
    code = "claim_conflict"
    default_detail = "Listing cannot be claimed"


class AlreadyClaimed(ClaimConflict):
    code = "already_claimed"
    default_detail = "This food has already been claimed"


class RaceLost(ClaimConflict):
    code = "race_lost"
    default_detail = "Food listing was claimed by someone else"


class ParseError(FoodShareError):
    status_code = 422
    code = "parse_error"
    default_detail = "AI response could not be parsed"


class NoIngredientsDetected(ParseError):
    code = "no_ingredients_detected"
    default_detail = "No ingredients detected in the image"


class ExternalServiceError(FoodShareError):
    status_code = 502
    code = "external_service_error"
    default_detail = "External AI service failed"


class PersistenceError(FoodShareError):
    status_code = 500
    code = "persistence_error"
    default_detail = "Database error"
