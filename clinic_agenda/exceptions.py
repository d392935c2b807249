from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from typing import List, Optional, Tuple


class SchedulingError(Exception):
    """Base class for every recoverable agenda failure"""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidRangeError(SchedulingError):
    def __init__(self, start, end):
        super().__init__(f"Appointment end ({end}) must be after its start ({start})")
        self.start = start
        self.end = end


class TimeOutOfRangeError(SchedulingError):
    def __init__(self, value, low, high, unit: str = "hour"):
        super().__init__(f"{unit} {value} is outside the visible window [{low}, {high}]")
        self.value = value
        self.low = low
        self.high = high


class UnresolvedProfessionalError(SchedulingError):
    status_code = 404

    def __init__(self, professional_id: Optional[str]):
        super().__init__(f"Professional '{professional_id}' not found")
        self.professional_id = professional_id


class ValidationError(SchedulingError):
    """Aggregate of missing or invalid draft fields"""

    status_code = 422

    def __init__(self, issues: List[Tuple[str, str]]):
        super().__init__("; ".join(f"{field}: {message}" for field, message in issues))
        self.issues = list(issues)


class AppointmentNotFoundError(SchedulingError):
    status_code = 404

    def __init__(self, appointment_id: str):
        super().__init__(f"Appointment '{appointment_id}' not found")
        self.appointment_id = appointment_id


class IllegalStateError(SchedulingError):
    status_code = 409


class InvalidStatusTransitionError(SchedulingError):
    status_code = 409


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

def create_success_response(data) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None
    }

async def scheduling_exception_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    content = create_error_response(exc.detail, exc.status_code)
    if isinstance(exc, ValidationError):
        content["issues"] = [{"field": f, "message": m} for f, m in exc.issues]
    return JSONResponse(status_code=exc.status_code, content=content)

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
