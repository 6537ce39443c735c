"""
Error taxonomy

Every failure the API reports is one of these. They are HTTPExceptions so
handlers can simply raise them; main.py renders them as
{"success": false, "message": ...}.
"""

from fastapi import HTTPException


class InvalidRequest(HTTPException):
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=400, detail=detail)


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "unauthorized access"):
        super().__init__(status_code=401, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "forbidden access"):
        super().__init__(status_code=403, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class InsufficientStock(HTTPException):
    def __init__(self, detail: str = "Not enough stock"):
        super().__init__(status_code=400, detail=detail)


class InternalFailure(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=500, detail=detail)
