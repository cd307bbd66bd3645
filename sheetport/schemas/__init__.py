from sheetport.schemas.common import ApiResponse
from sheetport.schemas.transfer import ExportPayload

__all__ = ["ApiResponse", "ExportPayload"]
