from urllib.parse import quote

from pydantic import BaseModel, Field

from sheetport.excel.formats import FileFormat


def content_disposition(filename: str) -> str:
    """Attachment disposition; non-ASCII names also get an RFC 5987 form."""
    try:
        filename.encode("ascii")
    except UnicodeEncodeError:
        fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return (
            f'attachment; filename="{fallback}"; '
            f"filename*=UTF-8''{quote(filename)}"
        )
    return f'attachment; filename="{filename}"'


class ExportPayload(BaseModel):
    """A serialized workbook ready to be sent as a download."""

    filename: str
    format: FileFormat
    content: bytes = Field(repr=False)
    rows: int = 0

    @property
    def content_type(self) -> str:
        return self.format.content_type

    @property
    def headers(self) -> dict[str, str]:
        return {
            "content-description": "File Transfer",
            "content-type": self.content_type,
            "content-disposition": content_disposition(self.filename),
            "content-transfer-encoding": "binary",
            "pragma": "public",
        }
