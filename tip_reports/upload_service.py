"""Upload handling: image in, parsed and stored report out"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from .exceptions import ExtractionError, InputRejectedError, PersistenceError
from .models import Report
from .report_parser import ReportParser
from .report_storage import ReportStorage
from .vision_client import TextExtractor

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """A file received from the client"""
    name: str
    content_type: str
    data: bytes


@dataclass
class ParsedUpload:
    report: Report
    report_id: str


@dataclass
class UploadResponse:
    """Status code plus JSON-ready body, as returned to the client"""
    status: int
    body: Dict[str, Any] = field(default_factory=dict)
    parsed: Optional[ParsedUpload] = None

    @property
    def ok(self) -> bool:
        return self.status == 200


def report_to_payload(report: Report) -> Dict[str, Any]:
    payload = asdict(report)
    payload['rows'] = [
        {**asdict(row), 'uncertain_fields': sorted(row.uncertain_fields)}
        for row in report.rows
    ]
    return payload


class ReportUploadService:
    """
    Turns an uploaded report image into a saved Report.

    Errors:
    - missing file / empty file / non-image content type -> InputRejectedError (400)
    - extraction service failure                        -> ExtractionError (500)
    - storage failure                                   -> PersistenceError (500)

    Incomplete text is not an error: whatever the parser finds is returned
    for review.
    """

    def __init__(self, extractor: TextExtractor, storage: ReportStorage,
                 parser: Optional[ReportParser] = None):
        self.extractor = extractor
        self.storage = storage
        self.parser = parser or ReportParser()

    def validate(self, upload: Optional[UploadedFile]) -> UploadedFile:
        if upload is None or not upload.data:
            raise InputRejectedError("No file provided")
        if not (upload.content_type or '').startswith('image/'):
            raise InputRejectedError("File must be an image", {'content_type': upload.content_type})
        return upload

    def ingest(self, upload: Optional[UploadedFile]) -> ParsedUpload:
        """
        Validate, extract, parse and store an uploaded report image.

        Args:
            upload: The uploaded file (None when the request carried no file)

        Returns:
            ParsedUpload with the report and its storage id
        """
        upload = self.validate(upload)

        try:
            text = self.extractor.extract_text(upload.data, upload.content_type)
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError("Text extraction failed", {'file': upload.name}) from e

        report = self.parser.parse(text)
        report_id = self.storage.add_report(report)
        return ParsedUpload(report=report, report_id=report_id)

    def handle(self, upload: Optional[UploadedFile]) -> UploadResponse:
        """
        Request boundary: run ingest() and map the outcome to a response.

        Server-side failures are logged in full but only a generic message
        reaches the client.
        """
        try:
            parsed = self.ingest(upload)
        except InputRejectedError as e:
            return UploadResponse(status=400, body={'error': e.message})
        except PersistenceError:
            logger.exception("Failed to save report")
            return UploadResponse(status=500, body={'error': 'Failed to save report'})
        except Exception:
            logger.exception("Failed to parse report")
            return UploadResponse(status=500, body={'error': 'Failed to parse report'})

        return UploadResponse(
            status=200,
            body={'report': {**report_to_payload(parsed.report), 'id': parsed.report_id}},
            parsed=parsed
        )
