"""Text extraction from report images"""
import logging
import time
from abc import ABC, abstractmethod

from .exceptions import ExtractionError
from config import MOCK_EXTRACTION_DELAY

logger = logging.getLogger(__name__)


SAMPLE_REPORT_TEXT = """
Tip Distribution Report

Store Number: 69600
Time Period: 2025-01-13 - 2025-01-19
Executed By: SM12345
Executed On: 2025-01-20 08:15:23

Data Disclaimer: This report contains confidential information.

Home Store    Partner Name              Partner Number    Total Tippable Hours
69600         Ailuogwemhe, Jodie O      US37008498       18.48
69600         Anderson, Sarah M         US36955947       22.75
69600         Chen, Michael K           US37012334       15.25
69600         Davis, Jennifer L         US36998765       31.50
69600         Martinez, Carlos R        US37015678       19.00

Total Tippable Hours: 107.98
"""


class TextExtractor(ABC):
    """Turns a report image into raw text."""

    @abstractmethod
    def extract_text(self, image_data: bytes, content_type: str) -> str:
        """
        Extract the text of a report image.

        Args:
            image_data: Raw image bytes
            content_type: MIME type of the image

        Returns:
            Raw text, line-oriented as printed on the report

        Raises:
            ExtractionError: If the text could not be extracted
        """


class MockVisionClient(TextExtractor):
    """
    Stand-in for the vision service.

    Returns the same sample report for every image after a short delay,
    which is enough to drive the whole pipeline end to end.
    """

    def __init__(self, text: str = SAMPLE_REPORT_TEXT, delay: float = MOCK_EXTRACTION_DELAY):
        self.text = text
        self.delay = delay

    def extract_text(self, image_data: bytes, content_type: str) -> str:
        if not image_data:
            raise ExtractionError("Image is empty", {'content_type': content_type})

        logger.info("Extracting text from %d byte %s image", len(image_data), content_type)
        if self.delay:
            time.sleep(self.delay)
        return self.text
