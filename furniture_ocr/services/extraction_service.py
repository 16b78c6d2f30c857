# File: furniture_ocr/services/extraction_service.py

"""
Document extraction.

Only a fixed sample extractor exists today: it returns constant content for
any image, in the same shape a real engine would have to produce.
"""

import logging

from furniture_ocr.core.errors import ExtractionError, InvalidArgumentError
from furniture_ocr.schemas.extraction import ExtractionResult

logger = logging.getLogger(__name__)


class Extractor:
    """Turns a stored image into an ``ExtractionResult``."""

    def extract(self, image_url: str) -> ExtractionResult:
        raise NotImplementedError


class SampleExtractor(Extractor):
    SAMPLE = ExtractionResult(
        full_text="Simulated text extracted by OCR",
        materials=["Wood", "Screws"],
        measurements=["50cm", "20cm"],
        instructions=["Cut the wood", "Join the pieces"],
    )

    def extract(self, image_url: str) -> ExtractionResult:
        return self.SAMPLE.model_copy(deep=True)


_extractor: Extractor = SampleExtractor()


def get_extractor() -> Extractor:
    return _extractor


def process_image(image_url: str | None, extractor: Extractor | None = None) -> ExtractionResult:
    if not image_url:
        raise InvalidArgumentError("Missing imageUrl")

    extractor = extractor or get_extractor()
    try:
        result = extractor.extract(image_url)
    except ExtractionError:
        raise
    except Exception as exc:
        logger.exception("Extraction failed for %s", image_url)
        raise ExtractionError("Failed to extract text from image") from exc

    logger.info("OCR result for %s: %s", image_url, result.model_dump())
    return result
