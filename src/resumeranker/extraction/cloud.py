"""Fallback extraction backend: Adobe PDF Services Extract API."""

from __future__ import annotations

import io
import json
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from adobe.pdfservices.operation.auth.service_principal_credentials import ServicePrincipalCredentials
from adobe.pdfservices.operation.exception.exceptions import (
    SdkException,
    ServiceApiException,
    ServiceUsageException,
)
from adobe.pdfservices.operation.pdf_services import PDFServices
from adobe.pdfservices.operation.pdf_services_media_type import PDFServicesMediaType
from adobe.pdfservices.operation.pdfjobs.jobs.extract_pdf_job import ExtractPDFJob
from adobe.pdfservices.operation.pdfjobs.params.extract_pdf.extract_element_type import ExtractElementType
from adobe.pdfservices.operation.pdfjobs.params.extract_pdf.extract_pdf_params import ExtractPDFParams
from adobe.pdfservices.operation.pdfjobs.result.extract_pdf_result import ExtractPDFResult

from ..errors import ExtractionError, ExtractionFailure

STRUCTURED_DATA_MEMBER = "structuredData.json"

_SERVICE_ERRORS = (ServiceApiException, ServiceUsageException, SdkException, OSError)


@dataclass
class CloudExtractionConfig:
    """Adobe PDF Services credentials."""

    client_id: str | None = None
    client_secret: str | None = None


class CloudExtractionBackend:
    """Run an Extract PDF job and read back the text elements.

    The job result is a ZIP archive holding ``structuredData.json``; a bare
    JSON document is accepted as well. Text is the newline-joined ``Text``
    value of every element that has one.
    """

    name = "cloud"

    def __init__(self, *, config: CloudExtractionConfig | None = None) -> None:
        self._config = config or CloudExtractionConfig()
        self._logger = structlog.get_logger(__name__)

    @property
    def configured(self) -> bool:
        return bool(self._config.client_id and self._config.client_secret)

    def extract(self, path: Path, display_name: str) -> str:
        if not self.configured:
            raise ExtractionError(
                ExtractionFailure.BACKEND_UNAVAILABLE,
                "PDF Services client credentials are not configured",
            )
        path = Path(path)
        try:
            payload = path.read_bytes()
        except OSError as exc:
            raise ExtractionError(
                ExtractionFailure.CORRUPT_SOURCE,
                f"Cannot read {display_name}: {exc}",
            ) from exc

        body = self._run_job(payload, display_name)
        document = self._decode(body, display_name)
        text = "\n".join(
            str(element["Text"])
            for element in document.get("elements") or []
            if isinstance(element, dict) and element.get("Text")
        )
        self._logger.info("extraction.cloud_done", filename=display_name, chars=len(text))
        return text.strip()

    def _run_job(self, payload: bytes, display_name: str) -> bytes:
        cfg = self._config
        try:
            credentials = ServicePrincipalCredentials(
                client_id=cfg.client_id,
                client_secret=cfg.client_secret,
            )
            pdf_services = PDFServices(credentials=credentials)
            input_asset = pdf_services.upload(input_stream=payload, mime_type=PDFServicesMediaType.PDF)
            job = ExtractPDFJob(
                input_asset=input_asset,
                extract_pdf_params=ExtractPDFParams(elements_to_extract=[ExtractElementType.TEXT]),
            )
            location = pdf_services.submit(job)
            self._logger.debug("extraction.cloud_submitted", filename=display_name)
            response = pdf_services.get_job_result(location, ExtractPDFResult)
            result_asset = response.get_result().get_resource()
            return pdf_services.get_content(result_asset).get_input_stream()
        except _SERVICE_ERRORS as exc:
            raise ExtractionError(
                ExtractionFailure.BACKEND_UNAVAILABLE,
                f"PDF Services extraction failed for {display_name}: {exc}",
            ) from exc

    @staticmethod
    def _decode(body: bytes, display_name: str) -> dict[str, Any]:
        try:
            if body[:2] == b"PK":
                with zipfile.ZipFile(io.BytesIO(body)) as archive:
                    if STRUCTURED_DATA_MEMBER not in archive.namelist():
                        raise ExtractionError(
                            ExtractionFailure.CORRUPT_SOURCE,
                            f"{STRUCTURED_DATA_MEMBER} not found in extraction result for {display_name}",
                        )
                    body = archive.read(STRUCTURED_DATA_MEMBER)
            document = json.loads(body.decode("utf-8"))
        except (zipfile.BadZipFile, UnicodeDecodeError, ValueError, RecursionError) as exc:
            raise ExtractionError(
                ExtractionFailure.CORRUPT_SOURCE,
                f"Unreadable extraction result for {display_name}: {exc}",
            ) from exc
        if not isinstance(document, dict):
            raise ExtractionError(
                ExtractionFailure.CORRUPT_SOURCE,
                f"Unexpected extraction result shape for {display_name}",
            )
        return document


__all__ = ["CloudExtractionBackend", "CloudExtractionConfig"]
