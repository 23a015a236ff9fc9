"""Text extraction from uploaded study material (PDF, DOCX, PPTX, plain text)."""
import hashlib
import io
import logging
from datetime import datetime
from typing import Any, Dict, List

import pdfplumber
import PyPDF2
from docx import Document
from pptx import Presentation

from .config import config
from .errors import UnsupportedFileError

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = (".pdf",)
DOCX_EXTENSIONS = (".docx",)
PPTX_EXTENSIONS = (".pptx",)
TEXT_EXTENSIONS = (".txt", ".md", ".csv", ".json", ".xml", ".log")

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


class FileProcessor:
    def __init__(self):
        self.processed_files: Dict[str, Dict[str, Any]] = {}  # In-memory cache
        self._user_files: Dict[str, List[str]] = {}

    def _generate_file_id(self, filename: str, content: bytes) -> str:
        """Generate unique ID for file."""
        content_hash = hashlib.md5(content).hexdigest()
        return f"{filename}_{content_hash[:8]}"

    def detect_type(self, filename: str, content_type: str = "") -> str:
        filename_lower = filename.lower()
        content_type = content_type or ""

        if filename_lower.endswith(PDF_EXTENSIONS) or "pdf" in content_type:
            return "pdf"
        if filename_lower.endswith(DOCX_EXTENSIONS) or content_type == DOCX_MIME:
            return "docx"
        if filename_lower.endswith(PPTX_EXTENSIONS) or content_type == PPTX_MIME:
            return "pptx"
        if filename_lower.endswith(TEXT_EXTENSIONS) or content_type.startswith("text/"):
            return "text"
        raise UnsupportedFileError(f"Unsupported file type: {filename}")

    def extract_pdf(self, file_content: bytes) -> Dict[str, Any]:
        """pdfplumber first (better for tables/structure), PyPDF2 if it finds nothing."""
        pdf_file = io.BytesIO(file_content)
        pages = []

        with pdfplumber.open(pdf_file) as pdf:
            for page in pdf.pages:
                pages.append((page.extract_text() or "").strip())

        if not any(pages):
            pdf_file.seek(0)
            reader = PyPDF2.PdfReader(pdf_file)
            pages = [(page.extract_text() or "").strip() for page in reader.pages]

        return {"content": "\n\n".join(page for page in pages if page), "page_count": len(pages)}

    def extract_docx(self, file_content: bytes) -> Dict[str, Any]:
        document = Document(io.BytesIO(file_content))
        paragraphs = [paragraph.text.strip() for paragraph in document.paragraphs if paragraph.text.strip()]
        return {"content": "\n".join(paragraphs), "page_count": None}

    def extract_pptx(self, file_content: bytes) -> Dict[str, Any]:
        presentation = Presentation(io.BytesIO(file_content))
        slides = []
        for number, slide in enumerate(presentation.slides, 1):
            texts = [
                shape.text_frame.text.strip()
                for shape in slide.shapes
                if shape.has_text_frame and shape.text_frame.text.strip()
            ]
            if texts:
                slides.append(f"Slide {number}: " + " ".join(texts))
        return {"content": "\n".join(slides), "page_count": len(presentation.slides)}

    def extract_text(self, file_content: bytes) -> Dict[str, Any]:
        # Try different encodings
        text_content = None
        for encoding in ("utf-8", "utf-16", "cp1252"):
            try:
                text_content = file_content.decode(encoding)
                break
            except UnicodeDecodeError:
                continue

        if text_content is None:
            text_content = file_content.decode("utf-8", errors="ignore")
        return {"content": text_content.strip(), "page_count": None}

    def process_file(self, file_content: bytes, filename: str, content_type: str = "",
                     user_id: str = None) -> Dict[str, Any]:
        """Extract text from an upload.

        Raises ``UnsupportedFileError`` for unknown types, oversized files and
        files that cannot be parsed.
        """
        max_bytes = config.max_upload_mb * 1024 * 1024
        if len(file_content) > max_bytes:
            raise UnsupportedFileError(f"{filename} is larger than {config.max_upload_mb} MB")

        file_type = self.detect_type(filename, content_type)
        file_id = self._generate_file_id(filename, file_content)

        result = self.processed_files.get(file_id)
        if result is None:
            extractors = {
                "pdf": self.extract_pdf,
                "docx": self.extract_docx,
                "pptx": self.extract_pptx,
                "text": self.extract_text,
            }
            try:
                extracted = extractors[file_type](file_content)
            except Exception as e:
                logger.error(f"{file_type} processing error for {filename}: {e}")
                raise UnsupportedFileError(f"Could not read {filename}: {e}") from e

            result = {
                "file_id": file_id,
                "filename": filename,
                "type": file_type,
                "size": len(file_content),
                "processed_at": datetime.utcnow().isoformat(),
                **extracted,
            }
            self.processed_files[file_id] = result

        if user_id:
            files = self._user_files.setdefault(user_id, [])
            if file_id not in files:
                files.append(file_id)
        return result

    def get_file_context(self, user_id: str) -> List[Dict[str, Any]]:
        """Processed files uploaded by ``user_id``, oldest first."""
        return [self.processed_files[file_id] for file_id in self._user_files.get(user_id, [])]

    def clear_files(self, user_id: str):
        self._user_files.pop(user_id, None)

# Global instance
file_processor = FileProcessor()
