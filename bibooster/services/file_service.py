"""
B.I Booster Backend — File Storage Service
============================================

What:  Validates and stores uploaded files: delivered website templates,
       lesson videos and lesson materials.
How:   Per-kind extension, size and MIME checks, then an async write below
       STORAGE_ROOT. Stored files are served back by GET /api/files/{path}.
Who:   AdminService (template delivery) and CourseService (media uploads).

Storage layout:
    storage/
    ├── templates/{user_id}/{order_id}/{filename}
    ├── videos/{timestamp}.{ext}
    └── materials/{timestamp}.{ext}

Validation order (cheapest first):
    1. Extension check against the kind's allowed list
    2. Size check (Content-Length, then actual byte count)
    3. MIME check via libmagic on the file header bytes
"""

import logging
import os
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Optional, Tuple

import aiofiles

from bibooster.config import settings
from bibooster.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

KIND_TEMPLATE = "template"
KIND_VIDEO = "video"
KIND_MATERIAL = "material"

_ZIP_MIMES = {"application/zip", "application/x-zip-compressed"}
_WORD_MIMES = {
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/CDFV2",
    "application/x-ole-storage",
}


@dataclass(frozen=True)
class UploadRule:
    extensions: FrozenSet[str]
    mime_types: FrozenSet[str]
    mime_prefix: Optional[str] = None
    large: bool = False

    def accepts_mime(self, mime_type: str) -> bool:
        if mime_type in self.mime_types:
            return True
        return bool(self.mime_prefix and mime_type.startswith(self.mime_prefix))


# Office Open XML files (.docx, .pptx) are zip containers; older libmagic
# builds report them as application/zip.
UPLOAD_RULES = {
    KIND_TEMPLATE: UploadRule(
        extensions=frozenset({".zip", ".rar", ".pdf", ".doc", ".docx"}),
        mime_types=frozenset(
            _ZIP_MIMES
            | _WORD_MIMES
            | {
                "application/pdf",
                "application/vnd.rar",
                "application/x-rar",
                "application/x-rar-compressed",
            }
        ),
    ),
    KIND_VIDEO: UploadRule(
        extensions=frozenset({".mp4", ".webm", ".mov", ".mkv"}),
        mime_types=frozenset(),
        mime_prefix="video/",
        large=True,
    ),
    KIND_MATERIAL: UploadRule(
        extensions=frozenset({".pdf", ".doc", ".docx", ".ppt", ".pptx"}),
        mime_types=frozenset(
            _ZIP_MIMES
            | _WORD_MIMES
            | {
                "application/pdf",
                "application/vnd.ms-powerpoint",
                "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            }
        ),
    ),
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    """
    Reduce a client filename to a safe single path component.

    "../../My Template (v2).zip" → "My_Template_v2_.zip"
    """
    name = Path(filename.replace("\\", "/")).name
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._")
    return name[:200] or f"upload-{uuid.uuid4().hex[:8]}"


class FileService:
    """
    Manages upload validation, storage and lookup of stored files.

    Lifecycle of an uploaded file:
        1. Route reads the multipart upload → store_template() / store_media()
        2. validate() runs extension, size and MIME checks for the kind
        3. File is written below storage_root with aiofiles
        4. Relative path and public URL go back to the caller
        5. Caller's DB write fails → cleanup_file() removes the orphan
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def _rule(self, kind: str) -> UploadRule:
        try:
            return UPLOAD_RULES[kind]
        except KeyError:
            raise ValidationError(
                message=f"Unknown upload type '{kind}'",
                field="kind",
                context={"allowed": sorted(UPLOAD_RULES)},
            )

    def max_size_for(self, kind: str) -> int:
        return settings.max_video_size if self._rule(kind).large else settings.max_file_size

    def validate_extension(self, filename: str, kind: str) -> str:
        """
        Check the file extension against the kind's allowed list.

        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if extension is not allowed.
        """
        rule = self._rule(kind)
        ext = Path(filename or "").suffix.lower()
        if ext not in rule.extensions:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported for {kind} uploads. "
                    f"Allowed types: {', '.join(sorted(rule.extensions))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(rule.extensions)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int, kind: str) -> None:
        """
        Reject empty files and files over the kind's size limit.

        content_length is the size the multipart parser reported for the
        file part (not the whole request). It may be missing, so the actual
        byte count is always checked too.
        """
        limit = self.max_size_for(kind)
        max_mb = limit / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="The uploaded file is empty.", field="file")

        if content_length and content_length > limit:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > limit:
            raise ValidationError(
                message=(
                    f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds "
                    f"maximum of {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes, filename: str, kind: str) -> str:
        """
        Check the real content type from the file's magic bytes.

        Returns: Detected MIME type string.
        Raises:
            ValidationError:  content does not match the kind
            FileStorageError: libmagic failed to inspect the buffer
        """
        import magic

        rule = self._rule(kind)
        try:
            mime_type = magic.from_buffer(file_content[:8192], mime=True)
        except Exception as e:
            logger.error("MIME type detection failed for %s: %s", filename, str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if not rule.accepts_mime(mime_type):
            raise ValidationError(
                message=f"File content type '{mime_type}' does not match a {kind} file.",
                field="file",
                context={"detected_mime": mime_type, "filename": filename},
            )
        return mime_type

    def validate(
        self,
        filename: str,
        content: bytes,
        kind: str,
        content_length: Optional[int] = None,
    ) -> str:
        """Run all checks for `kind` and return the normalized extension."""
        ext = self.validate_extension(filename, kind)
        self.validate_size(content_length, len(content), kind)
        self.validate_mime_type(content, filename, kind)
        return ext

    # ── Storage ───────────────────────────────────────────────────────────

    def _media_relative_path(self, kind: str, extension: str) -> str:
        # {kind}s/{timestamp}{ext}; bump the millisecond stamp on collision
        stamp = int(time.time() * 1000)
        while True:
            relative_path = f"{kind}s/{stamp}{extension}"
            if not (self.storage_root / relative_path).exists():
                return relative_path
            stamp += 1

    async def store_file(self, content: bytes, relative_path: str) -> Tuple[str, str]:
        """
        Write validated content to storage_root/relative_path.

        Returns: Tuple of (absolute_path, relative_path).
        Raises:  FileStorageError if directory creation or file write fails.
        """
        absolute_path = self.storage_root / relative_path
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
            logger.info("File stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save the uploaded file. Please try again.",
                context={"path": relative_path, "os_error": str(e)},
            )

    async def store_template(
        self,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """Validate a delivered template and store it under templates/{user}/{order}/."""
        self.validate(filename, content, KIND_TEMPLATE, content_length)
        relative_path = f"templates/{user_id}/{order_id}/{sanitize_filename(filename)}"
        return await self.store_file(content, relative_path)

    async def store_media(
        self,
        kind: str,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """Validate a lesson video or material and store it under {kind}s/."""
        if kind not in (KIND_VIDEO, KIND_MATERIAL):
            raise ValidationError(
                message=f"Unknown media type '{kind}'. Use 'video' or 'material'.",
                field="kind",
            )
        ext = self.validate(filename, content, kind, content_length)
        return await self.store_file(content, self._media_relative_path(kind, ext))

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored file after the database write that referenced it failed.

        Best-effort: a failed delete is logged, never raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    # ── Lookup ────────────────────────────────────────────────────────────

    def public_url(self, relative_path: str) -> str:
        return f"{settings.public_base_url}/api/files/{relative_path}"

    def resolve_stored_file(self, relative_path: str) -> Path:
        """
        Map a request path to a file below storage_root.

        Raises:
            ValidationError: the path escapes storage_root (../ tricks)
            NotFoundError:   nothing stored there
        """
        full_path = (self.storage_root / relative_path).resolve()
        root = str(self.storage_root)
        if not str(full_path).startswith(root + os.sep):
            raise ValidationError(message="Invalid file path", field="path")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return full_path


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
