# File: zodgen/exporters.py
"""
zodgen - Schema Exporter (File-System Manager)
==============================================

Responsible for:
    1. Laying out generated modules under the output directory::

           <out>/models/<model file>.ts
           <out>/models/index.ts
           <out>/enums/<enum file>.ts
           <out>/manifest.json

    2. Writing every file atomically (write-to-temp then rename).
    3. Producing a manifest with SHA-256 checksums for reproducibility.

If a write fails mid-batch, previously written files remain intact; each
individual file is atomic.  Re-running on the same directory is safe.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from zodgen import __version__
from zodgen.collection import SchemaCollection
from zodgen.utils import Timer, clean_directory, count_lines, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.exporters")

MODELS_DIRECTORY: str = "models"
ENUMS_DIRECTORY: str = "enums"
MANIFEST_FILE_NAME: str = "manifest.json"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(slots=True)
class ExportManifest:
    """Every exported file with its checksum; serialisable to JSON."""

    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float


def collection_files(collection: SchemaCollection) -> Dict[str, str]:
    """Relative path → content for every module of ``collection``."""
    files: Dict[str, str] = {}
    for name in collection.model_names:
        module = collection.schemas[name].module
        files[f"{MODELS_DIRECTORY}/{module.filename}"] = module.content
    if collection.index_module is not None:
        index = collection.index_module
        files[f"{MODELS_DIRECTORY}/{index.filename}"] = index.content
    for name in sorted(collection.enum_modules):
        enum_module = collection.enum_modules[name]
        files[f"{ENUMS_DIRECTORY}/{enum_module.filename}"] = enum_module.content
    return files


# ---------------------------------------------------------------------------
# SchemaExporter class
# ---------------------------------------------------------------------------


class SchemaExporter:
    """
    Writes generated modules to the filesystem.

    Usage::

        exporter = SchemaExporter(Path("./generated"))
        result = exporter.export(collection_files(collection))
        print(result.manifest.to_json())

    Not thread-safe; use one exporter per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        clean_before_export: bool = False,
        atomic_writes: bool = True,
        generate_manifest: bool = True,
    ) -> None:
        self._output_dir: Path = Path(output_dir).resolve()
        self._clean_before_export: bool = clean_before_export
        self._atomic_writes: bool = atomic_writes
        self._generate_manifest: bool = generate_manifest

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._file_records: List[FileRecord] = []

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def export(self, generated_files: Mapping[str, str]) -> ExportResult:
        """
        Write ``generated_files`` (relative path → content) under the output root.

        Never raises; failures are collected in ``ExportResult.errors``.
        """
        self._errors = []
        self._warnings = []
        self._file_records = []

        with Timer("export") as timer:
            try:
                if self._clean_before_export:
                    logger.info("Cleaning output directory: %s", self._output_dir)
                    clean_directory(self._output_dir)
                self._write_generated_files(generated_files)
                if self._generate_manifest:
                    self._write_manifest_file()
            except OSError as exc:
                error_msg: str = f"Fatal export error: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        manifest: ExportManifest = self._build_manifest()
        result: ExportResult = ExportResult(
            success=not self._errors,
            manifest=manifest,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

        if result.success:
            logger.info(
                "Export completed successfully: %d files, %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.", len(self._errors), timer.elapsed
            )
        return result

    # -- Internal: file writing ------------------------------------------------

    def _write_generated_files(self, generated_files: Mapping[str, str]) -> None:
        for rel_path in sorted(generated_files):
            try:
                record: FileRecord = self._write_single_file(rel_path, generated_files[rel_path])
            except OSError as exc:
                error_msg: str = f"Failed to write {rel_path}: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg)
                continue
            self._file_records.append(record)
        logger.info("Wrote %d generated files to %s.", len(self._file_records), self._output_dir)

    def _write_single_file(self, rel_path: str, content: str) -> FileRecord:
        full_path: Path = self._output_dir / rel_path
        size_bytes: int = write_file(full_path, content, atomic=self._atomic_writes)
        line_count: int = count_lines(content)
        logger.debug("Wrote file: %s (%d bytes, %d lines).", rel_path, size_bytes, line_count)
        return FileRecord(
            relative_path=rel_path,
            size_bytes=size_bytes,
            line_count=line_count,
            sha256=sha256_hex(content),
        )

    # -- Internal: manifest ----------------------------------------------------

    def _build_manifest(self) -> ExportManifest:
        return ExportManifest(
            generator_version=__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._output_dir),
            total_files=len(self._file_records),
            total_bytes=sum(r.size_bytes for r in self._file_records),
            total_lines=sum(r.line_count for r in self._file_records),
            files=list(self._file_records),
        )

    def _write_manifest_file(self) -> None:
        manifest: ExportManifest = self._build_manifest()
        try:
            write_file(
                self._output_dir / MANIFEST_FILE_NAME,
                manifest.to_json(),
                atomic=self._atomic_writes,
            )
        except OSError as exc:
            self._warnings.append(f"Could not write manifest: {exc}")
            logger.warning("Failed to write manifest: %s", exc)
            return
        logger.debug("Wrote manifest to %s.", self._output_dir / MANIFEST_FILE_NAME)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ENUMS_DIRECTORY",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
    "MANIFEST_FILE_NAME",
    "MODELS_DIRECTORY",
    "SchemaExporter",
    "collection_files",
]

logger.debug("zodgen.exporters loaded.")
