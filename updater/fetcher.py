"""
Archive fetcher: download a ZIP archive or a single workbook to a scratch directory.

The fetcher performs a single GET per call. It does not retry: a failed
download fails the run, and the scheduler repeats the whole run later.
"""

import asyncio
import io
import zipfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

import httpx

from core.config import settings
from core.exceptions import ArchiveEntryNotFoundError, FetchError, LocalIOError
import logging

logger = logging.getLogger(__name__)

RESPONSE_BODY_LIMIT = 500


@dataclass
class ExtractedArchive:
    """Files extracted from one downloaded archive."""

    directory: Path
    files: List[str] = field(default_factory=list)
    selected: str = ""

    @property
    def path(self) -> Path:
        """Local path of the selected file."""
        return self.directory / self.selected


def matches_target(entry_name: str, target_file: str) -> bool:
    """
    An entry matches when its full name, base name, or base name without
    extension equals the target.
    """
    entry = PurePosixPath(entry_name)
    target = target_file.strip()
    return target in (entry_name, entry.name, entry.stem)


class ArchiveFetcher:
    """
    Download and extract ZIP archives.

    Attributes:
        client: Optional shared ``httpx.AsyncClient``; one is created per
            fetch when omitted
        timeout: Request timeout in seconds
        require_target: Refuse to guess when no target file is named
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        require_target: Optional[bool] = None
    ):
        self.client = client
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.require_target = (
            require_target if require_target is not None else settings.UPDATER_REQUIRE_TARGET_FILE
        )

    async def download(self, url: str) -> bytes:
        """
        Download the response body into memory.

        Raises:
            FetchError: On a non-2xx response or a network failure
        """
        logger.info(f"Downloading {url}")

        try:
            if self.client is not None:
                response = await self.client.get(url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(
                f"Network error while downloading {url}",
                context={"url": url},
                original_exception=e
            )

        if not response.is_success:
            body = response.text[:RESPONSE_BODY_LIMIT]
            logger.error(f"Download failed: status={response.status_code} url={url}")
            raise FetchError(
                f"HTTP error! status: {response.status_code}",
                context={"url": url},
                status_code=response.status_code,
                response_body=body
            )

        logger.info(f"Downloaded {len(response.content)} bytes from {url}")
        return response.content

    def extract(
        self,
        content: bytes,
        destination: Union[str, Path],
        target_file: Optional[str] = None,
        url: Optional[str] = None
    ) -> ExtractedArchive:
        """
        Extract every file entry of a ZIP archive into ``destination``.

        Existing files of the same name are overwritten. Directory entries
        are skipped.

        Raises:
            ArchiveEntryNotFoundError: If the body is not a ZIP archive, it
                holds no files, or ``target_file`` is absent
            LocalIOError: If the files cannot be written
        """
        destination = Path(destination)
        context = {"url": url, "destination": str(destination)}

        try:
            archive = zipfile.ZipFile(io.BytesIO(content))
        except zipfile.BadZipFile as e:
            raise ArchiveEntryNotFoundError(
                "Downloaded content is not a valid ZIP archive",
                context=context,
                original_exception=e
            )

        extracted = ExtractedArchive(directory=destination)

        try:
            destination.mkdir(parents=True, exist_ok=True)
            with archive:
                for entry in archive.infolist():
                    if entry.is_dir():
                        continue
                    logger.debug(f"Found file in ZIP: {entry.filename}")
                    archive.extract(entry, destination)
                    extracted.files.append(entry.filename)
        except OSError as e:
            raise LocalIOError(
                "Failed to extract archive",
                context=context,
                original_exception=e
            )

        if not extracted.files:
            raise ArchiveEntryNotFoundError(
                "Archive contains no files",
                context=context
            )

        extracted.selected = self._select(extracted.files, target_file, context)
        logger.info(
            f"Extracted {len(extracted.files)} file(s) to {destination}, "
            f"selected {extracted.selected}"
        )
        return extracted

    def _select(self, files: List[str], target_file: Optional[str], context: dict) -> str:
        if target_file:
            for name in files:
                if matches_target(name, target_file):
                    return name
            raise ArchiveEntryNotFoundError(
                f"File {target_file} not found in archive",
                context={**context, "target_file": target_file, "entries": files}
            )

        if len(files) > 1:
            if self.require_target:
                raise ArchiveEntryNotFoundError(
                    "Archive contains several files and no target file was named",
                    context={**context, "entries": files}
                )
            logger.warning(
                f"Archive contains {len(files)} files and no target was named; "
                f"using the first entry {files[0]}"
            )
        return files[0]

    async def fetch(
        self,
        url: str,
        target_file: Optional[str] = None,
        destination: Optional[Union[str, Path]] = None
    ) -> ExtractedArchive:
        """Download ``url`` and extract it into ``destination``."""
        content = await self.download(url)
        # ZIP extraction is blocking file IO
        return await asyncio.to_thread(
            self.extract,
            content,
            destination or settings.UPDATER_SCRATCH_DIR,
            target_file=target_file,
            url=url
        )

    def save(self, content: bytes, destination: Union[str, Path], file_name: str,
             url: Optional[str] = None) -> ExtractedArchive:
        """
        Write a downloaded file that is not an archive to ``destination``.

        Raises:
            LocalIOError: If the file cannot be written
        """
        destination = Path(destination)
        try:
            destination.mkdir(parents=True, exist_ok=True)
            (destination / file_name).write_bytes(content)
        except OSError as e:
            raise LocalIOError(
                "Failed to save downloaded file",
                context={"url": url, "destination": str(destination)},
                original_exception=e
            )
        logger.info(f"Saved {len(content)} bytes to {destination / file_name}")
        return ExtractedArchive(directory=destination, files=[file_name], selected=file_name)

    async def fetch_document(
        self,
        url: str,
        destination: Optional[Union[str, Path]] = None
    ) -> ExtractedArchive:
        """Download a single file from ``url`` and store it under its URL name."""
        content = await self.download(url)
        file_name = PurePosixPath(httpx.URL(url).path).name or "download"
        return await asyncio.to_thread(
            self.save,
            content,
            destination or settings.UPDATER_SCRATCH_DIR,
            file_name,
            url=url
        )
