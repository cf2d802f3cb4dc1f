"""Subtitle retriever - turns track requests into named subtitle payloads.

Four kinds of source are handled:

1. The no-track sentinel yields one empty file so the slot stays addressable.
2. On-demand ("lazy") tracks are first resolved to a URL by the page layer.
3. Direct URLs (remote or local object URLs) are fetched once.
4. Segmented manifests are parsed and their segments fetched in order, each
   becoming a like-named part of one logical subtitle.

Skippable failures (transport errors on the track fetch, unresolvable
on-demand tracks) are reported through ``on_error`` and drop only their
track. HTTP status failures raise and abort the whole batch.
"""

import logging
from collections.abc import Awaitable, Callable

import httpx

from tracksync.api.channel import RequestChannel
from tracksync.config import Settings, settings as default_settings
from tracksync.core.errors import (
    ChannelError,
    LanguageUndeterminedError,
    LazyResolutionError,
    RetrievalHTTPError,
    TransportFetchError,
    error_context,
)
from tracksync.core.manifest import is_m3u8_url, parse_manifest
from tracksync.core.object_urls import ObjectUrlStore
from tracksync.models.video_data import (
    LAZY_URL,
    MANIFEST_EXTENSION,
    NO_TRACK,
    RetrievalBatch,
    RetrievedSubtitleFile,
    TrackRequest,
    VideoDataSnapshot,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], None]
ErrorCallback = Callable[[str], Awaitable[None]]

GET_LANGUAGE_DATA_COMMAND = "get-synced-language-data"

_SKIPPABLE = (TransportFetchError, LanguageUndeterminedError, LazyResolutionError)


class SubtitleRetriever:
    """Fetches subtitle payloads for confirmed or auto-selected tracks."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        page_channel: RequestChannel,
        object_urls: ObjectUrlStore | None = None,
        progress_callback: ProgressCallback | None = None,
        config: Settings | None = None,
    ):
        self._client = client
        self._page_channel = page_channel
        self._object_urls = object_urls or ObjectUrlStore()
        self._progress_callback = progress_callback
        self._config = config or default_settings

    async def retrieve(
        self,
        name: str,
        language: str | None,
        extension: str,
        url: str,
        is_local_file: bool = False,
        on_error: ErrorCallback | None = None,
    ) -> list[RetrievedSubtitleFile] | None:
        """Retrieve the files for one track.

        Args:
            name: Output base name; the file extension is appended
            language: Track language, needed for on-demand tracks
            extension: Track extension; "m3u8" marks a segmented manifest
            url: Sentinel, direct URL or object URL
            is_local_file: Revoke the object URL after fetching
            on_error: Receives messages for skipped tracks

        Returns:
            Retrieved files, or None when the track yielded nothing

        Raises:
            RetrievalHTTPError: On a non-success response
            TransportFetchError: When a manifest segment cannot be fetched
        """
        files, _ = await self._retrieve_track(
            name, language, extension, url, is_local_file=is_local_file, on_error=on_error
        )
        return files

    async def _retrieve_track(
        self,
        name: str,
        language: str | None,
        extension: str,
        url: str,
        is_local_file: bool = False,
        on_error: ErrorCallback | None = None,
    ) -> tuple[list[RetrievedSubtitleFile] | None, bool]:
        """Retrieve one track; the flag tells whether it was a segmented manifest."""
        if url == NO_TRACK:
            return [RetrievedSubtitleFile(name=f"{name}.{extension}")], False

        try:
            if url == LAZY_URL:
                url = await self._resolve_lazy(language)
            response = await self._fetch(url, revoke=is_local_file)
        except _SKIPPABLE as e:
            await self._report(on_error, str(e))
            return None, False

        if extension == MANIFEST_EXTENSION or is_m3u8_url(url):
            return await self._retrieve_segments(name, url, response), True

        self._raise_for_status(response)
        return [RetrievedSubtitleFile(name=f"{name}.{extension}", payload=response.content)], False

    async def retrieve_all(
        self,
        requests: list[TrackRequest],
        on_error: ErrorCallback | None = None,
    ) -> RetrievalBatch:
        """Retrieve every request in order and concatenate the results.

        ``flatten`` is set when any request is a manifest by extension or any
        track was retrieved as segments. Any RetrievalError propagates and
        aborts the batch.
        """
        files: list[RetrievedSubtitleFile] = []
        flatten = any(request.is_manifest for request in requests)

        for request in requests:
            result, segmented = await self._retrieve_track(
                request.name,
                request.language,
                request.extension,
                request.url,
                is_local_file=request.is_local_file,
                on_error=on_error,
            )
            flatten = flatten or segmented
            if result:
                files.extend(result)

        logger.info(f"Retrieved {len(files)} subtitle file(s) for {len(requests)} track(s)")
        return RetrievalBatch(files=files, flatten=flatten)

    async def _resolve_lazy(self, language: str | None) -> str:
        """Ask the page layer for the concrete URL of an on-demand track."""
        if language is None:
            raise LanguageUndeterminedError()

        try:
            response = await self._page_channel.request(
                GET_LANGUAGE_DATA_COMMAND, {"language": language}
            )
        except ChannelError as e:
            raise LazyResolutionError(str(e)) from e
        data = VideoDataSnapshot.model_validate(response or {})

        if data.error:
            raise LazyResolutionError(data.error)

        for track in data.subtitles or []:
            if track.language == language:
                logger.debug(f"Resolved on-demand '{language}' track to {track.url}")
                return track.url

        raise LazyResolutionError()

    async def _fetch(self, url: str, revoke: bool = False) -> httpx.Response:
        try:
            if ObjectUrlStore.is_object_url(url):
                payload = self._object_urls.resolve(url)
                if payload is None:
                    raise TransportFetchError(f"Failed to fetch: {url} is no longer available")
                return httpx.Response(200, content=payload)

            with error_context(
                error_types=(httpx.RequestError,),
                default_message="Failed to fetch",
                log_level="warning",
                wrap_as=TransportFetchError,
            ):
                return await self._client.get(url, timeout=self._config.request_timeout)
        finally:
            if revoke:
                self._object_urls.revoke(url)

    async def _retrieve_segments(
        self,
        name: str,
        url: str,
        response: httpx.Response,
    ) -> list[RetrievedSubtitleFile] | None:
        self._raise_for_status(response)
        manifest = parse_manifest(response.text)

        if not manifest.segments:
            logger.info(f"Manifest {url} has no segments")
            return None

        first_uri = manifest.segments[0].uri
        part_extension = first_uri[first_uri.rfind(".") + 1 :]
        base_url = url[: url.rfind("/")]
        file_name = f"{name}.{part_extension}"

        segments = [s for s in manifest.segments if not s.discontinuity and s.uri]
        total = len(segments)
        files: list[RetrievedSubtitleFile] = []

        for done, segment in enumerate(segments, start=1):
            segment_url = segment.uri
            if not httpx.URL(segment_url).is_absolute_url:
                segment_url = f"{base_url}/{segment.uri}"

            segment_response = await self._fetch(segment_url)
            self._raise_for_status(segment_response)

            percent = done * 100 // total
            if self._progress_callback is not None:
                self._progress_callback(file_name, percent)

            files.append(RetrievedSubtitleFile(name=file_name, payload=segment_response.content))

        logger.info(f"Fetched {total} segment(s) for {file_name}")
        return files

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if not response.is_success:
            raise RetrievalHTTPError(response.status_code, response.reason_phrase)

    @staticmethod
    async def _report(on_error: ErrorCallback | None, message: str) -> None:
        if on_error is None:
            logger.warning(f"Skipping track: {message}")
            return
        await on_error(message)
