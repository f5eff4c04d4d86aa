"""
Audio extraction pipeline: URL in, speech-ready WAV artifact out.
"""

import uuid

from app.config import Config
from app.core import source_resolver
from app.core.artifact_store import ArtifactStore
from app.core.source_resolver import SourceResolver
from app.core.transcoder import AudioTranscoder
from app.exceptions import DurationExceeded, ExtractionProducedEmptyOutput
from app.models.schemas import ExtractionJob, ExtractionResult, VideoReference
from app.utils.logger import logging

ARTIFACT_EXTENSION = "wav"


class ExtractionPipeline:
    """Runs one extraction per call; concurrent calls share nothing but the store."""

    def __init__(
        self,
        config: Config,
        resolver: SourceResolver,
        store: ArtifactStore,
        transcoder: AudioTranscoder,
    ):
        self.max_duration = config.max_duration_seconds
        self.resolver = resolver
        self.store = store
        self.transcoder = transcoder

    def _new_job(self, ref: VideoReference, duration: int) -> ExtractionJob:
        filename = f"{ref.video_id}_{uuid.uuid4()}.{ARTIFACT_EXTENSION}"
        return ExtractionJob(
            reference=ref,
            filename=filename,
            path=self.store.path(filename),
            duration=duration,
        )

    async def extract(self, url: str) -> ExtractionResult:
        """
        Extract the audio track of a video into the scratch directory.

        Validation and the duration check happen before any stream is
        opened or process started. A failure after that may leave a
        partial file behind; the retention sweeper removes it.

        Args:
            url: YouTube video URL

        Returns:
            ExtractionResult with the artifact name, size and source duration

        Raises:
            InvalidUrl, MetadataFetchFailed, DurationExceeded,
            TranscodeFailed, ExtractionProducedEmptyOutput
        """
        ref = source_resolver.resolve_id(url)
        logging.info(f"Starting audio extraction for video: {ref.video_id}")

        metadata = await self.resolver.fetch_metadata(ref)
        duration = metadata.duration
        logging.info(f"Video duration: {duration} seconds ({duration // 60}:{duration % 60:02d})")

        if duration > self.max_duration:
            logging.info(f"Video rejected: {duration} seconds > {self.max_duration} seconds")
            raise DurationExceeded(duration, self.max_duration)

        job = self._new_job(ref, duration)

        chunks = await self.resolver.open_audio_stream(ref)
        await self.transcoder.transcode(chunks, job.path, duration=job.duration)

        if not self.store.exists(job.filename):
            raise ExtractionProducedEmptyOutput("Audio file was not created")
        size = self.store.size(job.filename)
        if size == 0:
            raise ExtractionProducedEmptyOutput("Audio file is empty")

        logging.info(f"Audio extracted successfully: {job.path} ({size} bytes)")
        return ExtractionResult(filename=job.filename, size=size, duration=job.duration)
