"""
Video + audio capture of a running session.

Frames stream into ffmpeg as they are produced; audio blocks are kept
in memory and written as a WAV when recording stops, then both are
muxed into the final file.
"""

import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

import numpy as np
import soundfile as sf

from chladniscope.config import ChladniConfig
from chladniscope.io.encoder import (
    abort_video_pipe,
    finish_video_pipe,
    mux_audio,
    open_video_pipe,
)

DEFAULT_FILENAME = "chladni_ethereal.mp4"


class Recorder:
    """Start/stop capture of frames and audio to a single MP4."""

    def __init__(self, config: Optional[ChladniConfig] = None, quality: str = "medium"):
        self.cfg = config or ChladniConfig()
        self.quality = quality
        self.output_path: Optional[Path] = None
        self.frames_written = 0
        self._proc = None
        self._temp_dir: Optional[Path] = None
        self._audio: List[np.ndarray] = []

    @property
    def is_recording(self) -> bool:
        return self._proc is not None

    def start(self, output_path=DEFAULT_FILENAME):
        if self.is_recording:
            raise RuntimeError("Recorder is already recording")

        self.output_path = Path(output_path)
        self._temp_dir = Path(tempfile.mkdtemp(prefix="chladniscope_rec_"))
        self._audio = []
        self.frames_written = 0
        try:
            self._proc = open_video_pipe(
                self._temp_dir / "video.mp4",
                width=self.cfg.width,
                height=self.cfg.height,
                fps=self.cfg.fps,
                quality=self.quality,
            )
        except Exception:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            self._temp_dir = None
            raise

    def write(self, frame: np.ndarray, audio: Optional[np.ndarray] = None):
        """Append one frame and the audio produced alongside it."""
        if not self.is_recording:
            raise RuntimeError("Recorder is not recording")

        # Ensure contiguous C-order array
        self._proc.stdin.write(np.ascontiguousarray(frame, dtype=np.uint8).tobytes())
        self.frames_written += 1
        if audio is not None and len(audio):
            self._audio.append(np.asarray(audio, dtype=np.float32))

    def stop(self) -> Path:
        """Finish encoding, mux the soundtrack and return the output path."""
        if not self.is_recording:
            raise RuntimeError("Recorder is not recording")

        proc, self._proc = self._proc, None
        temp_dir = self._temp_dir
        try:
            finish_video_pipe(proc)

            audio = np.concatenate(self._audio) if self._audio else np.zeros(1, dtype=np.float32)
            wav_path = temp_dir / "audio.wav"
            sf.write(wav_path, audio, self.cfg.sample_rate, subtype="PCM_16")

            return mux_audio(temp_dir / "video.mp4", wav_path, self.output_path)
        finally:
            self._audio = []
            self._temp_dir = None
            shutil.rmtree(temp_dir, ignore_errors=True)

    def abort(self):
        """Drop the recording in progress; nothing is written to the output path."""
        if not self.is_recording:
            return

        proc, self._proc = self._proc, None
        temp_dir = self._temp_dir
        try:
            abort_video_pipe(proc)
        finally:
            self._audio = []
            self._temp_dir = None
            shutil.rmtree(temp_dir, ignore_errors=True)
