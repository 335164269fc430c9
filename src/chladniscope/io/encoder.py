"""
FFmpeg video encoder.

Frames are piped as raw RGB straight from numpy arrays into an ffmpeg
process. Because the soundtrack is synthesized alongside the frames,
the video is encoded first and the audio muxed in afterwards.
"""

import shutil
import subprocess
from pathlib import Path


# Quality presets: (preset, crf, pix_fmt)
QUALITY_PRESETS = {
    "high": ("slow", "18", "yuv444p"),
    "medium": ("medium", "23", "yuv420p"),
    "fast": ("ultrafast", "28", "yuv420p"),
}


def ensure_ffmpeg() -> str:
    """Path of the ffmpeg binary, or RuntimeError when it is not installed."""
    path = shutil.which("ffmpeg")
    if path is None:
        raise RuntimeError("ffmpeg not found on PATH; install it to record video")
    return path


def _error_summary(stderr: bytes) -> str:
    text = stderr.decode("utf-8", errors="replace")
    # Filter out common non-error ffmpeg messages
    error_lines = [
        line for line in text.split("\n")
        if "error" in line.lower() or "invalid" in line.lower()
    ]
    return "\n".join(error_lines[-5:]) if error_lines else text[-500:]


def open_video_pipe(
    output_path: Path,
    width: int,
    height: int,
    fps: int = 60,
    quality: str = "high",
) -> subprocess.Popen:
    """
    Start an ffmpeg process reading raw rgb24 frames from stdin.

    Args:
        output_path: Video-only output file.
        width: Frame width.
        height: Frame height.
        fps: Frames per second.
        quality: "high", "medium", or "fast".

    Returns:
        The running process; write ``frame.tobytes()`` to its stdin.
    """
    ffmpeg = ensure_ffmpeg()
    preset, crf, pix_fmt = QUALITY_PRESETS.get(quality, QUALITY_PRESETS["high"])

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = [
        ffmpeg, "-y",
        # Keep stderr small; it is only read after the last frame
        "-loglevel", "error", "-nostats",
        # Raw video input from pipe
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "pipe:0",
        # Video encoding; x264 needs even dimensions
        "-vf", "pad=ceil(iw/2)*2:ceil(ih/2)*2",
        "-c:v", "libx264",
        "-preset", preset,
        "-crf", crf,
        "-pix_fmt", pix_fmt,
        "-an",
        str(output_path),
    ]

    return subprocess.Popen(
        cmd,
        stdin=subprocess.PIPE,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
    )


def finish_video_pipe(proc: subprocess.Popen):
    """Close stdin and wait; RuntimeError if ffmpeg failed."""
    try:
        if proc.stdin:
            proc.stdin.close()
    except BrokenPipeError:
        pass

    stderr = proc.stderr.read() if proc.stderr else b""
    proc.wait()

    if proc.returncode != 0:
        raise RuntimeError(
            f"ffmpeg exited with code {proc.returncode}: {_error_summary(stderr)}"
        )


def mux_audio(video_path: Path, audio_path: Path, output_path: Path) -> Path:
    """
    Combine an encoded video with a WAV soundtrack.

    The video stream is copied; audio is encoded to AAC.

    Returns:
        Path to the output file.
    """
    ffmpeg = ensure_ffmpeg()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = [
        ffmpeg, "-y",
        "-i", str(video_path),
        "-i", str(audio_path),
        "-c:v", "copy",
        # Audio encoding
        "-c:a", "aac",
        "-b:a", "192k",
        # Trim to shortest stream
        "-shortest",
        str(output_path),
    ]

    result = subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE)
    if result.returncode != 0:
        raise RuntimeError(
            f"ffmpeg exited with code {result.returncode}: {_error_summary(result.stderr)}"
        )
    return output_path


def abort_video_pipe(proc: subprocess.Popen):
    """Stop ffmpeg without finishing the file."""
    try:
        if proc.stdin:
            proc.stdin.close()
    except BrokenPipeError:
        pass
    if proc.poll() is None:
        proc.kill()
    proc.wait()
