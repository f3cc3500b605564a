"""
Video transcoding through the ffmpeg binary.

Re-encodes to H.264 with the height capped (width follows the aspect ratio).
The call blocks until ffmpeg exits; there is no timeout.
"""

import logging
import os
import subprocess
from pathlib import Path

from classhub.core.config import settings

logger = logging.getLogger(__name__)


class TranscodeError(Exception):
    pass


def build_command(input_path: Path, output_path: Path, max_height: int) -> list[str]:
    return [
        settings.FFMPEG_BINARY,
        "-y",
        "-i", str(input_path),
        "-c:v", "libx264",
        # -2 keeps the width even, which libx264 requires
        "-vf", f"scale=-2:'min({max_height},ih)'",
        str(output_path),
    ]


def transcode_video(input_path: Path, output_path: Path) -> Path:
    """
    Transcode `input_path` into `output_path`.

    Raises TranscodeError if ffmpeg is missing or exits non-zero; the partial
    output file is removed in that case.
    """
    cmd = build_command(input_path, output_path, settings.TRANSCODE_MAX_HEIGHT)
    logger.info("Transcoding %s -> %s", input_path.name, output_path.name)
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        _remove_quietly(output_path)
        raise TranscodeError(f"Could not run {settings.FFMPEG_BINARY}: {e}") from e

    if proc.returncode != 0:
        _remove_quietly(output_path)
        tail = proc.stderr.decode("utf-8", errors="replace")[-500:]
        raise TranscodeError(f"ffmpeg exited with {proc.returncode}: {tail}")

    return output_path


def _remove_quietly(path: Path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
