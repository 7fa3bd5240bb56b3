"""Video concatenation for the final assembly step."""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from moviepy import VideoFileClip, concatenate_videoclips
from moviepy.video.fx import CrossFadeIn, CrossFadeOut

from ..exceptions import ConcatError

logger = logging.getLogger(__name__)


def write_concat_list(clip_paths: Sequence[Path], list_path: Path) -> Path:
    """Write an ffmpeg concat-demuxer list for ``clip_paths``.

    Paths are made absolute and single quotes are escaped.
    """
    lines = []
    for clip_path in clip_paths:
        escaped = str(clip_path.resolve()).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    list_path.parent.mkdir(parents=True, exist_ok=True)
    list_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return list_path


class FFmpegConcatenator:
    """Joins clips losslessly with ``ffmpeg -f concat -c copy``.

    Requires every clip to share codec parameters; use
    ``MoviePyConcatenator`` otherwise.
    """

    def __init__(self, ffmpeg: str = "ffmpeg", list_path: Optional[Path] = None) -> None:
        self._ffmpeg = ffmpeg
        self._list_path = list_path

    async def concat(self, clip_paths: Sequence[Path], output_path: Path) -> Path:
        """Concatenate ``clip_paths`` in order into ``output_path``.

        Raises:
            ConcatError: If ffmpeg is missing or exits with a non-zero status.
        """
        if not clip_paths:
            raise ValueError("No clips provided")

        list_path = self._list_path or output_path.parent / "ffconcat.txt"
        write_concat_list(clip_paths, list_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        args = [
            "-y", "-f", "concat", "-safe", "0",
            "-i", str(list_path),
            "-c", "copy",
            str(output_path),
        ]
        logger.debug(f"Running {self._ffmpeg} {' '.join(args)}")
        try:
            process = await asyncio.create_subprocess_exec(
                self._ffmpeg,
                *args,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise ConcatError(f"{self._ffmpeg} not found", details="Install ffmpeg and make sure it is on PATH")

        _, stderr = await process.communicate()
        if process.returncode != 0:
            tail = stderr.decode(errors="replace").strip().splitlines()[-5:]
            raise ConcatError(
                f"ffmpeg failed with exit code {process.returncode}",
                details="\n".join(tail) or None,
            )
        return output_path


def stitch_clips(
    clip_paths: List[Path],
    transition_duration: float = 0.0
):
    """Concatenate video clips into a single video.

    Args:
        clip_paths: List of paths to video clip files.
        transition_duration: Duration of crossfade transitions in seconds.
            If 0, clips are concatenated without transitions.

    Returns:
        Concatenated video clip.

    Raises:
        FileNotFoundError: If a clip file doesn't exist.
        ValueError: If clip_paths is empty.
    """
    if not clip_paths:
        raise ValueError("No clips provided")

    clips: List[VideoFileClip] = []
    for clip_path in clip_paths:
        if not clip_path.exists():
            raise FileNotFoundError(f"Clip not found: {clip_path}")
        clips.append(VideoFileClip(str(clip_path)))

    if transition_duration > 0 and len(clips) > 1:
        clips = add_transitions(clips, transition_duration)

    if len(clips) == 1:
        return clips[0]

    return concatenate_videoclips(clips, method="compose")


def add_transitions(
    clips: List[VideoFileClip],
    duration: float = 0.5
) -> List[VideoFileClip]:
    """Add crossfade transitions between clips."""
    if len(clips) < 2:
        return clips

    result: List[VideoFileClip] = []
    for i, clip in enumerate(clips):
        # Fade out all but the last, fade in all but the first
        if i < len(clips) - 1:
            clip = clip.with_effects([CrossFadeOut(duration)])
        if i > 0:
            clip = clip.with_effects([CrossFadeIn(duration)])
        result.append(clip)

    return result


def export(
    video,
    output_path: Path,
    fps: int = 30,
    codec: str = "libx264",
    audio_codec: str = "aac",
    preset: str = "medium"
) -> Path:
    """Export video to file with proper encoding."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    video.write_videofile(
        str(output_path),
        fps=fps,
        codec=codec,
        audio_codec=audio_codec,
        preset=preset,
    )
    return output_path


class MoviePyConcatenator:
    """Re-encodes clips into one video, tolerating mixed codecs."""

    def __init__(self, transition_duration: float = 0.0, fps: int = 30) -> None:
        self._transition_duration = transition_duration
        self._fps = fps

    async def concat(self, clip_paths: Sequence[Path], output_path: Path) -> Path:
        """Concatenate ``clip_paths`` in order into ``output_path``.

        Raises:
            ConcatError: If decoding or encoding fails.
        """
        try:
            return await asyncio.to_thread(self._render, list(clip_paths), output_path)
        except (OSError, ValueError) as e:
            raise ConcatError("Re-encoding concatenation failed", details=str(e))

    def _render(self, clip_paths: List[Path], output_path: Path) -> Path:
        video = stitch_clips(clip_paths, transition_duration=self._transition_duration)
        try:
            return export(video, output_path, fps=self._fps)
        finally:
            video.close()
