"""Assemble the ffmpeg encode command for a selection.

The command is only built here; running it belongs to the caller.
"""

from pathlib import Path

from trackpick.config import OutputConfig
from trackpick.models import Selection


def output_filename(selection: Selection, output: OutputConfig) -> str:
    """Return ``<output.path>/<media stem>.mkv``."""
    return str(Path(output.path) / (Path(selection.media_path).stem + ".mkv"))


def map_options(selection: Selection) -> list[str]:
    """Build ``-map`` options in video, audio, subtitle order.

    Input 0 is the source container. Caption files are extra inputs
    numbered from 1 in subtitle order, and a subtitle with a caption file
    maps that input instead of its bitmap stream.
    """
    maps: list[str] = []
    for stream in (*selection.video, *selection.audio):
        maps += ["-map", f"0:{stream.index}"]

    caption_input = 1
    for stream in selection.subtitle:
        if stream.caption_file:
            maps += ["-map", f"{caption_input}:0"]
            caption_input += 1
        else:
            maps += ["-map", f"0:{stream.index}"]
    return maps


def subtitle_metadata(selection: Selection) -> list[str]:
    """Carry language tags over to output subtitle streams."""
    options: list[str] = []
    for position, stream in enumerate(selection.subtitle):
        if stream.caption_file and stream.language:
            options += [f"-metadata:s:s:{position}", f"language={stream.language}"]
    return options


def build_encode_command(
    selection: Selection,
    output: OutputConfig | None = None,
    ffmpeg: str = "ffmpeg",
    output_path: str | None = None,
) -> list[str]:
    """Build the full ffmpeg argument list for a selection.

    Args:
        selection: Streams to keep, with any generated caption files
        output: Encoder and output settings (default: OutputConfig())
        ffmpeg: ffmpeg binary
        output_path: Override for the output file

    Returns:
        Argument list starting with the ffmpeg binary
    """
    output = output or OutputConfig()
    cmd = [ffmpeg, *output.global_options, "-i", selection.media_path]
    for caption_file in selection.caption_files:
        cmd += ["-i", caption_file]

    cmd += map_options(selection)
    cmd += ["-c:v", output.video_encoder, *output.video_options]
    cmd += ["-c:a", output.audio_encoder, *output.audio_options]
    if selection.subtitle:
        cmd += ["-c:s", output.subtitle_encoder, *output.subtitle_options]
        cmd += subtitle_metadata(selection)
    cmd.append(output_path or output_filename(selection, output))
    return cmd
