"""Dependency checking utilities."""

import shutil

from trackpick.config import get_config


def check_system_dependencies() -> dict[str, bool]:
    """Check availability of the configured ffprobe/ffmpeg binaries.

    Returns:
        Dict mapping tool names to availability status.
    """
    tools = get_config().tools
    return {
        "ffprobe": shutil.which(tools.ffprobe) is not None,
        "ffmpeg": shutil.which(tools.ffmpeg) is not None,
    }


def print_dependency_status() -> None:
    """Print dependency status to stdout."""
    deps = check_system_dependencies()

    print("trackpick dependency status:")
    print("=" * 40)

    print("\nSystem binaries:")
    for name, available in sorted(deps.items()):
        icon = "✓" if available else "✗"
        print(f"  {icon} {name}")

    if not all(deps.values()):
        print("\n⚠️  ffprobe and ffmpeg are required. Install: apt install ffmpeg")
