from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import math
import os
import subprocess
from typing import List, Union

from loguru import logger

from .errors import DecodeFailed

FRAME_PATTERN = "frame_%06d.jpg"

@dataclass(frozen=True)
class Frame:
    index: int
    t: float
    path: str

def ffmpeg_binary() -> str:
    return os.environ.get("FFMPEG_PATH") or "ffmpeg"

def build_decode_cmd(input_path: str, out_dir: Path, fps: float, start_sec: float, end_sec: float) -> List[str]:
    return [
        ffmpeg_binary(),
        "-hide_banner",
        "-loglevel", "error",
        "-ss", str(start_sec),
        "-to", str(end_sec),
        "-i", str(input_path),
        "-vf", f"fps={fps}",
        "-q:v", "2",
        str(out_dir / FRAME_PATTERN),
    ]

def decode_frames(input_path: Union[str, Path], out_dir: Union[str, Path], fps: float,
                  start_sec: float, end_sec: float) -> List[Frame]:
    """Sample ``input_path`` at ``fps`` between start and end into JPEG frames."""
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    outp = Path(out_dir).resolve()
    outp.mkdir(parents=True, exist_ok=True)
    stale = list(outp.glob("frame_*.jpg"))
    for p in stale:
        p.unlink()
    if stale:
        logger.debug(f"removed {len(stale)} stale frames from {outp}")

    cmd = build_decode_cmd(str(input_path), outp, fps, start_sec, end_sec)
    logger.info(f"decoding {input_path} [{start_sec}s..{end_sec}s] at {fps} fps")
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        raise DecodeFailed(f"cannot run ffmpeg ({cmd[0]}): {e}") from e
    if proc.returncode != 0:
        tail = (proc.stderr or "").strip()[-500:]
        raise DecodeFailed(f"ffmpeg exited with code {proc.returncode}: {tail}")

    expected = max(0, int(math.floor((end_sec - start_sec) * fps)))
    frames = []
    for i in range(1, expected + 1):
        p = outp / (FRAME_PATTERN % i)
        if p.is_file():
            frames.append(Frame(index=i, t=start_sec + (i - 1) / fps, path=str(p)))
    logger.info(f"decoded {len(frames)} frames into {outp}")
    return frames
