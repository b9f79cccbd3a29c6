from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
import json
import shutil
import threading
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import numpy as np
from loguru import logger
from tqdm import tqdm

from .config import RunConfig, SupplyConfig
from .decode import Frame, decode_frames
from .errors import OutOfBounds, RunCancelled
from .events import SupplySeries, queue_started_events
from .grouping import dedupe_events
from .icons import read_queue_icons
from .profile import Profile, load_profile
from .roi import load_gray, read_frame
from .supply import SupplyReading, read_supply
from .templates import (DigitTemplates, QueueTemplates, find_separator, load_digit_templates,
                        load_queue_templates, load_separator)
from .trigger import DiffHit, DiffTrigger

OUTPUT_VERSION = 1

@dataclass
class RunContext:
    profile: Profile
    digits: DigitTemplates
    queue: QueueTemplates
    separator: Optional[np.ndarray] = None
    supply_cfg: SupplyConfig = field(default_factory=SupplyConfig)

@dataclass
class FrameResult:
    frame: Frame
    reading: Optional[SupplyReading] = None
    selection: Optional[np.ndarray] = None
    queue: Optional[np.ndarray] = None
    errors: List[str] = field(default_factory=list)

def analyze_frame(frame: Frame, ctx: RunContext) -> FrameResult:
    """Per-frame work with no cross-frame state; safe to run on worker threads."""
    img = read_frame(frame.path)
    res = FrameResult(frame=frame)
    p = ctx.profile
    try:
        res.reading = read_supply(img, p.supply.strip, ctx.digits, ctx.separator, ctx.supply_cfg)
    except OutOfBounds as e:
        logger.warning(f"frame {frame.index}: supply read skipped: {e}")
        res.errors.append("supply_out_of_bounds")
    try:
        res.selection = load_gray(img, p.selection_panel)
    except OutOfBounds as e:
        logger.warning(f"frame {frame.index}: selection read skipped: {e}")
        res.errors.append("selection_panel_out_of_bounds")
    try:
        res.queue = load_gray(img, p.production_queue.area)
    except OutOfBounds as e:
        logger.warning(f"frame {frame.index}: queue read skipped: {e}")
        res.errors.append("production_queue_out_of_bounds")
    return res

def _results(frames: Sequence[Frame], ctx: RunContext, workers: int,
             executor: Optional[ThreadPoolExecutor]) -> Iterator[FrameResult]:
    if executor is None or workers <= 1:
        return (analyze_frame(f, ctx) for f in frames)
    # map() yields in submission order, i.e. timestamp order
    return executor.map(lambda f: analyze_frame(f, ctx), frames)

def copy_evidence(frame_path: str, evidence_dir: Path, prefix: str, index: int) -> str:
    evidence_dir.mkdir(parents=True, exist_ok=True)
    name = f"{prefix}_{index:06d}.jpg"
    shutil.copyfile(frame_path, evidence_dir / name)
    return f"evidence/{name}"

def load_context(profile_path: Union[str, Path], run_cfg: RunConfig,
                 supply_cfg: SupplyConfig, warnings: List[str]) -> RunContext:
    profile = load_profile(profile_path)
    logger.info(f"profile '{profile.name}' loaded from {profile_path}")
    tdir = Path(run_cfg.templates_dir)
    digits = load_digit_templates(tdir / "digits", supply_cfg)
    queue = load_queue_templates(tdir / "queue")
    sep_path = find_separator(tdir / "digits")
    separator = load_separator(sep_path)
    if len(digits) == 0:
        logger.warning(f"no digit templates in {tdir / 'digits'}")
        warnings.append("digit_templates_empty")
    if len(queue) == 0:
        logger.warning(f"no queue templates in {tdir / 'queue'}")
        warnings.append("queue_templates_empty")
    if separator is None:
        logger.warning("no separator template, supply glyphs placed at the fallback column")
        warnings.append("separator_template_missing")
    return RunContext(profile=profile, digits=digits, queue=queue,
                      separator=separator, supply_cfg=supply_cfg)

def fold_results(results: Iterator[FrameResult], total: int, run_cfg: RunConfig,
                 warnings: List[str], cancel: Optional[threading.Event] = None):
    """Sequential stage: change-point series plus the two diff triggers."""
    series = SupplySeries()
    sel_trig = DiffTrigger(run_cfg.diff_threshold)
    q_trig = DiffTrigger(run_cfg.diff_threshold)
    sel_hits: List[DiffHit] = []
    q_hits: List[DiffHit] = []

    pbar = tqdm(total=total, desc="Processing", unit="frame")
    try:
        for res in results:
            if cancel is not None and cancel.is_set():
                raise RunCancelled(f"run cancelled at frame {res.frame.index}")
            fr = res.frame
            for err in res.errors:
                if err not in warnings:
                    warnings.append(err)
            if res.reading is not None and series.push(fr.t, res.reading):
                logger.debug(f"t={fr.t:.2f} supply {res.reading.used}/{res.reading.total} conf={res.reading.conf:.3f}")
            if res.selection is not None:
                hit = sel_trig.update(fr.t, fr, res.selection)
                if hit is not None:
                    sel_hits.append(hit)
            if res.queue is not None:
                hit = q_trig.update(fr.t, fr, res.queue)
                if hit is not None:
                    q_hits.append(hit)
            pbar.update(1)
    finally:
        pbar.close()
    return series, sel_hits, q_hits

def process_video(video_path: str, profile_path: str, out_dir: str,
                  run_cfg: Optional[RunConfig] = None, supply_cfg: Optional[SupplyConfig] = None,
                  cancel: Optional[threading.Event] = None) -> Dict[str, Any]:
    run_cfg = run_cfg or RunConfig()
    supply_cfg = supply_cfg or SupplyConfig()
    outp = Path(out_dir).resolve()
    outp.mkdir(parents=True, exist_ok=True)
    evidence_dir = outp / "evidence"

    warnings: List[str] = []
    ctx = load_context(profile_path, run_cfg, supply_cfg, warnings)
    frames = decode_frames(video_path, outp / "frames", run_cfg.fps, run_cfg.start_sec, run_cfg.end_sec)

    executor = ThreadPoolExecutor(max_workers=run_cfg.workers) if run_cfg.workers > 1 else None
    try:
        series, sel_hits, q_hits = fold_results(
            _results(frames, ctx, run_cfg.workers, executor), len(frames), run_cfg, warnings, cancel)
    finally:
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)
    logger.info(f"supply samples={len(series.samples)} selection hits={len(sel_hits)} queue hits={len(q_hits)}")

    selection_changes = [{"t": h.t, "frame": copy_evidence(h.frame.path, evidence_dir, "sel", i)}
                         for i, h in enumerate(sel_hits, start=1)]

    queue_events: List[Dict[str, Any]] = []
    area = ctx.profile.production_queue
    for i, h in enumerate(q_hits, start=1):
        if cancel is not None and cancel.is_set():
            raise RunCancelled("run cancelled during queue recognition")
        evidence = copy_evidence(h.frame.path, evidence_dir, "q", i)
        for icon in read_queue_icons(read_frame(h.frame.path), area.area, area.slots,
                                     ctx.queue, run_cfg.queue_min_conf):
            queue_events.append({"t": h.t, "item_id": icon.item_id, "conf": icon.conf, "frame": evidence})

    events = dedupe_events(queue_started_events(queue_events))

    output: Dict[str, Any] = {
        "version": OUTPUT_VERSION,
        "segment": {"start_sec": run_cfg.start_sec, "end_sec": run_cfg.end_sec},
        "roi_profile": ctx.profile.name,
        "signals": {
            "supply_series": series.samples,
            "selection_changes": selection_changes,
            "queue_events": queue_events,
        },
        "events": [e.to_dict() for e in events],
        "diagnostics": {"warnings": warnings},
    }

    with open(outp / "result.json", "w", encoding="utf-8") as f:
        json.dump(output, f, indent=2)
    logger.info(f"wrote {outp / 'result.json'}")
    return output
