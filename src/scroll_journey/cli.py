from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List

from rich.console import Console
from rich.table import Table

from scroll_journey.config import settings
from scroll_journey.core.engine import JourneyEngine
from scroll_journey.core.scheduler import ManualScheduler
from scroll_journey.logs import configure_logging
from scroll_journey.providers.base import JourneySource
from scroll_journey.providers.geojson import GeoJSONSource
from scroll_journey.providers.mock import MockSource


def _read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


def _save_json(path: Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")


def _build_source(args: argparse.Namespace) -> JourneySource:
    if args.mock:
        return MockSource()
    if not (args.path and args.points):
        raise SystemExit("--path and --points are required unless --mock is given")
    narrative = _read_json(Path(args.narrative)) if args.narrative else None
    return GeoJSONSource(
        _read_json(Path(args.path)),
        _read_json(Path(args.points)),
        narrative,
        journey_id=Path(args.path).stem,
    )


def sample_offsets(total: float, n: int) -> List[float]:
    if n <= 1 or total <= 0:
        return [0.0]
    return [total * i / (n - 1) for i in range(n)]


def main() -> None:
    ap = argparse.ArgumentParser(description="Preview a scroll journey: waypoints, contents and resolved positions")
    ap.add_argument("--path", help="GeoJSON file holding the route LineString")
    ap.add_argument("--points", help="GeoJSON file holding labelled narrative points")
    ap.add_argument("--narrative", help="Narrative JSON (sections/subsections)")
    ap.add_argument("--mock", action="store_true", help="Use the built-in synthetic journey")
    ap.add_argument("--samples", type=int, default=12, help="Offsets to resolve across the scroll range")
    ap.add_argument("--subsections", action="store_true", help="Include sub-items in the contents")
    ap.add_argument("--out", help="Write resolved samples to this JSON file")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    configure_logging("DEBUG" if args.debug else settings.log_level)

    journey = _build_source(args).load()
    cfg = settings.model_copy(update={"include_subsections": args.subsections})
    scheduler = ManualScheduler(frame_interval_ms=cfg.frame_interval_ms)
    engine = JourneyEngine.from_input(journey, scheduler, settings=cfg)

    console = Console()

    wp_table = Table(title=f"Waypoints: {journey.journey_id}")
    wp_table.add_column("Id")
    wp_table.add_column("Section")
    wp_table.add_column("Subsection")
    wp_table.add_column("Km")
    wp_table.add_column("Scroll px")
    wp_table.add_column("Lon")
    wp_table.add_column("Lat")
    for w in engine.waypoints:
        wp_table.add_row(
            str(w.id),
            w.section_label,
            w.subsection_label,
            f"{w.distance_along_path:.2f}",
            f"{engine.resolver.offset_for_distance(w.distance_along_path):.0f}",
            f"{w.coordinate[0]:.5f}",
            f"{w.coordinate[1]:.5f}",
        )
    console.print(wp_table)

    nav_table = Table(title="Contents")
    nav_table.add_column("#")
    nav_table.add_column("Label")
    nav_table.add_column("Kind")
    nav_table.add_column("Scroll px")
    for i, item in enumerate(engine.progress.items):
        kind = "anchor" if item.is_anchor_bound else ("section" if item.is_header else "item")
        pos = engine.progress.effective_position(i)
        nav_table.add_row(str(i), item.label, kind, "unmeasured" if pos == float("inf") else f"{pos:.0f}")
    console.print(nav_table)

    res_table = Table(title=f"Resolved offsets (range {engine.mapping.total_pixel_range:.0f} px)")
    res_table.add_column("Offset")
    res_table.add_column("Km")
    res_table.add_column("Lon")
    res_table.add_column("Lat")
    res_table.add_column("Heading")
    res_table.add_column("Active")
    res_table.add_column("Section")
    res_table.add_column("Contents #")

    rows: List[dict] = []
    for px in sample_offsets(engine.mapping.total_pixel_range, args.samples):
        d = engine.resolve(px)
        pos = d.position
        res_table.add_row(
            f"{pos.offset:.0f}",
            f"{pos.distance:.2f}",
            f"{pos.coordinate[0]:.5f}",
            f"{pos.coordinate[1]:.5f}",
            f"{pos.heading:.1f}",
            str(d.active_waypoint_id or ""),
            d.current_section_name or "",
            "" if d.active_index is None else str(d.active_index),
        )
        rows.append({
            "offset": pos.offset,
            "distance_km": pos.distance,
            "lon": pos.coordinate[0],
            "lat": pos.coordinate[1],
            "heading_deg": pos.heading,
            "active_waypoint_id": d.active_waypoint_id,
            "section": d.current_section_name,
            "active_index": d.active_index,
        })
    console.print(res_table)

    if args.out:
        out_path = Path(args.out)
        _save_json(out_path, rows)
        console.print(f"Saved: {out_path.resolve()}")

    engine.dispose()


if __name__ == "__main__":
    main()
