"""Generate a scripted sample mission: paired intercepts over a sector."""

import math
import argparse
from pathlib import Path

import yaml

CENTER = {"lat": 51.505, "lng": -0.09}


def lerp(a, b, t):
    return a + (b - a) * t


def ring_point(bearing_deg, radius_deg, center=CENTER):
    """Point at `radius_deg` from center along a bearing (flat approximation)."""
    rad = math.radians(bearing_deg)
    kx = math.cos(math.radians(center["lat"]))
    return (
        round(center["lat"] + math.cos(rad) * radius_deg, 4),
        round(center["lng"] + math.sin(rad) * radius_deg / kx, 4),
    )


def build_pair(idx, pairs, duration):
    """One friendly/hostile pair converging on a merge point, hostile killed at the merge."""
    bearing = 360.0 * idx / pairs
    merge_t = round(duration * (0.35 + 0.4 * idx / max(1, pairs)), 1)

    merge = ring_point(bearing + 30, 0.03)
    f_start = ring_point(bearing + 180, 0.14)
    h_start = ring_point(bearing, 0.16)
    f_exit = ring_point(bearing + 60, 0.12)

    friendly_id = f"BLUE-{idx + 1}"
    hostile_id = f"RED-{idx + 1}"

    friendly = {
        "id": friendly_id,
        "callsign": f"VIPER-{idx + 1:02d}",
        "side": "friendly",
        "path": [
            {"t": 0, "lat": f_start[0], "lng": f_start[1]},
            {"t": merge_t, "lat": merge[0], "lng": merge[1]},
            {"t": duration, "lat": f_exit[0], "lng": f_exit[1]},
        ],
    }
    # Hostile overflies the merge point so it is still moving at the kill
    h_end = (
        round(lerp(h_start[0], merge[0], 1.4), 4),
        round(lerp(h_start[1], merge[1], 1.4), 4),
    )
    hostile = {
        "id": hostile_id,
        "callsign": f"BANDIT-{idx + 1:02d}",
        "side": "hostile",
        "path": [
            {"t": 0, "lat": h_start[0], "lng": h_start[1]},
            {"t": merge_t, "lat": merge[0], "lng": merge[1]},
            {"t": round(min(duration, merge_t * 1.4), 1), "lat": h_end[0], "lng": h_end[1]},
        ],
    }

    events = [
        {"t": round(max(0.0, merge_t - 20), 1), "type": "engagement", "actor": friendly_id,
         "target": hostile_id, "text": f"VIPER-{idx + 1:02d} engages BANDIT-{idx + 1:02d}."},
        {"t": merge_t, "type": "kill", "actor": friendly_id, "target": hostile_id,
         "text": f"BANDIT-{idx + 1:02d} DESTROYED."},
        {"t": round(merge_t + 0.4, 1), "type": "impact", "lat": merge[0], "lng": merge[1],
         "text": "IMPACT recorded."},
    ]
    return [friendly, hostile], events


def build_mission(pairs=3, duration=180.0, title="Sample Intercept"):
    aircraft = []
    events = [{"t": 5, "type": "contact", "text": f"{pairs} CONTACTS DETECTED"}]
    for idx in range(pairs):
        acs, evs = build_pair(idx, pairs, duration)
        aircraft.extend(acs)
        events.extend(evs)
    events.sort(key=lambda e: e["t"])
    events.append({"t": duration - 5, "type": "note", "text": "Sector clear. RTB."})
    return {
        "meta": {"title": title, "sector": "GENERATED"},
        "duration_s": duration,
        "center": dict(CENTER),
        "aircraft": aircraft,
        "events": events,
    }


def main():
    parser = argparse.ArgumentParser(description="Generate a sample replay mission")
    parser.add_argument("--output", default="data/missions/sample_intercept.yaml")
    parser.add_argument("--pairs", type=int, default=3)
    parser.add_argument("--duration", type=float, default=180.0)
    args = parser.parse_args()

    mission = build_mission(args.pairs, args.duration)
    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w") as f:
        yaml.safe_dump(mission, f, sort_keys=False)
    print(f"Mission written to {out}: {len(mission['aircraft'])} aircraft, {len(mission['events'])} events")


if __name__ == "__main__":
    main()
