# dipole_shield/main.py
import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dipole_shield.cli import run_cli
from dipole_shield.config import settings
from dipole_shield.physics.diagnostics import EnergyResult
from dipole_shield.simulation.runner import SweepResults, build_dipole, run_sweep
from dipole_shield.visualization.plots import plot_min_distance, plot_trajectories

# --- Setup logger ------------------------------------------------------------
log = logging.getLogger("main")


def save_json(obj: Any, name_prefix: str) -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    out_dir = Path(getattr(settings, "OUTPUT_DIR", "outputs"))
    out_dir.mkdir(parents=True, exist_ok=True)
    filename = out_dir / f"{name_prefix}_{ts}.json"
    with open(filename, "w") as f:
        json.dump(obj, f, indent=2, default=lambda o: repr(o))
    return str(filename)


def _format_row(r: EnergyResult) -> str:
    flag = "NEAR MISS" if r.near_miss else ("shielded" if r.shielded else "inside L")
    return (
        f"{r.energy_kev:10.2f}  {r.deflection_deg:12.3f}  {r.min_distance:14.6e}  "
        f"{r.larmor_radius:14.6e}  {flag}"
    )


def format_report(sweep: SweepResults) -> str:
    lines = [
        f"Dipole moment : {sweep.dipole.moment:.6e} A·m²",
        f"Protected L   : {sweep.dipole.protected_size:g} m",
        f"Time span     : {sweep.t_span[0]:g} .. {sweep.t_span[1]:.6e} s",
        "",
        f"{'E (keV)':>10}  {'Deflection':>12}  {'r_min (m)':>14}  {'r_L (m)':>14}  Status",
        "-" * 70,
    ]
    lines.extend(_format_row(r) for r in sweep.results)
    for f in sweep.failures:
        lines.append(f"{f.energy_kev:10.2f}  FAILED ({f.error}): {f.message}")
    return "\n".join(lines)


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-7s  %(message)s",
        datefmt="%H:%M:%S"
    )
    try:
        settings.validate_settings()
        protected_size, energies, e_ref = run_cli()
        log.info("Starting sweep: %d energies, L=%g m", len(energies), protected_size)

        dipole = build_dipole(protected_size, e_ref)
        sweep = run_sweep(energies, dipole=dipole)

        print("\n================ SWEEP RESULTS ================\n")
        print(format_report(sweep))

        for r in sweep.near_misses():
            log.warning("%.2f keV passed within %.3e m of the dipole", r.energy_kev, r.min_distance)

        out_file = save_json(
            {
                "meta": {"timestamp_utc": datetime.now(timezone.utc).isoformat()},
                **sweep.to_dict(),
            },
            "sweep_results"
        )
        log.info("Saved sweep results: %s", out_file)

        try:
            plot_trajectories(sweep)
            plot_min_distance(sweep)
            log.info("Plots generated.")
        except Exception as e:
            log.warning("Plotting failed: %s", e)

    except Exception:
        log.error("Fatal exception during run:")
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
